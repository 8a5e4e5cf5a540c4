"""
Per-match pipeline.

  calibrate(frame)  EdgeExtractor → LineDetector → CourtGeometryBuilder
  analyse(frame)    BallDetector → BallTracker → CallEvaluator → CallLog

Court geometry is only rebuilt on calibration and swapped in as a whole
snapshot, so an analysis step never sees half an update. One MatchPipeline
per match; nothing mutable is shared between instances.
"""
from __future__ import annotations
import asyncio
import inspect
from typing import List, Optional, Union

from .ball import AsyncBallDetector, BallDetector, BallTracker
from .court import CourtAnalyser, CourtGeometryBuilder
from .errors import DetectorUnavailable, InvalidFrame
from .models import (
    BallCandidate, CourtGeometry, Frame, FrameResult, ServiceSide,
    TrajectoryAnalysis, UmpireCall,
)
from .settings import AnalysisSettings
from .umpire import CallEvaluator, CallLog


class MatchPipeline:
    """Court calibration plus frame-by-frame ball tracking and line calls."""

    def __init__(
        self,
        detector:       Union[BallDetector, AsyncBallDetector],
        settings:       Optional[AnalysisSettings] = None,
        match_id:       str = "",
        court_analyser: Optional[CourtAnalyser] = None,
        verbose:        bool = False,
    ):
        self.settings = (settings or AnalysisSettings()).validate()
        self.detector = detector
        self.match_id = match_id
        self._verbose = verbose

        self._court = court_analyser or CourtAnalyser(
            builder=CourtGeometryBuilder(doubles=self.settings.doubles, verbose=verbose))
        self._tracker   = BallTracker(self.settings)
        self._evaluator = CallEvaluator(self.settings, verbose=verbose)
        self._log       = CallLog()
        self._geometry: Optional[CourtGeometry] = None

    # ── Court ─────────────────────────────────────────────────────────────────

    @property
    def geometry(self) -> Optional[CourtGeometry]:
        return self._geometry

    def calibrate(self, frame: Frame) -> Optional[CourtGeometry]:
        """Rebuild court geometry from `frame`; an invalid frame keeps the current one."""
        try:
            geometry = self._court.analyse(frame)
        except InvalidFrame as exc:
            self._log_msg(f"Calibration skipped: {exc}")
            return self._geometry
        return self._install(geometry)

    async def calibrate_async(self, frame: Frame) -> Optional[CourtGeometry]:
        """Like calibrate(), with the geometry build running in a worker thread."""
        try:
            geometry = await asyncio.to_thread(self._court.analyse, frame)
        except InvalidFrame as exc:
            self._log_msg(f"Calibration skipped: {exc}")
            return self._geometry
        return self._install(geometry)

    # ── Ball / calls ──────────────────────────────────────────────────────────

    def analyse(self, frame: Frame, serve_to: Optional[ServiceSide] = None) -> FrameResult:
        try:
            frame.validate()
        except InvalidFrame as exc:
            return self._skip(frame, exc)
        try:
            candidates = self.detector.detect(frame)
        except DetectorUnavailable as exc:
            self._log_msg(f"Detector unavailable at frame {frame.frame_number}: {exc}")
            candidates = []
        if inspect.isawaitable(candidates):
            if inspect.iscoroutine(candidates):
                candidates.close()
            raise TypeError("Detector is asynchronous; use analyse_async()")
        return self._step(frame, candidates, serve_to)

    async def analyse_async(
        self, frame: Frame, serve_to: Optional[ServiceSide] = None
    ) -> FrameResult:
        """analyse() for detectors whose detect() returns an awaitable."""
        try:
            frame.validate()
        except InvalidFrame as exc:
            return self._skip(frame, exc)
        try:
            candidates = self.detector.detect(frame)
            if inspect.isawaitable(candidates):
                candidates = await candidates
        except DetectorUnavailable as exc:
            self._log_msg(f"Detector unavailable at frame {frame.frame_number}: {exc}")
            candidates = []
        return self._step(frame, candidates, serve_to)

    def stop(self) -> None:
        """End of match: drop geometry, trajectory, rate limiter and call history."""
        self._tracker.reset()
        self._evaluator.reset()
        self._log.clear()
        self._geometry = None
        self._log_msg("Stopped, state flushed")

    # ── Read-only views ───────────────────────────────────────────────────────

    @property
    def calls(self) -> List[UmpireCall]:
        """Recent calls, newest first."""
        return self._log.recent

    @property
    def history(self) -> CallLog:
        return self._log

    def analysis(self) -> TrajectoryAnalysis:
        return self._tracker.analysis()

    # ── Internals ─────────────────────────────────────────────────────────────

    def _install(self, geometry: CourtGeometry) -> CourtGeometry:
        self._geometry = geometry
        self._log_msg(f"Court calibrated  conf={geometry.confidence:.2f}  "
                      f"missing={len(geometry.missing_roles)}")
        return geometry

    def _step(
        self,
        frame: Frame,
        candidates: List[BallCandidate],
        serve_to: Optional[ServiceSide],
    ) -> FrameResult:
        geometry = self._geometry
        state = self._tracker.update(candidates, frame.timestamp_ms, geometry)
        call = self._evaluator.evaluate(state, geometry, serve_to)
        if call is not None:
            self._log.record(call)
        return FrameResult(
            frame_number=frame.frame_number,
            timestamp_ms=frame.timestamp_ms,
            ball=state,
            call=call,
            announce=call is not None and self.settings.auto_call_enabled,
            geometry_confidence=geometry.confidence if geometry else 0.0,
        )

    def _skip(self, frame: Frame, exc: InvalidFrame) -> FrameResult:
        self._log_msg(f"Skipping frame: {exc}")
        state = self._tracker.update([], frame.timestamp_ms, self._geometry)
        return FrameResult(
            frame_number=frame.frame_number,
            timestamp_ms=frame.timestamp_ms,
            ball=state,
            geometry_confidence=self._geometry.confidence if self._geometry else 0.0,
            skipped=True,
        )

    def _log_msg(self, msg: str) -> None:
        if self._verbose:
            tag = f"[Pipeline:{self.match_id}]" if self.match_id else "[Pipeline]"
            print(f"{tag} {msg}")
