"""
Line-call evaluator.

Decides in / out / fault / net for a tracked ball against the current court
geometry. Checks run in priority order:

  net    ball hovering on the net line at low speed (not challengeable)
  out    outside the court bounds by more than the tolerance
  fault  inside the service band but outside the box being served to
  in     everything else

Calls are rate limited to one per `call_cooldown_ms`.
"""
from __future__ import annotations
from typing import Optional

from ..geometry import classify_region
from ..models.ball  import BallState
from ..models.call  import CallType, UmpireCall
from ..models.court import CourtGeometry, ServiceSide
from ..settings import AnalysisSettings


class CallEvaluator:

    def __init__(self, settings: Optional[AnalysisSettings] = None, verbose: bool = False):
        self.settings = (settings or AnalysisSettings()).validate()
        self._verbose = verbose
        self._last_call_ms: Optional[float] = None

    # ── Public API ─────────────────────────────────────────────────────────────

    def evaluate(
        self,
        state: BallState,
        geometry: Optional[CourtGeometry],
        serve_to: Optional[ServiceSide] = None,
    ) -> Optional[UmpireCall]:
        """Rate-limited call for this frame, or None."""
        if not self.eligible(state, geometry):
            return None
        if (self._last_call_ms is not None and
                state.timestamp_ms - self._last_call_ms < self.settings.call_cooldown_ms):
            return None

        call = self.classify(state, geometry, serve_to)
        self._last_call_ms = state.timestamp_ms
        if self._verbose:
            print(f"[Umpire] {call.description}  conf={call.confidence:.2f}")
        return call

    def eligible(self, state: BallState, geometry: Optional[CourtGeometry]) -> bool:
        return (geometry is not None and state.detected and state.position is not None and
                state.confidence >= self.settings.call_confidence_threshold)

    def classify(
        self,
        state: BallState,
        geometry: CourtGeometry,
        serve_to: Optional[ServiceSide] = None,
    ) -> UmpireCall:
        """The call this ball state deserves, ignoring the rate limit."""
        s = self.settings
        x, y = state.position
        tol = s.line_call_tolerance
        challengeable = True

        if abs(y - geometry.net_y) < s.net_band_px and state.speed < s.net_max_speed:
            call_type = CallType.NET
            challengeable = False
        elif not geometry.bounds.contains(x, y, margin=tol):
            call_type = CallType.OUT
        elif self._is_fault(x, y, geometry, serve_to):
            call_type = CallType.FAULT
        else:
            call_type = CallType.IN

        region = classify_region(x, y, geometry)
        return UmpireCall(
            id=f"call_{int(state.timestamp_ms)}_{x:.0f}_{y:.0f}",
            timestamp_ms=state.timestamp_ms,
            call_type=call_type,
            confidence=float(min(max(state.confidence, 0.0), 1.0)),
            position=(x, y),
            court_region=region,
            ball_speed=state.speed,
            challengeable=challengeable,
            description=f"{call_type.value.upper()} - {region.value} ({state.speed:.1f} mph)",
        )

    def reset(self) -> None:
        self._last_call_ms = None

    @property
    def last_call_ms(self) -> Optional[float]:
        return self._last_call_ms

    # ── Internals ──────────────────────────────────────────────────────────────

    def _is_fault(
        self, x: float, y: float, geometry: CourtGeometry, serve_to: Optional[ServiceSide]
    ) -> bool:
        boxes = geometry.service_boxes
        top, bottom = boxes.band
        if not top <= y <= bottom:
            return False
        tol = self.settings.line_call_tolerance
        targets = (boxes.box(serve_to),) if serve_to is not None else (boxes.deuce, boxes.ad)
        return not any(box.contains(x, y, margin=tol) for box in targets)
