"""
Ball tracker.

Turns per-frame ball candidates into a BallState:

  1. drop weak candidates, gate the rest around the last known position
  2. score survivors (confidence + trajectory consistency + physics) and pick one
  3. append it to a rolling 2-second trajectory with smoothed velocity
  4. derive speed, spin, bounce and court region

All mutable state sits in a TrackerContext, one per match, so two matches
never share a trajectory.
"""
from __future__ import annotations
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Iterable, List, Optional

from ..geometry import classify_region, distance, predict_linear
from ..models.ball import (
    BallCandidate, BallState, CourtRegion, TrajectoryAnalysis, TrajectoryPoint,
)
from ..models.court import CourtGeometry
from ..settings import AnalysisSettings
from .physics import classify_spin, detect_bounce, raw_velocity, smooth_velocity, speed_mph
import config


@dataclass
class TrackerContext:
    """Everything the tracker remembers between frames for one match."""
    trajectory: Deque[TrajectoryPoint] = field(default_factory=deque)
    last_known: Optional[TrajectoryPoint] = None
    last_state: Optional[BallState] = None
    track_points: int = 0            # points since the current track started

    # Session tallies for analysis()
    detections: int = 0
    speed_total: float = 0.0
    max_speed: float = 0.0
    bounces: int = 0
    spin_counts: Counter = field(default_factory=Counter)

    def lose_track(self) -> None:
        self.trajectory.clear()
        self.last_known = None
        self.track_points = 0


class BallTracker:
    """Selects the primary ball each frame and keeps its trajectory."""

    def __init__(
        self,
        settings: Optional[AnalysisSettings] = None,
        context: Optional[TrackerContext] = None,
    ):
        self.settings = (settings or AnalysisSettings()).validate()
        self.context = context if context is not None else TrackerContext()

    # ── Public API ─────────────────────────────────────────────────────────────

    def update(
        self,
        candidates: Iterable[BallCandidate],
        timestamp_ms: float,
        geometry: Optional[CourtGeometry] = None,
    ) -> BallState:
        ctx = self.context
        ts = float(timestamp_ms)

        # Seek backwards or new clip
        if ctx.trajectory and ts < ctx.trajectory[-1].timestamp_ms:
            ctx.lose_track()
        if (ctx.last_known is not None and
                ts - ctx.last_known.timestamp_ms > self.settings.trajectory_window_ms):
            ctx.lose_track()

        primary = self.select(self.gate(candidates), ts)
        if primary is None:
            self._prune(ts)
            state = self._stale_state(ts)
        else:
            state = self._advance(primary, ts, geometry)
        ctx.last_state = state
        return state

    def gate(self, candidates: Iterable[BallCandidate]) -> List[BallCandidate]:
        """Candidates that are confident enough and close to the last known position."""
        s = self.settings
        kept = [c for c in candidates if c.confidence >= s.ball_confidence_threshold]
        last = self.context.last_known
        if last is not None:
            kept = [c for c in kept
                    if distance(c.position, last.position) <= s.max_tracking_distance]
        return kept

    def select(self, candidates: List[BallCandidate], timestamp_ms: float) -> Optional[BallCandidate]:
        """Highest-scoring candidate; the first one wins ties."""
        best: Optional[BallCandidate] = None
        best_score = float("-inf")
        for cand in candidates:
            score = self.score(cand, timestamp_ms)
            if score > best_score:
                best, best_score = cand, score
        return best

    def score(self, cand: BallCandidate, timestamp_ms: float) -> float:
        score = cand.confidence
        predicted = predict_linear(self.context.trajectory)
        if predicted is not None:
            d = distance(cand.position, predicted)
            score += max(0.0, 1.0 - d / config.PREDICTION_RADIUS)
        if self._plausible(cand, timestamp_ms):
            score += config.PHYSICS_BONUS
        return score

    def reset(self) -> None:
        """Forget the trajectory and every session tally."""
        self.context = TrackerContext()

    def analysis(self) -> TrajectoryAnalysis:
        ctx = self.context
        return TrajectoryAnalysis(
            total_points=ctx.detections,
            average_speed=ctx.speed_total / ctx.detections if ctx.detections else 0.0,
            max_speed=ctx.max_speed,
            bounces=ctx.bounces,
            spin_counts=dict(ctx.spin_counts),
        )

    @property
    def trajectory(self) -> List[TrajectoryPoint]:
        return list(self.context.trajectory)

    # ── Internals ──────────────────────────────────────────────────────────────

    def _plausible(self, cand: BallCandidate, timestamp_ms: float) -> bool:
        s = self.settings
        if not self.context.trajectory:
            return True
        last = self.context.trajectory[-1]
        if distance(cand.position, last.position) >= s.teleport_distance:
            return False
        raw = raw_velocity(last, cand.x, cand.y, timestamp_ms)
        if raw is None:
            return True
        raw_speed = speed_mph(raw, scale=s.speed_scale, cap=float("inf"))
        return 0.0 <= raw_speed <= s.max_ball_speed

    def _advance(
        self, cand: BallCandidate, ts: float, geometry: Optional[CourtGeometry]
    ) -> BallState:
        s = self.settings
        ctx = self.context
        last = ctx.trajectory[-1] if ctx.trajectory else None

        if last is None:
            velocity = (0.0, 0.0)
        else:
            raw = raw_velocity(last, cand.x, cand.y, ts)
            if raw is None:
                velocity = last.velocity
            elif ctx.track_points == 1:
                velocity = raw
            else:
                velocity = smooth_velocity(last.velocity, raw, s.velocity_smoothing)

        point = TrajectoryPoint(x=cand.x, y=cand.y, timestamp_ms=ts,
                                vx=velocity[0], vy=velocity[1],
                                confidence=cand.confidence)
        ctx.trajectory.append(point)
        ctx.track_points += 1
        ctx.last_known = point
        self._prune(ts)

        points = list(ctx.trajectory)
        perspective = geometry.perspective if geometry is not None and s.use_homography_speed else None
        speed = speed_mph(velocity, scale=s.speed_scale, cap=s.max_ball_speed,
                          perspective=perspective, position=point.position)
        spin = classify_spin(points)
        bounce = detect_bounce(points)

        region = classify_region(cand.x, cand.y, geometry)
        in_bounds = region != CourtRegion.OUT
        if len(points) < 3:
            region = CourtRegion.UNKNOWN

        ctx.detections += 1
        ctx.speed_total += speed
        ctx.max_speed = max(ctx.max_speed, speed)
        if bounce:
            ctx.bounces += 1
        ctx.spin_counts[spin.value] += 1

        return BallState(
            timestamp_ms=ts,
            position=point.position,
            velocity=velocity,
            speed=speed,
            spin=spin,
            bounce_detected=bounce,
            in_bounds=in_bounds,
            court_region=region,
            trajectory=points[-config.TRAJECTORY_SNAPSHOT:],
            confidence=cand.confidence,
            detected=True,
        )

    def _stale_state(self, ts: float) -> BallState:
        """No ball this frame: repeat the last state, minus the event flags."""
        prev = self.context.last_state
        snapshot = list(self.context.trajectory)[-config.TRAJECTORY_SNAPSHOT:]
        if prev is None:
            return BallState(timestamp_ms=ts, trajectory=snapshot)
        return BallState(
            timestamp_ms=ts,
            position=prev.position,
            velocity=prev.velocity,
            speed=prev.speed,
            spin=prev.spin,
            bounce_detected=False,
            in_bounds=prev.in_bounds,
            court_region=prev.court_region,
            trajectory=snapshot,
            confidence=0.0,
            detected=False,
        )

    def _prune(self, ts: float) -> None:
        window = self.settings.trajectory_window_ms
        traj = self.context.trajectory
        while traj and ts - traj[0].timestamp_ms > window:
            traj.popleft()
