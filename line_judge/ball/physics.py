"""
Ball kinematics on image-plane trajectory points.

Pure functions: they read trajectory points and return numbers, the tracker
owns all state.
"""
from __future__ import annotations
from typing import Optional, Sequence, Tuple
import numpy as np

from ..models.ball  import SpinType, TrajectoryPoint
from ..models.court import Perspective
import config

Vector = Tuple[float, float]


def raw_velocity(
    last: TrajectoryPoint, x: float, y: float, timestamp_ms: float
) -> Optional[Vector]:
    """Pixel velocity (px/s) from `last` to (x, y); None when time has not advanced."""
    dt = (timestamp_ms - last.timestamp_ms) / 1000.0
    if dt <= 0:
        return None
    return ((x - last.x) / dt, (y - last.y) / dt)


def smooth_velocity(previous: Vector, raw: Vector, alpha: float) -> Vector:
    """Exponential smoothing: previous·(1−α) + raw·α."""
    return (previous[0] * (1.0 - alpha) + raw[0] * alpha,
            previous[1] * (1.0 - alpha) + raw[1] * alpha)


def speed_mph(
    velocity: Vector,
    scale: float = config.SPEED_SCALE,
    cap: float = config.MAX_BALL_SPEED,
    perspective: Optional[Perspective] = None,
    position: Optional[Tuple[float, float]] = None,
) -> float:
    """
    Ball speed in mph, clamped to [0, cap].

    With a real-world perspective the pixel velocity is projected onto the
    court plane at `position`; otherwise the rough pixel scale is used.
    """
    vx, vy = velocity
    mph = float(np.hypot(vx, vy)) * scale
    if perspective is not None and perspective.real_world and position is not None:
        wx, wy = perspective.pixel_velocity_to_world(position[0], position[1], vx, vy)
        world_mph = float(np.hypot(wx, wy)) * config.MPS_TO_MPH
        # Projection diverges near the horizon
        if np.isfinite(world_mph):
            mph = world_mph
    return float(min(max(mph, 0.0), cap))


def curvature(points: Sequence[TrajectoryPoint]) -> Optional[float]:
    """Signed curvature through the last three points; None if undefined."""
    if len(points) < 3:
        return None
    p1, p2, p3 = points[-3], points[-2], points[-1]
    dx1, dy1 = p2.x - p1.x, p2.y - p1.y
    dx2, dy2 = p3.x - p2.x, p3.y - p2.y
    norm = (dx1 * dx1 + dy1 * dy1) ** 1.5
    if norm == 0:
        return None
    return (dx1 * dy2 - dy1 * dx2) / norm


def classify_spin(
    points: Sequence[TrajectoryPoint], flat_threshold: float = config.SPIN_FLAT_CURVATURE
) -> SpinType:
    c = curvature(points)
    if c is None:
        return SpinType.UNKNOWN
    dy1 = points[-2].y - points[-3].y
    dy2 = points[-1].y - points[-2].y
    if abs(c) < flat_threshold:
        return SpinType.FLAT
    if dy2 > dy1 and c > 0:
        return SpinType.TOPSPIN
    if dy2 < dy1 and c < 0:
        return SpinType.BACKSPIN
    return SpinType.SLICE


def detect_bounce(points: Sequence[TrajectoryPoint]) -> bool:
    """Vertical velocity reversal: falling (vy > 0, image y grows downwards) then rising."""
    if len(points) < 3:
        return False
    return points[-2].vy > 0 and points[-1].vy < 0
