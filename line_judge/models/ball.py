"""
Ball-related data models.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class SpinType(Enum):
    TOPSPIN  = "topspin"
    BACKSPIN = "backspin"
    SLICE    = "slice"
    FLAT     = "flat"
    UNKNOWN  = "unknown"


class CourtRegion(Enum):
    SERVICE_BOX_DEUCE = "service_box_deuce"
    SERVICE_BOX_AD    = "service_box_ad"
    BASELINE          = "baseline"
    NET               = "net"
    OUT               = "out"
    UNKNOWN           = "unknown"


@dataclass(frozen=True)
class BallCandidate:
    """One possible ball position reported by a detector backend."""
    x: float
    y: float
    confidence: float
    radius: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class TrajectoryPoint:
    x: float
    y: float
    timestamp_ms: float
    vx: float = 0.0          # smoothed, px/s
    vy: float = 0.0
    confidence: float = 0.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def velocity(self) -> Tuple[float, float]:
        return (self.vx, self.vy)

    def to_dict(self) -> dict:
        return {"px": [round(self.x, 1), round(self.y, 1)],
                "t_ms": round(self.timestamp_ms, 1)}


@dataclass
class BallState:
    """Tracker output for one analysed frame."""
    timestamp_ms: float
    position: Optional[Tuple[float, float]] = None
    velocity: Tuple[float, float] = (0.0, 0.0)
    speed: float = 0.0                       # capped, see config.MAX_BALL_SPEED
    spin: SpinType = SpinType.UNKNOWN
    bounce_detected: bool = False
    in_bounds: bool = True
    court_region: CourtRegion = CourtRegion.UNKNOWN
    trajectory: List[TrajectoryPoint] = field(default_factory=list)
    confidence: float = 0.0                  # primary detection; 0 when stale
    detected: bool = False                   # fresh detection this frame

    @property
    def has_position(self) -> bool:
        return self.position is not None

    def to_dict(self) -> dict:
        return {
            "t_ms": round(self.timestamp_ms, 1),
            "px": ([round(self.position[0], 1), round(self.position[1], 1)]
                   if self.position else None),
            "velocity": [round(self.velocity[0], 1), round(self.velocity[1], 1)],
            "speed": round(self.speed, 2),
            "spin": self.spin.value,
            "bounce": self.bounce_detected,
            "in_bounds": self.in_bounds,
            "region": self.court_region.value,
            "conf": round(self.confidence, 3),
            "detected": self.detected,
        }


@dataclass
class TrajectoryAnalysis:
    """Session-level summary of what the tracker has seen."""
    total_points: int = 0
    average_speed: float = 0.0
    max_speed: float = 0.0
    bounces: int = 0
    spin_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_points": self.total_points,
            "average_speed": round(self.average_speed, 2),
            "max_speed": round(self.max_speed, 2),
            "bounces": self.bounces,
            "spin_counts": dict(self.spin_counts),
        }
