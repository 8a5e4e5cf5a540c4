"""
Line-call models.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .ball import CourtRegion


class CallType(Enum):
    IN         = "in"
    OUT        = "out"
    FAULT      = "fault"
    LET        = "let"
    NET        = "net"
    FOOT_FAULT = "foot_fault"


@dataclass(frozen=True)
class UmpireCall:
    """A single emitted line call. Never modified after creation."""
    id: str
    timestamp_ms: float
    call_type: CallType
    confidence: float
    position: Tuple[float, float]
    court_region: CourtRegion
    ball_speed: float
    challengeable: bool
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "t_ms": round(self.timestamp_ms, 1),
            "type": self.call_type.value,
            "conf": round(self.confidence, 3),
            "px": [round(self.position[0], 1), round(self.position[1], 1)],
            "region": self.court_region.value,
            "speed": round(self.ball_speed, 2),
            "challengeable": self.challengeable,
            "description": self.description,
        }
