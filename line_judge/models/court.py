"""
Court-related data models.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple
import cv2
import numpy as np


class LineOrientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL   = "vertical"
    DIAGONAL   = "diagonal"


class ServiceSide(Enum):
    DEUCE = "deuce"
    AD    = "ad"


# Structural roles a complete court model assigns, in reporting order.
COURT_ROLES = (
    "far_baseline", "near_baseline",
    "left_sideline", "right_sideline",
    "far_service_line", "near_service_line",
    "net", "center_service_line",
)


@dataclass(frozen=True)
class LineSegment:
    """A detected line segment, or a court role built from one."""
    x1: float
    y1: float
    x2: float
    y2: float
    strength: float = 0.0                # accumulator votes; 0 for synthetic lines
    orientation: LineOrientation = LineOrientation.DIAGONAL
    label: str = ""                      # e.g. "near_baseline", "net"

    @property
    def midpoint(self) -> Tuple[float, float]:
        return ((self.x1 + self.x2) / 2, (self.y1 + self.y2) / 2)

    @property
    def length(self) -> float:
        return float(np.hypot(self.x2 - self.x1, self.y2 - self.y1))

    @property
    def angle_deg(self) -> float:
        """Direction of the segment, folded into [0, 180)."""
        return float(np.degrees(np.arctan2(self.y2 - self.y1, self.x2 - self.x1)) % 180.0)

    @property
    def is_synthetic(self) -> bool:
        return self.strength <= 0

    def with_label(self, label: str) -> "LineSegment":
        return replace(self, label=label)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "p1": [round(self.x1, 1), round(self.y1, 1)],
            "p2": [round(self.x2, 1), round(self.y2, 1)],
            "angle_deg": round(self.angle_deg, 2),
            "strength": round(self.strength, 1),
            "orientation": self.orientation.value,
        }


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        return max(self.width, 0.0) * max(self.height, 0.0)

    def contains(self, px: float, py: float, margin: float = 0.0) -> bool:
        return (self.x - margin <= px <= self.right + margin and
                self.y - margin <= py <= self.bottom + margin)

    def to_dict(self) -> dict:
        return {"x": round(self.x, 1), "y": round(self.y, 1),
                "width": round(self.width, 1), "height": round(self.height, 1)}


@dataclass(frozen=True)
class ServiceBoxes:
    deuce: Rect
    ad: Rect

    def box(self, side: ServiceSide) -> Rect:
        return self.deuce if side == ServiceSide.DEUCE else self.ad

    @property
    def band(self) -> Tuple[float, float]:
        """Vertical extent (top, bottom) covered by either box."""
        return (min(self.deuce.y, self.ad.y), max(self.deuce.bottom, self.ad.bottom))


@dataclass(frozen=True)
class Perspective:
    """
    Camera perspective estimate.

    `homography` maps image pixels to court-plane metres. It is the identity
    until four court corners have been found.
    """
    view_angle_deg: float = 0.0
    distortion: float = 0.0
    homography: np.ndarray = field(default_factory=lambda: np.eye(3), compare=False)
    real_world: bool = False

    def __post_init__(self):
        H = np.array(self.homography, dtype=np.float64)
        H.setflags(write=False)
        object.__setattr__(self, "homography", H)

    @property
    def is_identity(self) -> bool:
        return bool(np.allclose(self.homography, np.eye(3)))

    def image_to_world(self, px: float, py: float) -> Tuple[float, float]:
        """Convert image pixel to court metres."""
        pt = np.array([[[px, py]]], dtype=np.float64)
        world = cv2.perspectiveTransform(pt, self.homography.copy())[0][0]
        return float(world[0]), float(world[1])

    def world_to_image(self, wx: float, wy: float) -> Tuple[float, float]:
        pt = np.array([[[wx, wy]]], dtype=np.float64)
        img = cv2.perspectiveTransform(pt, np.linalg.inv(self.homography))[0][0]
        return float(img[0]), float(img[1])

    def pixel_velocity_to_world(
        self, px: float, py: float, vx: float, vy: float, dt: float = 0.01
    ) -> Tuple[float, float]:
        """Project a pixel velocity at (px, py) onto the court plane (m/s)."""
        x0, y0 = self.image_to_world(px, py)
        x1, y1 = self.image_to_world(px + vx * dt, py + vy * dt)
        return (x1 - x0) / dt, (y1 - y0) / dt

    def to_dict(self) -> dict:
        return {
            "view_angle_deg": round(self.view_angle_deg, 2),
            "distortion": round(self.distortion, 3),
            "homography": np.round(self.homography, 6).tolist(),
            "real_world": self.real_world,
        }


@dataclass(frozen=True)
class CourtGeometry:
    """
    Structured court model for one camera set-up.

    Built in one go by CourtGeometryBuilder and replaced wholesale on
    recalibration, so readers always see a complete snapshot. Roles that were
    not detected hold synthetic lines and are listed in `missing_roles`.
    """
    frame_width: int
    frame_height: int
    bounds: Rect
    near_baseline: LineSegment
    far_baseline: LineSegment
    left_sideline: LineSegment
    right_sideline: LineSegment
    near_service_line: LineSegment
    far_service_line: LineSegment
    center_service_line: LineSegment
    net_line: LineSegment
    service_boxes: ServiceBoxes
    confidence: float = 0.0
    perspective: Perspective = field(default_factory=Perspective)
    detected_roles: Tuple[str, ...] = ()

    @property
    def net_y(self) -> float:
        return self.net_line.midpoint[1]

    @property
    def center_x(self) -> float:
        return self.center_service_line.midpoint[0]

    @property
    def missing_roles(self) -> Tuple[str, ...]:
        return tuple(r for r in COURT_ROLES if r not in self.detected_roles)

    @property
    def is_complete(self) -> bool:
        return not self.missing_roles

    def to_dict(self) -> dict:
        return {
            "frame": [self.frame_width, self.frame_height],
            "bounds": self.bounds.to_dict(),
            "lines": {
                ln.label: ln.to_dict() for ln in (
                    self.far_baseline, self.near_baseline,
                    self.left_sideline, self.right_sideline,
                    self.far_service_line, self.near_service_line,
                    self.net_line, self.center_service_line,
                )
            },
            "service_boxes": {
                "deuce": self.service_boxes.deuce.to_dict(),
                "ad": self.service_boxes.ad.to_dict(),
            },
            "confidence": round(self.confidence, 3),
            "perspective": self.perspective.to_dict(),
            "missing_roles": list(self.missing_roles),
        }
