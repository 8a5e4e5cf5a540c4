"""
Frame-level and aggregate result models.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import numpy as np

from ..errors import InvalidFrame
from .ball import BallState, TrajectoryAnalysis
from .call import UmpireCall


@dataclass(frozen=True)
class Frame:
    """A decoded video frame. `pixels` is H×W×3 uint8 in OpenCV (BGR) order."""
    pixels: Optional[np.ndarray]
    timestamp_ms: float
    frame_number: int = 0

    @property
    def width(self) -> int:
        return 0 if self.pixels is None or self.pixels.ndim < 2 else int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return 0 if self.pixels is None or self.pixels.ndim < 2 else int(self.pixels.shape[0])

    def validate(self) -> "Frame":
        """Raise InvalidFrame unless this is a non-empty 3-channel uint8 image."""
        px = self.pixels
        if px is None:
            raise InvalidFrame(f"Frame {self.frame_number}: no pixel data")
        if not isinstance(px, np.ndarray) or px.ndim != 3 or px.shape[2] != 3:
            shape = getattr(px, "shape", None)
            raise InvalidFrame(f"Frame {self.frame_number}: expected H×W×3 image, got {shape}")
        if px.dtype != np.uint8:
            raise InvalidFrame(f"Frame {self.frame_number}: expected uint8 pixels, got {px.dtype}")
        if self.width <= 0 or self.height <= 0:
            raise InvalidFrame(f"Frame {self.frame_number}: empty image")
        return self


@dataclass(frozen=True)
class EdgeMap:
    """Binary edge image (0 / 255), same size as the source frame."""
    mask: np.ndarray

    @property
    def width(self) -> int:
        return int(self.mask.shape[1])

    @property
    def height(self) -> int:
        return int(self.mask.shape[0])

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(self.mask))


@dataclass
class VideoMetadata:
    width: int
    height: int
    fps: float
    total_frames: int
    duration_s: float
    path: str = ""


@dataclass
class FrameResult:
    """Everything the pipeline produced for one analysed frame."""
    frame_number: int
    timestamp_ms: float
    ball: BallState
    call: Optional[UmpireCall] = None
    announce: bool = False               # call emitted and auto-call enabled
    geometry_confidence: float = 0.0
    skipped: bool = False                # frame failed validation

    def to_dict(self) -> dict:
        return {
            "frame": self.frame_number,
            "timestamp_ms": round(self.timestamp_ms, 1),
            "ball": self.ball.to_dict(),
            "call": self.call.to_dict() if self.call else None,
            "announce": self.announce,
            "geometry_conf": round(self.geometry_confidence, 3),
            "skipped": self.skipped,
        }


@dataclass
class AnalysisResult:
    """Aggregate result for a full video."""
    metadata: VideoMetadata
    frames: List[FrameResult] = field(default_factory=list)
    calls: List[UmpireCall] = field(default_factory=list)
    trajectory: TrajectoryAnalysis = field(default_factory=TrajectoryAnalysis)
    geometry: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "video": {
                "path": self.metadata.path,
                "width": self.metadata.width,
                "height": self.metadata.height,
                "fps": self.metadata.fps,
                "total_frames": self.metadata.total_frames,
                "duration_s": round(self.metadata.duration_s, 2),
            },
            "court": self.geometry,
            "calls": [c.to_dict() for c in self.calls],
            "trajectory": self.trajectory.to_dict(),
            "frames": [f.to_dict() for f in self.frames],
        }
