"""
Video loading with frame iteration.
"""
from __future__ import annotations
from typing import Generator, Optional
import cv2

from ..models.frame import Frame, VideoMetadata


class VideoLoader:
    """Wraps OpenCV VideoCapture with metadata and a clean iterator."""

    def __init__(self, path: str):
        self.path = path
        self._cap: Optional[cv2.VideoCapture] = None
        self._meta: Optional[VideoMetadata] = None

    def __enter__(self) -> "VideoLoader":
        self._cap = cv2.VideoCapture(self.path)
        if not self._cap.isOpened():
            raise IOError(f"Cannot open video: {self.path}")
        self._meta = self._read_metadata()
        return self

    def __exit__(self, *_) -> None:
        if self._cap:
            self._cap.release()
            self._cap = None

    def _read_metadata(self) -> VideoMetadata:
        cap = self._cap
        w   = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h   = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
        n   = int(cap.get(cv2.CAP_PROP_FRAME_COUNT))
        return VideoMetadata(
            width=w, height=h, fps=fps,
            total_frames=n, duration_s=n / fps,
            path=self.path,
        )

    @property
    def metadata(self) -> VideoMetadata:
        if self._meta is None:
            raise RuntimeError("VideoLoader not opened (use it as a context manager)")
        return self._meta

    def frames(
        self,
        interval_ms: float = 0.0,
        max_frames: Optional[int] = None,
    ) -> Generator[Frame, None, None]:
        """
        Yield decoded frames as Frame objects.

        Args:
            interval_ms: Minimum time between yielded frames (0 = every frame).
            max_frames:  Stop after this many yields.
        """
        if self._cap is None:
            raise RuntimeError("VideoLoader not opened")
        fps     = self._meta.fps
        count   = 0
        fn      = 0
        next_ts = 0.0
        while True:
            ret, pixels = self._cap.read()
            if not ret:
                break
            ts = (fn / fps) * 1000.0
            if ts >= next_ts:
                yield Frame(pixels=pixels, timestamp_ms=ts, frame_number=fn)
                next_ts = ts + interval_ms
                count += 1
                if max_frames and count >= max_frames:
                    break
            fn += 1

    def expected_yields(self, interval_ms: float) -> int:
        """Frames frames() will yield for the whole video; used for progress bars."""
        meta = self.metadata
        if interval_ms <= 0:
            return meta.total_frames
        step = max(1, round(interval_ms * meta.fps / 1000.0))
        return (meta.total_frames + step - 1) // step
