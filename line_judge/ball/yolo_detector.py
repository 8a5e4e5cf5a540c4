"""
YOLO ball detector.

Uses the COCO "sports ball" class of an ultralytics model. The model is only
loaded on the first detect() call, so constructing the detector is cheap and
the rest of the package never needs ultralytics installed.
"""
from __future__ import annotations
from typing import List, Optional

from ..errors import DetectorUnavailable
from ..models.ball  import BallCandidate
from ..models.frame import Frame
import config


class YoloBallDetector:
    """Ball candidates from YOLO boxes, filtered by plausible ball radius."""

    def __init__(
        self,
        model_path: str = config.BALL_MODEL,
        device: Optional[str] = None,
        min_confidence: float = 0.25,
        img_size: int = config.DETECTION_IMG_SIZE,
        verbose: bool = False,
    ):
        self.model_path = model_path
        self.device = device
        self.min_confidence = min_confidence
        self.img_size = img_size
        self._verbose = verbose
        self._model = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load(self) -> None:
        if self._model is not None:
            return
        try:
            from ultralytics import YOLO
        except ImportError as exc:
            raise DetectorUnavailable("ultralytics is not installed") from exc
        if self.device is None:
            self.device = config.resolve_device()
        try:
            self._model = YOLO(self.model_path)
        except Exception as exc:
            raise DetectorUnavailable(f"Cannot load {self.model_path}: {exc}") from exc
        if self._verbose:
            print(f"[Ball]   Loaded {self.model_path} on {self.device}")

    def detect(self, frame: Frame) -> List[BallCandidate]:
        frame.validate()
        self.load()
        try:
            results = self._model.predict(
                frame.pixels,
                conf=self.min_confidence,
                classes=[config.SPORTS_BALL_CLASS],
                imgsz=self.img_size,
                device=self.device,
                verbose=False,
            )
        except Exception as exc:
            raise DetectorUnavailable(f"YOLO inference failed: {exc}") from exc

        candidates: List[BallCandidate] = []
        for res in results:
            for box in res.boxes:
                x1, y1, x2, y2 = box.xyxy[0].tolist()
                cx = (x1 + x2) / 2
                cy = (y1 + y2) / 2
                r  = ((x2 - x1) + (y2 - y1)) / 4
                conf = float(box.conf[0])

                if not (config.BALL_MIN_RADIUS_PX <= r <= config.BALL_MAX_RADIUS_PX):
                    continue
                candidates.append(BallCandidate(x=cx, y=cy, confidence=conf, radius=r))
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates
