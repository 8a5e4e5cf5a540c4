"""
Ball detector capability.

Anything with `detect(frame) -> list[BallCandidate]` is a ball detector; the
tracker never looks behind that method. A backend that is not ready or fails
raises DetectorUnavailable, which the pipeline treats as "no ball this frame".

HoughBallDetector is the classical backend: circular Hough on a blurred gray
frame, scored by how bright the circle interior is (tennis balls are bright
yellow/white).
"""
from __future__ import annotations
from typing import Awaitable, List, Protocol, runtime_checkable
import cv2
import numpy as np

from ..errors import DetectorUnavailable
from ..models.ball  import BallCandidate
from ..models.frame import Frame
import config


@runtime_checkable
class BallDetector(Protocol):
    def detect(self, frame: Frame) -> List[BallCandidate]:
        ...


@runtime_checkable
class AsyncBallDetector(Protocol):
    """Backends behind a remote or otherwise asynchronous inference call."""

    def detect(self, frame: Frame) -> Awaitable[List[BallCandidate]]:
        ...


class HoughBallDetector:
    """Circular Hough transform detector; returns every circle it finds."""

    def __init__(
        self,
        min_radius: int = config.BALL_MIN_RADIUS_PX,
        max_radius: int = config.BALL_MAX_RADIUS_PX,
        min_distance: float = 30.0,
        max_confidence: float = 0.9,
    ):
        self.min_radius = min_radius
        self.max_radius = max_radius
        self.min_distance = min_distance
        self.max_confidence = max_confidence

    def detect(self, frame: Frame) -> List[BallCandidate]:
        frame.validate()
        try:
            gray = cv2.cvtColor(frame.pixels, cv2.COLOR_BGR2GRAY)
            blur = cv2.GaussianBlur(gray, (9, 9), 2)
            circles = cv2.HoughCircles(
                blur,
                cv2.HOUGH_GRADIENT,
                dp=1.2,
                minDist=self.min_distance,
                param1=100,
                param2=20,
                minRadius=self.min_radius,
                maxRadius=self.max_radius,
            )
        except cv2.error as exc:
            raise DetectorUnavailable(f"Hough circle search failed: {exc}") from exc
        if circles is None:
            return []

        candidates: List[BallCandidate] = []
        for cx, cy, r in np.round(circles[0]).astype(int):
            mask = np.zeros(gray.shape, np.uint8)
            cv2.circle(mask, (int(cx), int(cy)), int(r), 255, -1)
            mean_bright = float(cv2.mean(gray, mask=mask)[0])
            # Confidence proxy: brightness / 255
            conf = min(mean_bright / 255.0, self.max_confidence)
            candidates.append(BallCandidate(x=float(cx), y=float(cy),
                                            confidence=conf, radius=float(r)))
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates
