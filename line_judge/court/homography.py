"""
Court homography – maps image pixels ↔ real-world court metres.

Standard tennis court key points (world coordinates in metres,
origin at the near-left corner of the baseline):

    NL=(0,0)     NR=(W,0)         near baseline
    FL=(0,L)     FR=(W,L)         far baseline

H is computed from the four outer corners, i.e. the intersections of the
detected baselines with the detected sidelines.
"""
from __future__ import annotations
from typing import Optional
import cv2
import numpy as np

from ..geometry import intersect
from ..models.court import LineSegment
import config


def _world_corners(width: float) -> np.ndarray:
    # Order: near-left, near-right, far-right, far-left
    return np.array([
        [0.0,   0.0],
        [width, 0.0],
        [width, config.COURT_LENGTH],
        [0.0,   config.COURT_LENGTH],
    ], dtype=np.float64)


class HomographyCalc:
    """Computes the image → court-plane homography from four court corners."""

    def __init__(self, doubles: bool = config.DOUBLES):
        width = config.COURT_WIDTH_DOUBLE if doubles else config.COURT_WIDTH_SINGLE
        self._world = _world_corners(width)

    @staticmethod
    def court_corners(
        near_baseline: LineSegment,
        far_baseline: LineSegment,
        left_sideline: LineSegment,
        right_sideline: LineSegment,
    ) -> Optional[np.ndarray]:
        """Image corners in NL, NR, FR, FL order, or None if lines are parallel."""
        pts = (
            intersect(near_baseline, left_sideline),
            intersect(near_baseline, right_sideline),
            intersect(far_baseline, right_sideline),
            intersect(far_baseline, left_sideline),
        )
        if any(p is None for p in pts):
            return None
        return np.array(pts, dtype=np.float64)

    def compute(self, image_corners: np.ndarray) -> Optional[np.ndarray]:
        """
        Args:
            image_corners: (4, 2) pixel corners in NL, NR, FR, FL order.

        Returns:
            3×3 image → world matrix, or None when the corners are degenerate.
        """
        src = np.asarray(image_corners, dtype=np.float64).reshape(4, 2)
        if not np.all(np.isfinite(src)):
            return None
        # Reject quads that collapse to a line (zero area)
        area = 0.5 * abs(np.dot(src[:, 0], np.roll(src[:, 1], 1)) -
                         np.dot(src[:, 1], np.roll(src[:, 0], 1)))
        if area < 1.0:
            return None

        H, _ = cv2.findHomography(src, self._world)
        if H is None or not np.all(np.isfinite(H)) or abs(np.linalg.det(H)) < 1e-12:
            return None
        return H

    def from_lines(
        self,
        near_baseline: LineSegment,
        far_baseline: LineSegment,
        left_sideline: LineSegment,
        right_sideline: LineSegment,
    ) -> Optional[np.ndarray]:
        corners = self.court_corners(near_baseline, far_baseline, left_sideline, right_sideline)
        return None if corners is None else self.compute(corners)
