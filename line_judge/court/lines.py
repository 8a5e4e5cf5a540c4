"""
Court line detector.

Strategy:
1. Standard (ρ, θ) Hough transform over the edge map, 1 px × 1° cells.
2. Accumulator peaks above the vote threshold, thinned to one per peak
   window, become candidate lines, clipped to the image and filtered by length.
3. Tag each line horizontal / vertical / diagonal by its direction.
4. Merge near-duplicates (parallel, close midpoints) into one line weighted
   by accumulator strength.
"""
from __future__ import annotations
from typing import List, Optional, Tuple
import cv2
import numpy as np
from scipy import ndimage

from ..geometry import angle_difference, canonical_endpoints, clip_polar_line, distance
from ..models.court import LineOrientation, LineSegment
from ..models.frame import EdgeMap
import config


class LineDetector:
    """Finds straight court lines in an EdgeMap."""

    def __init__(
        self,
        threshold: int = config.HOUGH_THRESHOLD,
        min_length: float = config.HOUGH_MIN_LENGTH,
        angle_tolerance: float = config.LINE_ANGLE_TOLERANCE,
        parallel_threshold: float = config.LINE_PARALLEL_THRESHOLD,
        merge_distance: float = config.LINE_MERGE_DISTANCE,
        rho_step: float = config.HOUGH_RHO,
        theta_step_deg: float = config.HOUGH_THETA,
        peak_window: int = config.HOUGH_PEAK_WINDOW,
    ):
        self.threshold = threshold
        self.min_length = min_length
        self.angle_tolerance = angle_tolerance
        self.parallel_threshold = parallel_threshold
        self.merge_distance = merge_distance
        self.rho_step = rho_step
        self.theta_step_deg = theta_step_deg
        self.peak_window = peak_window

    # ── Public API ─────────────────────────────────────────────────────────────

    def detect(self, edge_map: EdgeMap) -> List[LineSegment]:
        """Hough search + merge. Same edge map in, same lines out."""
        return self.merge(self.candidates(edge_map))

    def candidates(self, edge_map: EdgeMap) -> List[LineSegment]:
        """Unmerged lines, strongest first."""
        if edge_map.edge_count == 0:
            return []
        W, H = edge_map.width, edge_map.height

        lines: List[LineSegment] = []
        for rho, theta, votes in self.peaks(self.hough(edge_map.mask)):
            seg = self._to_segment(rho, theta, W, H, votes)
            if seg is not None and seg.length >= self.min_length:
                lines.append(seg)
        return lines

    def hough(self, mask: np.ndarray) -> np.ndarray:
        """(ρ, θ, votes) rows for the accumulator peaks above the vote threshold."""
        found = cv2.HoughLinesWithAccumulator(
            np.ascontiguousarray(mask, dtype=np.uint8),
            self.rho_step,
            np.deg2rad(self.theta_step_deg),
            int(self.threshold),
        )
        if found is None:
            return np.empty((0, 3), dtype=np.float64)
        return found.reshape(-1, 3).astype(np.float64)

    def classify(self, angle_deg: float) -> LineOrientation:
        a = angle_deg % 180.0
        if a < self.angle_tolerance or a > 180.0 - self.angle_tolerance:
            return LineOrientation.HORIZONTAL
        if abs(a - 90.0) < self.angle_tolerance:
            return LineOrientation.VERTICAL
        return LineOrientation.DIAGONAL

    def merge(self, lines: List[LineSegment]) -> List[LineSegment]:
        """Greedy merge: each unused line seeds a group of its near-duplicates."""
        merged: List[LineSegment] = []
        used = [False] * len(lines)
        for i, seed in enumerate(lines):
            if used[i]:
                continue
            used[i] = True
            group = [seed]
            for j in range(i + 1, len(lines)):
                if not used[j] and self._similar(seed, lines[j]):
                    used[j] = True
                    group.append(lines[j])
            merged.append(self._merge_group(group))
        return merged

    def peaks(self, found: np.ndarray) -> List[Tuple[float, float, int]]:
        """Thin `hough` rows to one per peak window; strongest first."""
        if len(found) == 0:
            return []
        rho, theta, votes = found[:, 0], found[:, 1], found[:, 2].astype(np.int64)
        n_theta = int(round(180.0 / self.theta_step_deg))
        rho_idx = np.round(rho / self.rho_step).astype(np.int64)
        rho_idx -= rho_idx.min()
        theta_idx = np.round(np.degrees(theta) / self.theta_step_deg).astype(np.int64) % n_theta

        keep = np.ones(len(found), dtype=bool)
        if self.peak_window > 1:
            # Sparse accumulator of the returned cells, thinned to window maxima
            acc = np.zeros((int(rho_idx.max()) + 1, n_theta), dtype=np.int64)
            np.maximum.at(acc, (rho_idx, theta_idx), votes)
            local_max = ndimage.maximum_filter(acc, size=self.peak_window, mode="nearest")
            keep = votes == local_max[rho_idx, theta_idx]

        # Strongest first; ties broken by cell position
        order = np.lexsort((theta_idx, rho_idx, -votes))
        return [(float(rho[k]), float(theta[k]), int(votes[k])) for k in order if keep[k]]

    # ── Internals ──────────────────────────────────────────────────────────────

    def _to_segment(
        self, rho: float, theta: float, W: int, H: int, votes: int
    ) -> Optional[LineSegment]:
        clipped = clip_polar_line(rho, theta, W, H)
        if clipped is None:
            return None
        (x1, y1), (x2, y2) = canonical_endpoints(*clipped)
        angle = float(np.degrees(np.arctan2(y2 - y1, x2 - x1)) % 180.0)
        return LineSegment(x1, y1, x2, y2, strength=float(votes),
                           orientation=self.classify(angle))

    def _similar(self, a: LineSegment, b: LineSegment) -> bool:
        if angle_difference(a.angle_deg, b.angle_deg) > self.parallel_threshold:
            return False
        return distance(a.midpoint, b.midpoint) < self.merge_distance

    def _merge_group(self, group: List[LineSegment]) -> LineSegment:
        if len(group) == 1:
            return group[0]
        seed = group[0]
        weights = np.array([max(ln.strength, 0.0) for ln in group], dtype=np.float64)
        if weights.sum() <= 0:
            weights = np.ones(len(group))
        weights /= weights.sum()

        p1s, p2s, angles = [], [], []
        for ln in group:
            p, q = (ln.x1, ln.y1), (ln.x2, ln.y2)
            # Pair endpoints with the seed's so opposite orderings don't cancel
            if (distance(p, (seed.x1, seed.y1)) + distance(q, (seed.x2, seed.y2)) >
                    distance(p, (seed.x2, seed.y2)) + distance(q, (seed.x1, seed.y1))):
                p, q = q, p
            p1s.append(p)
            p2s.append(q)
            # Unwrap around the seed so 179° and 1° average to 0°, not 90°
            d = (ln.angle_deg - seed.angle_deg + 90.0) % 180.0 - 90.0
            angles.append(seed.angle_deg + d)

        p1 = np.average(np.array(p1s), axis=0, weights=weights)
        p2 = np.average(np.array(p2s), axis=0, weights=weights)
        angle = float(np.average(angles, weights=weights)) % 180.0
        length = float(np.hypot(*(p2 - p1)))
        cx, cy = (p1 + p2) / 2
        dx = np.cos(np.deg2rad(angle)) * length / 2
        dy = np.sin(np.deg2rad(angle)) * length / 2
        (x1, y1), (x2, y2) = canonical_endpoints(
            (float(cx - dx), float(cy - dy)), (float(cx + dx), float(cy + dy)))
        return LineSegment(
            x1, y1, x2, y2,
            strength=max(ln.strength for ln in group),
            orientation=self.classify(angle),
        )
