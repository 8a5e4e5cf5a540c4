"""
Small geometric helpers shared by the court and ball stages.
"""
from __future__ import annotations
from typing import List, Optional, Tuple
import numpy as np

from .models.ball  import CourtRegion
from .models.court import CourtGeometry, LineSegment
import config

Point = Tuple[float, float]


def distance(a: Point, b: Point) -> float:
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def angle_difference(a_deg: float, b_deg: float) -> float:
    """Smallest difference between two undirected line angles, in [0, 90]."""
    d = abs(a_deg - b_deg) % 180.0
    return min(d, 180.0 - d)


def intersect(a: LineSegment, b: LineSegment) -> Optional[Point]:
    """Line-line intersection using Cramer's rule."""
    x1, y1, x2, y2 = a.x1, a.y1, a.x2, a.y2
    x3, y3, x4, y4 = b.x1, b.y1, b.x2, b.y2
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < 1e-6:
        return None
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return (x1 + t * (x2 - x1), y1 + t * (y2 - y1))


def clip_polar_line(
    rho: float, theta: float, width: int, height: int
) -> Optional[Tuple[Point, Point]]:
    """
    Clip the infinite line x·cosθ + y·sinθ = ρ to the image rectangle
    [0, width-1] × [0, height-1]. Returns the two farthest border crossings,
    or None when the line misses the image.
    """
    c, s = float(np.cos(theta)), float(np.sin(theta))
    xmax, ymax = width - 1.0, height - 1.0
    eps = 1e-9
    pts: List[Point] = []
    if abs(s) > eps:                       # crossings with x = 0 and x = xmax
        for x in (0.0, xmax):
            y = (rho - x * c) / s
            if -eps <= y <= ymax + eps:
                pts.append((x, min(max(y, 0.0), ymax)))
    if abs(c) > eps:                       # crossings with y = 0 and y = ymax
        for y in (0.0, ymax):
            x = (rho - y * s) / c
            if -eps <= x <= xmax + eps:
                pts.append((min(max(x, 0.0), xmax), y))
    if len(pts) < 2:
        return None
    best, best_d = None, -1.0
    for i in range(len(pts)):
        for j in range(i + 1, len(pts)):
            d = distance(pts[i], pts[j])
            if d > best_d:
                best, best_d = (pts[i], pts[j]), d
    return best


def canonical_endpoints(p: Point, q: Point) -> Tuple[Point, Point]:
    """Order endpoints left→right for flat lines and top→bottom for steep ones."""
    if abs(q[0] - p[0]) >= abs(q[1] - p[1]):
        return (p, q) if (p[0], p[1]) <= (q[0], q[1]) else (q, p)
    return (p, q) if (p[1], p[0]) <= (q[1], q[0]) else (q, p)


def predict_linear(points) -> Optional[Point]:
    """Extrapolate one step from the last two positions."""
    if len(points) < 2:
        return None
    a, b = points[-2], points[-1]
    return (b.x + (b.x - a.x), b.y + (b.y - a.y))


def classify_region(x: float, y: float, geometry: Optional[CourtGeometry]) -> CourtRegion:
    """Court region of an image position; UNKNOWN when no geometry is known."""
    if geometry is None:
        return CourtRegion.UNKNOWN
    b = geometry.bounds
    if not b.contains(x, y):
        return CourtRegion.OUT

    boxes = geometry.service_boxes
    if boxes.deuce.contains(x, y) or boxes.ad.contains(x, y):
        return (CourtRegion.SERVICE_BOX_DEUCE if x < geometry.center_x
                else CourtRegion.SERVICE_BOX_AD)

    if (y < b.y + b.height * config.REGION_BASELINE_RATIO or
            y > b.bottom - b.height * config.REGION_BASELINE_RATIO):
        return CourtRegion.BASELINE
    if abs(y - geometry.net_y) < b.height * config.REGION_NET_RATIO:
        return CourtRegion.NET
    return CourtRegion.UNKNOWN
