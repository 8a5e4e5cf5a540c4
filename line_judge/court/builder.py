"""
Court geometry builder.

Assigns classified lines to court roles and derives the court model:

  horizontals (sorted by mid-y):  far baseline … service lines / net … near baseline
  verticals   (sorted by mid-x):  left sideline … center service line … right sideline

Anything that cannot be assigned is replaced by a synthetic line placed where
a standard court would have it, so the result is always usable; confidence
says how much of it was actually seen.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence
import numpy as np

from ..geometry import angle_difference
from ..models.court import (
    CourtGeometry, LineOrientation, LineSegment, Perspective, Rect, ServiceBoxes,
)
from .homography import HomographyCalc
import config


class CourtGeometryBuilder:
    """Builds a CourtGeometry snapshot from detected line segments."""

    def __init__(self, doubles: bool = config.DOUBLES, verbose: bool = False):
        self._homography = HomographyCalc(doubles=doubles)
        self._verbose = verbose

    # ── Public API ─────────────────────────────────────────────────────────────

    def build(
        self, lines: Sequence[LineSegment], frame_width: int, frame_height: int
    ) -> CourtGeometry:
        horizontals = sorted((ln for ln in lines if ln.orientation == LineOrientation.HORIZONTAL),
                             key=lambda ln: ln.midpoint[1])
        verticals = sorted((ln for ln in lines if ln.orientation == LineOrientation.VERTICAL),
                           key=lambda ln: ln.midpoint[0])

        found = self.assign_roles(horizontals, verticals)
        bounds = self._bounds(found, frame_width, frame_height)
        court = self._complete(found, bounds)
        boxes = self._service_boxes(court, bounds)

        confidence = self.line_confidence(found, horizontals + verticals)
        perspective = self.estimate_perspective(found)
        if perspective.distortion > config.MAX_DISTORTION:
            confidence *= config.DISTORTION_PENALTY
        if perspective.view_angle_deg > config.MAX_VIEW_ANGLE:
            confidence *= config.VIEW_ANGLE_PENALTY
        confidence = float(np.clip(confidence, 0.0, 1.0))

        homography = None
        if all(r in found for r in ("near_baseline", "far_baseline",
                                    "left_sideline", "right_sideline")):
            homography = self._homography.from_lines(
                found["near_baseline"], found["far_baseline"],
                found["left_sideline"], found["right_sideline"])
        if homography is not None:
            perspective = Perspective(
                view_angle_deg=perspective.view_angle_deg,
                distortion=perspective.distortion,
                homography=homography,
                real_world=confidence > config.REAL_WORLD_MIN_CONF,
            )

        geometry = CourtGeometry(
            frame_width=int(frame_width),
            frame_height=int(frame_height),
            bounds=bounds,
            near_baseline=court["near_baseline"],
            far_baseline=court["far_baseline"],
            left_sideline=court["left_sideline"],
            right_sideline=court["right_sideline"],
            near_service_line=court["near_service_line"],
            far_service_line=court["far_service_line"],
            center_service_line=court["center_service_line"],
            net_line=court["net"],
            service_boxes=boxes,
            confidence=confidence,
            perspective=perspective,
            detected_roles=tuple(r for r in court if r in found),
        )
        if self._verbose:
            missing = ", ".join(geometry.missing_roles) or "none"
            print(f"[Court]  Geometry built: H={len(horizontals)} V={len(verticals)}  "
                  f"conf={confidence:.2f}  missing={missing}")
        return geometry

    @staticmethod
    def assign_roles(
        horizontals: List[LineSegment], verticals: List[LineSegment]
    ) -> Dict[str, LineSegment]:
        """Map role name → detected line. Inputs must already be sorted."""
        found: Dict[str, LineSegment] = {}

        if len(horizontals) >= 2:
            found["far_baseline"] = horizontals[0].with_label("far_baseline")
            found["near_baseline"] = horizontals[-1].with_label("near_baseline")
        net_idx: Optional[int] = None
        if len(horizontals) >= 3:
            net_idx = len(horizontals) // 2
            found["net"] = horizontals[net_idx].with_label("net")

        service = [ln for i, ln in enumerate(horizontals[1:-1], start=1) if i != net_idx]
        if len(service) >= 2:
            found["far_service_line"] = service[0].with_label("far_service_line")
            found["near_service_line"] = service[-1].with_label("near_service_line")
        elif len(service) == 1:
            ref_y = (found["net"].midpoint[1] if "net" in found else
                     (horizontals[0].midpoint[1] + horizontals[-1].midpoint[1]) / 2)
            role = "near_service_line" if service[0].midpoint[1] > ref_y else "far_service_line"
            found[role] = service[0].with_label(role)

        if len(verticals) >= 2:
            found["left_sideline"] = verticals[0].with_label("left_sideline")
            found["right_sideline"] = verticals[-1].with_label("right_sideline")
        if len(verticals) >= 3:
            found["center_service_line"] = verticals[len(verticals) // 2].with_label(
                "center_service_line")
        return found

    @staticmethod
    def line_confidence(found: Dict[str, LineSegment], classified: List[LineSegment]) -> float:
        """Assigned roles ÷ 7 plus a bounded bonus for strong lines."""
        service = sum(1 for r in ("far_service_line", "near_service_line") if r in found)
        assigned = (
            sum(1 for r in ("far_baseline", "near_baseline") if r in found) +
            min(service, 2) +
            sum(1 for r in ("left_sideline", "right_sideline") if r in found) +
            int("net" in found) + int("center_service_line" in found)
        )
        confidence = min(assigned, config.COURT_EXPECTED_LINES) / config.COURT_EXPECTED_LINES
        if classified:
            mean_strength = float(np.mean([ln.strength for ln in classified]))
            confidence += min(config.COURT_STRENGTH_BONUS_MAX,
                              mean_strength / config.COURT_STRENGTH_SCALE)
        return float(np.clip(confidence, 0.0, 1.0))

    @staticmethod
    def estimate_perspective(found: Dict[str, LineSegment]) -> Perspective:
        """View angle from sideline divergence, distortion from baseline lengths."""
        view_angle = 0.0
        if "left_sideline" in found and "right_sideline" in found:
            view_angle = angle_difference(found["left_sideline"].angle_deg,
                                          found["right_sideline"].angle_deg)
        distortion = 0.0
        if "near_baseline" in found and "far_baseline" in found:
            near = found["near_baseline"].length
            far = found["far_baseline"].length
            if max(near, far) > 0:
                distortion = abs(near - far) / max(near, far)
        return Perspective(view_angle_deg=view_angle, distortion=distortion)

    # ── Internals ──────────────────────────────────────────────────────────────

    @staticmethod
    def _bounds(found: Dict[str, LineSegment], W: int, H: int) -> Rect:
        x0, x1 = 0.0, float(W)
        if "left_sideline" in found and "right_sideline" in found:
            left, right = found["left_sideline"], found["right_sideline"]
            lx, rx = min(left.x1, left.x2), max(right.x1, right.x2)
            if rx > lx:
                x0, x1 = lx, rx
        y0, y1 = 0.0, float(H)
        if "far_baseline" in found and "near_baseline" in found:
            far, near = found["far_baseline"], found["near_baseline"]
            ty, by = min(far.y1, far.y2), max(near.y1, near.y2)
            if by > ty:
                y0, y1 = ty, by
        return Rect(x0, y0, x1 - x0, y1 - y0)

    @staticmethod
    def _complete(found: Dict[str, LineSegment], b: Rect) -> Dict[str, LineSegment]:
        """Every role filled: detected line if present, else a synthetic one."""
        cx, cy = b.center

        def hline(y: float, label: str) -> LineSegment:
            return LineSegment(b.x, y, b.right, y, orientation=LineOrientation.HORIZONTAL,
                               label=label)

        def vline(x: float, label: str) -> LineSegment:
            return LineSegment(x, b.y, x, b.bottom, orientation=LineOrientation.VERTICAL,
                               label=label)

        synthetic = {
            "far_baseline":        hline(b.y, "far_baseline"),
            "near_baseline":       hline(b.bottom, "near_baseline"),
            "left_sideline":       vline(b.x, "left_sideline"),
            "right_sideline":      vline(b.right, "right_sideline"),
            "far_service_line":    hline(b.y + b.height * config.SERVICE_LINE_FAR_RATIO,
                                         "far_service_line"),
            "near_service_line":   hline(b.y + b.height * config.SERVICE_LINE_NEAR_RATIO,
                                         "near_service_line"),
            "net":                 hline(cy, "net"),
            "center_service_line": vline(cx, "center_service_line"),
        }
        return {role: found.get(role, line) for role, line in synthetic.items()}

    @staticmethod
    def _service_boxes(court: Dict[str, LineSegment], b: Rect) -> ServiceBoxes:
        cx, cy = b.center
        net_y = court["net"].midpoint[1]
        center_x = court["center_service_line"].midpoint[0]
        # A net or center line outside the court can't anchor the boxes
        if not b.y <= net_y <= b.bottom:
            net_y = cy
        if not b.x <= center_x <= b.right:
            center_x = cx

        box_h = b.height * config.SERVICE_BOX_HEIGHT_RATIO
        box_w = b.width / 2
        top = net_y - box_h / 2
        return ServiceBoxes(
            deuce=Rect(b.x, top, box_w, box_h),
            ad=Rect(center_x, top, box_w, box_h),
        )


def default_geometry(frame_width: int, frame_height: int) -> CourtGeometry:
    """All-synthetic, zero-confidence court covering the whole frame."""
    return CourtGeometryBuilder().build([], frame_width, frame_height)
