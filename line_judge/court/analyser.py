"""
Court analysis: EdgeExtractor → LineDetector → CourtGeometryBuilder.

Run on calibration only, not every frame. The returned geometry is a new
immutable snapshot; callers swap it in with a single assignment.
"""
from __future__ import annotations
from typing import Optional

from ..models.court import CourtGeometry
from ..models.frame import Frame
from .builder import CourtGeometryBuilder
from .edges import EdgeExtractor
from .lines import LineDetector


class CourtAnalyser:
    """Builds court geometry from a single frame."""

    def __init__(
        self,
        edge_extractor: Optional[EdgeExtractor] = None,
        line_detector: Optional[LineDetector] = None,
        builder: Optional[CourtGeometryBuilder] = None,
    ):
        self.edge_extractor = edge_extractor or EdgeExtractor()
        self.line_detector = line_detector or LineDetector()
        self.builder = builder or CourtGeometryBuilder()

    def analyse(self, frame: Frame) -> CourtGeometry:
        """Raises InvalidFrame; never fails on weak or missing lines."""
        edges = self.edge_extractor.extract(frame)
        lines = self.line_detector.detect(edges)
        return self.builder.build(lines, frame.width, frame.height)
