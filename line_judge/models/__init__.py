"""
Core data models for the line judge.
Split across sub-modules; this __init__ re-exports everything.
"""
from .court import (
    LineOrientation, LineSegment, Rect, ServiceSide, ServiceBoxes,
    Perspective, CourtGeometry, COURT_ROLES,
)
from .ball  import (
    SpinType, CourtRegion, BallCandidate, TrajectoryPoint, BallState,
    TrajectoryAnalysis,
)
from .call  import CallType, UmpireCall
from .frame import Frame, EdgeMap, VideoMetadata, FrameResult, AnalysisResult

__all__ = [
    "LineOrientation", "LineSegment", "Rect", "ServiceSide", "ServiceBoxes",
    "Perspective", "CourtGeometry", "COURT_ROLES",
    "SpinType", "CourtRegion", "BallCandidate", "TrajectoryPoint", "BallState",
    "TrajectoryAnalysis",
    "CallType", "UmpireCall",
    "Frame", "EdgeMap", "VideoMetadata", "FrameResult", "AnalysisResult",
]
