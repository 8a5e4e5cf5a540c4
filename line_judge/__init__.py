"""
Tennis line judge: court geometry, ball tracking and line calls from video frames.
"""
from .errors   import LineJudgeError, InvalidFrame, DetectorUnavailable
from .settings import AnalysisSettings
from .models   import (
    Frame, EdgeMap, LineSegment, CourtGeometry, BallCandidate, BallState,
    UmpireCall, CallType, CourtRegion, SpinType, ServiceSide, FrameResult,
)
from .court    import (
    EdgeExtractor, LineDetector, CourtGeometryBuilder, CourtAnalyser, default_geometry,
)
from .ball     import BallDetector, AsyncBallDetector, HoughBallDetector, BallTracker, TrackerContext
from .umpire   import CallEvaluator, CallLog
from .pipeline import MatchPipeline

__all__ = [
    "LineJudgeError", "InvalidFrame", "DetectorUnavailable", "AnalysisSettings",
    "Frame", "EdgeMap", "LineSegment", "CourtGeometry", "BallCandidate", "BallState",
    "UmpireCall", "CallType", "CourtRegion", "SpinType", "ServiceSide", "FrameResult",
    "EdgeExtractor", "LineDetector", "CourtGeometryBuilder", "CourtAnalyser",
    "default_geometry",
    "BallDetector", "AsyncBallDetector", "HoughBallDetector", "BallTracker", "TrackerContext",
    "CallEvaluator", "CallLog", "MatchPipeline",
]
