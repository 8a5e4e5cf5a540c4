from .detector import AsyncBallDetector, BallDetector, HoughBallDetector
from .tracker  import BallTracker, TrackerContext

__all__ = ["AsyncBallDetector", "BallDetector", "HoughBallDetector",
           "BallTracker", "TrackerContext"]
