from .loader import VideoLoader
from .runner import VideoAnalyser

__all__ = ["VideoLoader", "VideoAnalyser"]
