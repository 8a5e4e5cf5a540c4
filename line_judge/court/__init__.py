from .edges      import EdgeExtractor
from .lines      import LineDetector
from .builder    import CourtGeometryBuilder, default_geometry
from .homography import HomographyCalc
from .analyser   import CourtAnalyser

__all__ = [
    "EdgeExtractor", "LineDetector",
    "CourtGeometryBuilder", "default_geometry",
    "HomographyCalc", "CourtAnalyser",
]
