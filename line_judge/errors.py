"""
Exceptions raised by the line judge core.

Only per-call failures are exceptions. Weak court geometry and implausible
ball detections are reported through confidence values instead.
"""


class LineJudgeError(Exception):
    """Base class for all line judge errors."""


class InvalidFrame(LineJudgeError):
    """Frame is missing, empty or not a 3-channel image."""


class DetectorUnavailable(LineJudgeError):
    """Ball detector backend cannot produce a result for this frame."""
