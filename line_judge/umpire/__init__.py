from .evaluator import CallEvaluator
from .history   import CallLog

__all__ = ["CallEvaluator", "CallLog"]
