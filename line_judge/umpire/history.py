"""
Recent-call history with running statistics for display and audit.
"""
from __future__ import annotations
from collections import Counter, deque
from typing import Deque, Dict, List, Optional

from ..models.call import UmpireCall
import config


class CallLog:
    """Newest-first list of the last `size` calls, plus session totals."""

    def __init__(self, size: int = config.CALL_HISTORY_SIZE):
        self._recent: Deque[UmpireCall] = deque(maxlen=size)
        self.total_calls = 0
        self.average_confidence = 0.0
        self._by_type: Counter = Counter()
        self._first_ms: Optional[float] = None
        self._last_ms: Optional[float] = None

    def record(self, call: UmpireCall) -> None:
        self._recent.appendleft(call)
        self.total_calls += 1
        # Running mean over every call of the session, not just the visible ones
        self.average_confidence += (call.confidence - self.average_confidence) / self.total_calls
        self._by_type[call.call_type.value] += 1
        if self._first_ms is None:
            self._first_ms = call.timestamp_ms
        self._last_ms = call.timestamp_ms

    @property
    def recent(self) -> List[UmpireCall]:
        return list(self._recent)

    @property
    def latest(self) -> Optional[UmpireCall]:
        return self._recent[0] if self._recent else None

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self._by_type)

    @property
    def calls_per_minute(self) -> float:
        if self._first_ms is None or self._last_ms is None:
            return 0.0
        span_min = (self._last_ms - self._first_ms) / 60_000.0
        return self.total_calls / span_min if span_min > 0 else float(self.total_calls)

    def clear(self) -> None:
        self._recent.clear()
        self.total_calls = 0
        self.average_confidence = 0.0
        self._by_type.clear()
        self._first_ms = self._last_ms = None

    def __len__(self) -> int:
        return len(self._recent)

    def to_dict(self) -> dict:
        return {
            "total_calls": self.total_calls,
            "average_confidence": round(self.average_confidence, 3),
            "calls_per_minute": round(self.calls_per_minute, 2),
            "counts": self.counts,
            "recent": [c.to_dict() for c in self._recent],
        }
