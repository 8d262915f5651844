"""
Latency Tracking
Rolling latency windows per named series.

Page renders are recorded by the timing middleware (``requests.page``,
``requests.api``); each remote call is recorded by the search client
(``search_service.<operation>``), so the share of a render spent waiting on
the service is visible on ``/status``.
"""

import math
import statistics
from collections import deque
from threading import Lock
from typing import Deque, Dict, List


def summarize(values: List[float]) -> Dict[str, float]:
    """Count, mean, extremes and nearest-rank percentiles of a sample."""
    if not values:
        return {"count": 0, "p50": 0.0, "p95": 0.0, "p99": 0.0, "mean": 0.0, "max": 0.0}

    ordered = sorted(values)

    def rank(p: int) -> float:
        return ordered[max(math.ceil(p / 100.0 * len(ordered)) - 1, 0)]

    return {
        "count": len(ordered),
        "p50": rank(50),
        "p95": rank(95),
        "p99": rank(99),
        "mean": statistics.fmean(ordered),
        "max": ordered[-1],
    }


class LatencyTracker:
    """Keeps the most recent measurements of each series."""

    def __init__(self, window_size: int = 1000):
        self.window_size = window_size
        self._series: Dict[str, Deque[float]] = {}
        self._lock = Lock()

    def record(self, series: str, latency_ms: float) -> None:
        with self._lock:
            window = self._series.get(series)
            if window is None:
                window = self._series[series] = deque(maxlen=self.window_size)
            window.append(latency_ms)

    def get_stats(self) -> Dict[str, Dict[str, float]]:
        """Summary of every series seen so far, keyed by series name."""
        with self._lock:
            snapshot = {name: list(window) for name, window in self._series.items()}
        return {name: summarize(values) for name, values in sorted(snapshot.items())}

    def reset(self) -> None:
        with self._lock:
            self._series.clear()


_latency_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    """Process-wide tracker shared by the middleware and the search client."""
    return _latency_tracker
