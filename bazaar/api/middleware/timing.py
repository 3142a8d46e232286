"""
Request Timing Middleware
Rolling latency percentiles, overall and per route.
"""

import logging
import time
from collections import defaultdict, deque
from threading import Lock
from typing import Callable, Deque, Dict, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

EMPTY_STATS = {"count": 0, "p50": 0.0, "p95": 0.0, "p99": 0.0, "mean": 0.0, "max": 0.0}


def _percentile(sorted_values: List[float], percentile: int) -> float:
    if not sorted_values:
        return 0.0
    index = min(int((percentile / 100.0) * len(sorted_values)), len(sorted_values) - 1)
    return sorted_values[index]


def _summarize(values: Deque[float]) -> Dict[str, float]:
    if not values:
        return dict(EMPTY_STATS)
    ordered = sorted(values)
    return {
        "count": len(ordered),
        "p50": _percentile(ordered, 50),
        "p95": _percentile(ordered, 95),
        "p99": _percentile(ordered, 99),
        "mean": sum(ordered) / len(ordered),
        "max": ordered[-1],
    }


class LatencyTracker:
    """
    Rolling window of request latencies.

    Keeps the most recent `window_size` samples overall and for each route
    template. Requests that matched no route only count toward the overall
    window, so the number of tracked routes is bounded by the app's routes.
    """

    def __init__(self, window_size: int = 1000):
        self.window_size = window_size
        self._all: Deque[float] = deque(maxlen=window_size)
        self._by_path: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=window_size))
        self._lock = Lock()

    def record(self, latency_ms: float, path: Optional[str] = None) -> None:
        with self._lock:
            self._all.append(latency_ms)
            if path:
                self._by_path[path].append(latency_ms)

    def get_stats(self, path: Optional[str] = None) -> Dict[str, float]:
        """Percentile stats overall, or for one route template."""
        with self._lock:
            if path is None:
                return _summarize(self._all)
            return _summarize(self._by_path.get(path, deque()))

    def paths(self) -> List[str]:
        with self._lock:
            return sorted(self._by_path)

    def reset(self) -> None:
        with self._lock:
            self._all.clear()
            self._by_path.clear()


_latency_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    """Get global latency tracker."""
    return _latency_tracker


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Record request latency and flag requests slower than the target.

    Args:
        app: ASGI application
        tracker: Latency tracker (uses global if not provided)
        slow_threshold_ms: Requests above this are logged at WARNING
    """

    def __init__(self, app, tracker: LatencyTracker = None, slow_threshold_ms: float = 300.0):
        super().__init__(app)
        self.tracker = tracker or get_latency_tracker()
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        route = request.scope.get("route")
        self.tracker.record(duration_ms, getattr(route, "path", None))
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if duration_ms > self.slow_threshold_ms:
            logger.warning(
                "Slow request detected",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "threshold_ms": self.slow_threshold_ms,
                },
            )

        return response
