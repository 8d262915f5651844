"""
Request Timing Middleware
Records render time per route group and flags slow pages.
"""

import logging
import time
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..services.latency import LatencyTracker, get_latency_tracker

logger = logging.getLogger(__name__)


def route_group(path: str) -> str:
    """Latency series a request path is recorded under."""
    if path.startswith("/api/"):
        return "requests.api"
    if path in ("/health", "/status"):
        return "requests.health"
    return "requests.page"


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Sets X-Response-Time and records each request in the latency tracker.

    Requests slower than ``slow_request_ms`` are logged as warnings.
    """

    def __init__(
        self,
        app,
        tracker: Optional[LatencyTracker] = None,
        slow_request_ms: float = 300.0,
    ):
        super().__init__(app)
        self.tracker = tracker or get_latency_tracker()
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        path = request.url.path
        self.tracker.record(route_group(path), duration_ms)
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if duration_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request: {request.method} {path} took {duration_ms:.0f}ms",
                extra={"path": path, "duration_ms": duration_ms},
            )

        return response
