"""
Middleware
Request logging and timing middleware for the portal.
"""

from .logging import RequestLoggingMiddleware
from .timing import RequestTimingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "RequestTimingMiddleware",
]
