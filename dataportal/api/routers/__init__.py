"""
Routers
FastAPI route handlers for pages and JSON endpoints.
"""

from .health import router as health_router
from .portal import router as portal_router
from .search import router as search_router

__all__ = [
    "health_router",
    "portal_router",
    "search_router",
]
