"""
Health Check Endpoints
Endpoints for health checks and status monitoring.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends, status

from ..config import get_settings, PortalSettings
from ..dependencies import get_search_client, get_terms_cache
from ..services.latency import get_latency_tracker
from ..services.search_client import SearchServiceClient
from ..services.terms_cache import TermsCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_check() -> Dict[str, str]:
    """
    Basic health check.

    Returns:
        Simple health status
    """
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/status", status_code=status.HTTP_200_OK)
def status_check(
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
    terms_cache: TermsCache = Depends(get_terms_cache),
) -> Dict[str, Any]:
    """
    Detailed status check.

    Checks status of:
    - Remote search service (WSDL reachable)
    - Facet terms cache
    - Page and remote call latency

    Returns:
        Detailed status information
    """
    status_info: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "components": {},
    }

    if client.is_available():
        status_info["components"]["search_service"] = {
            "status": "healthy",
            "wsdl_url": settings.wsdl_url,
        }
    else:
        status_info["components"]["search_service"] = {
            "status": "unhealthy",
            "wsdl_url": settings.wsdl_url,
        }
        status_info["status"] = "degraded"

    status_info["components"]["terms_cache"] = terms_cache.get_stats()
    status_info["latency_ms"] = get_latency_tracker().get_stats()

    return status_info
