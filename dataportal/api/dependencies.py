"""
Dependency Injection
FastAPI dependencies for the search client, renderer and caches.
"""

import logging
import uuid
from typing import Optional

import redis
from fastapi import Header, Request

from .config import get_settings
from .services.latency import get_latency_tracker
from .services.search_client import SearchServiceClient
from .services.terms_cache import TermsCache
from .services.transform import ResultTransformer

logger = logging.getLogger(__name__)

_search_client: Optional[SearchServiceClient] = None
_result_transformer: Optional[ResultTransformer] = None
_terms_cache: Optional[TermsCache] = None


def get_search_client() -> SearchServiceClient:
    """
    Get search service client (singleton).

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(client: SearchServiceClient = Depends(get_search_client)):
            ...
    """
    global _search_client
    if _search_client is None:
        settings = get_settings()
        _search_client = SearchServiceClient(
            wsdl_url=settings.wsdl_url,
            timeout=settings.search_timeout,
            latency_tracker=get_latency_tracker(),
        )
        logger.info(f"Search service client created: {settings.wsdl_url}")
    return _search_client


def get_result_transformer() -> ResultTransformer:
    """Get result stylesheet transformer (singleton)."""
    global _result_transformer
    if _result_transformer is None:
        settings = get_settings()
        _result_transformer = ResultTransformer(settings.stylesheet_path)
    return _result_transformer


def get_terms_cache() -> TermsCache:
    """
    Get facet terms cache (singleton).

    The Redis connection is made on first use; until Redis answers, term
    listings are loaded from the search service directly.
    """
    global _terms_cache
    if _terms_cache is None:
        settings = get_settings()
        pool = redis.ConnectionPool(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            max_connections=20,
            socket_timeout=settings.redis_timeout,
            socket_connect_timeout=settings.redis_timeout,
        )
        _terms_cache = TermsCache(
            client=redis.Redis(connection_pool=pool),
            ttl_seconds=settings.terms_cache_ttl,
        )
        logger.info(
            f"Terms cache: redis {settings.redis_host}:{settings.redis_port} "
            f"(db={settings.redis_db}, ttl={settings.terms_cache_ttl}s)"
        )
    return _terms_cache


def get_request_id(request: Request, x_request_id: Optional[str] = Header(None)) -> str:
    """
    Get or generate request ID for tracing.

    Prefers the ID assigned by RequestLoggingMiddleware.
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id
    if x_request_id:
        return x_request_id
    return str(uuid.uuid4())


def reset_dependencies() -> None:
    """Drop cached singletons (useful for testing)."""
    global _search_client, _result_transformer, _terms_cache
    _search_client = None
    _result_transformer = None
    _terms_cache = None
