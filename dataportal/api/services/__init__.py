"""
Portal Services
Remote search client, result rendering and paging helpers.
"""

from .search_client import SearchServiceClient, request_to_soap
from .transform import ResultTransformer
from .terms_cache import TermsCache
from .latency import LatencyTracker, get_latency_tracker
from .pagination import Navigator, PageLink, build_navigator, page_offset
from .queries import build_search_request, normalize_facet, normalize_query

__all__ = [
    "SearchServiceClient",
    "request_to_soap",
    "ResultTransformer",
    "TermsCache",
    "LatencyTracker",
    "get_latency_tracker",
    "Navigator",
    "PageLink",
    "build_navigator",
    "page_offset",
    "build_search_request",
    "normalize_facet",
    "normalize_query",
]
