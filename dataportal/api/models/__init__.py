"""
Pydantic Models
Search service records and API request/response models.
"""

from .search import (
    SearchRequest,
    SearchRequestQuery,
    SearchRequestRange,
    SearchResponse,
    SearchResponseItem,
    unwrap_array,
)
from .api import SearchQueryBody, TermsResponse, SuggestResponse, StoredQueryResponse

__all__ = [
    "SearchRequest",
    "SearchRequestQuery",
    "SearchRequestRange",
    "SearchResponse",
    "SearchResponseItem",
    "unwrap_array",
    "SearchQueryBody",
    "TermsResponse",
    "SuggestResponse",
    "StoredQueryResponse",
]
