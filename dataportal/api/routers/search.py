"""
Search API Endpoints
JSON access to the remote search service:
POST /api/v1/search, GET /api/v1/terms, GET /api/v1/suggest,
POST /api/v1/stored-queries.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from ..config import get_settings, PortalSettings
from ..dependencies import get_request_id, get_search_client
from ..errors import InvalidRequestError
from ..models.api import SearchQueryBody, StoredQueryResponse, SuggestResponse, TermsResponse
from ..models.search import SearchRequest, SearchRequestQuery, SearchResponse
from ..services.queries import normalize_query
from ..services.search_client import SearchServiceClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["search"])


@router.post("/search", response_model=SearchResponse, status_code=status.HTTP_200_OK)
def search(
    body: SearchQueryBody,
    client: SearchServiceClient = Depends(get_search_client),
    request_id: str = Depends(get_request_id),
) -> SearchResponse:
    """
    Run a search request against the remote service.

    Args:
        body: Search request with offset and count
        client: Search service client
        request_id: Request ID for tracing

    Returns:
        One page of hits with the total hit count
    """
    if not body.request.has_constraints():
        raise InvalidRequestError("The search request does not contain any constraints")

    logger.info(
        f"API search: index={body.request.index}, offset={body.offset}, count={body.count}",
        extra={"request_id": request_id},
    )
    return client.search(body.request, body.offset, body.count)


@router.get("/terms", response_model=TermsResponse)
def list_terms(
    field: Optional[str] = Query(None, description="Field name (defaults to the facet field)"),
    prefix: Optional[str] = Query(None, description="Only terms starting with this prefix"),
    count: int = Query(100, ge=1, le=65536, description="Maximum number of terms"),
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
) -> TermsResponse:
    """List indexed terms of a field."""
    field = field or settings.facet_field
    terms = client.list_terms(settings.index_name, field, count, prefix=prefix or None)
    return TermsResponse(index=settings.index_name, field=field, prefix=prefix or None, terms=terms)


@router.get("/suggest", response_model=SuggestResponse)
def suggest(
    q: str = Query(..., max_length=1024, description="Partial query"),
    field: Optional[str] = Query(None, description="Field name (None for default field)"),
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
) -> SuggestResponse:
    """Suggest completions for a partial query; blank queries get no suggestions."""
    response = SuggestResponse(index=settings.index_name, field=field, query=q)
    if normalize_query(q) is None:
        return response

    clause = SearchRequestQuery(field=field, query=q)
    response.suggestions = client.suggest(settings.index_name, clause, settings.suggest_count)
    return response


@router.post(
    "/stored-queries", response_model=StoredQueryResponse, status_code=status.HTTP_201_CREATED
)
def store_query(
    search_request: SearchRequest,
    client: SearchServiceClient = Depends(get_search_client),
) -> StoredQueryResponse:
    """Store a query on the service so it can be re-run by UUID."""
    if search_request.stored_query_uuid is not None:
        raise InvalidRequestError("A stored query cannot be stored again")
    if not search_request.has_constraints():
        raise InvalidRequestError("The search request does not contain any constraints")
    return StoredQueryResponse(uuid=client.store_query(search_request))
