"""
Portal Pages
HTML pages: the data portal with facet selector and paging, a raw result
view, single documents and "more like this" listings.

Page handlers are plain functions: each render blocks on the remote search
service, so FastAPI runs them in its threadpool.
"""

import logging
import pprint
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse

from ..config import get_settings, PortalSettings
from ..dependencies import (
    get_request_id,
    get_result_transformer,
    get_search_client,
    get_terms_cache,
)
from ..errors import ResourceNotFoundError, SearchServiceError
from ..models.search import SearchResponse
from ..services.pagination import build_navigator
from ..services.queries import build_search_request, normalize_facet, normalize_query
from ..services.search_client import SearchServiceClient
from ..services.terms_cache import TermsCache
from ..services.transform import ResultTransformer
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["portal"])


def _link_builder(path: str, params: Dict[str, str]) -> Callable[[int], str]:
    """Return a function building links to other result pages of the same listing."""

    def href(offset: int) -> str:
        return f"{path}?{urlencode({**params, 'offset': offset})}"

    return href


def _facet_terms(
    client: SearchServiceClient, cache: TermsCache, settings: PortalSettings
) -> List[str]:
    key = cache.make_key(settings.index_name, settings.facet_field, settings.max_terms)
    return cache.get_or_load(
        key,
        lambda: client.list_terms(settings.index_name, settings.facet_field, settings.max_terms),
    )


def _listing_context(
    response: SearchResponse,
    offset: int,
    href: Callable[[int], str],
    transformer: ResultTransformer,
    settings: PortalSettings,
) -> Dict[str, Any]:
    """Navigator and rendered hits for a result listing."""
    return {
        "navigator": build_navigator(
            response.total_count,
            offset,
            href,
            page_size=settings.page_size,
            window=settings.navigator_window,
        ),
        "list_start": response.offset + 1,
        "items": [transformer.render_item(item) for item in response.results],
        "total_count": response.total_count,
    }


@router.get("/", response_class=HTMLResponse)
def portal_page(
    request: Request,
    q: Optional[str] = Query(None, max_length=1024, description="Free-text query"),
    offset: int = Query(0, ge=0, description="Offset of the first hit on the page"),
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
    transformer: ResultTransformer = Depends(get_result_transformer),
    terms_cache: TermsCache = Depends(get_terms_cache),
    request_id: str = Depends(get_request_id),
):
    """
    Data portal page.

    Shows the query form with the facet selector. When a query or a facet
    value is given, shows one page of hits rendered through the result
    stylesheet, with the navigator above and below.
    """
    query = normalize_query(q)
    # The facet parameter is named after the facet field
    facet_value = normalize_facet(request.query_params.get(settings.facet_field))

    context: Dict[str, Any] = {
        "settings": settings,
        "query": query,
        "facet_value": facet_value,
        "terms": [],
        "navigator": None,
        "error": None,
    }
    status_code = status.HTTP_200_OK

    try:
        context["terms"] = _facet_terms(client, terms_cache, settings)

        if query is not None or facet_value is not None:
            logger.info(
                f"Portal search: query={query!r}, {settings.facet_field}={facet_value!r}, offset={offset}",
                extra={"request_id": request_id},
            )
            search_request = build_search_request(
                settings.index_name,
                query=query,
                facet_field=settings.facet_field,
                facet_value=facet_value,
                sort_field=settings.sort_field,
                sort_reverse=settings.sort_reverse,
            )
            response = client.search(search_request, offset, settings.page_size)

            href = _link_builder(
                request.url.path,
                {"q": query or "", settings.facet_field: facet_value or ""},
            )
            context.update(_listing_context(response, offset, href, transformer, settings))
    except SearchServiceError as e:
        context["error"] = e
        status_code = status.HTTP_502_BAD_GATEWAY

    return templates.TemplateResponse(request, "portal.html", context, status_code=status_code)


@router.get("/simple", response_class=HTMLResponse)
def simple_page(
    request: Request,
    q: Optional[str] = Query(None, max_length=1024, description="Free-text query"),
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
    request_id: str = Depends(get_request_id),
):
    """
    Raw result page.

    Searches the default field and prints the first page of the response as
    is. Failed calls show the SOAP request and response next to the fault.
    """
    query = normalize_query(q)
    context: Dict[str, Any] = {"settings": settings, "query": query, "raw": None, "error": None}
    status_code = status.HTTP_200_OK

    if query is not None:
        logger.info(f"Simple search: query={query!r}", extra={"request_id": request_id})
        search_request = build_search_request(settings.index_name, query=query)
        try:
            response = client.search(search_request, 0, settings.page_size)
            context["raw"] = pprint.pformat(response.model_dump(by_alias=True), width=100)
        except SearchServiceError as e:
            context["error"] = e
            status_code = status.HTTP_502_BAD_GATEWAY

    return templates.TemplateResponse(request, "simple.html", context, status_code=status_code)


@router.get("/document/{identifier:path}", response_class=HTMLResponse)
def document_page(
    request: Request,
    identifier: str,
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
    transformer: ResultTransformer = Depends(get_result_transformer),
):
    """Single document rendered through the result stylesheet, with its stored fields."""
    item = client.get_document(settings.index_name, identifier)
    if item is None:
        raise ResourceNotFoundError("Document", identifier)

    fields = item.fields
    if settings.document_fields:
        fields = {name: fields[name] for name in settings.document_fields if name in fields}

    context = {
        "settings": settings,
        "identifier": identifier,
        "rendered": transformer.render_item(item),
        "fields": fields,
    }
    return templates.TemplateResponse(request, "document.html", context)


@router.get("/similar/{identifier:path}", response_class=HTMLResponse)
def similar_page(
    request: Request,
    identifier: str,
    field: Optional[str] = Query(None, description="Compare on this field only"),
    offset: int = Query(0, ge=0, description="Offset of the first hit on the page"),
    settings: PortalSettings = Depends(get_settings),
    client: SearchServiceClient = Depends(get_search_client),
    transformer: ResultTransformer = Depends(get_result_transformer),
):
    """Documents similar to the given one, paged like the portal page."""
    context: Dict[str, Any] = {
        "settings": settings,
        "identifier": identifier,
        "field": field,
        "navigator": None,
        "error": None,
    }
    status_code = status.HTTP_200_OK

    try:
        response = client.more_like_this(
            settings.index_name, identifier, offset, settings.page_size, field=field
        )
        params = {"field": field} if field else {}
        href = _link_builder(request.url.path, params)
        context.update(_listing_context(response, offset, href, transformer, settings))
    except SearchServiceError as e:
        context["error"] = e
        status_code = status.HTTP_502_BAD_GATEWAY

    return templates.TemplateResponse(request, "similar.html", context, status_code=status_code)
