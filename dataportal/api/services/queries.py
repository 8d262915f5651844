"""
Query Building
Turns page parameters into search requests.
"""

from typing import Optional

from ..models.search import SearchRequest, SearchRequestQuery


def normalize_query(text: Optional[str]) -> Optional[str]:
    """Return the query text, or None if it is missing, empty or whitespace-only."""
    if text is None or text.strip() == "":
        return None
    return text


def normalize_facet(value: Optional[str]) -> Optional[str]:
    """Return the facet value, or None if it is missing or empty."""
    if value is None or value == "":
        return None
    return value


def build_search_request(
    index: str,
    query: Optional[str] = None,
    facet_field: Optional[str] = None,
    facet_value: Optional[str] = None,
    sort_field: Optional[str] = None,
    sort_reverse: Optional[bool] = None,
) -> SearchRequest:
    """
    Build a request from a free-text query and an optional facet value.

    The free text searches the default field; the facet value must match the
    facet field exactly. Both clauses are required to match.
    """
    queries = []
    if query is not None:
        queries.append(SearchRequestQuery(field=None, query=query, any_of=False))
    if facet_field is not None and facet_value is not None:
        queries.append(SearchRequestQuery(field=facet_field, query=facet_value, any_of=False))

    return SearchRequest(
        index=index,
        sort_field=sort_field,
        sort_reverse=sort_reverse,
        queries=queries,
    )
