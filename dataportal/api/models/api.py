"""
API Models
Request/response bodies for the JSON endpoints.
"""

from typing import Optional, List
from pydantic import BaseModel, Field

from .search import SearchRequest


class SearchQueryBody(BaseModel):
    """Body of POST /api/v1/search."""

    request: SearchRequest = Field(..., description="Search request")
    offset: int = Field(default=0, ge=0, description="Number of hits to skip")
    count: int = Field(default=10, ge=1, le=1000, description="Maximum number of hits to return")


class TermsResponse(BaseModel):
    """Terms listed for a field."""

    index: str
    field: str
    prefix: Optional[str] = None
    terms: List[str] = Field(default_factory=list)


class SuggestResponse(BaseModel):
    """Query suggestions."""

    index: str
    field: Optional[str] = None
    query: str
    suggestions: List[str] = Field(default_factory=list)


class StoredQueryResponse(BaseModel):
    """UUID under which the service stored a query."""

    uuid: str
