"""
Search Models
Pydantic models for the records exchanged with the remote search service.
"""

from datetime import date, datetime
from typing import Annotated, Optional, List, Dict, Any, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    Strict,
    field_validator,
    model_validator,
)

# Range bounds are sent as xsd:anyType. Strings stay strings (the service
# decides whether they are numbers or dates); only date/datetime objects
# given from Python are sent as typed dates.
RangeValue = Optional[
    Annotated[
        Union[StrictInt, StrictFloat, str, Annotated[datetime, Strict()], Annotated[date, Strict()]],
        Field(union_mode="left_to_right"),
    ]
]


def unwrap_array(value: Any) -> List[Any]:
    """
    Normalize a SOAP array value to a plain list.

    Depending on the WSDL binding, arrays come back as lists, as ``None`` for
    empty arrays, or wrapped in a single-key mapping such as ``{"item": [...]}``.
    """
    if value is None:
        return []
    if isinstance(value, dict) and len(value) == 1:
        (inner,) = value.values()
        return unwrap_array(inner)
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class SearchRequestQuery(BaseModel):
    """
    Single query clause.

    ``field=None`` searches the default field. Clauses flagged ``any_of`` on
    the same field are OR-ed together; all other clauses must match.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"field": "dataCenterFull", "query": "PANGAEA", "anyOf": False}},
    )

    field: Optional[str] = Field(None, description="Field name (None for default field)")
    query: str = Field(..., max_length=1024, description="Query text")
    any_of: bool = Field(default=False, alias="anyOf", description="Match any clause on this field")

    @model_validator(mode="after")
    def check_any_of(self) -> "SearchRequestQuery":
        if self.any_of and self.field is None:
            raise ValueError("anyOf cannot be used with the default field")
        return self

    def is_empty(self) -> bool:
        return self.query == ""

    def to_soap(self) -> Dict[str, Any]:
        return {"field": self.field, "query": self.query, "anyOf": self.any_of}


class SearchRequestRange(BaseModel):
    """Range filter on a numeric or date field. ``None`` leaves a bound open."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"field": "maxLatitude", "min": -90.0, "max": None}},
    )

    field: str = Field(..., min_length=1, description="Field name")
    min: RangeValue = Field(None, description="Lower bound (inclusive)")
    max: RangeValue = Field(None, description="Upper bound (inclusive)")

    @model_validator(mode="after")
    def check_bounds(self) -> "SearchRequestRange":
        if self.min is None and self.max is None:
            raise ValueError(f"Range on field '{self.field}' needs at least one bound")
        return self


class SearchRequest(BaseModel):
    """
    Search request sent to the remote ``search`` operation.

    Sorting: without ``sort_field`` results are ordered by relevance (highest
    first). With a sort field, results are sorted by that field first (in the
    direction given by ``sort_reverse``), then by relevance.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "index": "dataportal",
                "sortField": None,
                "sortReverse": None,
                "queries": [{"field": None, "query": "sea ice", "anyOf": False}],
                "ranges": [{"field": "minLatitude", "min": None, "max": 90.0}],
            }
        },
    )

    index: str = Field(..., min_length=1, description="Index name")
    sort_field: Optional[str] = Field(None, alias="sortField", description="Sort field")
    sort_reverse: Optional[bool] = Field(None, alias="sortReverse", description="Sort descending")
    queries: List[SearchRequestQuery] = Field(default_factory=list, description="Query clauses")
    ranges: List[SearchRequestRange] = Field(default_factory=list, description="Range filters")
    stored_query_uuid: Optional[str] = Field(
        None, alias="storedQueryUUID", description="UUID of a query stored on the service"
    )

    @model_validator(mode="after")
    def check_stored_query(self) -> "SearchRequest":
        if self.stored_query_uuid is not None and (self.queries or self.ranges):
            raise ValueError("A stored query may not be combined with other constraints")
        return self

    def has_constraints(self) -> bool:
        """True if the service would accept this request as a query."""
        if self.stored_query_uuid is not None:
            return True
        return bool(self.ranges) or any(not q.is_empty() for q in self.queries)


class SearchResponseItem(BaseModel):
    """Single search hit."""

    model_config = ConfigDict(populate_by_name=True)

    score: float = Field(default=0.0, description="Relevance score")
    xml: Optional[str] = Field(None, description="Stored XML document")
    identifier: Optional[str] = Field(None, description="Document identifier")
    fields: Dict[str, List[Any]] = Field(default_factory=dict, description="Stored fields")

    @field_validator("fields", mode="before")
    @classmethod
    def parse_fields(cls, v: Any) -> Dict[str, List[Any]]:
        """Accept plain mappings as well as SOAP key/value map entries."""
        if v is None:
            return {}
        if isinstance(v, dict) and not _is_wrapped_array(v):
            return {str(name): unwrap_array(values) for name, values in v.items()}

        fields: Dict[str, List[Any]] = {}
        for entry in unwrap_array(v):
            if isinstance(entry, dict) and "key" in entry:
                fields[str(entry["key"])] = unwrap_array(entry.get("value"))
        return fields


class SearchResponse(BaseModel):
    """Search response: one page of hits plus the total hit count."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "totalCount": 42,
                "offset": 10,
                "queryTime": 7,
                "results": [{"score": 0.87, "identifier": "oai:example:1", "xml": "<DIF/>"}],
            }
        },
    )

    total_count: int = Field(default=0, alias="totalCount", description="Total number of hits")
    offset: int = Field(default=0, description="Offset of the first returned hit")
    query_time: Optional[int] = Field(None, alias="queryTime", description="Query time in ms")
    results: List[SearchResponseItem] = Field(default_factory=list, description="Hits")

    @field_validator("results", mode="before")
    @classmethod
    def parse_results(cls, v: Any) -> List[Any]:
        return unwrap_array(v)


def _is_wrapped_array(value: Dict[str, Any]) -> bool:
    return len(value) == 1 and next(iter(value)) in ("item", "items", "entry")
