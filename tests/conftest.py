"""
Pytest configuration and shared fixtures
"""

import pytest
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dataportal.api.errors import SearchServiceError
from dataportal.api.models.search import (
    SearchRequest,
    SearchRequestQuery,
    SearchResponse,
    SearchResponseItem,
)


SAMPLE_DIF = """<DIF>
  <Entry_ID>PANGAEA.123</Entry_ID>
  <Entry_Title>Sea ice thickness in the Fram Strait</Entry_Title>
  <Data_Center>
    <Data_Center_Name>
      <Short_Name>PANGAEA</Short_Name>
      <Long_Name>PANGAEA - Data Publisher for Earth &amp; Environmental Science</Long_Name>
    </Data_Center_Name>
  </Data_Center>
  <Summary><Abstract>Ice thickness measured by airborne EM sounding.</Abstract></Summary>
</DIF>"""


class FakeSearchClient:
    """In-memory stand-in for SearchServiceClient that records its calls."""

    def __init__(self, total_count: int = 25, terms: Optional[List[str]] = None):
        self.total_count = total_count
        self.terms = terms if terms is not None else ["AWI", "PANGAEA", "WDC-MARE"]
        self.fault: Optional[SearchServiceError] = None
        self.available = True
        self.documents = {"PANGAEA.123": SearchResponseItem(
            score=1.0, xml=SAMPLE_DIF, identifier="PANGAEA.123",
            fields={"dataCenterFull": ["PANGAEA"], "year": [2007]},
        )}
        self.calls = []

    def _check_fault(self):
        if self.fault is not None:
            raise self.fault

    def _page(self, offset: int, count: int) -> SearchResponse:
        hits = max(0, min(count, self.total_count - offset))
        return SearchResponse(
            total_count=self.total_count,
            offset=offset,
            query_time=3,
            results=[
                SearchResponseItem(score=0.5, xml=SAMPLE_DIF, identifier=f"PANGAEA.{offset + i}")
                for i in range(hits)
            ],
        )

    def search(self, request: SearchRequest, offset: int, count: int) -> SearchResponse:
        self.calls.append(("search", request, offset, count))
        self._check_fault()
        return self._page(offset, count)

    def list_terms(self, index, field, count, prefix=None):
        self.calls.append(("list_terms", index, field, count, prefix))
        self._check_fault()
        return [t for t in self.terms if not prefix or t.startswith(prefix)]

    def suggest(self, index, query: SearchRequestQuery, count):
        self.calls.append(("suggest", index, query, count))
        self._check_fault()
        return [query.query + "berg", query.query + "sheet"]

    def get_document(self, index, identifier):
        self.calls.append(("get_document", index, identifier))
        self._check_fault()
        return self.documents.get(identifier)

    def more_like_this(self, index, identifier, offset, count, field=None):
        self.calls.append(("more_like_this", index, identifier, offset, count, field))
        self._check_fault()
        return self._page(offset, count)

    def store_query(self, request):
        self.calls.append(("store_query", request))
        self._check_fault()
        return "3f2504e0-4f89-11d3-9a0c-0305e82c3301"

    def is_available(self):
        return self.available

    def calls_to(self, name):
        return [c for c in self.calls if c[0] == name]


def make_fault(message: str = "Index 'dataportal' does not exist!") -> SearchServiceError:
    return SearchServiceError(
        fault_message=message,
        operation="search",
        last_request="<soapenv:Envelope><search/></soapenv:Envelope>",
        last_response="<soapenv:Envelope><soapenv:Fault/></soapenv:Envelope>",
    )


@pytest.fixture
def sample_dif():
    """Sample DIF metadata record."""
    return SAMPLE_DIF


@pytest.fixture
def fake_search_client():
    """Fake search service client."""
    return FakeSearchClient()


@pytest.fixture
def service_fault():
    """SOAP fault as raised by the search service client."""
    return make_fault("Field '<dataCenter>' is unknown!")
