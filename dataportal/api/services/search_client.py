"""
Search Service Client
SOAP client for the remote metadata search service.

All operations block until the service answers. Faults and transport
failures are raised as SearchServiceError together with the last SOAP
envelopes exchanged on the calling thread.
"""

import logging
import threading
import time
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from lxml import etree
from pydantic import BaseModel, ValidationError
from zeep import Client, Settings, xsd
from zeep.plugins import Plugin
from zeep.cache import InMemoryCache
from zeep.exceptions import Error as ZeepError, Fault
from zeep.helpers import serialize_object
from zeep.transports import Transport

from ..errors import SearchServiceError
from ..models.search import (
    RangeValue,
    SearchRequest,
    SearchRequestQuery,
    SearchRequestRange,
    SearchResponse,
    SearchResponseItem,
    unwrap_array,
)
from .latency import LatencyTracker

logger = logging.getLogger(__name__)

# Failures other than SOAP faults that mean "remote call failed"
TRANSPORT_ERRORS = (ZeepError, requests.RequestException, etree.XMLSyntaxError)

# Raised by zeep when the WSDL has no such operation (AttributeError) or the
# arguments do not fit its signature (TypeError)
BINDING_ERRORS = (AttributeError, TypeError)

ModelT = TypeVar("ModelT", bound=BaseModel)


class EnvelopeHistory(Plugin):
    """
    Keeps the last SOAP envelope sent and received.

    Envelopes are stored per thread, so concurrent page renders sharing one
    client each see their own exchange.
    """

    def __init__(self):
        self._local = threading.local()

    def egress(self, envelope, http_headers, operation, binding_options):
        self._local.sent = envelope
        self._local.received = None
        return envelope, http_headers

    def ingress(self, envelope, http_headers, operation):
        self._local.received = envelope
        return envelope, http_headers

    def clear(self) -> None:
        self._local.sent = None
        self._local.received = None

    @property
    def last_sent(self) -> Optional[str]:
        return _envelope_to_string(getattr(self._local, "sent", None))

    @property
    def last_received(self) -> Optional[str]:
        return _envelope_to_string(getattr(self._local, "received", None))


def _envelope_to_string(envelope) -> Optional[str]:
    if envelope is None:
        return None
    return etree.tostring(envelope, pretty_print=True, encoding="unicode")


def to_any_value(value: RangeValue):
    """
    Wrap a range bound as a typed xsd:anyType value.

    Numbers go out as xsd:double, dates as xsd:date / xsd:dateTime and
    strings as xsd:string (the service guesses whether they are numeric or
    dates).
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Invalid values in range: booleans are not supported")
    if isinstance(value, (int, float)):
        return xsd.AnyObject(xsd.Double(), float(value))
    if isinstance(value, datetime):
        return xsd.AnyObject(xsd.DateTime(), value)
    if isinstance(value, date):
        return xsd.AnyObject(xsd.Date(), value)
    if isinstance(value, str):
        return xsd.AnyObject(xsd.String(), value)
    raise ValueError(f"Invalid values in range: {type(value).__name__}")


def range_to_soap(search_range: SearchRequestRange) -> Dict[str, Any]:
    return {
        "field": search_range.field,
        "min": to_any_value(search_range.min),
        "max": to_any_value(search_range.max),
    }


def request_to_soap(request: SearchRequest) -> Dict[str, Any]:
    """
    Build the SOAP representation of a search request.

    Empty clause lists are sent as nil: the service rejects stored queries
    combined with (even empty) query or range arrays.
    """
    soap_request: Dict[str, Any] = {
        "index": request.index,
        "sortField": request.sort_field,
        "sortReverse": request.sort_reverse,
        "queries": [q.to_soap() for q in request.queries] or None,
        "ranges": [range_to_soap(r) for r in request.ranges] or None,
    }
    if request.stored_query_uuid is not None:
        soap_request["storedQueryUUID"] = request.stored_query_uuid
    return soap_request


class SearchServiceClient:
    """
    Client for the remote search service.

    The WSDL is fetched on first use and cached for the lifetime of the
    client.
    """

    def __init__(
        self,
        wsdl_url: str,
        timeout: float = 30.0,
        latency_tracker: Optional[LatencyTracker] = None,
    ):
        """
        Initialize search service client.

        Args:
            wsdl_url: URL (or local path) of the service WSDL
            timeout: Timeout in seconds for WSDL loading and operations
            latency_tracker: Receives the duration of every remote call
        """
        self.wsdl_url = wsdl_url
        self.timeout = timeout
        self.latency_tracker = latency_tracker
        self.history = EnvelopeHistory()
        self._client: Optional[Client] = None
        self._lock = threading.Lock()

    def _get_service(self):
        """Get the service proxy, loading the WSDL on first use."""
        with self._lock:
            if self._client is None:
                logger.info(f"Loading search service WSDL: {self.wsdl_url}")
                transport = Transport(
                    cache=InMemoryCache(),
                    timeout=self.timeout,
                    operation_timeout=self.timeout,
                )
                self._client = Client(
                    self.wsdl_url,
                    transport=transport,
                    settings=Settings(strict=False, xml_huge_tree=True),
                    plugins=[self.history],
                )
            return self._client.service

    @property
    def last_request(self) -> Optional[str]:
        """Last SOAP request sent on this thread."""
        return self.history.last_sent

    @property
    def last_response(self) -> Optional[str]:
        """Last SOAP response received on this thread."""
        return self.history.last_received

    def _error(self, operation: str, message: str) -> SearchServiceError:
        return SearchServiceError(
            fault_message=message,
            operation=operation,
            last_request=self.last_request,
            last_response=self.last_response,
        )

    def _call(self, operation: str, *args) -> Any:
        """Invoke a remote operation and return its serialized result."""
        self.history.clear()
        start_time = time.perf_counter()

        try:
            service = self._get_service()
            result = getattr(service, operation)(*args)
        except BINDING_ERRORS as e:
            logger.error(
                f"Search service call {operation} does not match the WSDL: {e}",
                extra={"operation": operation, "wsdl_url": self.wsdl_url},
            )
            raise self._error(operation, f"Operation {operation} not supported: {e}") from e
        except Fault as e:
            logger.warning(
                f"Search service fault in {operation}: {e.message}",
                extra={"operation": operation},
            )
            raise self._error(operation, e.message or str(e)) from e
        except TRANSPORT_ERRORS as e:
            logger.error(
                f"Search service call {operation} failed: {e}",
                extra={"operation": operation, "wsdl_url": self.wsdl_url},
            )
            raise self._error(operation, str(e) or e.__class__.__name__) from e
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            if self.latency_tracker is not None:
                self.latency_tracker.record(f"search_service.{operation}", duration_ms)

        logger.debug(
            f"Search service call {operation} took {duration_ms:.2f}ms",
            extra={"operation": operation, "duration_ms": duration_ms},
        )
        return serialize_object(result)

    def _parse(self, model: Type[ModelT], operation: str, data: Any) -> ModelT:
        """Validate a serialized result; a malformed reply is a service error."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(
                f"Malformed {operation} response from search service: {e}",
                extra={"operation": operation},
            )
            raise self._error(
                operation, f"Malformed response from search service: {e.error_count()} invalid value(s)"
            ) from e

    def search(self, request: SearchRequest, offset: int, count: int) -> SearchResponse:
        """
        Run a search.

        Args:
            request: Search request
            offset: Number of hits to skip
            count: Maximum number of hits to return

        Returns:
            One page of hits with the total hit count
        """
        logger.info(
            f"Search: index={request.index}, queries={len(request.queries)}, "
            f"ranges={len(request.ranges)}, offset={offset}, count={count}"
        )
        result = self._call("search", request_to_soap(request), offset, count)
        return self._parse(SearchResponse, "search", result or {})

    def list_terms(
        self, index: str, field: str, count: int, prefix: Optional[str] = None
    ) -> List[str]:
        """List indexed terms of a field, optionally only those starting with a prefix."""
        # The prefix form is an overload of listTerms, not a separate operation
        if prefix:
            result = self._call("listTerms", index, field, prefix, count)
        else:
            result = self._call("listTerms", index, field, count)
        return [str(term) for term in unwrap_array(result)]

    def suggest(self, index: str, query: SearchRequestQuery, count: int) -> List[str]:
        """Suggest query completions for a (partial) query clause."""
        result = self._call("suggest", index, query.to_soap(), count)
        return [str(s) for s in unwrap_array(result)]

    def get_document(self, index: str, identifier: str) -> Optional[SearchResponseItem]:
        """Fetch a single document by identifier, or None if it does not exist."""
        result = self._call("getDocument", index, identifier)
        if not result:
            return None
        return self._parse(SearchResponseItem, "getDocument", result)

    def more_like_this(
        self,
        index: str,
        identifier: str,
        offset: int,
        count: int,
        field: Optional[str] = None,
    ) -> SearchResponse:
        """Find documents similar to the given one, on all fields or a single field."""
        if field:
            operation = "fieldedMoreLikeThis"
            result = self._call(operation, index, identifier, field, offset, count)
        else:
            operation = "defaultMoreLikeThis"
            result = self._call(operation, index, identifier, offset, count)
        return self._parse(SearchResponse, operation, result or {})

    def store_query(self, request: SearchRequest) -> str:
        """Store a query on the service and return its UUID."""
        return str(self._call("storeQuery", request_to_soap(request)))

    def is_available(self) -> bool:
        """Check whether the WSDL can be loaded."""
        try:
            self._get_service()
            return True
        except TRANSPORT_ERRORS + (OSError,) as e:
            logger.warning(f"Search service unavailable: {e}")
            return False
