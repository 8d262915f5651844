"""
Tests for the search client against a service proxy built from a WSDL.

The WSDL is read from a local file and HTTP posts are answered in-process.
"""

from unittest import mock

import pytest
import requests
from zeep.transports import Transport

from dataportal.api.errors import SearchServiceError
from dataportal.api.services.search_client import SearchServiceClient

WSDL_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<definitions xmlns="http://schemas.xmlsoap.org/wsdl/"
             xmlns:soap="http://schemas.xmlsoap.org/wsdl/soap/"
             xmlns:xsd="http://www.w3.org/2001/XMLSchema"
             xmlns:tns="urn:dataportal-search"
             targetNamespace="urn:dataportal-search">
  <types>
    <xsd:schema targetNamespace="urn:dataportal-search" elementFormDefault="qualified">
      <xsd:element name="listTerms">
        <xsd:complexType>
          <xsd:sequence>
            <xsd:element name="indexName" type="xsd:string"/>
            <xsd:element name="fieldName" type="xsd:string"/>
            {prefix_element}
            <xsd:element name="count" type="xsd:int"/>
          </xsd:sequence>
        </xsd:complexType>
      </xsd:element>
      <xsd:element name="listTermsResponse">
        <xsd:complexType>
          <xsd:sequence>
            <xsd:element name="listTermsReturn" type="xsd:string" minOccurs="0" maxOccurs="unbounded"/>
          </xsd:sequence>
        </xsd:complexType>
      </xsd:element>
    </xsd:schema>
  </types>
  <message name="listTermsRequest">
    <part name="parameters" element="tns:listTerms"/>
  </message>
  <message name="listTermsResponse">
    <part name="parameters" element="tns:listTermsResponse"/>
  </message>
  <portType name="Search">
    <operation name="listTerms">
      <input message="tns:listTermsRequest"/>
      <output message="tns:listTermsResponse"/>
    </operation>
  </portType>
  <binding name="SearchSoapBinding" type="tns:Search">
    <soap:binding style="document" transport="http://schemas.xmlsoap.org/soap/http"/>
    <operation name="listTerms">
      <soap:operation soapAction=""/>
      <input><soap:body use="literal"/></input>
      <output><soap:body use="literal"/></output>
    </operation>
  </binding>
  <service name="SearchService">
    <port name="Search" binding="tns:SearchSoapBinding">
      <soap:address location="http://localhost:8801/axis/Search"/>
    </port>
  </service>
</definitions>
"""

PREFIX_ELEMENT = '<xsd:element name="prefix" type="xsd:string"/>'

TERMS_REPLY = b"""<?xml version="1.0" encoding="UTF-8"?>
<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/">
  <soapenv:Body>
    <listTermsResponse xmlns="urn:dataportal-search">
      <listTermsReturn>PANGAEA</listTermsReturn>
      <listTermsReturn>PANGAEA-WDC</listTermsReturn>
    </listTermsResponse>
  </soapenv:Body>
</soapenv:Envelope>"""


def make_client(tmp_path, with_prefix: bool) -> SearchServiceClient:
    wsdl = tmp_path / "Search.wsdl"
    wsdl.write_text(
        WSDL_TEMPLATE.format(prefix_element=PREFIX_ELEMENT if with_prefix else ""),
        encoding="utf-8",
    )
    return SearchServiceClient(str(wsdl), timeout=5)


def soap_reply(content: bytes) -> requests.Response:
    reply = requests.Response()
    reply.status_code = 200
    reply.headers["Content-Type"] = "text/xml; charset=utf-8"
    reply._content = content
    return reply


def test_list_terms_with_prefix_calls_list_terms(tmp_path):
    client = make_client(tmp_path, with_prefix=True)

    with mock.patch.object(Transport, "post_xml", return_value=soap_reply(TERMS_REPLY)) as post:
        terms = client.list_terms("dataportal", "dataCenterFull", 10, prefix="PAN")

    assert terms == ["PANGAEA", "PANGAEA-WDC"]
    post.assert_called_once()
    assert "PAN</" in client.last_request
    assert "listTerms" in client.last_request


def test_operation_missing_from_wsdl(tmp_path):
    client = make_client(tmp_path, with_prefix=True)

    with mock.patch.object(Transport, "post_xml") as post:
        with pytest.raises(SearchServiceError) as exc_info:
            client.get_document("dataportal", "PANGAEA.123")

    post.assert_not_called()
    assert exc_info.value.operation == "getDocument"
    assert exc_info.value.status_code == 502
    assert "getDocument" in exc_info.value.fault_message


def test_arguments_not_matching_wsdl(tmp_path):
    client = make_client(tmp_path, with_prefix=False)

    with mock.patch.object(Transport, "post_xml") as post:
        with pytest.raises(SearchServiceError) as exc_info:
            client.list_terms("dataportal", "dataCenterFull", 10, prefix="PAN")

    post.assert_not_called()
    assert exc_info.value.operation == "listTerms"
