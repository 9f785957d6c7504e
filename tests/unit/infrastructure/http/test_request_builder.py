import json
import math
from dataclasses import dataclass

import httpx
import pytest

from gdapi import __version__
from gdapi.domain.models.errors import SerializationError
from gdapi.domain.models.request import RequestEnvelope
from gdapi.infrastructure.http.request_builder import RequestBuilder

from tests.helpers import TEST_ENDPOINT


@dataclass
class Record:
    data: str
    ttl: int


@pytest.fixture
def builder():
    return RequestBuilder(
        httpx.AsyncClient(),
        api_key="key123",
        api_secret="s3cret",
        endpoint=TEST_ENDPOINT,
        timeout=42.0,
    )


def test_get_request_headers(builder):
    request = builder.build(RequestEnvelope("GET", "/v1/domains"))

    assert request.method == "GET"
    assert str(request.url) == f"{TEST_ENDPOINT}/v1/domains"
    assert request.headers["Authorization"] == "sso-key key123:s3cret"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == f"gdapi/{__version__}"
    assert "Content-Type" not in request.headers
    assert request.content == b""


def test_body_is_json_with_content_type(builder):
    body = [{"data": "203.0.113.7", "ttl": 600}]

    request = builder.build(RequestEnvelope("PUT", "/v1/domains/example.com/records/A/www", body))

    assert request.headers["Content-Type"] == "application/json;charset=utf-8"
    assert json.loads(request.content) == body


def test_empty_dict_body_is_still_sent(builder):
    request = builder.build(RequestEnvelope("PATCH", "/v1/domains/example.com", {}))

    assert request.content == b"{}"
    assert request.headers["Content-Type"] == "application/json;charset=utf-8"


def test_dataclass_body_is_encoded(builder):
    request = builder.build(RequestEnvelope("POST", "/v1/x", [Record(data="1.2.3.4", ttl=600)]))

    assert json.loads(request.content) == [{"data": "1.2.3.4", "ttl": 600}]


def test_non_ascii_body_is_utf8(builder):
    request = builder.build(RequestEnvelope("POST", "/v1/x", {"name": "café"}))

    assert "café".encode("utf-8") in request.content


@pytest.mark.parametrize("body", [
    {"when": object()},
    {"ttl": math.nan},
    {"weight": math.inf},
    [-math.inf],
])
def test_unencodable_body_raises_serialization_error(builder, body):
    with pytest.raises(SerializationError, match="cannot encode request body"):
        builder.build(RequestEnvelope("PUT", "/v1/x", body))


def test_path_is_appended_without_re_escaping(builder):
    request = builder.build(RequestEnvelope("GET", "/v1/domains?statuses=ACTIVE,PENDING_DNS_ACTIVE"))

    assert request.url.path == "/v1/domains"
    assert request.url.params["statuses"] == "ACTIVE,PENDING_DNS_ACTIVE"


def test_timeout_is_attached(builder):
    request = builder.build(RequestEnvelope("GET", "/v1/domains"))

    assert request.extensions["timeout"] == httpx.Timeout(42.0).as_dict()


def test_custom_user_agent():
    builder = RequestBuilder(httpx.AsyncClient(), "k", "s", TEST_ENDPOINT, 1.0, user_agent="external-dns/1.0")

    assert builder.build(RequestEnvelope("GET", "/")).headers["User-Agent"] == "external-dns/1.0"
