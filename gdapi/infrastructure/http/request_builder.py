"""Builds authenticated GoDaddy API requests.

Translates a RequestEnvelope into an httpx.Request carrying the sso-key
authorization header, JSON content negotiation and the per-request timeout.
"""

import dataclasses
import json
import logging
from typing import Any, Dict, Optional

import httpx

from gdapi import __version__
from gdapi.domain.models.errors import SerializationError
from gdapi.domain.models.request import RequestEnvelope

logger = logging.getLogger(__name__)

AUTH_SCHEME = "sso-key"
JSON_CONTENT_TYPE = "application/json;charset=utf-8"
DEFAULT_USER_AGENT = f"gdapi/{__version__}"


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_body(body: Any) -> bytes:
    """Serializes a request body to UTF-8 JSON.

    Raises:
        SerializationError: If the value cannot be represented as JSON.
    """
    try:
        return json.dumps(body, default=_json_default, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot encode request body: {e}") from e


class RequestBuilder:
    """Assembles ready-to-send requests for one API endpoint and credential pair."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        api_secret: str,
        endpoint: str,
        timeout: float,
        user_agent: Optional[str] = None,
    ):
        self._http_client = http_client
        self._api_key = api_key
        self._api_secret = api_secret
        self.endpoint = endpoint
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT

    def headers(self, has_body: bool) -> Dict[str, str]:
        headers = {
            "Authorization": f"{AUTH_SCHEME} {self._api_key}:{self._api_secret}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if has_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    def build(self, envelope: RequestEnvelope) -> httpx.Request:
        """Creates the HTTP request for a call.

        Args:
            envelope: Method, already-escaped path and optional body.

        Returns:
            The request, targeting ``endpoint + path``.

        Raises:
            SerializationError: If the body cannot be encoded.
        """
        content = encode_body(envelope.body) if envelope.has_body else None
        url = f"{self.endpoint}{envelope.path}"
        logger.debug(f"Building {envelope.method} {url} (body: {len(content) if content else 0} bytes)")
        return self._http_client.build_request(
            envelope.method,
            url,
            content=content,
            headers=self.headers(envelope.has_body),
            timeout=httpx.Timeout(self.timeout),
        )
