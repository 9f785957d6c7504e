"""Decodes GoDaddy API responses.

Any status outside [200, 300) becomes an APIError built from the error
envelope. Successful bodies are parsed as JSON and converted into the type
the caller asked for.
"""

import dataclasses
import json
import logging
from typing import Any, Callable, Optional, Type, TypeVar, Union

import httpx

from gdapi.domain.models.errors import APIError, DecodeError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResultType = Union[Type[T], Callable[[Any], T]]


def convert_payload(payload: Any, result_type: ResultType) -> Any:
    """Converts decoded JSON into ``result_type``.

    Types exposing a ``from_dict`` classmethod use it. Dataclasses are built
    from the matching keys of a JSON object, ignoring unknown keys. Anything
    else is called with the payload, so ``dict`` or ``list`` work directly.
    """
    from_dict = getattr(result_type, "from_dict", None)
    if callable(from_dict):
        return from_dict(payload)
    if dataclasses.is_dataclass(result_type):
        if not isinstance(payload, dict):
            raise TypeError(f"expected a JSON object for {result_type.__name__}, got {type(payload).__name__}")
        names = {f.name for f in dataclasses.fields(result_type)}
        return result_type(**{key: value for key, value in payload.items() if key in names})
    return result_type(payload)


class ResponseDecoder:
    """Turns streamed httpx responses into results or APIError exceptions."""

    @staticmethod
    def is_success(status_code: int) -> bool:
        return 200 <= status_code < 300

    async def decode(self, response: httpx.Response, result_type: Optional[ResultType] = None) -> Optional[Any]:
        """Reads, classifies and decodes a response.

        The response is always closed, whatever the outcome.

        Args:
            response: A streamed response whose body has not been read.
            result_type: Target for a successful body, or None to skip decoding.

        Returns:
            The converted body, or None for an empty body or no target.

        Raises:
            APIError: For any status outside [200, 300).
            DecodeError: If the body is not valid JSON or cannot be converted.
        """
        try:
            body = await response.aread()
        except httpx.TransportError as e:
            raise TransportError(f"reading HTTP {response.status_code} response body: {e}") from e
        finally:
            await response.aclose()

        if not self.is_success(response.status_code):
            raise self._api_error(response.status_code, body)

        if not body or result_type is None:
            return None

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"invalid JSON in {response.status_code} response: {e}") from e
        try:
            return convert_payload(payload, result_type)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(f"cannot convert response into {getattr(result_type, '__name__', result_type)}: {e}") from e

    @staticmethod
    def _api_error(status_code: int, body: bytes) -> APIError:
        """Parses an error envelope.

        Raises:
            DecodeError: If the body is not an envelope; no error is synthesized.
        """
        try:
            envelope = json.loads(body)
        except ValueError as e:
            logger.debug(f"Unparsable error body for HTTP {status_code}: {body[:200]!r}")
            raise DecodeError(f"invalid JSON in HTTP {status_code} error response: {e}") from e
        if envelope is not None and not isinstance(envelope, dict):
            raise DecodeError(f"HTTP {status_code} error response is not a JSON object")
        try:
            error = APIError.from_envelope(envelope, status_code)
        except TypeError as e:
            raise DecodeError(f"malformed HTTP {status_code} error envelope: {e}") from e
        logger.debug(f"API error for HTTP {status_code}: {error.to_json()}")
        return error


def as_json(payload: Any) -> Any:
    """Result type that returns the decoded JSON value unchanged."""
    return payload
