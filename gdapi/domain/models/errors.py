"""Domain errors raised by the GoDaddy API client.

APIError mirrors the error envelope the API returns for any non-2xx status.
The remaining exceptions let callers tell apart "the server rejected this"
from transport, encoding, decoding and deadline failures.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Returned by the API when the per-endpoint request quota is exhausted
ERR_CODE_QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


class GoDaddyError(Exception):
    """Base class for every error raised by gdapi."""


class ConfigurationError(GoDaddyError):
    """Raised when required client settings are missing or invalid."""


class TransportError(GoDaddyError):
    """Connection, DNS or timeout failure before any response was received."""


class SerializationError(GoDaddyError):
    """The outgoing request body could not be encoded as JSON."""


class DecodeError(GoDaddyError):
    """The response body could not be parsed or converted."""


class DeadlineExceededError(GoDaddyError, TimeoutError):
    """The caller's deadline expired before the call completed."""


@dataclass
class ErrorField:
    """Field-level detail attached to an API error."""
    code: str = ""
    message: str = ""
    path: str = ""
    path_related: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorField":
        return cls(
            code=str(data.get("code") or ""),
            message=str(data.get("message") or ""),
            path=str(data.get("path") or ""),
            path_related=str(data.get("pathRelated") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        wire = {
            "code": self.code,
            "message": self.message,
            "path": self.path,
            "pathRelated": self.path_related,
        }
        return {key: value for key, value in wire.items() if value}


class APIError(GoDaddyError):
    """Structured error returned by the API for a non-2xx response.

    Attributes:
        code: Machine-readable error code (e.g. ``QUOTA_EXCEEDED``). Falls back
            to ``HTTPStatus: <status>`` when the body does not carry one.
        message: Human-readable description supplied by the server.
        fields: Optional per-field errors.
        status_code: HTTP status of the response that produced this error.
    """

    def __init__(
        self,
        code: str,
        message: str = "",
        fields: Optional[List[ErrorField]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.fields = list(fields or [])
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        return f'Error {self.code}: "{self.message}"'

    @property
    def is_quota_exceeded(self) -> bool:
        return self.code == ERR_CODE_QUOTA_EXCEEDED

    @classmethod
    def from_envelope(cls, envelope: Optional[Dict[str, Any]], status_code: int) -> "APIError":
        """Builds an APIError from a decoded error envelope.

        A ``None`` envelope (a literal JSON ``null`` body) yields an error
        carrying only the HTTP status pseudo-code.
        """
        envelope = envelope or {}
        raw_fields = envelope.get("fields") or []
        if not isinstance(raw_fields, list):
            raise TypeError(f"'fields' must be a list, got {type(raw_fields).__name__}")
        code = envelope.get("code")
        message = envelope.get("message")
        for name, value in (("code", code), ("message", message)):
            if value is not None and not isinstance(value, str):
                raise TypeError(f"'{name}' must be a string, got {type(value).__name__}")
        return cls(
            code=f"HTTPStatus: {status_code}" if code is None else code,
            message=message or "",
            fields=[ErrorField.from_dict(item) for item in raw_fields if isinstance(item, dict)],
            status_code=status_code,
        )

    def to_json(self) -> str:
        """Renders the error back into the API's envelope shape."""
        envelope: Dict[str, Any] = {"code": self.code}
        if self.fields:
            envelope["fields"] = [f.to_dict() for f in self.fields]
        if self.message:
            envelope["message"] = self.message
        return json.dumps(envelope)
