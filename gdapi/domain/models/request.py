"""Value objects describing an outgoing API call."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class RequestEnvelope:
    """One API call: verb, path relative to the endpoint, optional JSON body.

    The path is sent as-is, so callers must escape it themselves.
    """
    method: str
    path: str
    body: Optional[Any] = None

    @property
    def has_body(self) -> bool:
        return self.body is not None
