"""HttpLogger implementation backed by the standard logging module."""

import logging
from typing import Mapping, Optional

import httpx

from gdapi.domain.interfaces.http_logger import HttpLogger

REDACTED_HEADERS = frozenset({"authorization"})


def redact_headers(headers: Mapping[str, str]) -> dict:
    return {
        key: ("***" if key.lower() in REDACTED_HEADERS else value)
        for key, value in headers.items()
    }


class LoggingHttpLogger(HttpLogger):
    """Writes one log line per request and per response.

    Credentials in the Authorization header are never written.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("gdapi.http")
        self.level = level

    def log_request(self, request: httpx.Request) -> None:
        self.logger.log(
            self.level,
            f"--> {request.method} {request.url} headers={redact_headers(request.headers)}",
        )

    def log_response(self, response: httpx.Response) -> None:
        request = response.request
        self.logger.log(
            self.level,
            f"<-- {response.status_code} {request.method} {request.url} "
            f"retry-after={response.headers.get('Retry-After')}",
        )
