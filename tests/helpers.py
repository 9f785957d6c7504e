"""Shared test doubles: a controllable clock and a recording HTTP transport."""

import json
from typing import Any, List, Optional

import httpx

TEST_ENDPOINT = "https://api.test.example"


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingTransport:
    """Serves queued responses through httpx.MockTransport and records requests."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        return item


def json_response(status_code: int, payload: Any = None, headers: Optional[dict] = None) -> httpx.Response:
    content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    return httpx.Response(status_code, content=content, headers=headers)
