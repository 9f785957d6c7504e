"""Interface for observing HTTP traffic.

Implementations receive every outgoing request and every received response,
including retried attempts. They are purely observational.
"""

import abc

import httpx


class HttpLogger(abc.ABC):
    """Abstract Base Class for request/response observers."""

    @abc.abstractmethod
    def log_request(self, request: httpx.Request) -> None:
        """Called immediately before a request is sent.

        Args:
            request: The fully built request about to go on the wire.
        """
        pass

    @abc.abstractmethod
    def log_response(self, response: httpx.Response) -> None:
        """Called immediately after a response is received.

        The body has not been read yet; implementations must not consume it.

        Args:
            response: The streamed response.
        """
        pass


class NullHttpLogger(HttpLogger):
    """Default observer that ignores everything."""

    def log_request(self, request: httpx.Request) -> None:
        pass

    def log_response(self, response: httpx.Response) -> None:
        pass
