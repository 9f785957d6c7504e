"""Service for sending API requests with throttling recovery.

Every attempt first takes a token from the client's rate limiter. When the
API still answers 429 (several clients behind one NAT share a quota), the
request is retried after the server's Retry-After hint plus a random extra
delay, a bounded number of times. Transport failures are never retried.
"""

import asyncio
import logging
import random
import re
from typing import Any, Awaitable, Callable, Optional

import httpx

from gdapi.domain.events.api_events import ApiCallDeferred, ApiCallInitiated, RetryScheduled
from gdapi.domain.interfaces.http_logger import HttpLogger, NullHttpLogger
from gdapi.domain.models.errors import TransportError
from gdapi.infrastructure.resilience.rate_limiter import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

HTTP_TOO_MANY_REQUESTS = 429
DEFAULT_MAX_RETRIES = 2

_RETRY_AFTER_PATTERN = re.compile(r"[0-9]+")


def dispatch_event(event: Any) -> None:
    logger.debug(f"EVENT: {event}")


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parses a Retry-After header given as whole seconds.

    Returns:
        The number of seconds, or None when the header is absent, negative or
        not a plain base-10 integer (HTTP-date values are not supported).
    """
    if value is None or not _RETRY_AFTER_PATTERN.fullmatch(value.strip()):
        return None
    return int(value.strip())


def compute_backoff(retry_after: int, rng: random.Random) -> int:
    """Returns the delay in seconds before retrying a throttled request.

    The delay is ``retry_after + randrange(retry_after) // 2``, which always
    lies in ``[retry_after, 1.5 * retry_after)`` and staggers clients that
    were throttled together.
    """
    if retry_after <= 0:
        return 0
    jitter = rng.randrange(retry_after)
    return retry_after + jitter // 2


class ThrottleRetryExecutor:
    """Sends requests through the rate limiter and retries on HTTP 429."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rate_limiter: TokenBucketRateLimiter,
        http_logger: Optional[HttpLogger] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        """Initializes the executor.

        Args:
            http_client: Transport used to send requests.
            rate_limiter: Limiter consulted before every attempt.
            http_logger: Optional observer for requests and responses.
            max_retries: Additional attempts allowed after a 429.
            sleep: Coroutine used for the backoff wait.
            rng: Random source for the backoff jitter.
        """
        self.http_client = http_client
        self.rate_limiter = rate_limiter
        self.http_logger = http_logger or NullHttpLogger()
        self.max_retries = max_retries
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def execute(self, request: httpx.Request) -> httpx.Response:
        """Sends a request, retrying while the API answers 429.

        Args:
            request: The request to send. It is resent unchanged on retry.

        Returns:
            The last response received, still unread. It may be a 429 when
            no usable Retry-After was given or the retries ran out.

        Raises:
            TransportError: If sending fails before a response is received.
        """
        await self._acquire(request)
        response = await self._send(request, attempt=1)

        for attempt in range(2, self.max_retries + 2):
            if response.status_code != HTTP_TOO_MANY_REQUESTS:
                break

            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is None:
                logger.error("Rate-limited response did not contain a valid Retry-After header, quota likely exceeded")
                break

            delay = compute_backoff(retry_after, self._rng)
            dispatch_event(RetryScheduled(
                method=request.method,
                url=str(request.url),
                attempt_number=attempt,
                retry_after_seconds=retry_after,
                delay_seconds=delay,
            ))
            logger.warning(
                f"{request.method} {request.url} throttled (Retry-After: {retry_after}s). "
                f"Retrying in {delay}s, attempt {attempt}/{self.max_retries + 1}."
            )

            # The throttled response is discarded; release its connection first
            await response.aclose()
            await self._sleep(delay)
            await self._acquire(request)
            response = await self._send(request, attempt=attempt)

        return response

    async def _acquire(self, request: httpx.Request) -> None:
        wait = self.rate_limiter.wait_time()
        if wait > 0:
            dispatch_event(ApiCallDeferred(method=request.method, url=str(request.url), wait_time_seconds=wait))
        await self.rate_limiter.acquire()

    async def _send(self, request: httpx.Request, attempt: int) -> httpx.Response:
        dispatch_event(ApiCallInitiated(method=request.method, url=str(request.url), attempt_number=attempt))
        self._observe(self.http_logger.log_request, request)
        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.TransportError as e:
            if attempt > 1:
                raise TransportError(f"doing request after waiting for retry after: {e}") from e
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e
        self._observe(self.http_logger.log_response, response)
        return response

    @staticmethod
    def _observe(hook: Callable[[Any], None], message: Any) -> None:
        try:
            hook(message)
        except Exception as e:
            logger.warning(f"HTTP logger hook {getattr(hook, '__name__', hook)} failed: {e}", exc_info=True)
