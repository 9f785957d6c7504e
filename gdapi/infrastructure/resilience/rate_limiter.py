"""Implementation of a rate limiter.

Controls the frequency of outgoing requests so the client stays inside the
API's published quota. Uses a token bucket: one token is replenished per
interval, up to a burst ceiling, and every request spends one token.
"""

import asyncio
import logging
import time
from threading import Lock
from typing import Awaitable, Callable, Optional

from gdapi.domain.models.errors import DeadlineExceededError

logger = logging.getLogger(__name__)

# GoDaddy allows 60 requests per minute per endpoint
DEFAULT_REFILL_INTERVAL_SECONDS = 1.0
DEFAULT_BURST = 60


class TokenBucketRateLimiter:
    """Thread-safe token bucket shared by all calls on one client."""

    def __init__(
        self,
        interval: float = DEFAULT_REFILL_INTERVAL_SECONDS,
        burst: int = DEFAULT_BURST,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the rate limiter with a full bucket.

        Args:
            interval: Seconds needed to replenish one token.
            burst: Maximum number of tokens the bucket can hold.
            clock: Monotonic time source, in seconds.
            sleep: Coroutine used to wait for a refill.
        """
        if interval <= 0 or burst <= 0:
            raise ValueError("Refill interval and burst must be positive.")

        self.interval = interval
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._last_refill = clock()
        # Never held across an await, so tasks on different loops can share it
        self._lock = Lock()
        logger.info(f"RateLimiter initialized: 1 token / {interval}s, burst {burst}.")

    def _refill(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval)
        self._last_refill = now

    def _try_take(self) -> float:
        """Takes a token if one is available.

        Returns:
            0.0 when a token was consumed, otherwise the seconds to wait
            before one becomes available.
        """
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return 0.0
            return (1.0 - self._tokens) * self.interval

    def wait_time(self) -> float:
        """Seconds until the next token is available, without consuming it."""
        with self._lock:
            self._refill(self._clock())
            if self._tokens >= 1.0:
                return 0.0
            return (1.0 - self._tokens) * self.interval

    @property
    def available_tokens(self) -> float:
        with self._lock:
            self._refill(self._clock())
            return self._tokens

    async def acquire(self, timeout: Optional[float] = None) -> None:
        """Waits for a token and consumes it.

        Cancelling the awaiting task raises asyncio.CancelledError and leaves
        the bucket untouched.

        Args:
            timeout: Optional upper bound, in seconds, on the wait.

        Raises:
            DeadlineExceededError: If no token became available within timeout.
        """
        deadline = None if timeout is None else self._clock() + timeout
        while True:
            wait = self._try_take()
            if wait == 0.0:
                return

            if deadline is not None:
                remaining = deadline - self._clock()
                if wait > remaining:
                    raise DeadlineExceededError(
                        f"rate limiter wait of {wait:.2f}s exceeds the {timeout}s deadline"
                    )

            logger.debug(f"Rate limit reached. Waiting for {wait:.2f} seconds.")
            await self._sleep(wait)
