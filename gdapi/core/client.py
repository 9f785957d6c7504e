"""GoDaddy API client.

Ties the request builder, the throttling-aware executor and the response
decoder together behind one method per HTTP verb. Each client owns its rate
limiter, so independent clients never share quota state.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from gdapi.domain.events.api_events import ApiCallFailed, ApiCallSucceeded
from gdapi.domain.interfaces.http_logger import HttpLogger, NullHttpLogger
from gdapi.domain.models.errors import APIError, DeadlineExceededError, GoDaddyError
from gdapi.domain.models.request import RequestEnvelope
from gdapi.infrastructure.config.settings import (
    DEFAULT_TIMEOUT_SECONDS,
    OTE_ENDPOINT,
    PRODUCTION_ENDPOINT,
    ClientSettings,
)
from gdapi.infrastructure.http.request_builder import RequestBuilder
from gdapi.infrastructure.http.response_decoder import ResponseDecoder, ResultType
from gdapi.infrastructure.resilience.api_retry import ThrottleRetryExecutor, dispatch_event
from gdapi.infrastructure.resilience.rate_limiter import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

# Cheap authenticated endpoint used to check credentials at construction
VALIDATION_PATH = "/v1/domains?statuses=ACTIVE,PENDING_DNS_ACTIVE"


class GoDaddyClient:
    """Rate-limited, retrying client for the GoDaddy REST API.

    All verb methods are coroutines. Called without ``timeout`` they run until
    completion; with ``timeout`` (seconds) the whole call, including rate
    limiter waits and 429 backoff, is bounded and raises
    DeadlineExceededError on expiry. Cancelling the calling task aborts the
    call at its current wait.

    The constructor's ``timeout`` is applied by httpx separately to each
    connect, read, write and pool wait of a single request; it is not a limit
    on the total duration. Pass ``timeout`` to ``call_api`` or a verb method
    when the whole call must finish within a bound.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        endpoint: str = PRODUCTION_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        rate_limiter: Optional[TokenBucketRateLimiter] = None,
        http_logger: Optional[HttpLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        user_agent: Optional[str] = None,
        executor_options: Optional[dict] = None,
    ):
        """Initializes the client without contacting the API.

        Use ``create`` or ``from_settings`` to also validate the credentials.

        Args:
            api_key: GoDaddy API key.
            api_secret: GoDaddy API secret.
            endpoint: Base URL, without trailing slash.
            timeout: httpx connect/read/write/pool timeout in seconds, per request.
            rate_limiter: Limiter to use; a fresh 60-token bucket by default.
            http_logger: Optional request/response observer.
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
            user_agent: Overrides the default User-Agent.
            executor_options: Extra keyword arguments for ThrottleRetryExecutor
                (``sleep``, ``rng``, ``max_retries``).
        """
        if not api_key or not api_secret:
            raise ValueError("API key and secret must both be provided.")

        self.endpoint = endpoint
        self.timeout = timeout
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter()
        self._http = httpx.AsyncClient(transport=transport)
        self._builder = RequestBuilder(
            self._http,
            api_key=api_key,
            api_secret=api_secret,
            endpoint=endpoint,
            timeout=timeout,
            user_agent=user_agent,
        )
        self._executor = ThrottleRetryExecutor(
            self._http,
            self.rate_limiter,
            http_logger=http_logger,
            **(executor_options or {}),
        )
        self._decoder = ResponseDecoder()
        logger.info(f"GoDaddyClient initialized for endpoint: {endpoint}")

    # --- Construction with validation ---

    @classmethod
    async def create(
        cls,
        api_key: str,
        api_secret: str,
        use_ote: bool = False,
        **kwargs: Any,
    ) -> "GoDaddyClient":
        """Builds a client and checks it against the API.

        Args:
            api_key: GoDaddy API key.
            api_secret: GoDaddy API secret.
            use_ote: Target the OTE test environment instead of production.
            **kwargs: Forwarded to ``__init__``; ``endpoint`` wins over use_ote.

        Raises:
            GoDaddyError: If validation fails for any reason other than the
                validation endpoint's quota being exhausted.
        """
        kwargs.setdefault("endpoint", OTE_ENDPOINT if use_ote else PRODUCTION_ENDPOINT)
        client = cls(api_key, api_secret, **kwargs)
        try:
            await client.validate()
        except APIError as e:
            # Quota is tracked per endpoint; other endpoints may still have headroom
            if not e.is_quota_exceeded:
                await client.aclose()
                raise
            logger.warning(f"Validation endpoint quota exceeded, continuing: {e}")
        except BaseException:
            await client.aclose()
            raise
        return client

    @classmethod
    async def from_settings(cls, settings: ClientSettings, validate: bool = True, **kwargs: Any) -> "GoDaddyClient":
        """Builds a client from loaded ClientSettings, validating it unless told not to."""
        if "rate_limiter" not in kwargs:
            kwargs["rate_limiter"] = TokenBucketRateLimiter(interval=settings.rate_interval, burst=settings.burst)
        if not validate:
            return cls(
                settings.api_key,
                settings.api_secret,
                endpoint=settings.endpoint,
                timeout=settings.timeout,
                **kwargs,
            )
        return await cls.create(
            settings.api_key,
            settings.api_secret,
            endpoint=settings.endpoint,
            timeout=settings.timeout,
            **kwargs,
        )

    async def validate(self) -> None:
        """Issues one lightweight authenticated call."""
        await self.get(VALIDATION_PATH)

    # --- Hooks ---

    @property
    def http_logger(self) -> HttpLogger:
        return self._executor.http_logger

    @http_logger.setter
    def http_logger(self, value: Optional[HttpLogger]) -> None:
        self._executor.http_logger = value or NullHttpLogger()

    # --- Core call ---

    async def call_api(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        result_type: Optional[ResultType] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Any]:
        """Performs one API call: build, send (with throttling recovery), decode.

        Args:
            method: HTTP verb.
            path: Path relative to the endpoint, already escaped.
            body: Optional JSON-serializable request body.
            result_type: Type the success body is decoded into; None skips decoding.
            timeout: Optional overall deadline for the call, in seconds.

        Returns:
            The decoded body, or None.

        Raises:
            APIError: If the API answered with a non-2xx status.
            TransportError: If the request could not be sent.
            SerializationError: If the body cannot be encoded.
            DecodeError: If the response body cannot be decoded.
            DeadlineExceededError: If ``timeout`` expired.
        """
        envelope = RequestEnvelope(method=method.upper(), path=path, body=body)
        if timeout is None:
            return await self._call(envelope, result_type)
        try:
            return await asyncio.wait_for(self._call(envelope, result_type), timeout)
        except asyncio.TimeoutError as e:
            raise DeadlineExceededError(f"{envelope.method} {path} did not complete within {timeout}s") from e

    async def _call(self, envelope: RequestEnvelope, result_type: Optional[ResultType]) -> Optional[Any]:
        request = self._builder.build(envelope)
        start_time = time.perf_counter()
        try:
            response = await self._executor.execute(request)
            result = await self._decoder.decode(response, result_type)
        except GoDaddyError as e:
            dispatch_event(ApiCallFailed(
                method=envelope.method,
                url=str(request.url),
                error_type=type(e).__name__,
                error_message=str(e),
                status_code=getattr(e, "status_code", None),
            ))
            raise
        latency_ms = (time.perf_counter() - start_time) * 1000
        dispatch_event(ApiCallSucceeded(
            method=envelope.method,
            url=str(request.url),
            status_code=response.status_code,
            latency_ms=latency_ms,
        ))
        return result

    # --- Verb wrappers ---

    async def get(self, path: str, result_type: Optional[ResultType] = None, *, timeout: Optional[float] = None) -> Optional[Any]:
        """Wrapper for the GET method."""
        return await self.call_api("GET", path, None, result_type, timeout=timeout)

    async def post(
        self,
        path: str,
        body: Optional[Any] = None,
        result_type: Optional[ResultType] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Any]:
        """Wrapper for the POST method."""
        return await self.call_api("POST", path, body, result_type, timeout=timeout)

    async def put(
        self,
        path: str,
        body: Optional[Any] = None,
        result_type: Optional[ResultType] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Any]:
        """Wrapper for the PUT method."""
        return await self.call_api("PUT", path, body, result_type, timeout=timeout)

    async def patch(
        self,
        path: str,
        body: Optional[Any] = None,
        result_type: Optional[ResultType] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Optional[Any]:
        """Wrapper for the PATCH method."""
        return await self.call_api("PATCH", path, body, result_type, timeout=timeout)

    async def delete(self, path: str, result_type: Optional[ResultType] = None, *, timeout: Optional[float] = None) -> Optional[Any]:
        """Wrapper for the DELETE method."""
        return await self.call_api("DELETE", path, None, result_type, timeout=timeout)

    # --- Lifecycle ---

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "GoDaddyClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
