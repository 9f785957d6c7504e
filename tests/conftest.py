from typing import Any, Callable

import pytest
from typer.testing import CliRunner

from gdapi.core.client import GoDaddyClient
from gdapi.infrastructure.config.settings import ClientSettings
from gdapi.infrastructure.resilience.rate_limiter import TokenBucketRateLimiter

from tests.helpers import TEST_ENDPOINT, FakeClock, RecordingTransport


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def settings():
    return ClientSettings(api_key="test-key", api_secret="test-secret", endpoint=TEST_ENDPOINT, timeout=5.0)


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
def make_client(fake_clock: FakeClock) -> Callable[..., GoDaddyClient]:
    """Factory for clients over a RecordingTransport with instant sleeps."""
    def factory(transport: RecordingTransport, burst: int = 60, **kwargs: Any) -> GoDaddyClient:
        kwargs.setdefault("rate_limiter", TokenBucketRateLimiter(
            interval=1.0, burst=burst, clock=fake_clock, sleep=fake_clock.sleep,
        ))
        kwargs.setdefault("executor_options", {"sleep": fake_clock.sleep})
        return GoDaddyClient(
            "test-key",
            "test-secret",
            endpoint=TEST_ENDPOINT,
            transport=transport.transport,
            **kwargs,
        )

    return factory
