"""Domain Events related to API calls and resilience.

Emitted when calls are deferred by the rate limiter, sent, retried after
throttling, or fail.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when a request is about to be sent."""
    method: str
    url: str
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when a call decodes successfully."""
    method: str
    url: str
    status_code: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a call fails definitively."""
    method: str
    url: str
    error_type: str
    error_message: str
    status_code: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallDeferred(DomainEvent):
    """Event triggered when the rate limiter makes a call wait."""
    method: str
    url: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a throttled call is scheduled for another attempt."""
    method: str
    url: str
    attempt_number: int
    retry_after_seconds: int
    delay_seconds: int
    timestamp: float = field(default_factory=time.time)
