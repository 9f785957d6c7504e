"""API Resilience Implementations.

Contains the client-side token bucket and the executor that recovers from
HTTP 429 throttling with a jittered Retry-After backoff.
Bounded Context: API Resilience
"""
