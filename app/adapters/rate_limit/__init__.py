"""Rate limiting adapters.

A small abstraction layer so the service can start with an in-memory
sliding-window limiter and later migrate to Redis or another shared store
without changing the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemorySlidingWindowRateLimiter",
    "RateLimitResult",
]
