"""Rate limiter interfaces.

The signup flow depends on this abstraction (not the concrete implementation)
so the per-process limiter can later be replaced by a shared counter (e.g.,
Redis) without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit admission decision.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max requests per window.
        remaining: Requests still available in the trailing window (0 when blocked).
        reset_at: UNIX epoch seconds when the oldest counted request leaves the window.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, now: float | None = None) -> RateLimitResult:
        """Record one request for ``key`` if it is admitted.

        Args:
            key: Unique identifier (e.g., client IP address).
            now: Optional explicit timestamp (UNIX seconds); defaults to the
                limiter's clock.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    def admit(self, key: str, now: float | None = None) -> bool:
        """Shorthand for ``consume(key, now=now).allowed``."""
        return self.consume(key, now=now).allowed
