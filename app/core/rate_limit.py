"""Rate limiting wiring for the signup endpoint.

This module connects the rate limiting adapter to the HTTP layer.

Design goals:
- Minimal coupling: routes receive the limiter through a FastAPI dependency.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.

Rate limiting strategy:
- Sliding-window limit per client address (5 requests / 60 s by default).
- Client address comes from X-Forwarded-For (first hop), then X-Real-IP,
  then the "unknown" sentinel.
"""

from __future__ import annotations

import logging
from typing import Mapping

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.config import settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter | None:
    """Return the process-wide rate limiter, or None when disabled.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.

    Returns:
        AbstractRateLimiter | None: Configured limiter instance.
    """

    global _limiter, _limiter_config

    if not settings.app.rate_limit_enabled:
        return None

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_max_keys,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemorySlidingWindowRateLimiter(
            limit=settings.app.rate_limit_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
            max_keys=settings.app.rate_limit_max_keys,
        )
        _limiter_config = config

    return _limiter


def resolve_client_ip(headers: Mapping[str, str]) -> str:
    """Derive the client address from proxy headers.

    Args:
        headers: Request headers (case-insensitive mapping).

    Returns:
        str: First X-Forwarded-For entry, else X-Real-IP, else "unknown".
    """

    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = (headers.get("x-real-ip") or "").strip()
    return real_ip or UNKNOWN_CLIENT


def check_rate_limit(limiter: AbstractRateLimiter | None, client_ip: str) -> None:
    """Consume one unit of ``client_ip``'s budget.

    Args:
        limiter: Limiter to consult; None disables the check.
        client_ip: Client address used as the limiter key.

    Raises:
        RateLimitAppError: When the client exceeded its budget.
    """

    if limiter is None:
        return

    result = limiter.consume(client_ip)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_ip": client_ip,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_ip": client_ip,
            "limit": result.limit,
            "remaining": result.remaining,
            "retry_after_s": result.retry_after_seconds,
        },
    )
    raise RateLimitAppError(
        code="rate_limited",
        message="Too many requests. Please try again later.",
        details={
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": result.retry_after_seconds or 0,
        },
    )


def rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    """Build Retry-After / X-RateLimit-* headers for a throttled response."""

    if not settings.app.rate_limit_include_headers or not exc.details:
        return {}

    details = exc.details
    return {
        "Retry-After": str(details.get("retry_after", 0)),
        "X-RateLimit-Limit": str(details.get("limit", "")),
        "X-RateLimit-Remaining": str(details.get("remaining", 0)),
        "X-RateLimit-Reset": str(details.get("reset_at", "")),
    }
