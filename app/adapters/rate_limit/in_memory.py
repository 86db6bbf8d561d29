"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Memory-bounded: least recently seen keys are evicted past ``max_keys``.
"""

from __future__ import annotations

import math
import threading
import time
from collections import OrderedDict, deque
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests in a trailing window per key.

    Each key keeps the timestamps of its admitted requests. On every call the
    timestamps older than the window (relative to the current instant) are
    dropped; the request is admitted only if fewer than ``limit`` remain.
    Rejected requests are not recorded, so a client that keeps retrying is
    admitted again as soon as its oldest admitted request ages out.

    Important:
        This limiter is per-process only. If the API runs with multiple
        workers, each worker will enforce its own independent limits.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        max_keys: int | None = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admitted requests per trailing window.
            window_seconds: Size of the sliding window in seconds.
            max_keys: Maximum number of tracked keys (None for unbounded).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit, window_seconds or max_keys are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._max_keys = max_keys
        self._clock = clock
        self._lock = threading.RLock()
        self._hits: OrderedDict[str, deque[float]] = OrderedDict()
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _prune(self, hits: deque[float], now: float) -> None:
        while hits and now - hits[0] >= self._window_seconds:
            hits.popleft()

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_keys is None:
            return

        while len(self._hits) > self._max_keys:
            # popitem(last=False) removes the least recently seen key
            self._hits.popitem(last=False)
            self._evictions += 1

    def _build_result(self, hits: deque[float], *, allowed: bool, now: float) -> RateLimitResult:
        remaining = max(0, self._limit - len(hits))
        reset_at = hits[0] + self._window_seconds if hits else now
        retry_after = None
        if not allowed:
            retry_after = max(1, int(math.ceil(reset_at - now)))
        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            remaining=remaining,
            reset_at=int(math.ceil(reset_at)),
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str, *, now: float | None = None) -> RateLimitResult:
        """Decide admission for ``key`` and record the request when admitted.

        Args:
            key: Unique identifier for rate limiting (e.g., client IP).
            now: Optional explicit timestamp; defaults to ``clock()``.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        if now is None:
            now = self._clock()

        with self._lock:
            hits = self._hits.get(key)
            if hits is None:
                hits = deque()
                self._hits[key] = hits
            self._hits.move_to_end(key)
            self._prune(hits, now)

            if len(hits) >= self._limit:
                return self._build_result(hits, allowed=False, now=now)

            hits.append(now)
            self._evict_if_over_capacity_locked()
            return self._build_result(hits, allowed=True, now=now)

    def reset(self) -> None:
        """Forget all tracked keys."""

        with self._lock:
            self._hits.clear()
            self._evictions = 0

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight limiter metrics without exposing keys."""

        with self._lock:
            return {
                "limit": self._limit,
                "window_seconds": self._window_seconds,
                "max_keys": self._max_keys,
                "tracked_keys": len(self._hits),
                "evictions": self._evictions,
            }
