"""FastAPI dependencies shared by the signup, stats and admin routes.

Tests replace these through ``app.dependency_overrides`` to inject an
in-memory store or a limiter with a controllable clock.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.store.base import AbstractSignupStore
from app.adapters.store.factory import create_signup_store
from app.core.rate_limit import get_rate_limiter
from app.services.signup_service import SignupService


@lru_cache(maxsize=1)
def get_signup_store() -> AbstractSignupStore:
    """Return the process-wide signup store built from settings.

    Raises:
        ConfigurationAppError: If the configured backend cannot be built.
    """
    return create_signup_store()


def get_signup_service(
    store: AbstractSignupStore = Depends(get_signup_store),
    limiter: AbstractRateLimiter | None = Depends(get_rate_limiter),
) -> SignupService:
    return SignupService(store=store, limiter=limiter)
