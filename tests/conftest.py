"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before any app import so the global settings
object is built from them (and no .env file is loaded).
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("APP_ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("LOG_FORMAT", "json")

from typing import Iterator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.store.in_memory import InMemorySignupStore
from app.api.dependencies import get_signup_store
from app.core.rate_limit import get_rate_limiter
from app.main import app

ADMIN_PASSWORD = "test-admin-password"


@pytest.fixture
def clock() -> Mock:
    """Controllable time source for the rate limiter (UNIX seconds)."""
    return Mock(return_value=1_000.0)


@pytest.fixture
def limiter(clock: Mock) -> InMemorySlidingWindowRateLimiter:
    return InMemorySlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)


@pytest.fixture
def store() -> InMemorySignupStore:
    return InMemorySignupStore()


@pytest.fixture
def client(
    store: InMemorySignupStore,
    limiter: InMemorySlidingWindowRateLimiter,
) -> Iterator[TestClient]:
    """Test client wired to a fresh in-memory store and limiter."""
    app.dependency_overrides[get_signup_store] = lambda: store
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_PASSWORD}"}
