"""Tests for the public signup, stats and landing routes.

Configuration:
- conftest.py sets STORE_BACKEND=memory and the admin password before any
  app import
- the ``client`` fixture overrides the store and rate limiter dependencies
  with fresh in-memory instances, so tests never share state
"""

from unittest.mock import MagicMock, Mock

import pytest
from fastapi.testclient import TestClient

from app.adapters.store.base import AbstractSignupStore
from app.adapters.store.factory import create_signup_store
from app.adapters.store.in_memory import InMemorySignupStore
from app.api.dependencies import get_signup_store
from app.core.config import StoreSettings
from app.core.errors import StoreAppError
from app.main import app

IP_HEADERS = {"X-Forwarded-For": "203.0.113.7"}


class TestSignupEndpoint:
    def test_successful_signup(self, client: TestClient, store: InMemorySignupStore) -> None:
        response = client.post("/signup", json={"email": "ada@example.com"}, headers=IP_HEADERS)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Thank you for subscribing!"}
        [record] = store.list_recent()
        assert record.email == "ada@example.com"
        assert record.ip_address == "203.0.113.7"

    def test_email_is_normalized_before_storage(self, client: TestClient, store: InMemorySignupStore) -> None:
        response = client.post("/signup", json={"email": "  USER@Example.COM "})

        assert response.status_code == 200
        assert store.list_recent()[0].email == "user@example.com"

    def test_duplicate_is_success_toned_200(self, client: TestClient, store: InMemorySignupStore) -> None:
        client.post("/signup", json={"email": "user@example.com"})
        response = client.post("/signup", json={"email": "USER@example.com  "})

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "duplicate": True,
            "message": "Already Subscribed!",
        }
        assert store.count() == 1

    def test_distinct_emails_both_succeed(self, client: TestClient, store: InMemorySignupStore) -> None:
        first = client.post("/signup", json={"email": "one@example.com"})
        second = client.post("/signup", json={"email": "two@example.com"})

        assert first.json()["success"] is True
        assert second.json()["success"] is True
        assert store.count() == 2

    @pytest.mark.parametrize(
        "body",
        [{}, {"email": ""}, {"email": 123}, {"email": None}, ["user@example.com"], "user@example.com"],
    )
    def test_missing_or_non_string_email_is_400(self, client: TestClient, store: InMemorySignupStore, body) -> None:
        response = client.post("/signup", json=body)

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Email is required"
        assert data["code"] == "email_required"
        assert store.count() == 0

    def test_unparsable_body_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/signup",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "email_required"

    @pytest.mark.parametrize("email", ["plainaddress", "user@localhost", "a b@example.com", "x" * 250 + "@example.com"])
    def test_invalid_email_is_400(self, client: TestClient, store: InMemorySignupStore, email: str) -> None:
        response = client.post("/signup", json={"email": email})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Please enter a valid email address"
        assert data["code"] == "invalid_email"
        assert store.count() == 0

    def test_store_failure_is_500(self, client: TestClient) -> None:
        failing = MagicMock(spec=AbstractSignupStore)
        failing.insert_if_absent.side_effect = StoreAppError(
            code="store_error", message="Signup store insert failed"
        )
        app.dependency_overrides[get_signup_store] = lambda: failing

        response = client.post("/signup", json={"email": "user@example.com"})

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "internal_error"
        assert data["error"] == "An error occurred. Please try again."
        assert "insert failed" not in response.text

    @pytest.mark.parametrize(
        ("supabase_url", "supabase_key"),
        [(None, None), ("not-a-url", "service-role-key")],
    )
    def test_store_that_cannot_be_built_keeps_signup_envelope(
        self, client: TestClient, supabase_url, supabase_key
    ) -> None:
        app.dependency_overrides[get_signup_store] = lambda: create_signup_store(
            StoreSettings(backend="supabase", supabase_url=supabase_url, supabase_key=supabase_key)
        )

        response = client.post(
            "/signup",
            json={"email": "user@example.com"},
            headers={"Origin": "https://launch.example.com", "X-Request-ID": "req-store"},
        )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "An error occurred. Please try again.",
            "code": "internal_error",
            "request_id": "req-store",
        }
        assert response.headers["access-control-allow-origin"] == "*"
        assert "SUPABASE" not in response.text

    def test_unexpected_dependency_error_keeps_signup_envelope(self, client: TestClient) -> None:
        def _broken_store() -> AbstractSignupStore:
            raise RuntimeError("connection pool exhausted")

        app.dependency_overrides[get_signup_store] = _broken_store

        response = client.post(
            "/signup",
            json={"email": "user@example.com"},
            headers={"Origin": "https://launch.example.com"},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "internal_error"
        assert data["request_id"] == response.headers["X-Request-ID"]
        assert response.headers["access-control-allow-origin"] == "*"
        assert "connection pool" not in response.text


class TestSignupRateLimit:
    def test_sixth_request_in_window_is_429(self, client: TestClient, store: InMemorySignupStore) -> None:
        for i in range(5):
            response = client.post("/signup", json={"email": f"user{i}@example.com"}, headers=IP_HEADERS)
            assert response.status_code == 200

        response = client.post("/signup", json={"email": "user5@example.com"}, headers=IP_HEADERS)

        assert response.status_code == 429
        data = response.json()
        assert data["success"] is False
        assert data["code"] == "rate_limited"
        assert data["error"] == "Too many requests. Please try again later."
        assert response.headers["Retry-After"] == "60"
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert store.count() == 5

    def test_admitted_again_after_window(self, client: TestClient, clock: Mock) -> None:
        for i in range(5):
            client.post("/signup", json={"email": f"user{i}@example.com"}, headers=IP_HEADERS)
        assert client.post("/signup", json={"email": "late@example.com"}, headers=IP_HEADERS).status_code == 429

        clock.return_value += 60

        response = client.post("/signup", json={"email": "late@example.com"}, headers=IP_HEADERS)
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_failed_requests_count_towards_limit(self, client: TestClient) -> None:
        for _ in range(5):
            assert client.post("/signup", json={}, headers=IP_HEADERS).status_code == 400

        assert client.post("/signup", json={"email": "a@example.com"}, headers=IP_HEADERS).status_code == 429

    def test_limits_are_per_client_address(self, client: TestClient) -> None:
        for i in range(5):
            client.post("/signup", json={"email": f"user{i}@example.com"}, headers=IP_HEADERS)

        other = client.post(
            "/signup",
            json={"email": "other@example.com"},
            headers={"X-Real-IP": "198.51.100.1"},
        )
        assert other.status_code == 200

    def test_requests_without_proxy_headers_share_unknown_bucket(self, client: TestClient, store: InMemorySignupStore) -> None:
        for i in range(5):
            client.post("/signup", json={"email": f"user{i}@example.com"})

        assert client.post("/signup", json={"email": "x@example.com"}).status_code == 429
        assert {row.ip_address for row in store.list_recent()} == {"unknown"}


class TestStatsEndpoint:
    def test_empty_store(self, client: TestClient) -> None:
        response = client.get("/stats")

        assert response.status_code == 200
        assert response.json() == {"total_signups": 0}

    def test_counts_only_new_signups(self, client: TestClient) -> None:
        client.post("/signup", json={"email": "a@example.com"})
        client.post("/signup", json={"email": "a@example.com"})
        client.post("/signup", json={"email": "invalid"})
        client.post("/signup", json={"email": "b@example.com"})

        assert client.get("/stats").json() == {"total_signups": 2}

    def test_store_failure_is_500_with_error_body(self, client: TestClient) -> None:
        failing = MagicMock(spec=AbstractSignupStore)
        failing.count.side_effect = StoreAppError(code="store_error", message="Signup store count failed")
        app.dependency_overrides[get_signup_store] = lambda: failing

        response = client.get("/stats")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Failed to fetch stats"
        assert data["code"] == "store_error"
        assert "request_id" in data
        assert "details" not in data

    def test_stats_is_not_rate_limited(self, client: TestClient) -> None:
        for _ in range(10):
            assert client.get("/stats", headers=IP_HEADERS).status_code == 200


class TestCorsAndLanding:
    def test_preflight_allows_any_origin(self, client: TestClient) -> None:
        response = client.options(
            "/signup",
            headers={
                "Origin": "https://landing.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, apikey",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_simple_response_carries_cors_header(self, client: TestClient) -> None:
        response = client.get("/stats", headers={"Origin": "https://landing.example.com"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_landing_page_served(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Launching Soon" in response.text
        assert 'id="signup-form"' in response.text
