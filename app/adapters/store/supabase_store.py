"""Supabase (PostgREST) signup store adapter."""

from __future__ import annotations

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from app.adapters.store.base import AbstractSignupStore, InsertOutcome
from app.core.errors import StoreAppError
from app.schemas.signup import SignupRecord

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

_LIST_COLUMNS = "email, created_at, ip_address"


class SupabaseSignupStore(AbstractSignupStore):
    """Store signups in a Supabase table.

    The table must carry a UNIQUE constraint on ``email`` (see
    ``migrations/001_create_signups.sql``); a plain insert then acts as an
    insert-if-absent and a concurrent duplicate comes back as a unique
    violation instead of a second row.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        *,
        table: str = "signups",
        client: Client | None = None,
    ) -> None:
        """Initialize the Supabase client.

        Args:
            url: Supabase project URL.
            key: Service role key (bypasses row level security; server only).
            table: Name of the signups table.
            client: Pre-built client, mainly for tests.
        """
        if client is None:
            if not url or not key:
                raise ValueError("url and key are required when no client is given")
            client = create_client(url, key)
        self.client = client
        self.table = table

    def _fail(self, operation: str, exc: Exception) -> StoreAppError:
        logger.error(
            "store.error",
            extra={
                "backend": "supabase",
                "operation": operation,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )
        return StoreAppError(
            code="store_error",
            message=f"Signup store {operation} failed",
            details={"backend": "supabase", "operation": operation},
        )

    def insert_if_absent(self, email: str, ip_address: str | None) -> InsertOutcome:
        try:
            self.client.table(self.table).insert(
                {"email": email, "ip_address": ip_address}
            ).execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                return InsertOutcome.CONFLICT
            raise self._fail("insert", exc) from exc
        except Exception as exc:
            raise self._fail("insert", exc) from exc
        return InsertOutcome.CREATED

    def count(self) -> int:
        try:
            response = (
                self.client.table(self.table)
                .select("email", count="exact", head=True)
                .execute()
            )
        except Exception as exc:
            raise self._fail("count", exc) from exc
        return response.count or 0

    def list_recent(self) -> list[SignupRecord]:
        try:
            response = (
                self.client.table(self.table)
                .select(_LIST_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise self._fail("list", exc) from exc
        rows: list[dict[str, Any]] = response.data or []
        return [SignupRecord.model_validate(row) for row in rows]
