"""In-memory signup store for local development and tests.

Rows live for the lifetime of the process. Uniqueness is enforced under a
lock, which mirrors the UNIQUE constraint of the real table.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable

from app.adapters.store.base import AbstractSignupStore, InsertOutcome
from app.schemas.signup import SignupRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySignupStore(AbstractSignupStore):
    """Thread-safe dict-backed signup store keyed by email."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._rows: dict[str, SignupRecord] = {}

    def insert_if_absent(self, email: str, ip_address: str | None) -> InsertOutcome:
        with self._lock:
            if email in self._rows:
                return InsertOutcome.CONFLICT
            self._rows[email] = SignupRecord(
                email=email,
                created_at=self._clock(),
                ip_address=ip_address,
            )
            return InsertOutcome.CREATED

    def count(self) -> int:
        with self._lock:
            return len(self._rows)

    def list_recent(self) -> list[SignupRecord]:
        with self._lock:
            rows = list(self._rows.values())
        # Stable sort keeps insertion order reversed for identical timestamps
        return sorted(reversed(rows), key=lambda row: row.created_at, reverse=True)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
