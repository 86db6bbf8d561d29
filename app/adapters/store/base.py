"""Signup store interface.

Routes and services depend on this abstraction so the managed backend
(Supabase) can be swapped for the in-memory store in development and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from app.schemas.signup import SignupRecord


class InsertOutcome(str, Enum):
    """Result of a conditional insert."""

    CREATED = "created"
    CONFLICT = "conflict"


class AbstractSignupStore(ABC):
    """Interface for signup persistence backends.

    Implementations raise ``StoreAppError`` for any backend failure.
    """

    @abstractmethod
    def insert_if_absent(self, email: str, ip_address: str | None) -> InsertOutcome:
        """Insert a signup unless one already exists for ``email``.

        This is a single operation: a concurrent insert of the same email must
        surface as ``CONFLICT``, never as a second row.

        Args:
            email: Normalized email address.
            ip_address: Client address reported with the request.

        Returns:
            InsertOutcome.CREATED when a row was written, CONFLICT otherwise.
        """
        raise NotImplementedError

    @abstractmethod
    def count(self) -> int:
        """Return the total number of stored signups."""
        raise NotImplementedError

    @abstractmethod
    def list_recent(self) -> list[SignupRecord]:
        """Return every signup ordered by ``created_at`` descending."""
        raise NotImplementedError
