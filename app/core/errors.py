"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    retry_after: int
    limit: int
    remaining: int
    reset_at: int
    backend: str
    operation: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class RateLimitAppError(AppError):
    """Raised when a client exceeds its request budget."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class ConfigurationAppError(AppError):
    """Raised when required server-side configuration is missing."""


class StoreAppError(AppError):
    """Raised when the signup store cannot complete an operation."""
