"""Signup service orchestrating rate limiting, validation and persistence.

A signup request moves through these steps, stopping at the first failure:
1. Rate limit check for the client address (nothing else runs when throttled)
2. Body inspection: the payload must be a JSON object with a string ``email``
3. Normalization (trim + lowercase) and format/length validation
4. Conditional insert; an existing row is reported as a duplicate

Every outcome is logged with the client address. Email addresses only ever
appear in logs as a short fingerprint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.store.base import AbstractSignupStore, InsertOutcome
from app.core.errors import ValidationAppError
from app.core.logging import fingerprint
from app.core.rate_limit import check_rate_limit
from app.schemas.signup import SignupRecord
from app.utils.email_validator import normalize_email, validate_email

logger = logging.getLogger(__name__)


class SignupStatus(str, Enum):
    CREATED = "created"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class SignupResult:
    """Outcome of a successful (non-error) signup attempt."""

    status: SignupStatus
    email: str

    @property
    def created(self) -> bool:
        return self.status is SignupStatus.CREATED


def extract_email(payload: Any) -> str:
    """Pull the raw ``email`` value out of a decoded JSON body.

    Args:
        payload: Decoded request body (any JSON value).

    Returns:
        str: The submitted email, untouched.

    Raises:
        ValidationAppError: If the body is not an object or ``email`` is
            missing, empty or not a string.
    """
    email = payload.get("email") if isinstance(payload, dict) else None
    if not email or not isinstance(email, str):
        raise ValidationAppError(
            code="email_required",
            message="Email is required",
        )
    return email


class SignupService:
    """Business logic behind the signup, stats and admin endpoints."""

    def __init__(
        self,
        store: AbstractSignupStore,
        limiter: AbstractRateLimiter | None = None,
    ) -> None:
        self.store = store
        self.limiter = limiter

    def signup(self, payload: Any, client_ip: str) -> SignupResult:
        """Register an email address.

        Args:
            payload: Decoded JSON request body.
            client_ip: Client address used for rate limiting and stored
                alongside the signup.

        Returns:
            SignupResult: CREATED for a new row, DUPLICATE if the normalized
                address was already subscribed.

        Raises:
            RateLimitAppError: Client exceeded its request budget.
            ValidationAppError: Missing or malformed email.
            StoreAppError: The store failed to persist the signup.
        """
        logger.info("signup.received", extra={"client_ip": client_ip})

        check_rate_limit(self.limiter, client_ip)

        try:
            email = normalize_email(extract_email(payload))
        except ValidationAppError:
            logger.info(
                "signup.rejected",
                extra={"client_ip": client_ip, "reason": "email_required"},
            )
            raise

        email_hash = fingerprint(email)
        if not validate_email(email):
            logger.info(
                "signup.rejected",
                extra={
                    "client_ip": client_ip,
                    "reason": "invalid_email",
                    "email_hash": email_hash,
                    "email_length": len(email),
                },
            )
            raise ValidationAppError(
                code="invalid_email",
                message="Please enter a valid email address",
            )

        outcome = self.store.insert_if_absent(email, client_ip)
        if outcome is InsertOutcome.CONFLICT:
            logger.info(
                "signup.duplicate",
                extra={"client_ip": client_ip, "email_hash": email_hash},
            )
            return SignupResult(status=SignupStatus.DUPLICATE, email=email)

        logger.info(
            "signup.created",
            extra={"client_ip": client_ip, "email_hash": email_hash},
        )
        return SignupResult(status=SignupStatus.CREATED, email=email)

    def total_signups(self) -> int:
        """Return the number of stored signups."""
        total = self.store.count()
        logger.info("stats.served", extra={"total_signups": total})
        return total

    def list_signups(self) -> list[SignupRecord]:
        """Return every signup, newest first."""
        signups = self.store.list_recent()
        logger.info("admin.signups_listed", extra={"total": len(signups)})
        return signups
