"""Admin password authentication.

The admin listing is protected by a single shared secret configured on the
server (``ADMIN_PASSWORD``) and presented by operators as a Bearer token.

Design principles:
- Single Responsibility: Only handles admin credential validation
- Dependency Injection: Used via FastAPI Depends() for loose coupling
- Configuration-driven: The secret is managed via env vars, never hardcoded
- Constant-time comparison so response timing does not leak the secret
"""

from __future__ import annotations

import hmac
import logging
from typing import Annotated

from fastapi import Header

from app.core.config import settings
from app.core.errors import AuthenticationAppError, ConfigurationAppError
from app.core.logging import fingerprint

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the credential from an ``Authorization: Bearer <token>`` header.

    Examples:
        >>> extract_bearer_token("Bearer s3cret")
        's3cret'
        >>> extract_bearer_token("bearer  s3cret ")
        's3cret'
        >>> extract_bearer_token("Basic abc") is None
        True
        >>> extract_bearer_token(None) is None
        True
    """
    if not authorization:
        return None

    scheme, _, credential = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    return credential.strip() or None


def validate_admin_password(provided: str | None) -> None:
    """Check a presented credential against the configured admin password.

    Pure validation logic without FastAPI dependencies for easy testing.

    Args:
        provided: Credential taken from the Authorization header, if any.

    Raises:
        ConfigurationAppError: If no admin password is configured.
        AuthenticationAppError: If the credential is missing or wrong.
    """
    expected = settings.app.admin_password

    if not expected:
        logger.error(
            "admin.auth_failed",
            extra={"reason": "admin_password_not_configured"},
        )
        raise ConfigurationAppError(
            code="admin_not_configured",
            message="Admin access not configured",
            details={"hint": "Set the ADMIN_PASSWORD environment variable"},
        )

    if not provided or not hmac.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        logger.warning(
            "admin.unauthorized",
            extra={
                "reason": "missing_credential" if not provided else "invalid_credential",
                "credential_hash": fingerprint(provided) if provided else None,
            },
        )
        raise AuthenticationAppError(
            code="unauthorized",
            message="Unauthorized",
        )


async def verify_admin_password(
    authorization: Annotated[str | None, Header(alias="Authorization")] = None,
) -> None:
    """FastAPI dependency guarding the admin endpoints.

    Usage:
        @router.get("/admin-signups", dependencies=[Depends(verify_admin_password)])

    Args:
        authorization: Raw Authorization header (injected by FastAPI).

    Raises:
        ConfigurationAppError: 500 when the admin password is not configured.
        AuthenticationAppError: 401 when the bearer credential is wrong.
    """
    validate_admin_password(extract_bearer_token(authorization))
    logger.info("admin.authenticated")
