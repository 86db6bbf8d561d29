"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 401, 429, 500)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    ConfigurationAppError,
    RateLimitAppError,
    StoreAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code.

    - ValidationAppError (and any other AppError) → 400 Bad Request
    - AuthenticationAppError → 401 Unauthorized
    - RateLimitAppError → 429 Too Many Requests
    - ConfigurationAppError / StoreAppError → 500 Internal Server Error
    """
    if isinstance(exc, AuthenticationAppError):
        return 401
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, (ConfigurationAppError, StoreAppError)):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with a flat JSON body.

    The body carries a bare ``error`` message alongside the machine-readable
    ``code`` and the ``request_id`` for log correlation. Structured details
    are included only when present.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )

    content = {
        "error": exc.message,
        "code": exc.code,
        "request_id": get_request_id(),
    }
    if exc.details:
        content["details"] = exc.details

    return JSONResponse(status_code=status_code, content=content)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces or exception text reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred. Please try again later.",
            "code": "internal_server_error",
            "request_id": get_request_id(),
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization, before route registration.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
