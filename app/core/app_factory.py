from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build a fresh instance and main.py stays a one-liner.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import (
    admin_router,
    health_router,
    landing_router,
    signup_router,
    stats_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def parse_origins(origins: str | None) -> list[str]:
    """Split a comma-separated origin list, defaulting to ``["*"]``."""
    if not origins:
        return ["*"]
    parsed = [origin.strip() for origin in origins.split(",") if origin.strip()]
    return parsed or ["*"]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Launch Signup API",
        description=(
            "Backend for a \"coming soon\" landing page: collects email signups "
            "with validation, per-address rate limiting and duplicate detection, "
            "exposes a public signup counter and a password-protected admin "
            "listing."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    # Middleware (the last one added runs first: CORS wraps request-id)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(settings.app.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=CORS_ALLOW_HEADERS,
        expose_headers=[settings.log.request_id_header, "Retry-After"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(signup_router)
    app.include_router(stats_router)
    app.include_router(admin_router)
    app.include_router(health_router)
    app.include_router(landing_router)

    # OpenAPI customizations (security scheme, tags)
    apply_openapi_customizations(app)

    return app
