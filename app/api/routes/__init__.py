from __future__ import annotations

from app.api.routes.admin import router as admin_router
from app.api.routes.health import router as health_router
from app.api.routes.landing import router as landing_router
from app.api.routes.signup import router as signup_router
from app.api.routes.stats import router as stats_router

__all__ = [
    "admin_router",
    "health_router",
    "landing_router",
    "signup_router",
    "stats_router",
]
