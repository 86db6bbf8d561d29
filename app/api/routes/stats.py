from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_signup_service
from app.core.errors import StoreAppError
from app.schemas.signup import StatsResponse
from app.services.signup_service import SignupService

router = APIRouter(tags=["Signup"])


@router.get("/stats", response_model=StatsResponse)
def stats(service: SignupService = Depends(get_signup_service)) -> StatsResponse:
    """Return the number of collected signups.

    Public, unauthenticated and not rate limited. A store failure becomes a
    500 with an ``error`` body through the global exception handler.
    """
    try:
        total = service.total_signups()
    except StoreAppError as exc:
        raise StoreAppError(
            code=exc.code,
            message="Failed to fetch stats",
        ) from exc

    return StatsResponse(total_signups=total)
