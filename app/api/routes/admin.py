from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.api.dependencies import get_signup_service
from app.core.auth import verify_admin_password
from app.core.errors import StoreAppError
from app.core.logging import get_request_id
from app.schemas.signup import AdminSignupsResponse
from app.services.signup_service import SignupService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


@router.get(
    "/admin-signups",
    response_model=AdminSignupsResponse,
    dependencies=[Depends(verify_admin_password)],
)
def admin_signups(
    service: SignupService = Depends(get_signup_service),
) -> AdminSignupsResponse | JSONResponse:
    """List every signup, newest first, for operators.

    Requires ``Authorization: Bearer <ADMIN_PASSWORD>``. Returns 401 for a
    missing or wrong password and 500 when no password is configured.
    """
    try:
        signups = service.list_signups()
    except StoreAppError as exc:
        logger.error("admin.list_failed", extra={"error_code": exc.code})
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to retrieve signups",
                "code": exc.code,
                "request_id": get_request_id(),
                "signups": [],
            },
        )

    return AdminSignupsResponse(signups=signups, total=len(signups))
