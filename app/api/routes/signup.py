import logging
from typing import Any, Callable, Coroutine

from fastapi import APIRouter, Depends, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException

from app.api.dependencies import get_signup_service
from app.core.errors import RateLimitAppError, StoreAppError, ValidationAppError
from app.core.logging import get_request_id
from app.core.rate_limit import rate_limit_headers, resolve_client_ip
from app.schemas.signup import SignupRequest, SignupResponse
from app.services.signup_service import SignupService

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Thank you for subscribing!"
DUPLICATE_MESSAGE = "Already Subscribed!"
INTERNAL_ERROR_MESSAGE = "An error occurred. Please try again."
INTERNAL_ERROR_CODE = "internal_error"


def _signup_error(
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render a failed signup as ``{success: false, error, code}``."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "code": code,
            "request_id": get_request_id(),
        },
        headers=headers or None,
    )


class SignupRoute(APIRoute):
    """Route class keeping the signup error envelope for every failure.

    Dependency resolution (building the store, for instance) runs before the
    endpoint body, so its errors would otherwise reach the global handlers
    with a different body shape.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def signup_route_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except (HTTPException, RequestValidationError):
                raise
            except Exception as exc:
                logger.exception(
                    "signup.failed",
                    extra={
                        "client_ip": resolve_client_ip(request.headers),
                        "error_type": type(exc).__name__,
                    },
                )
                return _signup_error(500, INTERNAL_ERROR_MESSAGE, INTERNAL_ERROR_CODE)

        return signup_route_handler


router = APIRouter(tags=["Signup"], route_class=SignupRoute)


@router.post(
    "/signup",
    response_model=SignupResponse,
    response_model_exclude_none=True,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": SignupRequest.model_json_schema()}
            },
        }
    },
)
async def signup(
    request: Request,
    service: SignupService = Depends(get_signup_service),
) -> SignupResponse | JSONResponse:
    """Subscribe an email address to the launch list.

    Returns 200 with ``success: true`` for a new signup and 200 with
    ``success: false, duplicate: true`` when the address is already on the
    list. Throttled clients get 429, malformed input 400 and store failures
    500; all error bodies carry ``success: false`` and an ``error`` message.
    """
    client_ip = resolve_client_ip(request.headers)

    try:
        payload = await request.json()
    except ValueError:
        # Unparsable body is reported the same way as a missing email
        payload = None

    try:
        result = await run_in_threadpool(service.signup, payload, client_ip)
    except RateLimitAppError as exc:
        return _signup_error(429, exc.message, exc.code, headers=rate_limit_headers(exc))
    except ValidationAppError as exc:
        return _signup_error(400, exc.message, exc.code)
    except StoreAppError as exc:
        logger.error(
            "signup.failed",
            extra={"client_ip": client_ip, "error_code": exc.code},
        )
        return _signup_error(500, INTERNAL_ERROR_MESSAGE, INTERNAL_ERROR_CODE)

    if result.created:
        return SignupResponse(success=True, message=SUCCESS_MESSAGE)

    return SignupResponse(success=False, duplicate=True, message=DUPLICATE_MESSAGE)
