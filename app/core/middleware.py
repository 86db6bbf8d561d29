"""HTTP middleware for request ID propagation and access logging.

Every request/response pair carries a correlation ID so log lines emitted
while handling a signup, stats or admin call can be grouped together.

The middleware:
- Accepts the incoming X-Request-ID header (configurable) or generates a UUID
- Stores request_id in contextvars for access throughout the request lifecycle
- Writes one ``http.request`` log line with method, path, status and duration
- Injects request_id and duration into the response headers
- Clears context after request completion to prevent context leaks

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response

from app.core.config import settings
from app.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)


async def request_id_middleware(request: Request, call_next) -> Response:
    """Assign a correlation id to the request and log its outcome.

    If the client provides the configured request-id header, that value is
    reused; otherwise a new UUID4 is generated. The id is echoed back in the
    response together with ``X-Request-Duration-ms``.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with correlation headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "http.request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
