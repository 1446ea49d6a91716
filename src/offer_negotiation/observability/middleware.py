"""Per-request logging context for HTTP traffic.

Every response carries an ``X-Request-ID`` header (echoed from the caller or
generated).  The request ID and the gateway-supplied user id are bound into
structlog contextvars, so negotiation log events emitted while handling a
request can be traced back to who issued it.  Each request ends with one
``http_request_completed`` event.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
DEFAULT_USER_HEADER = "X-User-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request ID and caller identity to the logging context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        settings = getattr(request.app.state, "settings", None)
        user_header = settings.auth_user_header if settings is not None else DEFAULT_USER_HEADER

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            service="offer-negotiation",
            user_id=request.headers.get(user_header),
        )

        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        if request.url.path not in ("/health", "/ready", "/metrics"):
            logger.info(
                "http_request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
        return response
