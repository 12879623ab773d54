"""Middleware for request correlation and access logging."""

import re
import time
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger(__name__)

# Inbound ids are echoed into headers and logs, so only accept plain tokens
_CORRELATION_ID_RE = re.compile(r"[A-Za-z0-9._-]{1,64}")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation ID and log its outcome.

    - Reuses a well-formed X-Correlation-Id header, otherwise generates a UUID4
    - Stores it in request.state.correlation_id for the error handlers
    - Binds it with method and path to the structlog context
    - Logs request_completed with status and duration (never bodies or headers)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process request with correlation ID tracking."""
        # Caller-supplied id wins when it is safe to echo back
        supplied = request.headers.get("X-Correlation-Id", "")
        if _CORRELATION_ID_RE.fullmatch(supplied):
            correlation_id = supplied
        else:
            correlation_id = str(uuid4())

        request.state.correlation_id = correlation_id

        # Fresh context per request so ids never leak between requests
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)

        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )

        response.headers["X-Correlation-Id"] = correlation_id

        return response
