"""Mapping of domain errors to HTTP responses."""

from uuid import uuid4

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from chatauth.errors import AuthError, ErrorKind

logger = structlog.get_logger(__name__)

# Token failures share one message so callers cannot tell expired,
# revoked and forged tokens apart.
ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.EMAIL_ALREADY_EXISTS: (status.HTTP_409_CONFLICT, "email already registered"),
    ErrorKind.INVALID_CREDENTIALS: (status.HTTP_401_UNAUTHORIZED, "invalid email or password"),
    ErrorKind.INVALID_TOKEN: (status.HTTP_401_UNAUTHORIZED, "invalid or expired token"),
    ErrorKind.TOKEN_EXPIRED: (status.HTTP_401_UNAUTHORIZED, "invalid or expired token"),
    ErrorKind.TOKEN_REVOKED: (status.HTTP_401_UNAUTHORIZED, "invalid or expired token"),
    ErrorKind.INTERNAL: (status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error"),
}


def error_response(kind: ErrorKind) -> tuple[int, str]:
    """Return (status code, public message) for an error kind."""
    return ERROR_RESPONSES.get(kind, ERROR_RESPONSES[ErrorKind.INTERNAL])


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Convert an AuthError into a generic JSON error response.

    The exception message and cause are logged, never returned.
    """
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    status_code, message = error_response(exc.kind)

    log = logger.error if exc.kind is ErrorKind.INTERNAL else logger.info
    log(
        "auth_error",
        kind=exc.kind.value,
        detail=str(exc),
        cause=repr(exc.__cause__) if exc.__cause__ else None,
        path=request.url.path,
    )

    headers = {"X-Correlation-Id": correlation_id}
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"

    return JSONResponse(
        status_code=status_code,
        content={"error": message, "correlation_id": correlation_id},
        headers=headers,
    )
