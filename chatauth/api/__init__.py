"""API package exports."""

from chatauth.api.auth import jwks_router
from chatauth.api.auth import router as auth_router
from chatauth.api.errors import auth_error_handler
from chatauth.api.middleware import CorrelationIdMiddleware
from chatauth.api.routes import router

__all__ = [
    "CorrelationIdMiddleware",
    "auth_error_handler",
    "auth_router",
    "jwks_router",
    "router",
]
