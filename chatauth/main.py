"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chatauth.api import (
    CorrelationIdMiddleware,
    auth_error_handler,
    auth_router,
    jwks_router,
    router,
)
from chatauth.config import get_settings
from chatauth.database import close_database, init_database, run_migrations
from chatauth.errors import AuthError
from chatauth.repositories import PostgresRefreshTokenRepository, PostgresUserRepository
from chatauth.services import AuthService, KeyManager, TokenService
from chatauth.services.logging_service import configure_logging, get_logger


def build_auth_service() -> AuthService:
    """Wire the production AuthService from settings.

    Raises:
        KeyLoadError: If the signing key cannot be loaded
    """
    settings = get_settings()
    key_manager = KeyManager.from_file(settings.private_key_path)
    token_service = TokenService(
        key_manager,
        PostgresRefreshTokenRepository(),
        access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
        refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
    )
    return AuthService(PostgresUserRepository(), token_service)


def create_app(auth_service: Optional[AuthService] = None) -> FastAPI:
    """Create the application.

    Args:
        auth_service: Pre-wired service; when given, startup skips the
            database and key loading and uses it as-is
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        configure_logging(settings.log_level)
        logger = get_logger("main")

        if auth_service is not None:
            app.state.auth_service = auth_service
            logger.info("application_started", wiring="injected")
            yield
            return

        # Key problems are fatal: refuse to start without a signing key
        app.state.auth_service = build_auth_service()

        await init_database()
        await run_migrations()
        logger.info("database_initialized")

        logger.info(
            "application_started",
            log_level=settings.log_level,
            kid=app.state.auth_service.token_service.key_manager.kid,
        )

        yield

        await close_database()
        logger.info("application_shutdown")

    app = FastAPI(
        title="Chat Platform - Auth Service",
        description="Password authentication, JWT issuance and refresh token rotation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(auth_router)
    app.include_router(jwks_router)
    app.include_router(router)

    return app


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with a 400 and the first failing field."""
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    # Request bodies hold passwords and tokens; log only the summary
    logger.warning("validation_error", detail=detail)

    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation error",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={"X-Correlation-Id": correlation_id},
    )


app = create_app()
