"""Authentication API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from chatauth.api.dependencies import get_auth_service, get_current_user
from chatauth.models.auth import (
    LoginRequest,
    MeResponse,
    PublicKeysResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from chatauth.models.token import AccessClaims, TokenPair
from chatauth.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])
jwks_router = APIRouter(tags=["Auth"])


def _token_response(pair: TokenPair, user_id: UUID) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
        user_id=user_id,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Create a new account.

    Raises:
        409: If the email is already registered
    """
    user = await auth_service.register(request.email, request.password)
    return RegisterResponse(user_id=user.id)


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Login with email and password.

    Raises:
        401: If the credentials are invalid
    """
    pair, user_id = await auth_service.login(request.email, request.password)
    return _token_response(pair, user_id)


@router.post("/refresh")
async def refresh(
    request: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange a refresh token for a new pair.

    Performs token rotation: the presented refresh token is revoked and
    cannot be used again.

    Raises:
        401: If the refresh token is invalid, expired, or already used
    """
    pair, user_id = await auth_service.refresh(request.refresh_token)
    return _token_response(pair, user_id)


@router.get("/public-keys")
async def public_keys(
    auth_service: AuthService = Depends(get_auth_service),
) -> PublicKeysResponse:
    """Return the JWK set for verifying issued tokens."""
    return PublicKeysResponse(keys=auth_service.get_public_keys())


@jwks_router.get("/.well-known/jwks.json")
async def jwks(
    auth_service: AuthService = Depends(get_auth_service),
) -> PublicKeysResponse:
    """Standard JWKS location, same content as /auth/public-keys."""
    return PublicKeysResponse(keys=auth_service.get_public_keys())


@router.get("/me")
async def get_me(current_user: AccessClaims = Depends(get_current_user)) -> MeResponse:
    """Get the identity carried by the presented access token."""
    return MeResponse(user_id=UUID(current_user.sub), email=current_user.email)
