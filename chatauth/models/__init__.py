"""Models package exports."""

from chatauth.models.auth import (
    LoginRequest,
    MeResponse,
    PublicKeysResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from chatauth.models.token import AccessClaims, PublicKey, RefreshClaims, TokenPair
from chatauth.models.user import RefreshToken, User

__all__ = [
    "AccessClaims",
    "LoginRequest",
    "MeResponse",
    "PublicKey",
    "PublicKeysResponse",
    "RefreshClaims",
    "RefreshRequest",
    "RefreshToken",
    "RegisterRequest",
    "RegisterResponse",
    "TokenPair",
    "TokenResponse",
    "User",
]
