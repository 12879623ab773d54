"""Auth request and response models with validation."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from chatauth.models.token import PublicKey


class RegisterRequest(BaseModel):
    """New account credentials.

    Attributes:
        email: Account email (must contain '@', max 254 chars)
        password: Account password (8-128 chars)
    """

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def email_shape(cls, v: str) -> str:
        """Require a single '@' with something on both sides."""
        local, sep, domain = v.strip().partition("@")
        if not sep or not local or not domain or "@" in domain:
            raise ValueError("Email must look like name@domain")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, v: str) -> str:
        """Ensure password is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Password cannot be empty or whitespace only")
        return v


class RegisterResponse(BaseModel):
    user_id: UUID


class LoginRequest(BaseModel):
    """Login credentials.

    No strength rules here: a wrong password must fail as invalid
    credentials, not as a validation error.
    """

    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Request to exchange a refresh token for a new token pair."""

    refresh_token: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Token pair issued by login or refresh.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Single-use token for obtaining a new pair
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
        user_id: Authenticated user
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")
    user_id: UUID


class PublicKeysResponse(BaseModel):
    """JWK set for verifying tokens issued by this service."""

    keys: list[PublicKey]


class MeResponse(BaseModel):
    user_id: UUID
    email: str
