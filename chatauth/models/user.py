"""User and refresh token storage models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class User(BaseModel):
    """A registered account.

    Identity (id, email) is fixed at registration; only the password hash
    may change afterwards.
    """

    id: UUID
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


class RefreshToken(BaseModel):
    """Persisted metadata for one issued refresh token.

    ``token_hash`` is the SHA-256 hex digest of the token's ``jti`` claim;
    the raw jti is never stored.
    """

    id: UUID
    user_id: UUID
    token_hash: str
    expires_at: datetime
    revoked: bool = False
    created_at: datetime
