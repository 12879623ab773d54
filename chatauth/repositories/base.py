"""Storage contracts consumed by the auth services."""

from typing import Optional, Protocol
from uuid import UUID

from chatauth.models.user import RefreshToken, User


class UserRepository(Protocol):
    """Contract for user persistence."""

    async def create(self, user: User) -> None:
        """Store a new user.

        Raises:
            EmailAlreadyExists: If the email is already registered
        """
        ...

    async def get_by_id(self, user_id: UUID) -> Optional[User]: ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email, case-insensitively."""
        ...


class RefreshTokenRepository(Protocol):
    """Contract for refresh token metadata persistence.

    Records are keyed by ``token_hash`` (SHA-256 of the token's jti).
    """

    async def create(self, token: RefreshToken) -> None: ...

    async def get_by_token(self, token_hash: str) -> Optional[RefreshToken]: ...

    async def revoke(self, token_hash: str) -> bool:
        """Mark a token revoked.

        Must be atomic: when called concurrently for the same hash exactly
        one call returns True. Returns False if the token was already
        revoked or does not exist.
        """
        ...
