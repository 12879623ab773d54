"""Repository contracts and adapters."""

from chatauth.repositories.base import RefreshTokenRepository, UserRepository
from chatauth.repositories.memory import (
    InMemoryRefreshTokenRepository,
    InMemoryUserRepository,
)
from chatauth.repositories.postgres import (
    PostgresRefreshTokenRepository,
    PostgresUserRepository,
)

__all__ = [
    "InMemoryRefreshTokenRepository",
    "InMemoryUserRepository",
    "PostgresRefreshTokenRepository",
    "PostgresUserRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
