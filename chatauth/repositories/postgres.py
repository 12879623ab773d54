"""asyncpg-backed repositories."""

from typing import Optional
from uuid import UUID

import asyncpg
import structlog

from chatauth.database import get_pool
from chatauth.errors import EmailAlreadyExists
from chatauth.models.user import RefreshToken, User

logger = structlog.get_logger(__name__)


def _user_from_row(row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _token_from_row(row) -> RefreshToken:
    return RefreshToken(
        id=row["id"],
        user_id=row["user_id"],
        token_hash=row["token_hash"],
        expires_at=row["expires_at"],
        revoked=row["revoked"],
        created_at=row["created_at"],
    )


class PostgresUserRepository:
    """User store on the ``users`` table."""

    async def create(self, user: User) -> None:
        """Insert a user row.

        Raises:
            EmailAlreadyExists: On the unique email index
        """
        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (id, email, password_hash, created_at, updated_at)
                    VALUES ($1, $2, $3, $4, $5)
                    """,
                    user.id,
                    user.email,
                    user.password_hash,
                    user.created_at,
                    user.updated_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise EmailAlreadyExists() from e

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, email, password_hash, created_at, updated_at
                FROM users
                WHERE id = $1
                """,
                user_id,
            )

        return _user_from_row(row) if row is not None else None

    async def get_by_email(self, email: str) -> Optional[User]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, email, password_hash, created_at, updated_at
                FROM users
                WHERE LOWER(email) = LOWER($1)
                """,
                email,
            )

        return _user_from_row(row) if row is not None else None


class PostgresRefreshTokenRepository:
    """Refresh token store on the ``refresh_tokens`` table."""

    async def create(self, token: RefreshToken) -> None:
        pool = await get_pool()

        async with pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO refresh_tokens (id, user_id, token_hash, expires_at, revoked, created_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                token.id,
                token.user_id,
                token.token_hash,
                token.expires_at,
                token.revoked,
                token.created_at,
            )

    async def get_by_token(self, token_hash: str) -> Optional[RefreshToken]:
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT id, user_id, token_hash, expires_at, revoked, created_at
                FROM refresh_tokens
                WHERE token_hash = $1
                """,
                token_hash,
            )

        return _token_from_row(row) if row is not None else None

    async def revoke(self, token_hash: str) -> bool:
        """Conditionally flip ``revoked``; True only for the caller that changed the row."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE refresh_tokens
                SET revoked = TRUE
                WHERE token_hash = $1 AND revoked = FALSE
                """,
                token_hash,
            )

        # asyncpg returns the command tag, e.g. "UPDATE 1"
        return result.split()[-1] != "0"
