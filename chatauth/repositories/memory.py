"""In-memory repositories for tests and local development."""

import asyncio
from typing import Optional
from uuid import UUID

from chatauth.errors import EmailAlreadyExists
from chatauth.models.user import RefreshToken, User


class InMemoryUserRepository:
    """Dict-backed user store keyed by id and lower-cased email."""

    def __init__(self):
        self._by_id: dict[UUID, User] = {}
        self._by_email: dict[str, UUID] = {}
        self._lock = asyncio.Lock()

    async def create(self, user: User) -> None:
        key = user.email.lower()
        async with self._lock:
            if key in self._by_email:
                raise EmailAlreadyExists()
            self._by_id[user.id] = user.model_copy()
            self._by_email[key] = user.id

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        user = self._by_id.get(user_id)
        return user.model_copy() if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        user_id = self._by_email.get(email.lower())
        if user_id is None:
            return None
        return self._by_id[user_id].model_copy()


class InMemoryRefreshTokenRepository:
    """Dict-backed refresh token store keyed by token hash."""

    def __init__(self):
        self._tokens: dict[str, RefreshToken] = {}
        self._lock = asyncio.Lock()

    async def create(self, token: RefreshToken) -> None:
        async with self._lock:
            if token.token_hash in self._tokens:
                raise ValueError("duplicate refresh token hash")
            self._tokens[token.token_hash] = token.model_copy()

    async def get_by_token(self, token_hash: str) -> Optional[RefreshToken]:
        token = self._tokens.get(token_hash)
        return token.model_copy() if token else None

    async def revoke(self, token_hash: str) -> bool:
        async with self._lock:
            token = self._tokens.get(token_hash)
            if token is None or token.revoked:
                return False
            token.revoked = True
            return True
