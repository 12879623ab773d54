"""Registration, login and refresh token rotation."""

import asyncio
from datetime import datetime, timezone
from functools import cached_property
from uuid import UUID, uuid4

import structlog
from argon2.exceptions import HashingError, InvalidHashError, VerifyMismatchError

from chatauth.errors import (
    AuthError,
    InternalError,
    InvalidCredentials,
    InvalidToken,
)
from chatauth.models.token import PublicKey, TokenPair
from chatauth.models.user import User
from chatauth.repositories.base import UserRepository
from chatauth.services.password import PasswordHasher
from chatauth.services.token_service import TokenService

logger = structlog.get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    """Composes password hashing, token issuance and storage into the auth flows.

    Depends only on the repository and token service contracts; all
    collaborators are injected.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        token_service: TokenService,
        password_hasher: PasswordHasher | None = None,
    ):
        self.user_repo = user_repo
        self.token_service = token_service
        self.password_hasher = password_hasher or PasswordHasher()

    async def register(self, email: str, password: str) -> User:
        """Create a new account.

        Args:
            email: Account email (normalized to lower case)
            password: Plain-text password (will be hashed)

        Returns:
            The created User

        Raises:
            EmailAlreadyExists: If the email is taken
            InternalError: If hashing or storage fails
        """
        try:
            password_hash = await asyncio.to_thread(self.password_hasher.hash_password, password)
        except HashingError as e:
            logger.error("password_hash_failed", error=str(e))
            raise InternalError("hash password") from e

        now = datetime.now(timezone.utc)
        user = User(
            id=uuid4(),
            email=normalize_email(email),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )

        try:
            await self.user_repo.create(user)
        except AuthError:
            raise
        except Exception as e:
            logger.error("user_create_failed", error=str(e))
            raise InternalError("create user") from e

        logger.info("user_registered", user_id=str(user.id))
        return user

    async def login(self, email: str, password: str) -> tuple[TokenPair, UUID]:
        """Authenticate with email and password and issue a token pair.

        Unknown email and wrong password both raise ``InvalidCredentials``.

        Returns:
            Tuple of (TokenPair, user id)
        """
        try:
            user = await self.user_repo.get_by_email(normalize_email(email))
        except Exception as e:
            logger.error("user_lookup_failed", error=str(e))
            raise InternalError("get user by email") from e

        if user is None:
            # Spend the same hashing time as a real check
            await asyncio.to_thread(self._verify_against_dummy, password)
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentials()

        try:
            await asyncio.to_thread(
                self.password_hasher.compare_password, user.password_hash, password
            )
        except VerifyMismatchError:
            logger.info("login_failed", reason="password_mismatch", user_id=str(user.id))
            raise InvalidCredentials()
        except InvalidHashError as e:
            logger.error("login_failed", reason="stored_hash_invalid", user_id=str(user.id), error=str(e))
            raise InvalidCredentials()

        pair = await self._issue(user)
        logger.info("user_logged_in", user_id=str(user.id))
        return pair, user.id

    async def refresh(self, refresh_token: str) -> tuple[TokenPair, UUID]:
        """Exchange a refresh token for a new pair, consuming the old token.

        Returns:
            Tuple of (new TokenPair, user id)

        Raises:
            InvalidToken, TokenExpired, TokenRevoked: See
                ``TokenService.validate_and_revoke_refresh_token``
        """
        user_id = await self.token_service.validate_and_revoke_refresh_token(refresh_token)

        try:
            user = await self.user_repo.get_by_id(user_id)
        except Exception as e:
            logger.error("user_lookup_failed", user_id=str(user_id), error=str(e))
            raise InternalError("get user") from e

        if user is None:
            logger.warning("refresh_token_rejected", reason="user_missing", user_id=str(user_id))
            raise InvalidToken()

        pair = await self._issue(user)
        logger.info("tokens_refreshed", user_id=str(user.id))
        return pair, user.id

    def get_public_keys(self) -> list[PublicKey]:
        return self.token_service.get_public_keys()

    async def _issue(self, user: User) -> TokenPair:
        pair, record = self.token_service.generate_token_pair(user.id, user.email)
        await self.token_service.store_refresh_token(record)
        return pair

    @cached_property
    def _dummy_hash(self) -> str:
        return self.password_hasher.hash_password(str(uuid4()))

    def _verify_against_dummy(self, password: str) -> None:
        self.password_hasher.verify_password(self._dummy_hash, password)
