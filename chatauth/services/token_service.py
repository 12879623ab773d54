"""JWT issuance, refresh token rotation and public key distribution."""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

import jwt
import structlog
from pydantic import ValidationError

from chatauth.errors import InternalError, InvalidToken, TokenExpired, TokenRevoked
from chatauth.models.token import AccessClaims, PublicKey, RefreshClaims, TokenPair
from chatauth.models.user import RefreshToken
from chatauth.repositories.base import RefreshTokenRepository
from chatauth.services.key_manager import KeyManager

logger = structlog.get_logger(__name__)

# Constants
JWT_ALGORITHM = "RS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 15
REFRESH_TOKEN_EXPIRE_DAYS = 30


def hash_token_id(jti: str) -> str:
    """SHA-256 hex digest of a refresh token's jti, as stored in the repository."""
    return hashlib.sha256(jti.encode("utf-8")).hexdigest()


class TokenService:
    """Signs access/refresh tokens and validates refresh tokens for rotation.

    The service holds no mutable state of its own; the keypair comes from an
    injected ``KeyManager`` and refresh token state lives in the repository.
    """

    def __init__(
        self,
        key_manager: KeyManager,
        refresh_token_repo: RefreshTokenRepository,
        access_token_ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh_token_ttl: timedelta = timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    ):
        self.key_manager = key_manager
        self.refresh_token_repo = refresh_token_repo
        self.access_token_ttl = access_token_ttl
        self.refresh_token_ttl = refresh_token_ttl

    # --------- Issuance ----------

    def generate_token_pair(self, user_id: UUID, email: str) -> tuple[TokenPair, RefreshToken]:
        """Create a signed access/refresh pair and the refresh metadata to persist.

        Performs no I/O; the caller stores the returned record.

        Args:
            user_id: Subject of both tokens
            email: Included in the access token claims

        Returns:
            Tuple of (TokenPair, RefreshToken record)
        """
        now = datetime.now(timezone.utc).replace(microsecond=0)
        iat = int(now.timestamp())

        access_token = self._sign(
            {
                "sub": str(user_id),
                "email": email,
                "iat": iat,
                "exp": int((now + self.access_token_ttl).timestamp()),
                "type": "access",
            }
        )

        jti = str(uuid4())
        expires_at = now + self.refresh_token_ttl
        refresh_token = self._sign(
            {
                "sub": str(user_id),
                "jti": jti,
                "iat": iat,
                "exp": int(expires_at.timestamp()),
                "type": "refresh",
            }
        )

        record = RefreshToken(
            id=uuid4(),
            user_id=user_id,
            token_hash=hash_token_id(jti),
            expires_at=expires_at,
            revoked=False,
            created_at=now,
        )

        logger.debug(
            "token_pair_generated",
            user_id=str(user_id),
            kid=self.key_manager.kid,
            refresh_expires_at=expires_at.isoformat(),
        )

        pair = TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_token_ttl.total_seconds()),
        )
        return pair, record

    async def store_refresh_token(self, record: RefreshToken) -> None:
        """Persist refresh token metadata.

        Raises:
            InternalError: If the repository fails
        """
        try:
            await self.refresh_token_repo.create(record)
        except Exception as e:
            logger.error(
                "refresh_token_store_failed",
                user_id=str(record.user_id),
                error=str(e),
            )
            raise InternalError("store refresh token") from e

    # --------- Validation ----------

    async def validate_and_revoke_refresh_token(self, refresh_token: str) -> UUID:
        """Validate a refresh token and consume it.

        Checks run in a fixed order and the first failure wins: signature,
        token type, required claims, stored record, subject cross-check,
        expiry, revocation. On success the record is revoked atomically,
        so a token can complete at most one rotation.

        Args:
            refresh_token: Encoded refresh JWT

        Returns:
            The user id stored with the token

        Raises:
            InvalidToken: Bad signature, wrong type, missing claims, unknown
                token or subject mismatch
            TokenExpired: The token or its record has expired
            TokenRevoked: The token was already used
            InternalError: The repository failed
        """
        # Expiry is judged at the record step, after the subject cross-check
        claims = self._decode(refresh_token, verify_exp=False)

        if claims.get("type") != "refresh":
            logger.warning("refresh_token_rejected", reason="wrong_type")
            raise InvalidToken()

        try:
            parsed = RefreshClaims.model_validate(claims)
        except ValidationError as e:
            logger.warning("refresh_token_rejected", reason="missing_claims")
            raise InvalidToken() from e

        subject = parsed.sub
        token_hash = hash_token_id(parsed.jti)
        stored = await self._lookup(token_hash)
        if stored is None:
            logger.warning("refresh_token_rejected", reason="not_found", sub=subject)
            raise InvalidToken()

        # Defends against jti collisions and forged subjects
        if str(stored.user_id) != subject:
            logger.warning(
                "refresh_token_rejected",
                reason="subject_mismatch",
                sub=subject,
                user_id=str(stored.user_id),
            )
            raise InvalidToken()

        now = datetime.now(timezone.utc)
        if now > stored.expires_at or now.timestamp() > parsed.exp:
            logger.warning("refresh_token_rejected", reason="expired", user_id=subject)
            raise TokenExpired()

        if stored.revoked:
            logger.warning("refresh_token_rejected", reason="revoked", user_id=subject)
            raise TokenRevoked()

        try:
            revoked_now = await self.refresh_token_repo.revoke(token_hash)
        except Exception as e:
            logger.error("refresh_token_revoke_failed", user_id=subject, error=str(e))
            raise InternalError("revoke refresh token") from e

        if not revoked_now:
            # Another request consumed the token between lookup and revoke
            logger.warning("refresh_token_rejected", reason="revoked_concurrently", user_id=subject)
            raise TokenRevoked()

        logger.info("refresh_token_revoked", user_id=subject)
        return stored.user_id

    def validate_access_token(self, access_token: str) -> AccessClaims:
        """Decode and validate an access token.

        Raises:
            InvalidToken: Bad signature, wrong type or malformed claims
            TokenExpired: The token has expired
        """
        claims = self._decode(access_token)

        if claims.get("type") != "access":
            raise InvalidToken()

        try:
            return AccessClaims.model_validate(claims)
        except ValidationError as e:
            raise InvalidToken() from e

    # --------- Keys ----------

    def get_public_keys(self) -> list[PublicKey]:
        """Return the JWK set clients use to verify tokens."""
        return self.key_manager.get_public_keys()

    # --------- Helpers ----------

    def _sign(self, claims: dict[str, Any]) -> str:
        try:
            return jwt.encode(
                claims,
                self.key_manager.private_key,
                algorithm=JWT_ALGORITHM,
                headers={"kid": self.key_manager.kid},
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.error("token_signing_failed", error=str(e))
            raise InternalError("sign token") from e

    def _decode(self, token: str, verify_exp: bool = True) -> dict[str, Any]:
        """Verify the RS256 signature and standard claims.

        Only RS256 is accepted and the ``kid`` header must name the loaded key.
        With ``verify_exp`` off a past ``exp`` is left for the caller to judge.
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            logger.warning("token_rejected", reason="malformed", error=str(e))
            raise InvalidToken() from e

        if header.get("kid") != self.key_manager.kid:
            logger.warning("token_rejected", reason="unknown_kid", kid=header.get("kid"))
            raise InvalidToken()

        try:
            return jwt.decode(
                token,
                self.key_manager.public_key,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "iat", "sub"], "verify_exp": verify_exp},
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("token_rejected", reason="expired")
            raise TokenExpired() from e
        except jwt.InvalidTokenError as e:
            logger.warning("token_rejected", reason="invalid", error=str(e))
            raise InvalidToken() from e

    async def _lookup(self, token_hash: str) -> Optional[RefreshToken]:
        try:
            return await self.refresh_token_repo.get_by_token(token_hash)
        except Exception as e:
            logger.error("refresh_token_lookup_failed", error=str(e))
            raise InternalError("look up refresh token") from e
