"""Argon2id password hashing.

Encoded hashes use the PHC string layout produced by argon2-cffi::

    $argon2id$v=19$m=65536,t=2,p=4$<salt b64>$<hash b64>

Verification reads the stored parameters first so that oversized cost
values are rejected before any memory is allocated for hashing.
"""

import structlog
from argon2 import PasswordHasher as Argon2Hasher
from argon2 import Type, extract_parameters
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from argon2.low_level import ARGON2_VERSION

logger = structlog.get_logger(__name__)

# OWASP 2024 minimums are m=19 MiB, t=2, p=1
ARGON2_TIME_COST = 2
ARGON2_MEMORY_COST = 64 * 1024  # KiB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32
ARGON2_SALT_LEN = 16

# Upper bounds accepted from a stored hash
MAX_TIME_COST = 10
MAX_MEMORY_COST = 256 * 1024  # KiB
MAX_PARALLELISM = 16


def _secret(password: str) -> bytes:
    # Lone surrogates cannot be encoded strictly; keep them as raw code units
    return password.encode("utf-8", "surrogatepass")


class PasswordHasher:
    """Hashes and verifies passwords with Argon2id.

    The cost parameters default to the production constants above; they are
    only overridden in tests.
    """

    def __init__(
        self,
        time_cost: int = ARGON2_TIME_COST,
        memory_cost: int = ARGON2_MEMORY_COST,
        parallelism: int = ARGON2_PARALLELISM,
    ):
        self.time_cost = time_cost
        self.memory_cost = memory_cost
        self.parallelism = parallelism
        self._hasher = Argon2Hasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=ARGON2_HASH_LEN,
            salt_len=ARGON2_SALT_LEN,
            type=Type.ID,
        )

    def hash_password(self, password: str) -> str:
        """Hash a password with a fresh random salt.

        Args:
            password: Plain-text password

        Returns:
            Encoded Argon2id hash string
        """
        return self._hasher.hash(_secret(password))

    def compare_password(self, encoded_hash: str, password: str) -> None:
        """Check a password against an encoded Argon2id hash.

        Args:
            encoded_hash: Stored hash produced by ``hash_password``
            password: Plain-text password to check

        Raises:
            InvalidHashError: If the hash is malformed, uses another
                algorithm or version, or its cost parameters exceed the caps
            VerifyMismatchError: If the password does not match
        """
        parts = encoded_hash.split("$")
        if len(parts) != 6 or parts[0]:
            raise InvalidHashError("invalid hash format")
        if parts[1] != "argon2id":
            raise InvalidHashError("incompatible hash algorithm")

        params = extract_parameters(encoded_hash)

        # Only the canonical "v=..", "m=..,t=..,p=.." spelling is accepted
        if parts[2] != f"v={params.version}" or parts[3] != (
            f"m={params.memory_cost},t={params.time_cost},p={params.parallelism}"
        ):
            raise InvalidHashError("invalid hash parameters")

        if params.time_cost > MAX_TIME_COST:
            raise InvalidHashError("time parameter exceeds maximum allowed value")
        if params.memory_cost > MAX_MEMORY_COST:
            raise InvalidHashError("memory parameter exceeds maximum allowed value")
        if params.parallelism > MAX_PARALLELISM:
            raise InvalidHashError("parallelism parameter exceeds maximum allowed value")
        if params.version != ARGON2_VERSION:
            raise InvalidHashError(f"unsupported argon2 version: {params.version}")

        try:
            self._hasher.verify(encoded_hash, _secret(password))
        except VerifyMismatchError as e:
            raise VerifyMismatchError("password does not match") from e
        except VerificationError as e:
            # libargon2 could not decode the salt or hash
            raise InvalidHashError("invalid hash encoding") from e

    def verify_password(self, encoded_hash: str, password: str) -> bool:
        """Boolean form of ``compare_password``; malformed hashes count as a mismatch."""
        try:
            self.compare_password(encoded_hash, password)
        except InvalidHashError as e:
            logger.warning("password_hash_invalid", reason=str(e))
            return False
        except VerifyMismatchError:
            return False
        return True
