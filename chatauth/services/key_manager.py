"""RSA signing key loading and JWK publication."""

import base64
import hashlib
import json
from pathlib import Path

import structlog
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from chatauth.errors import KeyLoadError
from chatauth.models.token import PublicKey

logger = structlog.get_logger(__name__)


def _b64url_uint(value: int) -> str:
    """Encode a positive integer as unpadded base64url of its big-endian bytes."""
    raw = value.to_bytes((value.bit_length() + 7) // 8 or 1, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _jwk_thumbprint(n: str, e: str) -> str:
    """RFC 7638 SHA-256 thumbprint of an RSA JWK."""
    canonical = json.dumps({"e": e, "kty": "RSA", "n": n}, separators=(",", ":"))
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


class KeyManager:
    """Holds the single RSA keypair used to sign tokens.

    Instances are immutable after construction and safe to share between
    concurrent requests. The key id is the JWK thumbprint of the public
    key, so it survives restarts as long as the key file does not change.
    """

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._private_key = private_key
        self._public_key = private_key.public_key()
        numbers = self._public_key.public_numbers()
        self._n = _b64url_uint(numbers.n)
        self._e = _b64url_uint(numbers.e)
        self._kid = _jwk_thumbprint(self._n, self._e)

    @classmethod
    def from_pem(cls, data: bytes) -> "KeyManager":
        """Build from PEM bytes holding a PKCS#1 or PKCS#8 RSA private key.

        Raises:
            KeyLoadError: If the data is not a PEM private key or not RSA
        """
        try:
            key = serialization.load_pem_private_key(data, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyLoadError(f"parse private key: {e}") from e

        if not isinstance(key, rsa.RSAPrivateKey):
            raise KeyLoadError("key is not an RSA private key")

        return cls(key)

    @classmethod
    def from_file(cls, path: str | Path) -> "KeyManager":
        """Load the signing key from a PEM file.

        Raises:
            KeyLoadError: If the file cannot be read or parsed
        """
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise KeyLoadError(f"read private key file {path}: {e}") from e

        manager = cls.from_pem(data)
        logger.info(
            "signing_key_loaded",
            path=str(path),
            kid=manager.kid,
            key_size=manager._private_key.key_size,
        )
        return manager

    @classmethod
    def generate(cls, key_size: int = 2048) -> "KeyManager":
        """Create a manager around a freshly generated key (tests and local dev)."""
        return cls(rsa.generate_private_key(public_exponent=65537, key_size=key_size))

    @property
    def kid(self) -> str:
        return self._kid

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        return self._private_key

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self._public_key

    def get_public_keys(self) -> list[PublicKey]:
        """Return the verification key set in JWK form."""
        return [PublicKey(kid=self._kid, n=self._n, e=self._e)]
