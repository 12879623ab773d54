"""Token, claim and public key models."""

from typing import Literal

from pydantic import BaseModel, Field


class TokenPair(BaseModel):
    """Access and refresh token pair.

    Attributes:
        access_token: Short-lived RS256 JWT for API access
        refresh_token: Long-lived, single-use RS256 JWT
        token_type: Always "bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(ge=1)


class AccessClaims(BaseModel):
    """Claims carried by an access token."""

    sub: str
    email: str
    iat: int
    exp: int
    type: Literal["access"] = "access"


class RefreshClaims(BaseModel):
    """Claims carried by a refresh token."""

    sub: str
    jti: str
    iat: int
    exp: int
    type: Literal["refresh"] = "refresh"


class PublicKey(BaseModel):
    """RSA public key in JWK form (RFC 7517).

    ``n`` and ``e`` are unpadded base64url encodings of the big-endian
    modulus and exponent.
    """

    kid: str
    kty: Literal["RSA"] = "RSA"
    alg: Literal["RS256"] = "RS256"
    use: Literal["sig"] = "sig"
    n: str
    e: str
