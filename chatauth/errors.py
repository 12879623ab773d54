"""Domain errors for the auth service.

Every failure raised out of the service layer is an ``AuthError`` carrying an
``ErrorKind``. The API layer matches on the kind, never on the message.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error categories surfaced by the auth service."""

    EMAIL_ALREADY_EXISTS = "email_already_exists"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_REVOKED = "token_revoked"
    INTERNAL = "internal"


class AuthError(Exception):
    """Base class for auth service errors.

    Attributes:
        kind: The error category
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class EmailAlreadyExists(AuthError):
    """Raised by the user store when the email is already registered."""

    kind = ErrorKind.EMAIL_ALREADY_EXISTS
    default_message = "email already exists"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "invalid credentials"


class InvalidToken(AuthError):
    kind = ErrorKind.INVALID_TOKEN
    default_message = "invalid token"


class TokenExpired(AuthError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "token expired"


class TokenRevoked(AuthError):
    kind = ErrorKind.TOKEN_REVOKED
    default_message = "token revoked"


class InternalError(AuthError):
    """Unclassified failure (storage, encoding, signing).

    Raised ``from`` the underlying exception so the cause stays available
    for logging while callers only ever see the generic kind.
    """

    kind = ErrorKind.INTERNAL


class KeyLoadError(Exception):
    """Raised when the RSA signing key cannot be loaded at startup."""
