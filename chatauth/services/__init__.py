"""Services package exports."""

from chatauth.services.auth_service import AuthService
from chatauth.services.key_manager import KeyManager
from chatauth.services.logging_service import configure_logging, get_logger
from chatauth.services.password import PasswordHasher
from chatauth.services.token_service import TokenService

__all__ = [
    "AuthService",
    "KeyManager",
    "PasswordHasher",
    "TokenService",
    "configure_logging",
    "get_logger",
]
