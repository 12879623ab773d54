"""FastAPI dependencies for service access and authentication."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chatauth.models.token import AccessClaims
from chatauth.services.auth_service import AuthService

bearer_scheme = HTTPBearer()


def get_auth_service(request: Request) -> AuthService:
    """Return the AuthService wired onto the app at startup."""
    return request.app.state.auth_service


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> AccessClaims:
    """Validate the Bearer access token and return its claims.

    Access tokens are stateless, so no store lookup happens here.

    Raises:
        InvalidToken, TokenExpired: Rendered as 401 by the error handler
    """
    return auth_service.token_service.validate_access_token(credentials.credentials)
