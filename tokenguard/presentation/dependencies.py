"""FastAPI dependencies.

Services come from the AuthContainer built by the application lifespan
(``app.state.container``); nothing here creates long-lived objects.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tokenguard.application.dtos.auth_dto import ClaimsDTO
from tokenguard.application.exceptions.exceptions import UnauthorizedError
from tokenguard.application.services.auth_service import AuthService
from tokenguard.presentation.container import AuthContainer

# auto_error=False so a missing header is a 401 from our handler, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def get_container(request: Request) -> AuthContainer:
    return request.app.state.container


def get_auth_service(container: AuthContainer = Depends(get_container)) -> AuthService:
    return container.auth_service


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """
    Extract the raw bearer token from the Authorization header.

    Raises:
        UnauthorizedError: If the header is missing
    """
    if credentials is None:
        raise UnauthorizedError("Missing authorization credentials")
    return credentials.credentials


async def get_current_claims(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> ClaimsDTO:
    """
    Validate the bearer access token and return its claims.

    Usage in endpoints:
        @router.get("/me")
        async def get_me(claims: ClaimsDTO = Depends(get_current_claims)):
            return claims
    """
    return await auth_service.authenticate(token)


async def require_admin(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> ClaimsDTO:
    """Validate the bearer access token and require the admin role."""
    return await auth_service.authorize_admin(token)
