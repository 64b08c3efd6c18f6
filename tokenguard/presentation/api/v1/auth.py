"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, status

from tokenguard.application.dtos.auth_dto import (
    AuthResultDTO,
    ClaimsDTO,
    IntrospectDTO,
    LoginDTO,
    LogoutDTO,
    RefreshTokenDTO,
)
from tokenguard.application.services.auth_service import AuthService
from tokenguard.presentation.dependencies import (
    get_auth_service,
    get_bearer_token,
    get_current_claims,
)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post(
    "/login",
    response_model=AuthResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Login",
    description="Authenticate with identifier and password, returns access and refresh tokens.",
)
async def login(
    dto: LoginDTO,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Authenticate and receive a token pair.

    Raises:
        401 Unauthorized: Identifier or password is incorrect
        403 Forbidden: Account is disabled or inactive
        423 Locked: Too many failed attempts (see Retry-After)
        503 Service Unavailable: Account store cannot answer (see Retry-After)
    """
    return await auth_service.login(dto)


@router.post(
    "/refresh",
    response_model=AuthResultDTO,
    status_code=status.HTTP_200_OK,
    summary="Rotate refresh token",
    description="Exchange a refresh token for a new pair. Each refresh token works once.",
)
async def refresh_token(
    dto: RefreshTokenDTO,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Rotate a refresh token.

    Raises:
        401 Unauthorized: Refresh token invalid, expired, revoked or already used
        403 Forbidden: Account was disabled since login
    """
    return await auth_service.refresh_token(dto)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the bearer access token, and the refresh token when one is sent.",
)
async def logout(
    dto: LogoutDTO | None = None,
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> None:
    await auth_service.logout(token, dto)


@router.post(
    "/introspect",
    response_model=ClaimsDTO,
    status_code=status.HTTP_200_OK,
    summary="Introspect token",
    description="Validate a token without side effects and return its claims.",
)
async def introspect(
    dto: IntrospectDTO,
    auth_service: AuthService = Depends(get_auth_service),
):
    return await auth_service.introspect(dto)


@router.get(
    "/me",
    response_model=ClaimsDTO,
    status_code=status.HTTP_200_OK,
    summary="Current subject",
    description="Claims of the bearer access token.",
)
async def get_me(claims: ClaimsDTO = Depends(get_current_claims)):
    """
    Requires a valid access token in the Authorization header:
    Authorization: Bearer <your_access_token>
    """
    return claims
