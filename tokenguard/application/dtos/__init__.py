"""Data Transfer Objects for application layer."""

from tokenguard.application.dtos.auth_dto import (
    AdminRevokeDTO,
    AuthResultDTO,
    ClaimsDTO,
    IntrospectDTO,
    LoginDTO,
    LogoutDTO,
    RefreshTokenDTO,
    RevocationResultDTO,
)

__all__ = [
    "AdminRevokeDTO",
    "AuthResultDTO",
    "ClaimsDTO",
    "IntrospectDTO",
    "LoginDTO",
    "LogoutDTO",
    "RefreshTokenDTO",
    "RevocationResultDTO",
]
