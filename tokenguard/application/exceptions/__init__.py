"""Application layer exceptions."""

from tokenguard.application.exceptions.exceptions import (
    AccountDisabledError,
    AccountInactiveError,
    AccountLockedError,
    ApplicationError,
    DependencyUnavailableError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    UnauthorizedError,
)

__all__ = [
    "ApplicationError",
    "InvalidCredentialsError",
    "AccountLockedError",
    "AccountDisabledError",
    "AccountInactiveError",
    "DependencyUnavailableError",
    "UnauthorizedError",
    "InsufficientPermissionsError",
]
