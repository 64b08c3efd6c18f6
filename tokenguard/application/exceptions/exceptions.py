"""Application layer exceptions - credential and account failures."""


class ApplicationError(Exception):
    """Base application layer exception."""

    def __init__(self, message: str, error_code: str = "APPLICATION_ERROR"):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidCredentialsError(ApplicationError):
    """Raised when login credentials are invalid."""

    def __init__(self, message: str = "Invalid identifier or password"):
        super().__init__(message, error_code="INVALID_CREDENTIALS")


class AccountLockedError(ApplicationError):
    """Raised when an account is locked after repeated failed logins."""

    def __init__(
        self,
        retry_after_seconds: int,
        message: str = "Account is temporarily locked",
    ):
        super().__init__(message, error_code="ACCOUNT_LOCKED")
        self.retry_after_seconds = retry_after_seconds


class AccountDisabledError(ApplicationError):
    """Raised when the account has been disabled."""

    def __init__(self, message: str = "Account is disabled"):
        super().__init__(message, error_code="ACCOUNT_DISABLED")


class AccountInactiveError(ApplicationError):
    """Raised when the account is not active."""

    def __init__(self, message: str = "Account is not active"):
        super().__init__(message, error_code="ACCOUNT_INACTIVE")


class DependencyUnavailableError(ApplicationError):
    """
    Raised when a collaborator (account store, lockout store) cannot answer.

    Callers may retry with backoff; this is never reported as bad credentials.
    """

    def __init__(
        self,
        message: str = "Authentication service temporarily unavailable",
        retry_after_seconds: int = 1,
    ):
        super().__init__(message, error_code="DEPENDENCY_UNAVAILABLE")
        self.retry_after_seconds = retry_after_seconds


class UnauthorizedError(ApplicationError):
    """Raised when user is not authenticated."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, error_code="UNAUTHORIZED")


class InsufficientPermissionsError(ApplicationError):
    """Raised when an authenticated caller lacks the required role."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, error_code="INSUFFICIENT_PERMISSIONS")
