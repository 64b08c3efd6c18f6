"""Domain layer exceptions for business rule violations and token failures."""


class DomainException(Exception):
    """
    Base exception for domain layer.

    Domain exceptions represent business rule violations and should be
    raised when domain invariants are broken.

    Examples:
        - Invalid entity state
        - A presented token that fails validation
        - A backing store that cannot answer
    """

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR"):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class InvalidEntityStateException(DomainException):
    """Raised when an entity is in an invalid state."""

    def __init__(self, message: str):
        super().__init__(message, error_code="INVALID_ENTITY_STATE")


class StoreUnavailableException(DomainException):
    """Raised when the revocation or lockout backing store cannot be reached."""

    def __init__(self, message: str = "Token state store is unavailable"):
        super().__init__(message, error_code="STORE_UNAVAILABLE")


class AccountStoreUnavailableException(DomainException):
    """Raised by an account store when it cannot answer a lookup."""

    def __init__(self, message: str = "Account store is unavailable"):
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR")


# === TOKEN VALIDATION FAILURES ===
#
# These are terminal for the presented token: the caller must refresh or
# re-authenticate. Malformed and bad-signature tokens share one public
# error code so responses do not reveal which check failed.


class TokenValidationException(DomainException):
    """Base class for every reason a presented token is rejected."""

    def __init__(self, message: str = "Invalid token", error_code: str = "INVALID_TOKEN"):
        super().__init__(message, error_code=error_code)


class MalformedTokenException(TokenValidationException):
    """Raised when a token is not a decodable three-part envelope with the required claims."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, error_code="INVALID_TOKEN")


class InvalidSignatureException(TokenValidationException):
    """Raised when the token signature does not match any known key."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, error_code="INVALID_TOKEN")


class TokenExpiredException(TokenValidationException):
    """Raised when the token is past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message, error_code="TOKEN_EXPIRED")


class WrongTokenTypeException(TokenValidationException):
    """Raised when an access token is presented where a refresh token is expected, or vice versa."""

    def __init__(self, message: str = "Invalid token type"):
        super().__init__(message, error_code="WRONG_TOKEN_TYPE")


class TokenRevokedException(TokenValidationException):
    """
    Raised when a token was revoked before its natural expiry.

    Carries the revocation reason and subject so callers can react to a
    replayed refresh token (reason "rotated") as a compromise signal.
    """

    def __init__(
        self,
        message: str = "Token has been revoked",
        reason: str | None = None,
        subject_id: str | None = None,
        token_id: str | None = None,
    ):
        super().__init__(message, error_code="TOKEN_REVOKED")
        self.reason = reason
        self.subject_id = subject_id
        self.token_id = token_id
