"""Exception handlers for converting exceptions to HTTP responses.

Two base handlers cover every ApplicationError and DomainException; the
HTTP status comes from ERROR_CODE_TO_HTTP_STATUS in error_codes.py. Errors
that tell the client when to come back (locked account, unavailable
dependency) also set Retry-After.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tokenguard.application.exceptions import ApplicationError
from tokenguard.domain.exceptions import DomainException
from tokenguard.presentation.error_codes import get_http_status_for_error_code

logger = logging.getLogger(__name__)


def _error_response(exc: ApplicationError | DomainException) -> JSONResponse:
    headers: dict[str, str] = {}

    retry_after = getattr(exc, "retry_after_seconds", None)
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    http_status = get_http_status_for_error_code(exc.error_code)
    if http_status == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = "Bearer"

    return JSONResponse(
        status_code=http_status,
        content={
            "detail": exc.message,
            "error_code": exc.error_code,
        },
        headers=headers or None,
    )


async def application_error_handler(
    request: Request, exc: ApplicationError
) -> JSONResponse:
    """Handle ALL application layer exceptions (credentials, lockout, dependencies)."""
    return _error_response(exc)


async def domain_exception_handler(
    request: Request, exc: DomainException
) -> JSONResponse:
    """Handle ALL domain layer exceptions (token validation failures, store outages)."""
    return _error_response(exc)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from request data.

    Returns a list of all validation errors with field locations and messages.
    """
    validation_errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed",
            "error_code": "VALIDATION_ERROR",
            "errors": validation_errors,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    This is the catch-all handler for any unexpected errors.
    """
    logger.error(f"Unhandled error: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal server error occurred",
            "error_code": "INTERNAL_SERVER_ERROR",
        },
    )
