"""Pydantic models for error responses used in OpenAPI schema generation."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of every non-validation error response."""

    detail: str = Field(..., description="Human-readable error message", examples=["Invalid token"])
    error_code: str = Field(
        ...,
        description="Machine-readable error code for client-side error handling",
        examples=["TOKEN_REVOKED", "ACCOUNT_LOCKED"],
    )


class ValidationErrorDetail(BaseModel):
    """A single field validation error."""

    field: str = Field(
        ...,
        description="The field path where the validation error occurred",
        examples=["body.identifier", "body.refresh_token"],
    )
    message: str = Field(..., description="What went wrong", examples=["Field required"])


class ValidationErrorResponse(ErrorResponse):
    """The 422 body returned by validation_error_handler."""

    errors: list[ValidationErrorDetail] = Field(
        ...,
        description="List of all validation errors found in the request",
        min_length=1,
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "detail": "Validation failed",
                "error_code": "VALIDATION_ERROR",
                "errors": [{"field": "body.identifier", "message": "Field required"}],
            }
        }
    }
