"""Error response schemas for consistent error handling."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from assethub.errors import ErrorKind


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_INPUT = "invalid_input"
    DATABASE_ERROR = "database_error"
    INTERNAL_ERROR = "internal_error"
    TIMEOUT_ERROR = "timeout_error"

    @classmethod
    def from_kind(cls, kind: ErrorKind) -> "ErrorType":
        return cls(kind.value)


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(..., description="When error occurred")
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")
    retry_after: int | None = Field(
        None, description="Seconds to wait before retrying (for timeout/database errors)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "not_found",
                "message": "user not found",
                "detail": None,
                "status_code": 404,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "req_abc123xyz",
                "path": "/api/users/11111111-1111-1111-1111-111111111111/favourites",
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Extended error response for validation errors."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )
