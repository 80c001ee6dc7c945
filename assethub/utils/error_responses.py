"""Helper functions for constructing structured API error responses.

Every payload embeds the request ID and a timezone-aware timestamp so error
bodies share one shape regardless of which handler produced them.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from fastapi import status

from assethub.errors import AssetHubError, ErrorKind
from assethub.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from assethub.utils.request_context import get_request_id

__all__ = [
    "STATUS_BY_ERROR_KIND",
    "build_domain_error_response",
    "build_error_response",
    "build_validation_error_response",
]

STATUS_BY_ERROR_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
}


def _current_timestamp() -> datetime:
    """Return a timezone-aware timestamp; patched by tests for determinism."""

    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    """Construct a ``ValidationErrorResponse`` enriched with metadata."""

    return ValidationErrorResponse(
        error_type=ErrorType.VALIDATION_ERROR,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str | None,
    status_code: int,
    path: str,
    retry_after: int | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    """Construct a generic ``ErrorResponse`` enriched with metadata."""

    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        retry_after=retry_after,
    )


def build_domain_error_response(exc: AssetHubError, *, path: str) -> ErrorResponse:
    """Translate a domain error into a response using only its ``kind``."""

    return build_error_response(
        error_type=ErrorType.from_kind(exc.kind),
        message=exc.message,
        detail=None,
        status_code=STATUS_BY_ERROR_KIND[exc.kind],
        path=path,
    )
