"""Helper functions for constructing structured API error responses.

Every payload embeds the request id and a timezone-aware timestamp so that
exception handlers only decide the status code and the caller-facing text.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from fastapi import status

from voting_system.errors import (
    InvalidTarget,
    InvalidVoteKind,
    PersistenceError,
    VotesNotFound,
    VotingError,
)
from voting_system.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from voting_system.utils.request_context import get_request_id

__all__ = [
    "PERSISTENCE_RETRY_AFTER_SECONDS",
    "build_error_response",
    "build_validation_error_response",
    "build_voting_error_response",
]

PERSISTENCE_RETRY_AFTER_SECONDS = 5

# (error type, status code, caller-facing message) per domain exception.
_VOTING_ERROR_MAPPING: dict[type[VotingError], tuple[ErrorType, int, str]] = {
    InvalidTarget: (
        ErrorType.INVALID_TARGET,
        status.HTTP_404_NOT_FOUND,
        "Item is not eligible for voting",
    ),
    VotesNotFound: (
        ErrorType.NOT_FOUND,
        status.HTTP_404_NOT_FOUND,
        "Vote data not found",
    ),
    InvalidVoteKind: (
        ErrorType.VALIDATION_ERROR,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Invalid vote type",
    ),
    PersistenceError: (
        ErrorType.PERSISTENCE_ERROR,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Vote storage unavailable",
    ),
}


def _current_timestamp() -> datetime:
    """Return a timezone-aware timestamp (patched by tests for determinism)."""

    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    error_type: ErrorType = ErrorType.VALIDATION_ERROR,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    resolved_request_id = request_id or get_request_id()
    return ValidationErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=resolved_request_id,
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str,
    status_code: int,
    path: str,
    retry_after: int | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    resolved_request_id = request_id or get_request_id()
    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=resolved_request_id,
        path=path,
        retry_after=retry_after,
    )


def build_voting_error_response(exc: VotingError, *, path: str) -> ErrorResponse:
    """Translate a domain exception into an :class:`ErrorResponse`.

    ``exc.message`` is produced by the voting core itself and never contains
    driver or stack-trace text, so it is safe to echo as ``detail``.
    """

    error_type, status_code, message = next(
        (
            mapping
            for error_class, mapping in _VOTING_ERROR_MAPPING.items()
            if isinstance(exc, error_class)
        ),
        (
            ErrorType.INTERNAL_ERROR,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Voting request failed",
        ),
    )
    retry_after = (
        PERSISTENCE_RETRY_AFTER_SECONDS if isinstance(exc, PersistenceError) else None
    )
    return build_error_response(
        error_type=error_type,
        message=message,
        detail=exc.message,
        status_code=status_code,
        path=path,
        retry_after=retry_after,
    )
