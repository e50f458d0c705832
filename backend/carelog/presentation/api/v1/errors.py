"""Translate domain exceptions into HTTP errors."""

from fastapi import HTTPException, status

from carelog.domain.exceptions import (
    AuthenticationRequiredError,
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)

DOMAIN_ERRORS = (
    AuthenticationRequiredError,
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
)

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateEntityError, status.HTTP_409_CONFLICT),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationRequiredError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
]


def _status_for(exc: Exception) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: Exception) -> HTTPException:
    """Map a domain exception to an HTTPException with a structured detail."""
    if isinstance(exc, BulkOperationError):
        return HTTPException(
            status_code=_status_for(exc.cause),
            detail={"message": str(exc), "index": exc.index, "error": str(exc.cause)},
        )
    if isinstance(exc, AuthenticationRequiredError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "X-User-Id"},
        )
    if isinstance(exc, DomainValidationError) and exc.field:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": exc.message, "field": exc.field},
        )
    return HTTPException(status_code=_status_for(exc), detail=str(exc))
