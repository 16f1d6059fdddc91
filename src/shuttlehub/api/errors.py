"""Translation of domain errors to HTTP responses."""

from fastapi import HTTPException, status

from shuttlehub.errors import (
    ConfirmationRequiredError,
    DuplicateNameError,
    PermissionDeniedError,
    PersistenceError,
    SessionCompletedError,
    SessionNotFoundError,
    ShuttlehubError,
    ValidationError,
)

# Checked in order; the first matching class wins
_STATUS_CODES: list[tuple[type[ShuttlehubError], int]] = [
    (DuplicateNameError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionCompletedError, status.HTTP_409_CONFLICT),
    (ConfirmationRequiredError, status.HTTP_400_BAD_REQUEST),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def http_error(error: ShuttlehubError) -> HTTPException:
    """Build the HTTPException for a domain error. Unknown errors map to 400."""
    for error_class, status_code in _STATUS_CODES:
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
