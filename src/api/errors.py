"""Translate service errors into HTTP errors with the standard error body."""

from fastapi import HTTPException, status

from api.models.responses import ErrorCodes
from core.exceptions import (
    ConflictError,
    MalformedEntryError,
    NoActiveEntryError,
    PermissionDeniedError,
    ProjectNotFoundError,
)


def _details(message: str) -> list[str]:
    """Split multi-line error messages into detail lines."""
    return [line.strip() for line in message.split("\n") if line.strip()]


def to_http_exception(exc: Exception) -> HTTPException:
    """Map a domain error to an HTTPException. Unknown errors map to 500."""
    if isinstance(exc, ProjectNotFoundError):
        status_code, code, error = status.HTTP_404_NOT_FOUND, ErrorCodes.NOT_FOUND, "Project not found"
    elif isinstance(exc, PermissionDeniedError):
        status_code, code, error = status.HTTP_403_FORBIDDEN, ErrorCodes.FORBIDDEN, "Permission denied"
    elif isinstance(exc, ConflictError):
        status_code, code, error = status.HTTP_409_CONFLICT, ErrorCodes.CONFLICT, "Time entry conflict"
    elif isinstance(exc, NoActiveEntryError):
        status_code, code, error = status.HTTP_409_CONFLICT, ErrorCodes.NO_ACTIVE_ENTRY, "No running time entry"
    elif isinstance(exc, MalformedEntryError):
        status_code, code, error = (
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorCodes.MALFORMED_ENTRY,
            "Invalid time entry",
        )
    elif isinstance(exc, ValueError):
        status_code, code, error = (
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            ErrorCodes.VALIDATION_ERROR,
            "Validation failed",
        )
    else:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Internal server error", "code": ErrorCodes.INTERNAL_ERROR, "details": []},
        )

    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": _details(str(exc))},
    )
