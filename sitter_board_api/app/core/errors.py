"""
Error taxonomy for the notice lifecycle.

Every failure the core can report is a subclass of ``LifecycleError``
with a stable ``code`` so that clients can tell the kinds apart and
render role‑appropriate messages.  The HTTP layer converts them into
``HTTPException`` instances with ``to_http_exception``; the services
themselves never deal with status codes.
"""

from typing import Any, Optional

from fastapi import HTTPException, status


class LifecycleError(Exception):
    """Base class for all errors raised by the notice services."""

    code = "lifecycle_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(LifecycleError):
    """Malformed or missing input; the caller can correct it."""

    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(LifecycleError):
    """Wrong role, or not the owner of the notice."""

    code = "authorization_error"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(LifecycleError):
    """Unknown notice or application id."""

    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(LifecycleError):
    """Duplicate application, or a transition the current state forbids."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class StorageError(LifecycleError):
    """The key‑value store failed.  Not retried by the core."""

    code = "storage_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def to_http_exception(exc: LifecycleError) -> HTTPException:
    """Translate a lifecycle error into the matching HTTP error."""
    return HTTPException(status_code=exc.status_code, detail=exc.to_dict())
