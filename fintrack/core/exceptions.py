"""FinTrack exceptions.

Every exception carries the HTTP status it maps to; the service's exception
handlers render them as ``{"success": false, "error": message}``.
"""

from fastapi import status


class FinTrackError(Exception):
    """Base exception for FinTrack errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FinTrackError):
    """Missing or malformed input (e.g. missing email, non-positive amount, goal overflow)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request"


class AuthError(FinTrackError):
    """Bad credentials, or no valid identity on an endpoint that requires one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "not authenticated"


class NotFoundError(FinTrackError):
    """Record absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"


class ConflictError(FinTrackError):
    """Duplicate email or duplicate category name."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "conflict"


class ServerError(FinTrackError):
    """Store or infrastructure failure."""

    pass
