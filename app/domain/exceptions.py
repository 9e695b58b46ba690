"""Exception hierarchy for portfolio tracker operations."""

from __future__ import annotations

from typing import Optional

from fastapi import status


class TrackerError(Exception):
    """Base class for application-specific exceptions."""

    default_message = "Failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TrackerError):
    """Malformed or missing required input. Never retried."""

    default_message = "Invalid input"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TrackerError):
    """Lookup by id or code yielded no record."""

    default_message = "Not found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(TrackerError):
    """Operation is not allowed in the record's current state."""

    default_message = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class RegistrySaturatedError(TrackerError):
    """Every attempt to allocate a unique portfolio code collided."""

    default_message = "Could not allocate a portfolio code"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
