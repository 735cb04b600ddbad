# app/errors.py
"""
Typed error hierarchy for the bed lifecycle core.
Every error carries a stable error_code and an HTTP status hint so route
handlers (and the global handler in main.py) can map it without guessing.
"""

from typing import Any, Dict, Optional


class BedTrackerError(Exception):
    """Base class for all errors raised by the core."""

    status_code = 400

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"detail": self.message, "error_code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(BedTrackerError):
    """Referenced bed, service, sector, status or task does not exist."""
    status_code = 404


class InvalidStatusError(BedTrackerError):
    """Target status is not part of the status catalog."""
    status_code = 422


class ValidationError(BedTrackerError):
    """Malformed or missing context for the requested operation."""
    status_code = 422


class PermissionDeniedError(ValidationError):
    """Caller is not allowed to touch the record (role or service scope)."""
    status_code = 403


class ConflictError(BedTrackerError):
    """Another writer changed the same bed concurrently."""
    status_code = 409


class ConsistencyError(BedTrackerError):
    """Bed was written but its history entry could not be appended."""
    status_code = 500
