"""Typed errors raised by the booking core.

Every error carries a human-readable message plus a ``context`` dict with the
values a caller needs to correct and resubmit (blocked hours, allowed advance
days, cutoff hours). The API layer renders them as JSON with ``status_code``.
"""

from typing import Any


class BookingError(Exception):
    status_code: int = 400

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "error": type(self).__name__, **self.context}


class ValidationError(BookingError):
    """Malformed request or schedule: bad time format, slot count, duration."""

    status_code = 422


class PolicyViolation(BookingError):
    """Outside the advance window, outside operating hours, or court closed."""

    status_code = 400


class AvailabilityConflict(BookingError):
    """Requested interval overlaps a booking or an unavailability window."""

    status_code = 409


class NotFoundError(BookingError):
    status_code = 404


class CutoffViolation(BookingError):
    """Cancellation not allowed: inside the cutoff or booking not confirmed."""

    status_code = 400


class PermissionDenied(BookingError):
    status_code = 403
