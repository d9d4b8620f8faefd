"""
Domain Errors

Every error the service layer raises on purpose carries the HTTP status it
maps to. A single exception handler in main.py turns them into the standard
error body, so route functions never build error responses by hand.
"""

from typing import Optional


class ReservationError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ReservationError):
    status_code = 400
    default_message = "Missing required fields"


class InvalidCode(ReservationError):
    status_code = 400
    default_message = "Invalid verification code"


class CodeExpired(ReservationError):
    status_code = 400
    default_message = "Verification code has expired. Please request a new one."


class NotAuthenticated(ReservationError):
    status_code = 401
    default_message = "Authentication required"


class NotFound(ReservationError):
    status_code = 404
    default_message = "Not found"


class Conflict(ReservationError):
    """Illegal status transition, duplicate name or a stale write."""
    status_code = 409
    default_message = "Conflicting update"


class ResendTooSoon(ReservationError):
    status_code = 429
    default_message = "Please wait before requesting a new code"


class DeliveryFailed(ReservationError):
    status_code = 500
    default_message = "Message could not be delivered"
