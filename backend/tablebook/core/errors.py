"""
Centralized error handling for the booking core and its HTTP shell.

Business rejections (closed day, fully booked, ...) are values (see Rejection), not exceptions.
Exceptions here are for bad input, lookups that miss, and infrastructure failures.
Routes map them to HTTP through ERROR_RULES so they stay thin.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_SERVICE_UNAVAILABLE = 503  # storage down or lock wait timed out; client may retry
STATUS_INTERNAL_ERROR = 500


class TablebookError(Exception):
    """Base for all errors raised by the booking core."""


class InvalidInputError(TablebookError):
    """Malformed date, time, guest count or guest details. Not retryable."""


class InvalidRangeError(InvalidInputError):
    """Interval whose end is not after its start."""


class NotFoundError(TablebookError):
    """Reservation, cancel token or closure does not exist."""


class StorageUnavailable(TablebookError):
    """Database failed or timed out. Retryable; the transaction was rolled back."""


class NotifierUnavailable(TablebookError):
    """Message could not be delivered. Retryable; never fatal to an admission."""


# ---------------------------------------------------------------------------
# Business rejections
# ---------------------------------------------------------------------------


class RejectionReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    CLOSED_DAY = "closed_day"
    OUTSIDE_HOURS = "outside_hours"
    BLOCKED = "blocked"
    TOO_MANY_GUESTS = "too_many_guests"
    FULLY_BOOKED = "fully_booked"


@dataclass(frozen=True)
class Rejection:
    """Structured 'no' from the admission decision. Returned, never raised."""
    reason: RejectionReason
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"error": self.reason.value, "message": self.message}


# ---------------------------------------------------------------------------
# Error rules: (exception type, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

ERROR_RULES: list[tuple[type[Exception], int]] = [
    (InvalidInputError, STATUS_BAD_REQUEST),
    (NotFoundError, STATUS_NOT_FOUND),
    (StorageUnavailable, STATUS_SERVICE_UNAVAILABLE),
]


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map a core exception into an HTTPException.
    Uses ERROR_RULES for known types; otherwise returns 500 with the exception message.
    """
    for exc_type, status_code in ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc) or exc_type.__name__)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))


def rejection_to_http(rejection: Rejection) -> HTTPException:
    """invalid_input is the caller's fault (400); every other rejection is an availability conflict (409)."""
    status_code = STATUS_BAD_REQUEST if rejection.reason is RejectionReason.INVALID_INPUT else STATUS_CONFLICT
    return HTTPException(status_code=status_code, detail=rejection.to_dict())
