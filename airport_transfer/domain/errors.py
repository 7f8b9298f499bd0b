"""
Error taxonomy shared by the domain, the stores and the API layer.

Every error is recoverable from the caller's point of view.  Domain errors
mean "your request was invalid"; ``CollaboratorUnavailable`` means "the
system is down" and is kept apart so callers can tell the two apart.
"""

from __future__ import annotations


class BookingServiceError(Exception):
    """Base class; ``error`` is a stable machine-readable code."""

    error = "booking_service_error"
    status_code = 400

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.error
        super().__init__(self.detail)


class AuthenticationRequired(BookingServiceError):
    """Sign in to continue."""

    error = "authentication_required"
    status_code = 401


class Forbidden(BookingServiceError):
    """You are not allowed to perform this action."""

    error = "forbidden"
    status_code = 403


class NotFound(BookingServiceError):
    """Booking not found."""

    error = "not_found"
    status_code = 404


class InvalidInput(BookingServiceError):
    """Missing or malformed trip details."""

    error = "invalid_input"
    status_code = 422


class InvalidVehicleClass(InvalidInput):
    """Unknown vehicle class."""

    error = "invalid_vehicle_class"


class IllegalTransition(BookingServiceError):
    """Raised when a booking status change violates the state machine."""

    error = "illegal_transition"
    status_code = 409

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot transition from {getattr(current, 'value', current)} "
            f"to {getattr(target, 'value', target)}"
        )


class ConflictError(BookingServiceError):
    """The booking was modified concurrently; reload and retry."""

    error = "conflict"
    status_code = 409


class CollaboratorUnavailable(BookingServiceError):
    """A backing service (database, auth, cache) is unreachable."""

    error = "collaborator_unavailable"
    status_code = 503
