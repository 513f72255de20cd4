"""
Booking error taxonomy

Every rejection raised by the scheduling and booking contexts derives from
BookingError and carries a stable ``code`` that callers can map to a
response without parsing messages.

- BookingValidationError: caller-correctable, nothing was changed
- BookingConflictError: lost a race with another admission, pick another time
- ResourceNotFound: the caller referenced something that does not exist
- InvalidStateTransition: operation not allowed in the booking's current status
- NotBookingOwner: the actor may not touch someone else's booking
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for all booking rejections."""

    code = "booking_error"
    default_message = "Booking request rejected."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return self.args[0]


# ===== Validation =====

class BookingValidationError(BookingError):
    code = "validation_error"


class TooSoon(BookingValidationError):
    code = "too_soon"
    default_message = "Must book at least 2 hours in advance."


class TooFarAhead(BookingValidationError):
    code = "too_far_ahead"
    default_message = "Cannot book more than 90 days in advance."


class ClosedDay(BookingValidationError):
    code = "closed_day"
    default_message = "The studio is closed on the selected day."


class ReasonRequired(BookingValidationError):
    code = "reason_required"
    default_message = "A cancellation reason is required."


class WithinCancellationWindow(BookingValidationError):
    code = "within_cancellation_window"
    default_message = "Cannot cancel within 12 hours of the appointment."


# ===== Conflict =====

class BookingConflictError(BookingError):
    """Raised when the requested time is busy."""

    code = "conflict"


class SlotUnavailable(BookingConflictError):
    code = "slot_unavailable"
    default_message = "Selected time slot is not available."


class Overlap(BookingConflictError):
    code = "overlap"
    default_message = "Time slot already booked. Please select a different time."


# ===== Not found =====

class ResourceNotFound(BookingError):
    code = "not_found"
    resource = "Resource"

    def __init__(self, resource_id=None, message: str | None = None):
        self.resource_id = resource_id
        if message is None and resource_id is not None:
            message = f"{self.resource} not found with id: {resource_id}"
        super().__init__(message)


class ServiceNotFound(ResourceNotFound):
    code = "service_not_found"
    resource = "Service"
    default_message = "Service not found or inactive."


class BookingNotFound(ResourceNotFound):
    code = "booking_not_found"
    resource = "Booking"
    default_message = "Booking not found."


class SlotNotFound(ResourceNotFound):
    code = "slot_not_found"
    resource = "Time slot"
    default_message = "Time slot not found."


class ClientNotFound(ResourceNotFound):
    code = "client_not_found"
    resource = "Client"
    default_message = "A client id or guest phone is required."


# ===== State / permission =====

class InvalidStateTransition(BookingError):
    code = "invalid_state_transition"
    default_message = "Invalid status transition."


class NotBookingOwner(BookingError):
    code = "not_booking_owner"
    default_message = "Cannot cancel other client's booking."
