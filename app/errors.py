from typing import Any, Optional


class BookingError(Exception):
    """Base class for user-facing booking errors.

    Every subclass carries a stable ``code`` and the HTTP status the request
    layer answers with. Raising one never leaves a booking half-mutated.
    """

    code = "BOOKING_ERROR"
    status_code = 400
    message = "Booking request could not be processed"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        return {"code": self.code, "message": self.message, "details": self.details}


# Validation


class ValidationError(BookingError):
    code = "VALIDATION_ERROR"
    message = "Invalid input data"


class InvalidTimeFormat(ValidationError):
    code = "INVALID_FORMAT"
    message = "Time must be in HH:MM format"


class InvalidDate(ValidationError):
    code = "INVALID_DATE"
    message = "Date must be in YYYY-MM-DD format"


class InvalidTimeRange(ValidationError):
    code = "INVALID_TIME_RANGE"
    message = "Start time must be before end time"


class BookingTooShort(ValidationError):
    code = "BOOKING_TOO_SHORT"
    message = "Booking must be at least 30 minutes long"


class ReasonRequired(ValidationError):
    message = "A reason is required"


# Business rules


class RoomInactive(BookingError):
    code = "ROOM_NOT_ACTIVE"
    message = "This meeting room is currently inactive and cannot be booked"


class BookingOverlap(BookingError):
    code = "BOOKING_OVERLAP"
    message = "The selected time slot overlaps with an existing booking"


class LifecycleError(BookingError):
    """A transition was requested from a status that does not allow it."""


class NotConfirmable(LifecycleError):
    code = "BOOKING_NOT_CONFIRMABLE"
    message = "Only pending bookings can be confirmed"


class NotRejectable(LifecycleError):
    code = "BOOKING_NOT_REJECTABLE"
    message = "Only pending bookings can be rejected"


class NotReschedulable(LifecycleError):
    code = "BOOKING_NOT_RESCHEDULABLE"
    message = "Only confirmed or pending bookings can be rescheduled"


class NoRescheduleRequest(LifecycleError):
    code = "NO_RESCHEDULE_REQUEST"
    message = "No reschedule request found for this booking"


class AlreadyCancelled(LifecycleError):
    code = "BOOKING_ALREADY_CANCELLED"
    message = "Booking is already cancelled"


class NotEditable(LifecycleError):
    code = "BOOKING_NOT_EDITABLE"
    message = "Only pending bookings can be edited"


# Lookups


class NotFound(BookingError):
    status_code = 404


class BookingNotFound(NotFound):
    code = "BOOKING_NOT_FOUND"
    message = "Booking not found"


class RoomNotFound(NotFound):
    code = "ROOM_NOT_FOUND"
    message = "Meeting room not found"


class Forbidden(BookingError):
    code = "FORBIDDEN"
    status_code = 403
    message = "Insufficient permissions"


class StorageUnavailable(Exception):
    """The booking store could not complete a read or write. Safe to retry."""

    code = "INTERNAL_ERROR"
    status_code = 503
    message = "Booking storage is temporarily unavailable"
