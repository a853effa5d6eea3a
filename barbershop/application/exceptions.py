class BarbershopError(Exception):
    """Base class for errors the scheduling core reports to its callers."""


class ValidationError(BarbershopError):
    """A business rule or user input was rejected (maps to 4xx)."""

    reason = "validation"

    def __init__(self, message: str, appointment_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.appointment_id = appointment_id


class PastDateError(ValidationError):
    reason = "past_date"


class LunchWindowError(ValidationError):
    reason = "lunch_window"


class OutsideWorkingHoursError(ValidationError):
    reason = "outside_working_hours"


class DoubleBookingError(ValidationError):
    reason = "double_booking"


class NotAvailableError(DoubleBookingError):
    """Raised by reschedules that collide with another appointment."""

    reason = "not_available"


class MissingReasonError(ValidationError):
    reason = "missing_reason"


class IllegalTransitionError(ValidationError):
    reason = "illegal_transition"


class ImmutableStateError(ValidationError):
    reason = "immutable_state"


class CannotDeleteCompletedError(ValidationError):
    reason = "cannot_delete_completed"


class NotFoundError(BarbershopError):
    """An entity referenced by the caller does not exist (maps to 404)."""


class EmployeeNotFoundError(NotFoundError):
    pass


class ClientNotFoundError(NotFoundError):
    pass


class AppointmentNotFoundError(NotFoundError):
    pass


class TrackingCodeNotFoundError(AppointmentNotFoundError):
    pass


class IntegrationError(RuntimeError):
    """Raised when an external provider (calendar, WhatsApp) fails."""
    pass


class StaleConversationError(RuntimeError):
    """Raised when a conversation row changed since it was read."""
    pass
