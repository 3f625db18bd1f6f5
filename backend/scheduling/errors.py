"""Typed failures raised by the scheduling engine.

Every error carries the HTTP status the API layer reports it with, so the
routes never have to translate them one by one.
"""


class SchedulingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormatError(SchedulingError):
    """Malformed date, time, timezone or schedule input."""

    status_code = 400


class NotFoundError(SchedulingError):
    status_code = 404


class AuthorizationError(SchedulingError):
    status_code = 403


class SlotUnavailableError(SchedulingError):
    """The interval is outside the doctor's availability."""

    status_code = 409


class BookingConflictError(SchedulingError):
    """The interval collides with an active appointment."""

    status_code = 409


class InvalidStateError(SchedulingError):
    status_code = 409

    def __init__(self, message: str, current_status=None):
        super().__init__(message)
        self.current_status = current_status


class PersistenceError(SchedulingError):
    """The store rejected a write; nothing from the operation was kept."""

    status_code = 503
