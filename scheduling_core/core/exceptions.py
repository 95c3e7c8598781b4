import enum
from typing import Optional


class ConflictReason(enum.Enum):
    DUPLICATE_BOOKING = "duplicate_booking"
    SLOT_UNAVAILABLE = "slot_unavailable"
    SLOT_BUSY = "slot_busy"
    INVALID_TRANSITION = "invalid_transition"
    FUTURE_APPOINTMENT = "future_appointment"
    NOT_CANCELLABLE = "not_cancellable"


class SchedulingError(Exception):
    """Base class for every error raised by the scheduling core."""

    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SchedulingError):
    """Malformed or out-of-range input. The message names the violated rule."""


class ConflictError(SchedulingError):
    """Well-formed input that the current state does not allow."""

    def __init__(self, message: str, reason: ConflictReason):
        self.reason = reason
        super().__init__(message)


class NotFoundError(SchedulingError):
    """A referenced service, staff member or appointment does not exist."""

    def __init__(self, message: str, entity: Optional[str] = None):
        self.entity = entity
        super().__init__(message)


class StoreError(SchedulingError):
    """A collaborator (database, redis) failed. Propagated without interpretation."""

    retryable = True
