"""Appointment status rules.

Allowed transitions::

    pending   -> confirmed, cancelled, no-show
    confirmed -> cancelled, completed, no-show

``completed``, ``no-show`` and ``cancelled`` are terminal.
"""

from datetime import datetime

from scheduling_core.core.exceptions import ConflictError, ConflictReason
from scheduling_core.models.appointment import AppointmentStatus

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.CANCELLED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.CANCELLED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
        }
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}

# Statuses that may only be set once the appointment has started
RETROSPECTIVE_STATUSES = frozenset(
    {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.COMPLETED,
        AppointmentStatus.NO_SHOW,
    }
)


def can_transition(current: AppointmentStatus, new: AppointmentStatus) -> bool:
    return new in ALLOWED_TRANSITIONS[current]


def is_terminal(status: AppointmentStatus) -> bool:
    return not ALLOWED_TRANSITIONS[status]


def check_transition(
    current: AppointmentStatus,
    new: AppointmentStatus,
    scheduled_at: datetime,
    local_now: datetime,
) -> None:
    """Raise ConflictError unless ``current -> new`` is allowed at ``local_now``."""
    if not can_transition(current, new):
        raise ConflictError(
            f"Cannot change status from {current.value} to {new.value}",
            ConflictReason.INVALID_TRANSITION,
        )

    if new in RETROSPECTIVE_STATUSES and scheduled_at > local_now:
        raise ConflictError(
            f"Cannot mark as {new.value}. Appointment is scheduled for "
            f"{scheduled_at:%Y-%m-%d} at {scheduled_at:%H:%M}. "
            "You can only cancel future appointments.",
            ConflictReason.FUTURE_APPOINTMENT,
        )


def check_cancellable(
    current: AppointmentStatus, scheduled_at: datetime, local_now: datetime
) -> None:
    """Raise ConflictError unless an appointment may be cancelled now."""
    if current == AppointmentStatus.CANCELLED:
        raise ConflictError(
            "Appointment is already cancelled", ConflictReason.NOT_CANCELLABLE
        )
    if scheduled_at < local_now:
        raise ConflictError(
            "Cannot cancel an appointment that has already started",
            ConflictReason.NOT_CANCELLABLE,
        )
    if not can_transition(current, AppointmentStatus.CANCELLED):
        raise ConflictError(
            f"Cannot change status from {current.value} to "
            f"{AppointmentStatus.CANCELLED.value}",
            ConflictReason.INVALID_TRANSITION,
        )
