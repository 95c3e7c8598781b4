from datetime import datetime

import pytest

from scheduling_core.core.exceptions import ConflictError, ConflictReason
from scheduling_core.models.appointment import AppointmentStatus as S
from scheduling_core.services.status import (
    can_transition,
    check_cancellable,
    check_transition,
    is_terminal,
)

SCHEDULED = datetime(2025, 6, 3, 10, 0)
BEFORE = datetime(2025, 6, 3, 9, 0)
AFTER = datetime(2025, 6, 3, 11, 0)


class TestTransitionTable:
    @pytest.mark.parametrize(
        "current,new",
        [
            (S.PENDING, S.CONFIRMED),
            (S.PENDING, S.CANCELLED),
            (S.PENDING, S.NO_SHOW),
            (S.CONFIRMED, S.CANCELLED),
            (S.CONFIRMED, S.COMPLETED),
            (S.CONFIRMED, S.NO_SHOW),
        ],
    )
    def test_allowed(self, current, new):
        assert can_transition(current, new)

    @pytest.mark.parametrize(
        "current,new",
        [
            (S.PENDING, S.COMPLETED),
            (S.PENDING, S.PENDING),
            (S.CONFIRMED, S.PENDING),
            (S.COMPLETED, S.CANCELLED),
            (S.NO_SHOW, S.CONFIRMED),
            (S.CANCELLED, S.PENDING),
        ],
    )
    def test_disallowed(self, current, new):
        assert not can_transition(current, new)

    @pytest.mark.parametrize("status", [S.COMPLETED, S.NO_SHOW, S.CANCELLED])
    def test_terminal_states(self, status):
        assert is_terminal(status)
        assert not any(can_transition(status, new) for new in S)

    def test_open_states_are_not_terminal(self):
        assert not is_terminal(S.PENDING)
        assert not is_terminal(S.CONFIRMED)


class TestCheckTransition:
    def test_invalid_transition_message(self):
        with pytest.raises(ConflictError) as exc_info:
            check_transition(S.PENDING, S.COMPLETED, SCHEDULED, AFTER)

        assert exc_info.value.reason == ConflictReason.INVALID_TRANSITION
        assert exc_info.value.message == "Cannot change status from pending to completed"

    @pytest.mark.parametrize("new", [S.CONFIRMED, S.NO_SHOW])
    def test_future_appointment_guard(self, new):
        with pytest.raises(ConflictError) as exc_info:
            check_transition(S.PENDING, new, SCHEDULED, BEFORE)

        assert exc_info.value.reason == ConflictReason.FUTURE_APPOINTMENT
        assert "scheduled for 2025-06-03 at 10:00" in exc_info.value.message
        assert "You can only cancel future appointments" in exc_info.value.message

    def test_start_time_counts_as_started(self):
        check_transition(S.PENDING, S.CONFIRMED, SCHEDULED, SCHEDULED)

    def test_retrospective_transition_allowed(self):
        check_transition(S.CONFIRMED, S.COMPLETED, SCHEDULED, AFTER)

    def test_cancelling_future_appointment_allowed(self):
        check_transition(S.PENDING, S.CANCELLED, SCHEDULED, BEFORE)

    def test_table_checked_before_time(self):
        with pytest.raises(ConflictError) as exc_info:
            check_transition(S.COMPLETED, S.NO_SHOW, SCHEDULED, BEFORE)

        assert exc_info.value.reason == ConflictReason.INVALID_TRANSITION


class TestCheckCancellable:
    def test_future_pending_is_cancellable(self):
        check_cancellable(S.PENDING, SCHEDULED, BEFORE)
        check_cancellable(S.CONFIRMED, SCHEDULED, BEFORE)

    def test_already_cancelled(self):
        with pytest.raises(ConflictError, match="already cancelled") as exc_info:
            check_cancellable(S.CANCELLED, SCHEDULED, BEFORE)

        assert exc_info.value.reason == ConflictReason.NOT_CANCELLABLE

    def test_past_appointment(self):
        with pytest.raises(ConflictError, match="already started") as exc_info:
            check_cancellable(S.CONFIRMED, SCHEDULED, AFTER)

        assert exc_info.value.reason == ConflictReason.NOT_CANCELLABLE

    def test_terminal_future_appointment(self):
        with pytest.raises(ConflictError) as exc_info:
            check_cancellable(S.NO_SHOW, SCHEDULED, BEFORE)

        assert exc_info.value.reason == ConflictReason.INVALID_TRANSITION
