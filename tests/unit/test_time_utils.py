from datetime import date, datetime, timezone

import pytest

from scheduling_core.utils.time import (
    BusinessClock,
    day_of_week,
    intervals_overlap,
    minutes_to_time,
    slot_datetime,
    time_to_minutes,
)


class TestClockArithmetic:
    """Test HH:MM conversions."""

    @pytest.mark.parametrize(
        "value,minutes",
        [("00:00", 0), ("09:30", 570), ("13:05", 785), ("23:59", 1439)],
    )
    def test_time_to_minutes(self, value, minutes):
        assert time_to_minutes(value) == minutes

    @pytest.mark.parametrize(
        "minutes,value",
        [(0, "00:00"), (65, "01:05"), (570, "09:30"), (1439, "23:59")],
    )
    def test_minutes_to_time_is_zero_padded(self, minutes, value):
        assert minutes_to_time(minutes) == value

    def test_day_of_week(self):
        assert day_of_week(date(2025, 6, 1)) == "sunday"
        assert day_of_week(date(2025, 6, 2)) == "monday"
        assert day_of_week("2025-06-07") == "saturday"

    def test_slot_datetime_is_naive(self):
        assert slot_datetime(date(2025, 6, 3), "14:45") == datetime(2025, 6, 3, 14, 45)


class TestIntervalsOverlap:
    """Test the half-open overlap rule."""

    def test_adjacent_intervals_do_not_overlap(self):
        assert not intervals_overlap(600, 630, 630, 660)
        assert not intervals_overlap(630, 660, 600, 630)

    def test_partial_overlap(self):
        assert intervals_overlap(600, 660, 630, 690)
        assert intervals_overlap(630, 690, 600, 660)

    def test_containment(self):
        assert intervals_overlap(600, 720, 630, 660)
        assert intervals_overlap(630, 660, 600, 720)

    def test_identical_intervals(self):
        assert intervals_overlap(600, 630, 600, 630)


class TestBusinessClock:
    """Test the injected business clock."""

    NOW = datetime(2025, 6, 2, 8, 0, tzinfo=timezone.utc)

    def test_now_in_business_timezone(self):
        clock = BusinessClock("Asia/Karachi", now_func=lambda: self.NOW)

        assert clock.now() == datetime(2025, 6, 2, 13, 0)
        assert clock.now().tzinfo is None
        assert clock.today() == date(2025, 6, 2)

    def test_today_rolls_over_in_business_timezone(self):
        late = datetime(2025, 6, 2, 22, 0, tzinfo=timezone.utc)
        clock = BusinessClock("Asia/Karachi", now_func=lambda: late)

        assert clock.today() == date(2025, 6, 3)

    def test_local_now_offset_convention(self):
        clock = BusinessClock("UTC", now_func=lambda: self.NOW)

        # -300 is UTC+5, 300 is UTC-5
        assert clock.local_now(-300) == datetime(2025, 6, 2, 13, 0)
        assert clock.local_now(300) == datetime(2025, 6, 2, 3, 0)
        assert clock.local_now(0) == datetime(2025, 6, 2, 8, 0)

    def test_local_now_without_offset_uses_business_clock(self):
        clock = BusinessClock("Asia/Karachi", now_func=lambda: self.NOW)

        assert clock.local_now(None) == clock.now()

    def test_naive_now_func_is_treated_as_utc(self):
        clock = BusinessClock("UTC", now_func=lambda: datetime(2025, 6, 2, 8, 0))

        assert clock.utcnow() == self.NOW

    def test_slot_starting_now_is_in_past(self):
        clock = BusinessClock("UTC", now_func=lambda: self.NOW)

        assert clock.is_slot_in_past(date(2025, 6, 2), "08:00")
        assert clock.is_slot_in_past(date(2025, 6, 2), "07:30")
        assert not clock.is_slot_in_past(date(2025, 6, 2), "08:30")

    def test_slot_in_past_respects_client_offset(self):
        clock = BusinessClock("UTC", now_func=lambda: self.NOW)

        assert clock.is_slot_in_past(date(2025, 6, 2), "12:00", timezone_offset=-300)
        assert not clock.is_slot_in_past(date(2025, 6, 2), "13:30", timezone_offset=-300)
