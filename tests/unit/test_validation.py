from datetime import date

import pytest

from scheduling_core.core.config import Settings
from scheduling_core.core.exceptions import ValidationError
from scheduling_core.schemas.booking import BookingRequest
from scheduling_core.utils.validation import (
    check_phone,
    parse_date,
    validate_booking_request,
    validate_booking_window,
    validate_email,
    validate_name,
    validate_notes,
    validate_phone,
    validate_schedule_request,
    validate_time,
)

TODAY = date(2025, 6, 2)  # Monday


@pytest.fixture
def settings():
    return Settings()


def make_request(**overrides) -> BookingRequest:
    data = {
        "customer_name": "  Jane Doe ",
        "customer_email": " Jane.Doe@Example.COM ",
        "customer_phone": " +1 (415) 555-1234 ",
        "service_id": "svc-haircut",
        "staff_id": "staff-alice",
        "date": "2025-06-03",
        "time": "10:00",
        "notes": "  window seat ",
    }
    data.update(overrides)
    return BookingRequest(**data)


class TestNameAndEmail:
    def test_name_is_trimmed(self):
        assert validate_name("  Jo  ") == "Jo"

    @pytest.mark.parametrize("name", ["", " ", "J", "x" * 101])
    def test_name_length(self, name):
        with pytest.raises(ValidationError, match="Customer name"):
            validate_name(name)

    def test_email_is_normalised(self):
        assert validate_email(" Jane@Example.COM ") == "jane@example.com"

    @pytest.mark.parametrize(
        "email", ["plainaddress", "a@b", "a b@example.com", "@example.com"]
    )
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError, match="Invalid email format"):
            validate_email(email)

    def test_email_too_long(self):
        with pytest.raises(ValidationError, match="Email too long"):
            validate_email("a" * 250 + "@example.com")


class TestPhone:
    """Test country-aware phone checks."""

    def test_us_number(self):
        result = check_phone("+14155551234")
        assert result.valid
        assert result.country == "USA/Canada"

    def test_separators_are_ignored(self):
        assert check_phone("+44 (20) 7946-0958").valid

    def test_short_pakistan_number_names_country(self):
        result = check_phone("+92300123456")

        assert not result.valid
        assert result.country == "Pakistan"
        assert "Pakistan" in result.error
        assert "10 digits" in result.error
        assert "you provided 9" in result.error

    def test_long_number_reports_maximum(self):
        result = check_phone("+9130012345678")

        assert not result.valid
        assert "India numbers have max 10 digits" in result.error

    def test_three_digit_code_wins(self):
        assert check_phone("+8801712345678").country == "Bangladesh"

    def test_unknown_code_uses_generic_length(self):
        assert check_phone("+500123456789").valid

        result = check_phone("+5001234")
        assert not result.valid
        assert "8-15 digits" in result.error

    def test_missing_plus(self):
        result = check_phone("4155551234")

        assert not result.valid
        assert "country code" in result.error

    def test_letters_rejected(self):
        result = check_phone("+1415555ABCD")

        assert not result.valid
        assert "only contain digits" in result.error

    def test_validate_phone_raises(self):
        with pytest.raises(ValidationError, match="Pakistan"):
            validate_phone("+92300123456")


class TestDateAndTime:
    @pytest.mark.parametrize(
        "value",
        ["2025-6-3", "03-06-2025", "2025/06/03", "tomorrow", "2025-06-0\u0663"],
    )
    def test_date_format(self, value):
        with pytest.raises(ValidationError, match="Invalid date format"):
            parse_date(value)

    def test_impossible_date(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            parse_date("2025-02-30")

    def test_date_in_past(self):
        with pytest.raises(ValidationError, match="in the past"):
            validate_booking_window(date(2025, 6, 1), TODAY, 30)

    def test_booking_window_edges(self):
        validate_booking_window(TODAY, TODAY, 30)
        validate_booking_window(date(2025, 7, 2), TODAY, 30)

        with pytest.raises(ValidationError, match="more than 30 days"):
            validate_booking_window(date(2025, 7, 3), TODAY, 30)

    @pytest.mark.parametrize("value", ["00:00", "09:30", "23:59"])
    def test_valid_time(self, value):
        assert validate_time(value) == value

    @pytest.mark.parametrize(
        "value",
        ["9:30", "24:00", "12:60", "12:5", "noon", "1\u0660:00", "10:0\u0665"],
    )
    def test_invalid_time(self, value):
        with pytest.raises(ValidationError, match="Invalid time format"):
            validate_time(value)

    def test_closed_day(self, settings):
        with pytest.raises(ValidationError, match="closed on sundays"):
            validate_schedule_request("2025-06-08", "10:00", TODAY, settings)

    def test_schedule_request(self, settings):
        assert validate_schedule_request(" 2025-06-03 ", " 10:00 ", TODAY, settings) == (
            date(2025, 6, 3),
            "10:00",
        )


class TestNotes:
    def test_blank_notes_become_none(self):
        assert validate_notes("   ") is None
        assert validate_notes(None) is None

    def test_notes_too_long(self):
        with pytest.raises(ValidationError, match="Notes"):
            validate_notes("x" * 501)


class TestValidateBookingRequest:
    def test_normalises_request(self, settings):
        booking = validate_booking_request(make_request(), TODAY, settings)

        assert booking.customer_name == "Jane Doe"
        assert booking.customer_email == "jane.doe@example.com"
        assert booking.customer_phone == "+1 (415) 555-1234"
        assert booking.appointment_date == date(2025, 6, 3)
        assert booking.appointment_time == "10:00"
        assert booking.notes == "window seat"

    def test_first_failing_rule_wins(self, settings):
        request = make_request(customer_name="J", customer_email="bad")

        with pytest.raises(ValidationError, match="Customer name"):
            validate_booking_request(request, TODAY, settings)

    def test_phone_checked_before_date(self, settings):
        request = make_request(customer_phone="+92300123456", date="2020-01-01")

        with pytest.raises(ValidationError, match="Pakistan"):
            validate_booking_request(request, TODAY, settings)

    def test_blank_staff_becomes_none(self, settings):
        booking = validate_booking_request(make_request(staff_id="  "), TODAY, settings)

        assert booking.staff_id is None
