"""Normalisation and validation of raw booking input.

Every check raises :class:`~scheduling_core.core.exceptions.ValidationError`
with a message meant for the person filling in the booking form.
"""

import re
from datetime import date, timedelta
from typing import NamedTuple, Optional

from scheduling_core.core.config import Settings
from scheduling_core.core.exceptions import ValidationError
from scheduling_core.core.phone_rules import (
    COUNTRY_PHONE_RULES,
    GENERIC_MAX_DIGITS,
    GENERIC_MIN_DIGITS,
)
from scheduling_core.schemas.booking import BookingRequest, NormalizedBooking
from scheduling_core.utils.time import day_of_week

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
NOTES_MAX_LENGTH = 500

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$", re.ASCII)
PHONE_SEPARATORS = re.compile(r"[\s\-().]")


class PhoneCheck(NamedTuple):
    valid: bool
    error: Optional[str] = None
    country: Optional[str] = None


def validate_name(name: str) -> str:
    name = name.strip()
    if len(name) < NAME_MIN_LENGTH:
        raise ValidationError(
            f"Customer name must be at least {NAME_MIN_LENGTH} characters"
        )
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError(
            f"Customer name must be at most {NAME_MAX_LENGTH} characters"
        )
    return name


def validate_email(email: str) -> str:
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError("Email too long")
    return email


def check_phone(phone: str) -> PhoneCheck:
    """Check a phone number against the country calling code table."""
    cleaned = PHONE_SEPARATORS.sub("", phone)

    if not cleaned.startswith("+"):
        return PhoneCheck(
            False,
            "Phone number must start with country code "
            "(e.g., +91 for India, +1 for USA)",
        )

    digits = cleaned[1:]
    if not digits.isdigit() or not digits.isascii():
        return PhoneCheck(
            False, "Phone number can only contain digits after the country code"
        )

    # Longest calling code wins
    for code_length in (3, 2, 1):
        code = digits[:code_length]
        rule = COUNTRY_PHONE_RULES.get(code)
        if rule is None:
            continue

        national = digits[code_length:]
        if len(national) < rule.min_length:
            return PhoneCheck(
                False,
                f"{rule.name} numbers need {rule.min_length} digits after +{code} "
                f"(you provided {len(national)})",
                rule.name,
            )
        if len(national) > rule.max_length:
            return PhoneCheck(
                False,
                f"{rule.name} numbers have max {rule.max_length} digits after +{code} "
                f"(you provided {len(national)})",
                rule.name,
            )
        return PhoneCheck(True, country=rule.name)

    if not GENERIC_MIN_DIGITS <= len(digits) <= GENERIC_MAX_DIGITS:
        return PhoneCheck(
            False,
            f"Phone number should be {GENERIC_MIN_DIGITS}-{GENERIC_MAX_DIGITS} "
            "digits including country code",
        )
    return PhoneCheck(True)


def validate_phone(phone: str) -> str:
    phone = phone.strip()
    result = check_phone(phone)
    if not result.valid:
        raise ValidationError(result.error)
    return phone


def parse_date(value: str) -> date:
    """Parse a strict ``YYYY-MM-DD`` string into a real calendar date."""
    value = value.strip()
    if not DATE_PATTERN.match(value):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date")


def validate_booking_window(day: date, today: date, max_advance_days: int) -> None:
    if day < today:
        raise ValidationError("Cannot book appointments in the past")
    if day > today + timedelta(days=max_advance_days):
        raise ValidationError(
            f"Cannot book more than {max_advance_days} days in advance"
        )


def validate_time(value: str) -> str:
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValidationError("Invalid time format. Use HH:MM (24-hour)")
    return value


def ensure_open_on(day: date, settings: Settings) -> None:
    weekday = day_of_week(day)
    if settings.hours_for(weekday) is None:
        raise ValidationError(f"Sorry, we are closed on {weekday}s")


def validate_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    notes = notes.strip()
    if len(notes) > NOTES_MAX_LENGTH:
        raise ValidationError(
            f"Notes must be at most {NOTES_MAX_LENGTH} characters"
        )
    return notes or None


def validate_schedule_request(
    raw_date: str, raw_time: str, today: date, settings: Settings
) -> tuple[date, str]:
    """Date, window, time and closed-day checks shared by booking and rescheduling."""
    day = parse_date(raw_date)
    validate_booking_window(day, today, settings.MAX_ADVANCE_BOOKING_DAYS)
    clock_time = validate_time(raw_time)
    ensure_open_on(day, settings)
    return day, clock_time


def validate_booking_request(
    request: BookingRequest, today: date, settings: Settings
) -> NormalizedBooking:
    """Normalise a booking request and run every input rule in order."""
    name = validate_name(request.customer_name)
    email = validate_email(request.customer_email)
    phone = validate_phone(request.customer_phone)
    day, clock_time = validate_schedule_request(
        request.date, request.time, today, settings
    )
    notes = validate_notes(request.notes)

    return NormalizedBooking(
        customer_name=name,
        customer_email=email,
        customer_phone=phone,
        service_id=request.service_id.strip(),
        staff_id=(request.staff_id or "").strip() or None,
        appointment_date=day,
        appointment_time=clock_time,
        notes=notes,
        timezone_offset=request.timezone_offset,
    )
