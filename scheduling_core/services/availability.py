from datetime import date as date_type
from datetime import timedelta
from typing import Optional, Union
import logging

from scheduling_core.core.config import Settings, settings as default_settings
from scheduling_core.models.appointment import Appointment, AppointmentStatus
from scheduling_core.repositories.appointment import AppointmentRepository
from scheduling_core.repositories.directory import DirectoryRepository
from scheduling_core.schemas.appointment import AppointmentFilter
from scheduling_core.schemas.directory import StaffInfo
from scheduling_core.schemas.scheduling import TimeSlot
from scheduling_core.utils.time import (
    BusinessClock,
    day_of_week,
    intervals_overlap,
    minutes_to_time,
    time_to_minutes,
)
from scheduling_core.utils.validation import parse_date


logger = logging.getLogger(__name__)


class AvailabilityService:
    """Slot engine: which start times can be booked for a service on a date."""

    def __init__(
        self,
        appointments: AppointmentRepository,
        directory: DirectoryRepository,
        settings: Optional[Settings] = None,
        clock: Optional[BusinessClock] = None,
    ):
        self.appointments = appointments
        self.directory = directory
        self.settings = settings or default_settings
        self.clock = clock or BusinessClock(self.settings.BUSINESS_TIMEZONE)

    async def get_available_slots(
        self,
        date: Union[date_type, str],
        service_id: str,
        staff_id: Optional[str] = None,
        timezone_offset: Optional[int] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[TimeSlot]:
        """
        Compute the slot grid for a date.

        Args:
            date: Date or ``YYYY-MM-DD`` string
            service_id: Service being booked; unknown services use the default duration
            staff_id: Optional staff filter
            timezone_offset: Client offset used to drop slots already in the past
            exclude_appointment_id: Appointment to ignore when checking overlaps

        Returns:
            Slots ordered by start time. Past slots and slots outside the
            staff member's window are omitted; booked slots are listed as
            unavailable.
        """
        day = parse_date(date) if isinstance(date, str) else date

        today = self.clock.today()
        max_day = today + timedelta(days=self.settings.MAX_ADVANCE_BOOKING_DAYS)
        if day < today or day > max_day:
            logger.debug(f"Date {day} is outside the booking window")
            return []

        duration = await self._get_service_duration(service_id)

        window = await self._get_opening_window(day)
        if window is None:
            return []
        open_minutes, close_minutes = window

        if staff_id:
            staff = await self.directory.get_staff(staff_id)
            if not staff:
                logger.warning(f"Staff not found: {staff_id}")
                return []
            candidates = [staff]
        else:
            candidates = [
                s for s in await self.directory.get_all_staff() if s.offers(service_id)
            ]
            if not candidates:
                logger.info(f"No active staff offer service {service_id}")
                return []

        booked = await self._get_booked_intervals(day, staff_id, exclude_appointment_id)
        weekday = day_of_week(day)

        slots: list[TimeSlot] = []
        current = open_minutes
        while current + duration <= close_minutes:
            slot_end = current + duration
            clock_time = minutes_to_time(current)

            if self.clock.is_slot_in_past(day, clock_time, timezone_offset):
                current += self.settings.SLOT_INTERVAL_MINUTES
                continue

            working = [
                s for s in candidates if self._works_during(s, weekday, current, slot_end)
            ]
            if staff_id and not working:
                current += self.settings.SLOT_INTERVAL_MINUTES
                continue

            available = any(
                not self._has_conflict(booked.get(s.id, []), current, slot_end)
                for s in working
            )
            slots.append(TimeSlot(time=clock_time, available=available))
            current += self.settings.SLOT_INTERVAL_MINUTES

        logger.debug(
            f"Generated {len(slots)} slots for {day} "
            f"(service={service_id}, staff={staff_id})"
        )
        return slots

    async def is_slot_available(
        self,
        date: date_type,
        time: str,
        service_id: str,
        staff_id: Optional[str] = None,
        timezone_offset: Optional[int] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> bool:
        slots = await self.get_available_slots(
            date, service_id, staff_id, timezone_offset, exclude_appointment_id
        )
        return any(slot.time == time and slot.available for slot in slots)

    async def check_day_has_availability(
        self, date: date_type, service_id: str, staff_id: Optional[str] = None
    ) -> bool:
        """Check if a specific day has at least one bookable slot."""
        slots = await self.get_available_slots(date, service_id, staff_id)
        return any(slot.available for slot in slots)

    async def get_available_days(
        self,
        start_date: date_type,
        end_date: date_type,
        service_id: str,
        staff_id: Optional[str] = None,
    ) -> list[date_type]:
        """
        Get all days in a date range that have at least one bookable slot.

        Args:
            start_date: First day of the range (inclusive)
            end_date: Last day of the range (inclusive)
            service_id: Service being booked
            staff_id: Optional staff filter

        Returns:
            Days with availability, in order
        """
        logger.info(
            f"Getting available days from {start_date} to {end_date} "
            f"for service {service_id}"
        )

        available_days = []
        current_date = start_date
        while current_date <= end_date:
            if await self.check_day_has_availability(current_date, service_id, staff_id):
                available_days.append(current_date)
            current_date += timedelta(days=1)

        logger.info(f"Found {len(available_days)} available days")
        return available_days

    async def find_available_staff(
        self, date: date_type, time: str, service_id: str
    ) -> list[StaffInfo]:
        """Active staff offering the service who are free at the given time."""
        available = []
        for staff in await self.directory.get_all_staff():
            if not staff.offers(service_id):
                continue
            if await self.is_slot_available(date, time, service_id, staff.id):
                available.append(staff)
        return available

    async def _get_service_duration(self, service_id: str) -> int:
        service = await self.directory.get_service(service_id)
        if service:
            return service.duration_minutes
        logger.warning(
            f"Service not found: {service_id}, using default duration "
            f"{self.settings.DEFAULT_SERVICE_DURATION_MINUTES}"
        )
        return self.settings.DEFAULT_SERVICE_DURATION_MINUTES

    async def _get_opening_window(self, day: date_type) -> Optional[tuple[int, int]]:
        """Business open/close minutes for the day after holiday rules, or None if closed."""
        hours = self.settings.hours_for(day_of_week(day))
        if hours is None:
            logger.debug(f"Business is closed on {day_of_week(day)}")
            return None
        open_time, close_time = hours["open"], hours["close"]

        holiday = await self.directory.get_holiday_by_date(day)
        if holiday:
            if holiday.is_closed:
                logger.info(f"{day} is a closed holiday ({holiday.name})")
                return None
            if holiday.has_custom_hours:
                open_time = holiday.custom_hours_open
                close_time = holiday.custom_hours_close

        return time_to_minutes(open_time), time_to_minutes(close_time)

    async def _get_booked_intervals(
        self,
        day: date_type,
        staff_id: Optional[str],
        exclude_appointment_id: Optional[str],
    ) -> dict[Optional[str], list[tuple[int, int]]]:
        """Non-cancelled appointment intervals on the day, grouped by staff id."""
        appointments: list[Appointment] = await self.appointments.find_many(
            AppointmentFilter(
                appointment_date=day,
                staff_id=staff_id,
                status_not_in=[AppointmentStatus.CANCELLED],
                exclude_id=exclude_appointment_id,
            )
        )

        buffer = self.settings.BUFFER_BETWEEN_APPOINTMENTS_MINUTES
        booked: dict[Optional[str], list[tuple[int, int]]] = {}
        for appointment in appointments:
            start = time_to_minutes(appointment.appointment_time)
            booked.setdefault(appointment.staff_id, []).append(
                (start, start + appointment.duration_minutes + buffer)
            )
        return booked

    @staticmethod
    def _works_during(staff: StaffInfo, weekday: str, start: int, end: int) -> bool:
        """Staff without a schedule work the full business hours."""
        if staff.schedule is None:
            return True
        window = staff.schedule.for_day(weekday)
        if window is None:
            return False
        return time_to_minutes(window.start) <= start and end <= time_to_minutes(
            window.end
        )

    @staticmethod
    def _has_conflict(intervals: list[tuple[int, int]], start: int, end: int) -> bool:
        return any(
            intervals_overlap(start, end, booked_start, booked_end)
            for booked_start, booked_end in intervals
        )
