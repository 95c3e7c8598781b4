from datetime import date as date_type
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_core.core.config import Settings, settings as default_settings
from scheduling_core.models.appointment import Appointment
from scheduling_core.repositories.appointment import AppointmentRepository
from scheduling_core.repositories.directory import DirectoryRepository
from scheduling_core.schemas.appointment import AppointmentStats
from scheduling_core.schemas.booking import BookingRequest, RescheduleRequest
from scheduling_core.schemas.directory import StaffInfo
from scheduling_core.schemas.scheduling import TimeSlot
from scheduling_core.services.appointment import AppointmentService
from scheduling_core.services.availability import AvailabilityService
from scheduling_core.services.booking import BookingService
from scheduling_core.services.holidays import build_holiday_service
from scheduling_core.services.locking import build_lock_manager
from scheduling_core.services.stats import StatsService
from scheduling_core.utils.time import BusinessClock

_lock_managers: dict = {}


def get_lock_manager(settings: Optional[Settings] = None):
    """Process-wide slot lock manager for the configured backend, built on first use.

    Managers are shared per ``(SLOT_LOCK_BACKEND, REDIS_URL)`` so every
    session booking against the same backend contends on the same locks.
    """
    settings = settings or default_settings
    key = (settings.SLOT_LOCK_BACKEND, settings.REDIS_URL)
    manager = _lock_managers.get(key)
    if manager is None:
        manager = _lock_managers[key] = build_lock_manager(settings)
    return manager


class SchedulerService:
    """Entry point to the scheduling core for one database session."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        clock: Optional[BusinessClock] = None,
        lock_manager=None,
    ):
        self.db = db
        self.settings = settings or default_settings
        self.clock = clock or BusinessClock(self.settings.BUSINESS_TIMEZONE)

        self.appointments = AppointmentRepository(db)
        self.directory = DirectoryRepository(
            db, build_holiday_service(self.settings.HOLIDAY_COUNTRY_CODE)
        )

        self.availability = AvailabilityService(
            self.appointments, self.directory, self.settings, self.clock
        )
        self.booking = BookingService(
            self.appointments,
            self.directory,
            self.availability,
            lock_manager or get_lock_manager(self.settings),
            self.settings,
            self.clock,
        )
        self.appointment_service = AppointmentService(
            self.appointments, self.settings, self.clock
        )
        self.stats = StatsService(self.appointments, self.settings, self.clock)

    async def get_available_slots(
        self,
        date: Union[date_type, str],
        service_id: str,
        staff_id: Optional[str] = None,
        timezone_offset: Optional[int] = None,
    ) -> list[TimeSlot]:
        return await self.availability.get_available_slots(
            date, service_id, staff_id, timezone_offset
        )

    async def get_available_days(
        self,
        start_date: date_type,
        end_date: date_type,
        service_id: str,
        staff_id: Optional[str] = None,
    ) -> list[date_type]:
        return await self.availability.get_available_days(
            start_date, end_date, service_id, staff_id
        )

    async def find_available_staff(
        self, date: date_type, time: str, service_id: str
    ) -> list[StaffInfo]:
        return await self.availability.find_available_staff(date, time, service_id)

    async def book_appointment(self, request: BookingRequest) -> Appointment:
        return await self.booking.book_appointment(request)

    async def reschedule_appointment(
        self, appointment_id: str, request: RescheduleRequest
    ) -> Appointment:
        return await self.booking.reschedule_appointment(appointment_id, request)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return await self.appointment_service.get_appointment(appointment_id)

    async def get_appointments_by_email(self, email: str) -> list[Appointment]:
        return await self.appointment_service.get_appointments_by_email(email)

    async def get_appointments_by_date(self, day: date_type) -> list[Appointment]:
        return await self.appointment_service.get_appointments_by_date(day)

    async def lookup_upcoming_appointments(self, email: str) -> list[Appointment]:
        return await self.appointment_service.lookup_upcoming_appointments(email)

    async def get_appointments_needing_action(self) -> list[Appointment]:
        return await self.appointment_service.get_appointments_needing_action()

    async def cancel_appointment(
        self, appointment_id: str, timezone_offset: Optional[int] = None
    ) -> Appointment:
        return await self.appointment_service.cancel_appointment(
            appointment_id, timezone_offset
        )

    async def update_appointment_status(
        self, appointment_id: str, status: str, timezone_offset: Optional[int] = None
    ) -> Appointment:
        return await self.appointment_service.transition_status(
            appointment_id, status, timezone_offset
        )

    async def get_appointment_stats(self) -> AppointmentStats:
        return await self.stats.get_appointment_stats()
