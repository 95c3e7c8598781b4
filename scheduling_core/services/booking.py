from typing import Optional

import structlog

from scheduling_core.core.config import Settings, settings as default_settings
from scheduling_core.core.exceptions import (
    ConflictError,
    ConflictReason,
    NotFoundError,
    ValidationError,
)
from scheduling_core.models.appointment import Appointment, AppointmentStatus
from scheduling_core.repositories.appointment import AppointmentRepository
from scheduling_core.repositories.directory import DirectoryRepository
from scheduling_core.schemas.appointment import AppointmentCreate, AppointmentFilter
from scheduling_core.schemas.booking import BookingRequest, RescheduleRequest
from scheduling_core.services.availability import AvailabilityService
from scheduling_core.services.locking import (
    SlotLockManager,
    slot_lock_key,
    staff_day_lock_key,
)
from scheduling_core.utils.time import BusinessClock
from scheduling_core.utils.validation import (
    validate_booking_request,
    validate_email,
    validate_schedule_request,
)

logger = structlog.get_logger(__name__)

SLOT_TAKEN_MESSAGE = "Sorry, this time slot was just booked. Please select another time."
SLOT_IN_PAST_MESSAGE = "Cannot book a time slot in the past"


class BookingService:
    """Race-safe booking and rescheduling."""

    def __init__(
        self,
        appointments: AppointmentRepository,
        directory: DirectoryRepository,
        availability: AvailabilityService,
        lock_manager: SlotLockManager,
        settings: Optional[Settings] = None,
        clock: Optional[BusinessClock] = None,
    ):
        self.appointments = appointments
        self.directory = directory
        self.availability = availability
        self.lock_manager = lock_manager
        self.settings = settings or default_settings
        self.clock = clock or BusinessClock(self.settings.BUSINESS_TIMEZONE)

    async def book_appointment(self, request: BookingRequest) -> Appointment:
        """
        Validate a booking request and create a pending appointment.

        The availability re-check and the insert run while holding the slot
        lock, so two requests for the same slot cannot both succeed.

        Raises:
            ValidationError: input breaks a booking rule
            NotFoundError: service or staff member does not exist
            ConflictError: duplicate booking, or the slot is no longer free
        """
        booking = validate_booking_request(request, self.clock.today(), self.settings)

        service = await self.directory.get_service(booking.service_id)
        if not service:
            raise NotFoundError("Selected service not found", entity="service")

        if not booking.staff_id:
            raise ValidationError("Please select a staff member")
        staff = await self.directory.get_staff(booking.staff_id)
        if not staff:
            raise NotFoundError("Selected staff member not found", entity="staff")

        duplicates = await self.appointments.count(
            AppointmentFilter(
                customer_email=booking.customer_email,
                appointment_date=booking.appointment_date,
                appointment_time=booking.appointment_time,
                service_id=booking.service_id,
                staff_id=booking.staff_id,
                status_not_in=[AppointmentStatus.CANCELLED],
            )
        )
        if duplicates:
            logger.info(
                "Duplicate booking rejected",
                email=booking.customer_email,
                date=str(booking.appointment_date),
                time=booking.appointment_time,
            )
            raise ConflictError(
                "You already have this appointment booked",
                ConflictReason.DUPLICATE_BOOKING,
            )

        lock_key = self._lock_key(
            booking.appointment_date, booking.appointment_time, booking.staff_id
        )
        async with self.lock_manager.hold(lock_key):
            await self._ensure_slot_free(
                booking.appointment_date,
                booking.appointment_time,
                booking.service_id,
                booking.staff_id,
                booking.timezone_offset,
            )

            appointment = await self.appointments.create(
                AppointmentCreate(
                    customer_name=booking.customer_name,
                    customer_email=booking.customer_email,
                    customer_phone=booking.customer_phone,
                    service_id=service.id,
                    service_name=service.name,
                    staff_id=staff.id,
                    staff_name=staff.name,
                    appointment_date=booking.appointment_date,
                    appointment_time=booking.appointment_time,
                    duration_minutes=service.duration_minutes,
                    status=AppointmentStatus.PENDING,
                    notes=booking.notes,
                )
            )

        logger.info(
            "Appointment booked",
            appointment_id=appointment.id,
            staff_id=staff.id,
            date=str(appointment.appointment_date),
            time=appointment.appointment_time,
        )
        return appointment

    async def reschedule_appointment(
        self, appointment_id: str, request: RescheduleRequest
    ) -> Appointment:
        """Move a pending or confirmed appointment to a new date and time."""
        appointment = await self.appointments.find_one(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", entity="appointment")

        if not appointment.is_active:
            raise ConflictError(
                "Only pending or confirmed appointments can be rescheduled",
                ConflictReason.INVALID_TRANSITION,
            )

        if request.email is not None:
            if validate_email(request.email) != appointment.customer_email:
                raise ValidationError("Email does not match this appointment")

        new_date, new_time = validate_schedule_request(
            request.date, request.time, self.clock.today(), self.settings
        )

        lock_key = self._lock_key(new_date, new_time, appointment.staff_id)
        async with self.lock_manager.hold(lock_key):
            await self._ensure_slot_free(
                new_date,
                new_time,
                appointment.service_id,
                appointment.staff_id,
                request.timezone_offset,
                exclude_appointment_id=appointment.id,
            )
            await self.appointments.update(
                appointment.id, appointment_date=new_date, appointment_time=new_time
            )

        logger.info(
            "Appointment rescheduled",
            appointment_id=appointment.id,
            date=str(new_date),
            time=new_time,
        )
        return await self.appointments.find_one(appointment.id)

    async def _ensure_slot_free(
        self,
        day,
        clock_time: str,
        service_id: str,
        staff_id: Optional[str],
        timezone_offset: Optional[int],
        exclude_appointment_id: Optional[str] = None,
    ) -> None:
        if self.clock.is_slot_in_past(day, clock_time, timezone_offset):
            raise ConflictError(SLOT_IN_PAST_MESSAGE, ConflictReason.SLOT_UNAVAILABLE)

        available = await self.availability.is_slot_available(
            day,
            clock_time,
            service_id,
            staff_id,
            timezone_offset,
            exclude_appointment_id,
        )
        if not available:
            logger.info(
                "Slot no longer available",
                date=str(day),
                time=clock_time,
                staff_id=staff_id,
            )
            raise ConflictError(SLOT_TAKEN_MESSAGE, ConflictReason.SLOT_UNAVAILABLE)

    def _lock_key(self, day, clock_time: str, staff_id: Optional[str]) -> str:
        if self.settings.LOCK_PER_STAFF_DAY and staff_id:
            return staff_day_lock_key(day, staff_id)
        if self.settings.LOCK_INCLUDES_STAFF:
            return slot_lock_key(day, clock_time, staff_id)
        return slot_lock_key(day, clock_time)
