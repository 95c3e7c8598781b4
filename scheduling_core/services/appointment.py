from datetime import date
from typing import Optional

import structlog

from scheduling_core.core.config import Settings, settings as default_settings
from scheduling_core.core.exceptions import NotFoundError, ValidationError
from scheduling_core.models.appointment import Appointment, AppointmentStatus
from scheduling_core.repositories.appointment import AppointmentRepository
from scheduling_core.schemas.appointment import AppointmentFilter
from scheduling_core.services.status import check_cancellable, check_transition
from scheduling_core.utils.time import BusinessClock

logger = structlog.get_logger(__name__)


class AppointmentService:
    """Appointment lookups and status changes after booking."""

    def __init__(
        self,
        appointments: AppointmentRepository,
        settings: Optional[Settings] = None,
        clock: Optional[BusinessClock] = None,
    ):
        self.appointments = appointments
        self.settings = settings or default_settings
        self.clock = clock or BusinessClock(self.settings.BUSINESS_TIMEZONE)

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return await self.appointments.find_one(appointment_id)

    async def get_appointments_by_email(self, email: str) -> list[Appointment]:
        return await self.appointments.find_many(
            AppointmentFilter(customer_email=email.strip().lower())
        )

    async def get_appointments_by_date(self, day: date) -> list[Appointment]:
        return await self.appointments.find_many(AppointmentFilter(appointment_date=day))

    async def lookup_upcoming_appointments(self, email: str) -> list[Appointment]:
        """Confirmed appointments for a customer from today onwards."""
        return await self.appointments.find_many(
            AppointmentFilter(
                customer_email=email.strip().lower(),
                date_from=self.clock.today(),
                status_in=[AppointmentStatus.CONFIRMED],
            )
        )

    async def get_appointments_needing_action(self) -> list[Appointment]:
        """Confirmed appointments that have ended and still need an outcome.

        Newest first.
        """
        now = self.clock.now()
        candidates = await self.appointments.find_many(
            AppointmentFilter(
                date_to=now.date(),
                status_in=[AppointmentStatus.CONFIRMED],
            ),
            newest_first=True,
        )
        return [appointment for appointment in candidates if appointment.ends_at <= now]

    async def transition_status(
        self,
        appointment_id: str,
        status: str,
        timezone_offset: Optional[int] = None,
    ) -> Appointment:
        """
        Move an appointment to a new status.

        Confirming, completing or marking a no-show is only allowed once the
        appointment has started, judged on the caller's clock. Without an
        offset ``DEFAULT_TIMEZONE_OFFSET_MINUTES`` is used.
        """
        new_status = self._parse_status(status)

        appointment = await self.appointments.find_one(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", entity="appointment")

        if timezone_offset is None:
            timezone_offset = self.settings.DEFAULT_TIMEZONE_OFFSET_MINUTES

        current = AppointmentStatus(appointment.status)
        check_transition(
            current,
            new_status,
            appointment.scheduled_at,
            self.clock.local_now(timezone_offset),
        )

        await self.appointments.update(appointment.id, status=new_status.value)
        logger.info(
            "Appointment status changed",
            appointment_id=appointment.id,
            from_status=current.value,
            to_status=new_status.value,
        )
        return appointment

    async def cancel_appointment(
        self, appointment_id: str, timezone_offset: Optional[int] = None
    ) -> Appointment:
        """Cancel an appointment that has not started yet."""
        appointment = await self.appointments.find_one(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found", entity="appointment")

        check_cancellable(
            AppointmentStatus(appointment.status),
            appointment.scheduled_at,
            self.clock.local_now(timezone_offset),
        )

        await self.appointments.update(
            appointment.id, status=AppointmentStatus.CANCELLED.value
        )
        logger.info("Appointment cancelled", appointment_id=appointment.id)
        return appointment

    @staticmethod
    def _parse_status(status: str) -> AppointmentStatus:
        try:
            return AppointmentStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in AppointmentStatus)
            raise ValidationError(f"Status must be one of: {allowed}")
