from datetime import timedelta
from typing import Optional

from scheduling_core.core.config import Settings, settings as default_settings
from scheduling_core.models.appointment import AppointmentStatus
from scheduling_core.repositories.appointment import AppointmentRepository
from scheduling_core.schemas.appointment import AppointmentFilter, AppointmentStats
from scheduling_core.utils.time import BusinessClock


def compute_no_show_rate(completed: int, no_show: int) -> int:
    """No-show percentage of finished appointments, rounded half up. 0 with none finished."""
    finished = completed + no_show
    if finished == 0:
        return 0
    return (200 * no_show + finished) // (2 * finished)


class StatsService:
    def __init__(
        self,
        appointments: AppointmentRepository,
        settings: Optional[Settings] = None,
        clock: Optional[BusinessClock] = None,
    ):
        self.appointments = appointments
        self.settings = settings or default_settings
        self.clock = clock or BusinessClock(self.settings.BUSINESS_TIMEZONE)

    async def get_appointment_stats(self) -> AppointmentStats:
        """All-time status counts plus the no-show rate over the stats window."""
        counts = {
            status: await self.appointments.count(AppointmentFilter(status_in=[status]))
            for status in AppointmentStatus
        }

        window_start = self.clock.today() - timedelta(
            days=self.settings.STATS_WINDOW_DAYS
        )
        completed_recent = await self.appointments.count(
            AppointmentFilter(
                date_from=window_start, status_in=[AppointmentStatus.COMPLETED]
            )
        )
        no_show_recent = await self.appointments.count(
            AppointmentFilter(date_from=window_start, status_in=[AppointmentStatus.NO_SHOW])
        )

        return AppointmentStats(
            total=await self.appointments.count(AppointmentFilter()),
            pending=counts[AppointmentStatus.PENDING],
            confirmed=counts[AppointmentStatus.CONFIRMED],
            completed=counts[AppointmentStatus.COMPLETED],
            cancelled=counts[AppointmentStatus.CANCELLED],
            no_show=counts[AppointmentStatus.NO_SHOW],
            no_show_rate=compute_no_show_rate(completed_recent, no_show_recent),
        )
