from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Union
from zoneinfo import ZoneInfo

MINUTES_PER_HOUR = 60

# Indexed by date.weekday() (Monday == 0)
_WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def time_to_minutes(value: str) -> int:
    """Convert ``"HH:MM"`` to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * MINUTES_PER_HOUR + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to a zero-padded 24-hour ``"HH:MM"``."""
    hours, mins = divmod(minutes, MINUTES_PER_HOUR)
    return f"{hours:02d}:{mins:02d}"


def day_of_week(value: Union[date, str]) -> str:
    """Lowercase weekday name, ``"sunday"`` through ``"saturday"``."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    return _WEEKDAY_NAMES[value.weekday()]


def intervals_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    """Half-open interval overlap: ``[start1, end1)`` against ``[start2, end2)``."""
    return start1 < end2 and end1 > start2


def slot_datetime(day: date, clock_time: str) -> datetime:
    """Naive wall-clock datetime for a date and ``"HH:MM"``."""
    return datetime.combine(day, datetime.min.time()) + timedelta(
        minutes=time_to_minutes(clock_time)
    )


class BusinessClock:
    """The current business moment.

    Wall-clock values (``now``, ``local_now``) are naive datetimes so they can
    be compared directly with stored appointment dates and ``HH:MM`` times.
    """

    def __init__(
        self,
        tz_name: str = "UTC",
        now_func: Optional[Callable[[], datetime]] = None,
    ):
        self.tz = ZoneInfo(tz_name)
        self._now_func = now_func or (lambda: datetime.now(timezone.utc))

    def utcnow(self) -> datetime:
        current = self._now_func()
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current.astimezone(timezone.utc)

    def now(self) -> datetime:
        """Business-local wall clock."""
        return self.utcnow().astimezone(self.tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()

    def local_now(self, timezone_offset: Optional[int] = None) -> datetime:
        """Wall clock of a caller whose clock lags UTC by ``timezone_offset`` minutes.

        ``-300`` is UTC+5, ``300`` is UTC-5. Without an offset the business
        clock is used.
        """
        if timezone_offset is None:
            return self.now()
        shifted = self.utcnow() - timedelta(minutes=timezone_offset)
        return shifted.replace(tzinfo=None)

    def is_slot_in_past(
        self, day: date, clock_time: str, timezone_offset: Optional[int] = None
    ) -> bool:
        return slot_datetime(day, clock_time) <= self.local_now(timezone_offset)
