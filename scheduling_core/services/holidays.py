from datetime import date, datetime
from functools import lru_cache
from typing import Optional

import holidays


class HolidayService:
    """Public holidays for one country.

    Uses the `holidays` library; ``country_code`` is any code it accepts
    (e.g. "US", "PK", "IL").
    """

    def __init__(self, country_code: str):
        self.country_code = country_code

    @staticmethod
    @lru_cache(maxsize=32)
    def _country_holidays(country_code: str, year: int) -> holidays.HolidayBase:
        return holidays.country_holidays(country_code, years=year)

    def is_holiday(self, dt: date) -> bool:
        d: date = dt.date() if isinstance(dt, datetime) else dt
        return d in self._country_holidays(self.country_code, d.year)

    def get_holiday_name(self, dt: date) -> Optional[str]:
        d: date = dt.date() if isinstance(dt, datetime) else dt
        return self._country_holidays(self.country_code, d.year).get(d)


def build_holiday_service(country_code: Optional[str]) -> Optional[HolidayService]:
    return HolidayService(country_code) if country_code else None
