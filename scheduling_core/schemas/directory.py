from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


class DailySchedule(BaseModel):
    start: str
    end: str


class WeeklySchedule(BaseModel):
    monday: Optional[DailySchedule] = None
    tuesday: Optional[DailySchedule] = None
    wednesday: Optional[DailySchedule] = None
    thursday: Optional[DailySchedule] = None
    friday: Optional[DailySchedule] = None
    saturday: Optional[DailySchedule] = None
    sunday: Optional[DailySchedule] = None

    def for_day(self, weekday: str) -> Optional[DailySchedule]:
        return getattr(self, weekday, None)


class ServiceInfo(BaseModel):
    id: str
    name: str
    duration_minutes: int = Field(..., gt=0)

    class Config:
        from_attributes = True


class StaffInfo(BaseModel):
    id: str
    name: str
    services: list[str] = Field(default_factory=list)
    schedule: Optional[WeeklySchedule] = None
    is_active: bool = True

    class Config:
        from_attributes = True

    def offers(self, service_id: str) -> bool:
        """Staff with no explicit service list offer every service."""
        return not self.services or service_id in self.services


class HolidayInfo(BaseModel):
    date: date_type
    name: str
    is_closed: bool = True
    custom_hours_open: Optional[str] = None
    custom_hours_close: Optional[str] = None

    class Config:
        from_attributes = True

    @property
    def has_custom_hours(self) -> bool:
        return bool(self.custom_hours_open and self.custom_hours_close)
