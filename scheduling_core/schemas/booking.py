from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


class BookingRequest(BaseModel):
    """Raw booking input as received from a booking form or API client."""

    customer_name: str
    customer_email: str
    customer_phone: str
    service_id: str
    staff_id: Optional[str] = None
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, 24-hour")
    notes: Optional[str] = None
    timezone_offset: Optional[int] = Field(
        None, description="Minutes the client clock lags UTC (-300 is UTC+5)"
    )


class NormalizedBooking(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: str
    service_id: str
    staff_id: Optional[str] = None
    appointment_date: date_type
    appointment_time: str
    notes: Optional[str] = None
    timezone_offset: Optional[int] = None


class RescheduleRequest(BaseModel):
    date: str
    time: str
    email: Optional[str] = None
    timezone_offset: Optional[int] = None
