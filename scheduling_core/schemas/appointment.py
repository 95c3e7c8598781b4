from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

# Import enums from the model to avoid duplication
from scheduling_core.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: str
    service_id: str
    service_name: str
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    appointment_date: date_type
    appointment_time: str
    duration_minutes: int = Field(..., gt=0)
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None


class AppointmentRead(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    service_id: str
    service_name: str
    staff_id: Optional[str] = None
    staff_name: Optional[str] = None
    appointment_date: date_type
    appointment_time: str
    duration_minutes: int
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AppointmentFilter(BaseModel):
    """Store query filter. Unset fields do not constrain the query."""

    appointment_date: Optional[date_type] = None
    appointment_time: Optional[str] = None
    date_from: Optional[date_type] = None
    date_to: Optional[date_type] = None
    staff_id: Optional[str] = None
    service_id: Optional[str] = None
    customer_email: Optional[str] = None
    status_in: Optional[List[AppointmentStatus]] = None
    status_not_in: Optional[List[AppointmentStatus]] = None
    exclude_id: Optional[str] = None


class AppointmentStats(BaseModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0
    no_show: int = 0
    no_show_rate: int = Field(0, description="Percent over the trailing stats window")
