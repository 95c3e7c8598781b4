import enum
import uuid
from datetime import datetime, timedelta

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.sql import func

from scheduling_core.core.database import Base
from scheduling_core.utils.time import slot_datetime


class AppointmentStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class Appointment(Base):
    """A booked appointment. Date and time are business-local wall clock values."""

    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Customer
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(254), nullable=False, index=True)
    customer_phone = Column(String(32), nullable=False)

    # Service and staff (names are denormalised for display)
    service_id = Column(String(36), nullable=False)
    service_name = Column(String(255), nullable=False)
    staff_id = Column(String(36), nullable=True)
    staff_name = Column(String(255), nullable=True)

    # Scheduling details
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(String(5), nullable=False)  # HH:MM
    duration_minutes = Column(Integer, nullable=False)

    status = Column(
        String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True
    )
    notes = Column(Text, nullable=True)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_positive_duration"),
        Index("ix_appointments_date_staff", "appointment_date", "staff_id"),
    )

    @property
    def scheduled_at(self) -> datetime:
        """Naive wall-clock start."""
        return slot_datetime(self.appointment_date, self.appointment_time)

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    @property
    def is_active(self) -> bool:
        """Pending or confirmed appointments still hold their slot."""
        return self.status in (
            AppointmentStatus.PENDING.value,
            AppointmentStatus.CONFIRMED.value,
        )

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, status='{self.status}', "
            f"date='{self.appointment_date}', time='{self.appointment_time}', "
            f"staff_id={self.staff_id})>"
        )
