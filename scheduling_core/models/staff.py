import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from scheduling_core.core.database import Base


class Staff(Base):
    """Staff member with the services they offer and their weekly working hours."""

    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(254), nullable=True)
    phone = Column(String(32), nullable=True)
    role = Column(String(50), nullable=False, default="staff")

    # Service ids this staff member offers; empty means all services
    services = Column(JSON, nullable=False, default=list)
    # {"monday": {"start": "09:00", "end": "17:00"}, "sunday": null, ...}
    schedule = Column(JSON, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Staff(id={self.id}, name='{self.name}', active={self.is_active})>"
