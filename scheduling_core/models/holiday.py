import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, String
from sqlalchemy.sql import func

from scheduling_core.core.database import Base


class Holiday(Base):
    """A closure date. Partial closures carry their own opening hours."""

    __tablename__ = "holidays"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    date = Column(Date, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    is_closed = Column(Boolean, default=True, nullable=False)
    custom_hours_open = Column(String(5), nullable=True)
    custom_hours_close = Column(String(5), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Holiday(date={self.date}, name='{self.name}', closed={self.is_closed})>"
