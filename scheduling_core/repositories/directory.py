from datetime import date
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_core.core.exceptions import StoreError
from scheduling_core.models.holiday import Holiday
from scheduling_core.models.service import Service
from scheduling_core.models.staff import Staff
from scheduling_core.schemas.directory import HolidayInfo, ServiceInfo, StaffInfo
from scheduling_core.services.holidays import HolidayService

logger = structlog.get_logger(__name__)


class DirectoryRepository:
    """Read access to services, staff and holidays."""

    def __init__(self, db: AsyncSession, holiday_service: Optional[HolidayService] = None):
        self.db = db
        self.holiday_service = holiday_service

    async def get_service(self, service_id: str) -> Optional[ServiceInfo]:
        service = await self._scalar(
            select(Service).where(Service.id == service_id), "service"
        )
        return ServiceInfo.model_validate(service) if service else None

    async def get_staff(self, staff_id: str) -> Optional[StaffInfo]:
        staff = await self._scalar(select(Staff).where(Staff.id == staff_id), "staff")
        return StaffInfo.model_validate(staff) if staff else None

    async def get_all_staff(self, active_only: bool = True) -> list[StaffInfo]:
        query = select(Staff).order_by(Staff.name)
        if active_only:
            query = query.where(Staff.is_active.is_(True))
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to load staff list", exc_info=e)
            raise StoreError("Failed to load staff") from e
        return [StaffInfo.model_validate(s) for s in result.scalars().all()]

    async def get_holiday_by_date(self, day: date) -> Optional[HolidayInfo]:
        """Stored holiday for ``day``, else the national holiday calendar if configured."""
        holiday = await self._scalar(
            select(Holiday).where(Holiday.date == day), "holiday"
        )
        if holiday:
            return HolidayInfo.model_validate(holiday)

        if self.holiday_service:
            name = self.holiday_service.get_holiday_name(day)
            if name:
                return HolidayInfo(date=day, name=name, is_closed=True)
        return None

    async def _scalar(self, query, entity: str):
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {entity}", exc_info=e)
            raise StoreError(f"Failed to load {entity}") from e
        return result.scalar_one_or_none()
