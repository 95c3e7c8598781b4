from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scheduling_core.core.exceptions import NotFoundError, StoreError
from scheduling_core.models.appointment import Appointment
from scheduling_core.schemas.appointment import AppointmentCreate, AppointmentFilter

logger = structlog.get_logger(__name__)


class AppointmentRepository:
    """SQLAlchemy-backed appointment store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: AppointmentCreate) -> Appointment:
        appointment = Appointment(
            **data.model_dump(exclude={"status"}), status=data.status.value
        )
        try:
            self.db.add(appointment)
            await self.db.commit()
            await self.db.refresh(appointment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create appointment", exc_info=e)
            raise StoreError("Failed to create appointment") from e
        return appointment

    async def find_one(self, appointment_id: str) -> Optional[Appointment]:
        try:
            result = await self.db.execute(
                select(Appointment).where(Appointment.id == appointment_id)
            )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to load appointment", appointment_id=appointment_id, exc_info=e
            )
            raise StoreError("Failed to load appointment") from e
        return result.scalar_one_or_none()

    async def find_many(
        self, filters: AppointmentFilter, newest_first: bool = False
    ) -> list[Appointment]:
        query = self._apply_filters(select(Appointment), filters)
        if newest_first:
            query = query.order_by(
                Appointment.appointment_date.desc(), Appointment.appointment_time.desc()
            )
        else:
            query = query.order_by(
                Appointment.appointment_date.asc(), Appointment.appointment_time.asc()
            )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to query appointments", exc_info=e)
            raise StoreError("Failed to query appointments") from e
        return list(result.scalars().all())

    async def count(self, filters: AppointmentFilter) -> int:
        query = self._apply_filters(
            select(func.count()).select_from(Appointment), filters
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to count appointments", exc_info=e)
            raise StoreError("Failed to count appointments") from e
        return result.scalar() or 0

    async def update(self, appointment_id: str, **fields) -> None:
        appointment = await self.find_one(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found", entity="appointment")

        for field, value in fields.items():
            setattr(appointment, field, value)
        try:
            await self.db.commit()
            await self.db.refresh(appointment)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "Failed to update appointment",
                appointment_id=appointment_id,
                exc_info=e,
            )
            raise StoreError("Failed to update appointment") from e

    def _apply_filters(self, query, filters: AppointmentFilter):
        """Apply filters to appointment query."""

        if filters.appointment_date:
            query = query.where(Appointment.appointment_date == filters.appointment_date)
        if filters.appointment_time:
            query = query.where(Appointment.appointment_time == filters.appointment_time)
        if filters.date_from:
            query = query.where(Appointment.appointment_date >= filters.date_from)
        if filters.date_to:
            query = query.where(Appointment.appointment_date <= filters.date_to)
        if filters.staff_id:
            query = query.where(Appointment.staff_id == filters.staff_id)
        if filters.service_id:
            query = query.where(Appointment.service_id == filters.service_id)
        if filters.customer_email:
            query = query.where(
                Appointment.customer_email == filters.customer_email.lower()
            )
        if filters.status_in:
            query = query.where(
                Appointment.status.in_([s.value for s in filters.status_in])
            )
        if filters.status_not_in:
            query = query.where(
                Appointment.status.not_in([s.value for s in filters.status_not_in])
            )
        if filters.exclude_id:
            query = query.where(Appointment.id != filters.exclude_id)

        return query
