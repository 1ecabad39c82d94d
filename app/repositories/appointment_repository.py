"""
Appointment repository - database operations for Appointment.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment


class AppointmentRepository:
    """Repository for Appointment database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, appointment_id: UUID) -> Optional[Appointment]:
        result = await self.db.execute(
            select(Appointment).where(Appointment.id == appointment_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        status: Optional[str] = None,
        member_id: Optional[UUID] = None,
    ) -> List[Appointment]:
        """
        List appointments ordered by date and time.

        Dates are YYYY-MM-DD strings, so range filters compare lexically.
        Both bounds are inclusive. member_id restricts the list to
        appointments that user organizes or takes part in.
        """
        query = select(Appointment)
        if start_date is not None:
            query = query.where(Appointment.data >= start_date)
        if end_date is not None:
            query = query.where(Appointment.data <= end_date)
        if status is not None:
            query = query.where(Appointment.status == status)
        if member_id is not None:
            query = query.where(
                or_(
                    Appointment.organizador_id == member_id,
                    Appointment.participantes.any(member_id),
                )
            )
        query = query.order_by(Appointment.data.asc(), Appointment.horario.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        await self.db.flush()
        await self.db.refresh(appointment)
        return appointment

    async def save(self, appointment: Appointment) -> Appointment:
        await self.db.flush()
        await self.db.refresh(appointment)
        return appointment
