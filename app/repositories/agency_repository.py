"""
Agency and Department repositories.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.agency import Agency, Department


class AgencyRepository:
    """Repository for Agency database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, agency_id: UUID) -> Optional[Agency]:
        result = await self.db.execute(
            select(Agency).where(Agency.id == agency_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        agency_ids: Optional[List[UUID]] = None,
        status: Optional[str] = "ativo",
    ) -> List[Agency]:
        """List agencies, optionally restricted to agency_ids."""
        query = select(Agency)
        if agency_ids is not None:
            query = query.where(Agency.id.in_(agency_ids))
        if status is not None:
            query = query.where(Agency.status == status)
        result = await self.db.execute(query.order_by(Agency.nome.asc()))
        return list(result.scalars().all())

    async def add(self, agency: Agency) -> Agency:
        self.db.add(agency)
        await self.db.flush()
        await self.db.refresh(agency)
        return agency

    async def save(self, agency: Agency) -> Agency:
        await self.db.flush()
        await self.db.refresh(agency)
        return agency


class DepartmentRepository:
    """Repository for Department database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, department_id: UUID) -> Optional[Department]:
        result = await self.db.execute(
            select(Department).where(Department.id == department_id)
        )
        return result.scalar_one_or_none()

    async def get_by_nome(self, nome: str) -> Optional[Department]:
        result = await self.db.execute(
            select(Department).where(Department.nome == nome.strip())
        )
        return result.scalar_one_or_none()

    async def list(self, status: Optional[str] = "ativo") -> List[Department]:
        query = select(Department)
        if status is not None:
            query = query.where(Department.status == status)
        result = await self.db.execute(query.order_by(Department.nome.asc()))
        return list(result.scalars().all())

    async def add(self, department: Department) -> Department:
        self.db.add(department)
        await self.db.flush()
        await self.db.refresh(department)
        return department

    async def save(self, department: Department) -> Department:
        await self.db.flush()
        await self.db.refresh(department)
        return department
