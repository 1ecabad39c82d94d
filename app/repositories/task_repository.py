"""
Task repository - database operations for Task.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, false, or_
from sqlalchemy.dialects.postgresql import array, UUID as PG_UUID
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import ScopeKind, VisibilityScope
from app.models.task import Task


def task_visibility_clause(scope: VisibilityScope):
    if scope.kind == ScopeKind.ALL:
        return None
    if scope.kind == ScopeKind.DEPARTMENT:
        return Task.departamento == scope.departamento
    if scope.kind == ScopeKind.OWNERS:
        ids = list(scope.owner_ids)
        id_array = array(ids, type_=PG_UUID(as_uuid=True))
        return or_(
            Task.criador_id.in_(ids),
            Task.destinatario_id.in_(ids),
            Task.responsaveis.overlap(id_array),
            Task.acompanhantes.overlap(id_array),
        )
    return false()


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        result = await self.db.execute(
            select(Task).where(Task.id == task_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: Optional[VisibilityScope],
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Task]:
        """List tasks visible under scope, soonest due date first."""
        query = select(Task)
        if scope is not None:
            clause = task_visibility_clause(scope)
            if clause is not None:
                query = query.where(clause)
        if status is not None:
            query = query.where(Task.status == status)
        query = query.order_by(
            Task.prazo.asc().nullslast(),
            Task.created_at.desc(),
        ).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, task: Task) -> Task:
        self.db.add(task)
        await self.db.flush()
        await self.db.refresh(task)
        return task

    async def save(self, task: Task) -> Task:
        await self.db.flush()
        await self.db.refresh(task)
        return task

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.flush()
