"""
Task business logic service.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Action, Actor, ensure_access, visibility_scope
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.db.session import commit_or_conflict
from app.errors import NotFoundError
from app.models.task import Task
from app.repositories.task_repository import TaskRepository
from app.schemas.task import TaskCreate, TaskUpdate
from app.utils.canonical_json import row_payload
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

MIRROR_TABLE = "task"
DEFAULT_STATUS = "Pendente"


class TaskService:
    """Service for task business logic."""

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[TaskRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
    ):
        self.db = db
        self.repository = repository or TaskRepository(db)
        self.mirror = mirror or NullMirror()

    async def _load(self, actor: Actor, task_id: UUID, action: Action) -> Task:
        task = await self.repository.get_by_id(task_id)
        if task is None:
            raise NotFoundError("Tarefa não encontrada")
        ensure_access(actor, task, action)
        return task

    async def list_tasks(
        self,
        actor: Actor,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Task]:
        """List tasks visible to actor."""
        return await self.repository.list(
            visibility_scope(actor),
            status=status,
            limit=limit,
            offset=offset,
        )

    async def get_task(self, actor: Actor, task_id: UUID) -> Task:
        return await self._load(actor, task_id, Action.READ)

    async def create_task(self, actor: Actor, data: TaskCreate) -> Task:
        """Create a task owned by actor, in actor's department unless given."""
        task = Task(
            id=uuid.uuid4(),
            titulo=data.titulo.strip(),
            descricao=data.descricao,
            data=data.data or utc_now(),
            prazo=data.prazo,
            status=data.status or DEFAULT_STATUS,
            criador_id=actor.id,
            destinatario_id=data.destinatario_id,
            responsaveis=list(dict.fromkeys(data.responsaveis)),
            acompanhantes=list(dict.fromkeys(data.acompanhantes)),
            departamento=data.departamento or actor.departamento,
        )
        await self.repository.add(task)
        await commit_or_conflict(self.db)
        logger.info("Task %s created by %s", task.id, actor.id)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, row_payload(task))
        return task

    async def update_task(self, actor: Actor, task_id: UUID, data: TaskUpdate) -> Task:
        """Update a task."""
        task = await self._load(actor, task_id, Action.WRITE)
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if field in ("responsaveis", "acompanhantes") and value is not None:
                value = list(dict.fromkeys(value))
            setattr(task, field, value)
        await self.repository.save(task)
        await commit_or_conflict(self.db)
        logger.info("Task %s updated by %s: %s", task.id, actor.id, sorted(update_data))
        await mirror_best_effort(self.mirror, MIRROR_TABLE, row_payload(task))
        return task

    async def delete_task(self, actor: Actor, task_id: UUID) -> None:
        task = await self._load(actor, task_id, Action.WRITE)
        await self.repository.delete(task)
        await commit_or_conflict(self.db)
        logger.info("Task %s deleted by %s", task_id, actor.id)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, deleted_id=task_id)
