"""
Task router - API endpoints for tasks.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.access_policy import Actor
from app.core.dependencies import get_current_actor, get_task_service
from app.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """
    List tasks with pagination.

    Only tasks visible to the caller are returned, soonest deadline first.
    """
    return await service.list_tasks(actor, status=status_filter, limit=limit, offset=offset)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """Get a task by ID."""
    return await service.get_task(actor, task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """Create a new task."""
    return await service.create_task(actor, data)


@router.put("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    """Update a task."""
    return await service.update_task(actor, task_id, data)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(actor, task_id)
