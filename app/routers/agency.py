"""
Agency and Department routers.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.access_policy import Actor
from app.core.dependencies import get_agency_service, get_current_actor, get_department_service
from app.schemas.agency import (
    AgencyCreate,
    AgencyRead,
    AgencyUpdate,
    DepartmentCreate,
    DepartmentRead,
    DepartmentUpdate,
)
from app.services.agency_service import AgencyService, DepartmentService

agency_router = APIRouter(prefix="/agencies", tags=["Agencies"])
department_router = APIRouter(prefix="/departments", tags=["Departments"])


@agency_router.post("", response_model=AgencyRead, status_code=status.HTTP_201_CREATED)
async def create_agency(
    data: AgencyCreate,
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    return await service.create_agency(actor, data)


@agency_router.get("", response_model=List[AgencyRead])
async def list_agencies(
    status_filter: Optional[str] = Query("ativo", alias="status"),
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    """List agencies; non top-tier callers only see their own agencies."""
    return await service.list_agencies(actor, status=status_filter)


@agency_router.get("/{agency_id}", response_model=AgencyRead)
async def get_agency(
    agency_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    return await service.get_agency(actor, agency_id)


@agency_router.put("/{agency_id}", response_model=AgencyRead)
async def update_agency(
    agency_id: UUID,
    data: AgencyUpdate,
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    return await service.update_agency(actor, agency_id, data)


@agency_router.delete("/{agency_id}", response_model=AgencyRead)
async def delete_agency(
    agency_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    """Inactivate an agency. Records are never physically removed."""
    return await service.inactivate_agency(actor, agency_id)


@agency_router.put("/{agency_id}/reactivate", response_model=AgencyRead)
async def reactivate_agency(
    agency_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: AgencyService = Depends(get_agency_service),
):
    return await service.reactivate_agency(actor, agency_id)


@department_router.post("", response_model=DepartmentRead, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    actor: Actor = Depends(get_current_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return await service.create_department(actor, data)


@department_router.get("", response_model=List[DepartmentRead])
async def list_departments(
    status_filter: Optional[str] = Query("ativo", alias="status"),
    actor: Actor = Depends(get_current_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return await service.list_departments(status=status_filter)


@department_router.put("/{department_id}", response_model=DepartmentRead)
async def update_department(
    department_id: UUID,
    data: DepartmentUpdate,
    actor: Actor = Depends(get_current_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return await service.update_department(actor, department_id, data)


@department_router.delete("/{department_id}", response_model=DepartmentRead)
async def delete_department(
    department_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: DepartmentService = Depends(get_department_service),
):
    return await service.inactivate_department(actor, department_id)
