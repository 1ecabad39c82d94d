"""
Appointment router - agenda endpoints.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.access_policy import Actor
from app.core.dependencies import get_appointment_service, get_current_actor
from app.schemas.appointment import AppointmentCreate, AppointmentRead, AppointmentUpdate
from app.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    data: AppointmentCreate,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Schedule an appointment organized by the caller.

    Dates in the past are rejected. The external calendar is updated when
    configured.
    """
    return await service.create_appointment(actor, data)


@router.get("", response_model=List[AppointmentRead])
async def list_appointments(
    status_filter: Optional[str] = Query(None, alias="status"),
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.list_appointments(actor, status=status_filter)


@router.get("/today", response_model=List[AppointmentRead])
async def list_today_appointments(
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.list_today(actor)


@router.get("/period/{start}/{end}", response_model=List[AppointmentRead])
async def list_period_appointments(
    start: str,
    end: str,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments between two YYYY-MM-DD dates, inclusive."""
    return await service.list_period(actor, start, end)


@router.get("/{appointment_id}", response_model=AppointmentRead)
async def get_appointment(
    appointment_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.get_appointment(actor, appointment_id)


@router.put("/{appointment_id}", response_model=AppointmentRead)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.update_appointment(actor, appointment_id, data)


@router.put("/{appointment_id}/cancel", response_model=AppointmentRead)
async def cancel_appointment(
    appointment_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    return await service.cancel_appointment(actor, appointment_id)
