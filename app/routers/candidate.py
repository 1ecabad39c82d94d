"""
Candidate router - API endpoints for candidates.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.access_policy import Actor
from app.core.dependencies import get_candidate_service, get_current_actor
from app.schemas.candidate import (
    CandidateCreate,
    CandidateInactivate,
    CandidateRead,
    CandidateUpdate,
    InteractionRequest,
    ResponsibleStatusRequest,
    StatusChangeRequest,
)
from app.services.candidate_service import CandidateService

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.post("", response_model=CandidateRead, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    data: CandidateCreate,
    response: Response,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    """
    Create a candidate, or join an existing one.

    When a candidate with the same email and phone already exists the caller
    is added as a responsible party and the response is 200 instead of 201.
    """
    created, candidate = await service.find_or_attach(data, actor)
    if not created:
        response.status_code = status.HTTP_200_OK
    return candidate


@router.get("", response_model=List[CandidateRead])
async def list_candidates(
    status_filter: Optional[str] = Query(None, alias="status"),
    pipeline_status: Optional[str] = None,
    departamento: Optional[str] = None,
    origem_contato: Optional[str] = None,
    skills: Optional[str] = Query(None, description="Comma separated skills, any match"),
    sort: Optional[str] = Query(None, description="field:asc|desc"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    """
    List candidates visible to the caller.

    Filters: status, pipeline_status, departamento, origem_contato, skills.
    """
    return await service.list_candidates(
        actor,
        status=status_filter,
        pipeline_status=pipeline_status,
        departamento=departamento,
        origem_contato=origem_contato,
        skills=skills,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@router.get("/inactive", response_model=List[CandidateRead])
async def list_inactive_candidates(
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    return await service.list_inactive(actor)


@router.get("/{candidate_id}", response_model=CandidateRead)
async def get_candidate(
    candidate_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    """Get a candidate by ID."""
    return await service.get_candidate(actor, candidate_id)


@router.put("/{candidate_id}", response_model=CandidateRead)
async def update_candidate(
    candidate_id: UUID,
    data: CandidateUpdate,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    return await service.update_candidate(actor, candidate_id, data)


@router.put("/{candidate_id}/status", response_model=CandidateRead)
async def change_candidate_status(
    candidate_id: UUID,
    data: StatusChangeRequest,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    """Move the candidate to another pipeline stage."""
    return await service.change_status(actor, candidate_id, data)


@router.post("/{candidate_id}/interaction", response_model=CandidateRead)
async def add_candidate_interaction(
    candidate_id: UUID,
    data: InteractionRequest,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    return await service.add_interaction(actor, candidate_id, data)


@router.put("/{candidate_id}/inactivate", response_model=CandidateRead)
async def inactivate_candidate(
    candidate_id: UUID,
    data: CandidateInactivate,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    return await service.inactivate(actor, candidate_id, data.motivo)


@router.put("/{candidate_id}/reactivate", response_model=CandidateRead)
async def reactivate_candidate(
    candidate_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    return await service.reactivate(actor, candidate_id)


@router.put("/{candidate_id}/responsaveis/{user_id}", response_model=CandidateRead)
async def set_candidate_responsible_status(
    candidate_id: UUID,
    user_id: UUID,
    data: ResponsibleStatusRequest,
    actor: Actor = Depends(get_current_actor),
    service: CandidateService = Depends(get_candidate_service),
):
    """Activate or deactivate one responsible party."""
    return await service.set_responsible_status(actor, candidate_id, user_id, data.status)
