"""
CV analysis router - API endpoints for CV analyses.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.access_policy import Actor
from app.core.dependencies import get_current_actor, get_cv_analysis_service
from app.schemas.cv_analysis import CVAnalysisCreate, CVAnalysisRead, CVAnalysisUpdate
from app.services.cv_analysis_service import CVAnalysisService

router = APIRouter(prefix="/cv-analyses", tags=["CV Analyses"])


@router.post("", response_model=CVAnalysisRead, status_code=status.HTTP_201_CREATED)
async def create_cv_analysis(
    data: CVAnalysisCreate,
    actor: Actor = Depends(get_current_actor),
    service: CVAnalysisService = Depends(get_cv_analysis_service),
):
    return await service.create_analysis(actor, data)


@router.get("", response_model=List[CVAnalysisRead])
async def list_cv_analyses(
    candidato_id: Optional[UUID] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(get_current_actor),
    service: CVAnalysisService = Depends(get_cv_analysis_service),
):
    return await service.list_analyses(
        actor,
        candidato_id=candidato_id,
        status=status_filter,
        limit=limit,
        offset=offset,
    )


@router.get("/{analysis_id}", response_model=CVAnalysisRead)
async def get_cv_analysis(
    analysis_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: CVAnalysisService = Depends(get_cv_analysis_service),
):
    return await service.get_analysis(actor, analysis_id)


@router.put("/{analysis_id}", response_model=CVAnalysisRead)
async def update_cv_analysis(
    analysis_id: UUID,
    data: CVAnalysisUpdate,
    actor: Actor = Depends(get_current_actor),
    service: CVAnalysisService = Depends(get_cv_analysis_service),
):
    return await service.update_analysis(actor, analysis_id, data)


@router.delete("/{analysis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cv_analysis(
    analysis_id: UUID,
    actor: Actor = Depends(get_current_actor),
    service: CVAnalysisService = Depends(get_cv_analysis_service),
):
    await service.delete_analysis(actor, analysis_id)
