"""
Report router - dashboard, funnel and rankings.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.access_policy import Actor
from app.core.dependencies import get_current_actor, get_report_service
from app.schemas.report import DashboardRead, FunnelRead, RankingRead
from app.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/dashboard", response_model=DashboardRead)
async def get_dashboard(
    period: Optional[str] = Query(None, description="semana | mes | ano"),
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    """Candidate and CV analysis metrics for the period, within the caller's visibility."""
    return await service.dashboard(actor, period)


@router.get("/funnel", response_model=FunnelRead)
async def get_funnel(
    period: Optional[str] = Query(None, description="semana | mes | ano"),
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    return await service.funnel(actor, period)


@router.get("/rankings", response_model=RankingRead)
async def get_rankings(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000),
    actor: Actor = Depends(get_current_actor),
    service: ReportService = Depends(get_report_service),
):
    """Monthly ranking: two points per recruitment, one per CV analysis."""
    return await service.rankings(month, year)
