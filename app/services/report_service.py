"""
Report service: dashboard metrics, pipeline funnel and monthly rankings.

Dashboard and funnel are restricted to what the caller can see; rankings are
organization-wide. Every report is mirrored as a snapshot row.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Actor, visibility_scope
from app.core.pipeline import PipelineStatus
from app.core.reporting import (
    build_rankings,
    dashboard_metrics,
    month_window,
    resolve_period,
    score_counts,
    stage_counts,
)
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.repositories.candidate_repository import CandidateRepository
from app.repositories.cv_analysis_repository import CVAnalysisRepository
from app.repositories.user_repository import UserRepository
from app.schemas.report import DashboardRead, FunnelRead, RankingEntryRead, RankingRead
from app.utils.canonical_json import canonical_hash, json_safe
from app.utils.time import utc_now

logger = logging.getLogger(__name__)


class ReportService:
    """Service for report aggregation."""

    def __init__(
        self,
        db: AsyncSession,
        candidate_repository: Optional[CandidateRepository] = None,
        cv_repository: Optional[CVAnalysisRepository] = None,
        user_repository: Optional[UserRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
        clock=utc_now,
    ):
        self.db = db
        self.candidate_repository = candidate_repository or CandidateRepository(db)
        self.cv_repository = cv_repository or CVAnalysisRepository(db)
        self.user_repository = user_repository or UserRepository(db)
        self.mirror = mirror or NullMirror()
        self.clock = clock

    async def _snapshot(self, table: str, report: dict) -> None:
        payload = json_safe(report)
        await mirror_best_effort(
            self.mirror,
            table,
            {"id": canonical_hash(payload), "generated_at": self.clock().isoformat(), **payload},
        )

    async def dashboard(self, actor: Actor, period: Optional[str] = None) -> DashboardRead:
        window = resolve_period(period, self.clock())
        scope = visibility_scope(actor)
        candidates = await self.candidate_repository.list_created_between(scope, window.start, window.end)
        analyses = await self.cv_repository.list_created_between(scope, window.start, window.end)

        metrics = dashboard_metrics(
            [c.pipeline_status for c in candidates],
            [a.pontuacao for a in analyses],
        )
        report = DashboardRead(
            periodo=window.name,
            data_inicio=window.start,
            data_fim=window.end,
            **metrics,
        )
        logger.info("Dashboard %s for %s: %d candidates", window.name, actor.id, len(candidates))
        await self._snapshot("report_dashboard", report.model_dump())
        return report

    async def funnel(self, actor: Actor, period: Optional[str] = None) -> FunnelRead:
        """Current stage of each candidate created in the window."""
        window = resolve_period(period, self.clock())
        candidates = await self.candidate_repository.list_created_between(
            visibility_scope(actor), window.start, window.end
        )
        report = FunnelRead(
            periodo=window.name,
            data_inicio=window.start,
            data_fim=window.end,
            etapas=stage_counts(c.pipeline_status for c in candidates),
        )
        await self._snapshot("report_funnel", report.model_dump())
        return report

    async def rankings(self, month: Optional[int] = None, year: Optional[int] = None) -> RankingRead:
        now = self.clock()
        month = month or now.month
        year = year or now.year
        start, end = month_window(year, month)

        recruited_candidates = await self.candidate_repository.list_created_between(
            None, start, end, pipeline_status=PipelineStatus.RECRUTADO.value
        )
        analyses = await self.cv_repository.list_created_between(None, start, end)

        recruited, authored = score_counts(
            ([r.user_id for r in c.responsaveis] for c in recruited_candidates),
            (a.analisado_por_id or a.dono_id for a in analyses),
        )
        users = await self.user_repository.get_many(set(recruited) | set(authored))
        entries = build_rankings(users, recruited, authored)

        report = RankingRead(
            mes=month,
            ano=year,
            ranking=[RankingEntryRead.model_validate(e) for e in entries],
        )
        logger.info("Rankings %04d-%02d: %d entries", year, month, len(entries))
        await self._snapshot("report_ranking", report.model_dump())
        return report
