"""
CV analysis business logic service.
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
from app.models.cv_analysis import CVAnalysis
from app.repositories.cv_analysis_repository import CVAnalysisRepository
from app.schemas.cv_analysis import CVAnalysisCreate, CVAnalysisUpdate
from app.utils.canonical_json import row_payload
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

MIRROR_TABLE = "cv_analysis"
DEFAULT_STATUS = "Em análise"


class CVAnalysisService:
    """Service for CV analysis business logic."""

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[CVAnalysisRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
    ):
        self.db = db
        self.repository = repository or CVAnalysisRepository(db)
        self.mirror = mirror or NullMirror()

    async def _load(self, actor: Actor, analysis_id: UUID, action: Action) -> CVAnalysis:
        analysis = await self.repository.get_by_id(analysis_id)
        if analysis is None:
            raise NotFoundError("Análise de CV não encontrada")
        ensure_access(actor, analysis, action)
        return analysis

    async def create_analysis(self, actor: Actor, data: CVAnalysisCreate) -> CVAnalysis:
        """The creating actor owns and analyses it; its department is the actor's."""
        fields = data.model_dump(exclude_none=True)
        analysis = CVAnalysis(
            id=uuid.uuid4(),
            candidato_id=fields.get("candidato_id"),
            analise=fields["analise"],
            pontuacao=fields.get("pontuacao"),
            classificacao=fields.get("classificacao"),
            status=fields.get("status", DEFAULT_STATUS),
            dono_id=actor.id,
            departamento_dono=actor.departamento,
            analisado_por_id=actor.id,
            data_analise=fields.get("data_analise", utc_now()),
        )
        await self.repository.add(analysis)
        await commit_or_conflict(self.db)
        logger.info("CV analysis %s created by %s", analysis.id, actor.id)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, row_payload(analysis))
        return analysis

    async def list_analyses(
        self,
        actor: Actor,
        candidato_id: Optional[UUID] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[CVAnalysis]:
        return await self.repository.list(
            visibility_scope(actor),
            candidato_id=candidato_id,
            status=status,
            limit=limit,
            offset=offset,
        )

    async def get_analysis(self, actor: Actor, analysis_id: UUID) -> CVAnalysis:
        return await self._load(actor, analysis_id, Action.READ)

    async def update_analysis(self, actor: Actor, analysis_id: UUID, data: CVAnalysisUpdate) -> CVAnalysis:
        analysis = await self._load(actor, analysis_id, Action.WRITE)
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(analysis, field, value)
        await self.repository.save(analysis)
        await commit_or_conflict(self.db)
        logger.info("CV analysis %s updated by %s: %s", analysis.id, actor.id, sorted(update_data))
        await mirror_best_effort(self.mirror, MIRROR_TABLE, row_payload(analysis))
        return analysis

    async def delete_analysis(self, actor: Actor, analysis_id: UUID) -> None:
        analysis = await self._load(actor, analysis_id, Action.WRITE)
        await self.repository.delete(analysis)
        await commit_or_conflict(self.db)
        logger.info("CV analysis %s deleted by %s", analysis_id, actor.id)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, deleted_id=analysis_id)
