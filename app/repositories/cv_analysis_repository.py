"""
CVAnalysis repository - database operations for CV analyses.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, false
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import ScopeKind, VisibilityScope
from app.models.cv_analysis import CVAnalysis


def cv_visibility_clause(scope: VisibilityScope):
    if scope.kind == ScopeKind.ALL:
        return None
    if scope.kind == ScopeKind.DEPARTMENT:
        return CVAnalysis.departamento_dono == scope.departamento
    if scope.kind == ScopeKind.OWNERS:
        ids = list(scope.owner_ids)
        return CVAnalysis.dono_id.in_(ids)
    return false()


class CVAnalysisRepository:
    """Repository for CVAnalysis database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _scoped(self, query, scope: Optional[VisibilityScope]):
        if scope is None:
            return query
        clause = cv_visibility_clause(scope)
        return query if clause is None else query.where(clause)

    async def get_by_id(self, analysis_id: UUID) -> Optional[CVAnalysis]:
        result = await self.db.execute(
            select(CVAnalysis).where(CVAnalysis.id == analysis_id)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: Optional[VisibilityScope],
        candidato_id: Optional[UUID] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[CVAnalysis]:
        query = self._scoped(select(CVAnalysis), scope)
        if candidato_id is not None:
            query = query.where(CVAnalysis.candidato_id == candidato_id)
        if status is not None:
            query = query.where(CVAnalysis.status == status)
        query = query.order_by(CVAnalysis.created_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_created_between(
        self,
        scope: Optional[VisibilityScope],
        start: datetime,
        end: datetime,
    ) -> List[CVAnalysis]:
        query = self._scoped(
            select(CVAnalysis).where(CVAnalysis.created_at >= start, CVAnalysis.created_at < end),
            scope,
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, analysis: CVAnalysis) -> CVAnalysis:
        self.db.add(analysis)
        await self.db.flush()
        await self.db.refresh(analysis)
        return analysis

    async def save(self, analysis: CVAnalysis) -> CVAnalysis:
        await self.db.flush()
        await self.db.refresh(analysis)
        return analysis

    async def delete(self, analysis: CVAnalysis) -> None:
        await self.db.delete(analysis)
        await self.db.flush()
