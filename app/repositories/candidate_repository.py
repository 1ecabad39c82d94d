"""
Candidate repository - database operations for Candidate.
"""

from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select, false, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import ScopeKind, VisibilityScope
from app.models.candidate import Candidate, CandidateResponsible


def candidate_visibility_clause(scope: VisibilityScope):
    """Translate a visibility scope into a WHERE clause (None means no filter)."""
    if scope.kind == ScopeKind.ALL:
        return None
    if scope.kind == ScopeKind.DEPARTMENT:
        return Candidate.departamento == scope.departamento
    if scope.kind == ScopeKind.OWNERS:
        return Candidate.responsaveis.any(
            (CandidateResponsible.user_id.in_(list(scope.owner_ids)))
            & (CandidateResponsible.status == "ativo")
        )
    return false()


class CandidateRepository:
    """Repository for Candidate database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _scoped(self, query, scope: Optional[VisibilityScope]):
        if scope is None:
            return query
        clause = candidate_visibility_clause(scope)
        return query if clause is None else query.where(clause)

    async def get_by_id(self, candidate_id: UUID) -> Optional[Candidate]:
        """Get a candidate by ID."""
        result = await self.db.execute(
            select(Candidate).where(Candidate.id == candidate_id)
        )
        return result.scalar_one_or_none()

    async def find_by_natural_key(self, email: str, telefone: str) -> Optional[Candidate]:
        """Lower-cased e-mail plus trimmed phone."""
        result = await self.db.execute(
            select(Candidate)
            .where(
                func.lower(Candidate.email) == email.strip().lower(),
                Candidate.telefone == telefone.strip(),
            )
            .order_by(Candidate.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list(
        self,
        scope: Optional[VisibilityScope],
        status: Optional[str] = None,
        pipeline_status: Optional[str] = None,
        departamento: Optional[str] = None,
        origem_contato: Optional[str] = None,
        skills: Optional[Sequence[str]] = None,
        sort: Optional[Tuple[str, bool]] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Candidate]:
        """
        List candidates visible under scope.

        Args:
            sort: (column name, descending); defaults to newest first
        """
        query = self._scoped(select(Candidate), scope)

        if status is not None:
            query = query.where(Candidate.status == status)
        if pipeline_status is not None:
            query = query.where(Candidate.pipeline_status == pipeline_status)
        if departamento is not None:
            query = query.where(Candidate.departamento == departamento)
        if origem_contato is not None:
            query = query.where(Candidate.origem_contato == origem_contato)
        if skills:
            query = query.where(Candidate.skills.overlap(list(skills)))

        if sort is None:
            query = query.order_by(Candidate.created_at.desc())
        else:
            column = getattr(Candidate, sort[0])
            query = query.order_by(column.desc() if sort[1] else column.asc())

        query = query.limit(limit).offset(offset)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_created_between(
        self,
        scope: Optional[VisibilityScope],
        start: datetime,
        end: datetime,
        pipeline_status: Optional[str] = None,
    ) -> List[Candidate]:
        query = self._scoped(
            select(Candidate).where(Candidate.created_at >= start, Candidate.created_at < end),
            scope,
        )
        if pipeline_status is not None:
            query = query.where(Candidate.pipeline_status == pipeline_status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def add(self, candidate: Candidate) -> Candidate:
        self.db.add(candidate)
        await self.db.flush()
        await self.db.refresh(candidate)
        return candidate

    async def delete(self, candidate: Candidate) -> None:
        await self.db.delete(candidate)
        await self.db.flush()
