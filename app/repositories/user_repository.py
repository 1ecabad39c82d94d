"""
User repository - database operations for User and agency memberships.
"""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func, false
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import ScopeKind, VisibilityScope
from app.models.user import User, UserAgency


def user_visibility_clause(scope: VisibilityScope):
    if scope.kind == ScopeKind.ALL:
        return None
    if scope.kind == ScopeKind.DEPARTMENT:
        return User.departamento == scope.departamento
    if scope.kind == ScopeKind.OWNERS:
        return User.id.in_(list(scope.owner_ids))
    return false()


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        if not username or not username.strip():
            return None
        result = await self.db.execute(
            select(User).where(User.username == username.strip())
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        if not email or not email.strip():
            return None
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(User))
        return int(result.scalar_one())

    async def get_many(self, user_ids: Iterable[UUID]) -> List[User]:
        ids = list(set(user_ids))
        if not ids:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def team_ids(self, broker_id: UUID) -> List[UUID]:
        """Ids of the users whose team broker is broker_id."""
        result = await self.db.execute(
            select(User.id).where(User.broker_equipa_id == broker_id)
        )
        return list(result.scalars().all())

    async def list(
        self,
        scope: Optional[VisibilityScope],
        status: Optional[str] = "ativo",
        skip: int = 0,
        limit: int = 100,
    ) -> List[User]:
        query = select(User)
        if scope is not None:
            clause = user_visibility_clause(scope)
            if clause is not None:
                query = query.where(clause)
        if status is not None:
            query = query.where(User.status == status)
        result = await self.db.execute(
            query.order_by(User.nome.asc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())

    async def add(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def save(self, user: User) -> User:
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def get_membership(self, user_id: UUID, agencia_id: UUID) -> Optional[UserAgency]:
        result = await self.db.execute(
            select(UserAgency).where(
                UserAgency.user_id == user_id,
                UserAgency.agencia_id == agencia_id,
            )
        )
        return result.scalar_one_or_none()
