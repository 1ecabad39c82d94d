"""
Agency and Department business logic.

Both are organizational records: only Admin and Manager may write them, and
deletion is a soft inactivation.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Actor, can_access_agency, can_manage_organization
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.db.session import commit_or_conflict
from app.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from app.models.agency import Agency, Department
from app.repositories.agency_repository import AgencyRepository, DepartmentRepository
from app.schemas.agency import AgencyCreate, AgencyUpdate, DepartmentCreate, DepartmentUpdate
from app.utils.canonical_json import row_payload

logger = logging.getLogger(__name__)


def ensure_organization_admin(actor: Actor) -> None:
    if not can_manage_organization(actor):
        raise PermissionDeniedError("Apenas Admin e Manager podem gerir agências e departamentos")


def _unique(ids) -> list:
    return list(dict.fromkeys(ids or []))


class AgencyService:
    """Service for agency business logic."""

    MIRROR_TABLE = "agency"

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[AgencyRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
    ):
        self.db = db
        self.repository = repository or AgencyRepository(db)
        self.mirror = mirror or NullMirror()

    async def _get(self, agency_id: UUID) -> Agency:
        agency = await self.repository.get_by_id(agency_id)
        if agency is None:
            raise NotFoundError("Agência não encontrada")
        return agency

    async def _persist(self, agency: Agency) -> Agency:
        await self.repository.save(agency)
        await commit_or_conflict(self.db)
        await mirror_best_effort(self.mirror, self.MIRROR_TABLE, row_payload(agency))
        return agency

    async def create_agency(self, actor: Actor, data: AgencyCreate) -> Agency:
        ensure_organization_admin(actor)
        agency = Agency(
            id=uuid.uuid4(),
            nome=data.nome.strip(),
            manager_id=data.manager_id,
            diretores=_unique(data.diretores),
            departamentos=_unique(data.departamentos),
            employees=_unique(data.employees),
            status="ativo",
        )
        await self.repository.add(agency)
        logger.info("Agency %s created by %s", agency.id, actor.id)
        return await self._persist(agency)

    async def list_agencies(self, actor: Actor, status: Optional[str] = "ativo") -> List[Agency]:
        """Top tier sees every agency; others only their active memberships."""
        agency_ids = None if actor.is_top_tier else list(actor.agency_ids)
        return await self.repository.list(agency_ids=agency_ids, status=status)

    async def get_agency(self, actor: Actor, agency_id: UUID) -> Agency:
        if not can_access_agency(actor, agency_id):
            raise PermissionDeniedError("Sem acesso a esta agência")
        return await self._get(agency_id)

    async def update_agency(self, actor: Actor, agency_id: UUID, data: AgencyUpdate) -> Agency:
        ensure_organization_admin(actor)
        agency = await self._get(agency_id)
        update_data = data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if field in ("diretores", "departamentos", "employees"):
                value = _unique(value)
            setattr(agency, field, value)
        logger.info("Agency %s updated by %s: %s", agency.id, actor.id, sorted(update_data))
        return await self._persist(agency)

    async def inactivate_agency(self, actor: Actor, agency_id: UUID) -> Agency:
        ensure_organization_admin(actor)
        agency = await self._get(agency_id)
        if agency.status == "inativo":
            raise ValidationError("Agência já está inativa")
        agency.status = "inativo"
        logger.info("Agency %s inactivated by %s", agency.id, actor.id)
        return await self._persist(agency)

    async def reactivate_agency(self, actor: Actor, agency_id: UUID) -> Agency:
        ensure_organization_admin(actor)
        agency = await self._get(agency_id)
        if agency.status == "ativo":
            raise ValidationError("Agência já está ativa")
        agency.status = "ativo"
        logger.info("Agency %s reactivated by %s", agency.id, actor.id)
        return await self._persist(agency)


class DepartmentService:
    """Service for department business logic."""

    MIRROR_TABLE = "department"

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[DepartmentRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
    ):
        self.db = db
        self.repository = repository or DepartmentRepository(db)
        self.mirror = mirror or NullMirror()

    async def _get(self, department_id: UUID) -> Department:
        department = await self.repository.get_by_id(department_id)
        if department is None:
            raise NotFoundError("Departamento não encontrado")
        return department

    async def _ensure_unique_name(self, nome: str, exclude_id: Optional[UUID] = None) -> None:
        existing = await self.repository.get_by_nome(nome)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"Departamento já existe: {nome}")

    async def _persist(self, department: Department) -> Department:
        await self.repository.save(department)
        await commit_or_conflict(self.db)
        await mirror_best_effort(self.mirror, self.MIRROR_TABLE, row_payload(department))
        return department

    async def create_department(self, actor: Actor, data: DepartmentCreate) -> Department:
        ensure_organization_admin(actor)
        nome = data.nome.strip()
        await self._ensure_unique_name(nome)
        department = Department(
            id=uuid.uuid4(),
            nome=nome,
            manager_id=data.manager_id,
            agencias=_unique(data.agencias),
            status="ativo",
        )
        await self.repository.add(department)
        logger.info("Department %s created by %s", department.id, actor.id)
        return await self._persist(department)

    async def list_departments(self, status: Optional[str] = "ativo") -> List[Department]:
        return await self.repository.list(status=status)

    async def update_department(self, actor: Actor, department_id: UUID, data: DepartmentUpdate) -> Department:
        ensure_organization_admin(actor)
        department = await self._get(department_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("nome"):
            update_data["nome"] = update_data["nome"].strip()
            await self._ensure_unique_name(update_data["nome"], exclude_id=department.id)
        if "agencias" in update_data:
            update_data["agencias"] = _unique(update_data["agencias"])
        for field, value in update_data.items():
            setattr(department, field, value)
        logger.info("Department %s updated by %s: %s", department.id, actor.id, sorted(update_data))
        return await self._persist(department)

    async def inactivate_department(self, actor: Actor, department_id: UUID) -> Department:
        ensure_organization_admin(actor)
        department = await self._get(department_id)
        department.status = "inativo"
        logger.info("Department %s inactivated by %s", department.id, actor.id)
        return await self._persist(department)
