"""
Candidate business logic service.

Every mutation is access-checked, appends history, touches ``updated_at`` so
the version counter guards against lost updates, commits the primary store
and then mirrors the row.
"""

import logging
import uuid
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Action, Actor, ensure_access, visibility_scope
from app.core.pipeline import (
    INITIAL_STATUS,
    PipelineStateMachine,
    history_entry,
    stamp_stage_entry,
)
from app.core.responsibility import (
    attach_responsible,
    is_active_responsible,
    new_responsible,
    set_responsible_status,
)
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.db.session import commit_or_conflict
from app.errors import DependencyError, NotFoundError, ValidationError
from app.models.candidate import Candidate
from app.repositories.candidate_repository import CandidateRepository
from app.schemas.candidate import (
    CandidateCreate,
    CandidateUpdate,
    InteractionRequest,
    StatusChangeRequest,
)
from app.services.notification_service import DatabaseNotificationSink, NotificationSink
from app.utils.canonical_json import row_payload
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

MIRROR_TABLE = "candidate"

SORTABLE_FIELDS = frozenset({
    "nome",
    "email",
    "status",
    "pipeline_status",
    "departamento",
    "importancia",
    "origem_contato",
    "created_at",
    "updated_at",
})


def parse_sort(sort: Optional[str]) -> Optional[Tuple[str, bool]]:
    """Parse ``field:asc|desc`` into (field, descending)."""
    if not sort:
        return None
    field, _, order = sort.partition(":")
    field = field.strip()
    order = (order or "asc").strip().lower()
    if field not in SORTABLE_FIELDS:
        raise ValidationError(
            f"Campo de ordenação inválido: {field!r}",
            details={"allowed": sorted(SORTABLE_FIELDS)},
        )
    if order not in ("asc", "desc"):
        raise ValidationError(f"Ordem inválida: {order!r}")
    return field, order == "desc"


def parse_skills(skills: Optional[str]) -> List[str]:
    if not skills:
        return []
    return [s.strip() for s in skills.split(",") if s.strip()]


def natural_key(email: str, telefone: str) -> Tuple[str, str]:
    return email.strip().lower(), telefone.strip()


def candidate_mirror_row(candidate: Candidate) -> dict:
    row = row_payload(candidate)
    row["responsaveis"] = [
        {"user_id": str(r.user_id), "status": r.status} for r in candidate.responsaveis
    ]
    return row


def ensure_referral_consistent(candidate: Candidate) -> None:
    if candidate.indicacao and (not candidate.nivel_indicacao or not candidate.responsavel_indicacao):
        raise ValidationError(
            "nivel_indicacao e responsavel_indicacao são obrigatórios quando indicacao é verdadeiro"
        )


def build_candidate(data: CandidateCreate, actor: Actor, now=None) -> Candidate:
    """New candidate with actor as its sole active responsible party."""
    now = now or utc_now()
    email, telefone = natural_key(data.email, data.telefone)
    fields = data.model_dump(exclude={"nome", "email", "telefone"})
    candidate = Candidate(
        id=uuid.uuid4(),
        nome=data.nome.strip(),
        email=email,
        telefone=telefone,
        status="ativo",
        pipeline_status=INITIAL_STATUS.value,
        metricas=stamp_stage_entry({}, INITIAL_STATUS.value, now),
        criado_por=actor.id,
        responsaveis=[new_responsible(actor.id, now)],
        historico=[history_entry("sistema", "Candidato cadastrado no sistema", actor.id, now)],
        **fields,
    )
    if not is_active_responsible(candidate, actor.id):
        raise ValidationError("O candidato deve ter pelo menos um responsável ativo")
    return candidate


class CandidateService:
    """Service for candidate business logic."""

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[CandidateRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
        notification_sink: Optional[NotificationSink] = None,
        pipeline: Optional[PipelineStateMachine] = None,
    ):
        self.db = db
        self.repository = repository or CandidateRepository(db)
        self.mirror = mirror or NullMirror()
        if pipeline is None:
            pipeline = PipelineStateMachine(notification_sink or DatabaseNotificationSink(db))
        self.pipeline = pipeline

    async def _load(self, actor: Actor, candidate_id: UUID, action: Action) -> Candidate:
        candidate = await self.repository.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("Candidato não encontrado")
        ensure_access(actor, candidate, action)
        return candidate

    async def _persist(self, candidate: Candidate) -> Candidate:
        # Parent row must be updated so the version counter is checked
        candidate.updated_at = utc_now()
        await commit_or_conflict(self.db)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, candidate_mirror_row(candidate))
        return candidate

    async def find_or_attach(self, data: CandidateCreate, actor: Actor) -> Tuple[bool, Candidate]:
        """
        Create a candidate, or attach actor to the existing one with the same
        natural key.

        Returns:
            (created, candidate)

        Raises:
            DependencyError: the mirror rejected a new candidate; the primary
                record has been removed again
        """
        email, telefone = natural_key(data.email, data.telefone)
        existing = await self.repository.find_by_natural_key(email, telefone)
        if existing is not None:
            if attach_responsible(existing, actor.id, actor.id, actor.nome):
                await self._persist(existing)
            logger.info("Candidate %s matched natural key, actor %s attached", existing.id, actor.id)
            return False, existing

        candidate = build_candidate(data, actor)
        await self.repository.add(candidate)
        await commit_or_conflict(self.db)

        try:
            await self.mirror.write(MIRROR_TABLE, candidate_mirror_row(candidate))
        except DependencyError as e:
            logger.exception("Mirror rejected candidate %s, removing primary record", candidate.id)
            await self.repository.delete(candidate)
            await self.db.commit()
            raise DependencyError(
                "Erro ao gravar candidato no armazenamento secundário",
                details=e.details,
            ) from e

        logger.info("Candidate %s created by %s", candidate.id, actor.id)
        return True, candidate

    async def list_candidates(
        self,
        actor: Actor,
        status: Optional[str] = None,
        pipeline_status: Optional[str] = None,
        departamento: Optional[str] = None,
        origem_contato: Optional[str] = None,
        skills: Optional[str] = None,
        sort: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Candidate]:
        return await self.repository.list(
            visibility_scope(actor),
            status=status,
            pipeline_status=pipeline_status,
            departamento=departamento,
            origem_contato=origem_contato,
            skills=parse_skills(skills),
            sort=parse_sort(sort),
            limit=limit,
            offset=offset,
        )

    async def list_inactive(self, actor: Actor) -> List[Candidate]:
        return await self.repository.list(
            visibility_scope(actor),
            status="inativo",
            sort=("updated_at", True),
        )

    async def get_candidate(self, actor: Actor, candidate_id: UUID) -> Candidate:
        return await self._load(actor, candidate_id, Action.READ)

    async def update_candidate(self, actor: Actor, candidate_id: UUID, data: CandidateUpdate) -> Candidate:
        candidate = await self._load(actor, candidate_id, Action.WRITE)

        update_data = data.model_dump(exclude_unset=True)
        if "email" in update_data and update_data["email"] is not None:
            update_data["email"] = update_data["email"].strip().lower()
        if "telefone" in update_data and update_data["telefone"] is not None:
            update_data["telefone"] = update_data["telefone"].strip()
        for field, value in update_data.items():
            setattr(candidate, field, value)
        ensure_referral_consistent(candidate)

        candidate.historico.append(
            history_entry("atualizacao", "Informações atualizadas", actor.id, utc_now())
        )
        logger.info("Candidate %s updated by %s: %s", candidate.id, actor.id, sorted(update_data))
        return await self._persist(candidate)

    async def change_status(self, actor: Actor, candidate_id: UUID, data: StatusChangeRequest) -> Candidate:
        candidate = await self._load(actor, candidate_id, Action.WRITE)
        await self.pipeline.transition(candidate, data.novo_status, actor, data.observacao)
        return await self._persist(candidate)

    async def add_interaction(self, actor: Actor, candidate_id: UUID, data: InteractionRequest) -> Candidate:
        """Record an interaction; only history changes."""
        candidate = await self._load(actor, candidate_id, Action.WRITE)
        candidate.historico.append(
            history_entry("interacao", f"{data.tipo}: {data.conteudo}", actor.id, utc_now())
        )
        return await self._persist(candidate)

    async def inactivate(self, actor: Actor, candidate_id: UUID, motivo: Optional[str]) -> Candidate:
        if not motivo or not motivo.strip():
            raise ValidationError("Motivo da inativação é obrigatório")
        candidate = await self._load(actor, candidate_id, Action.WRITE)
        candidate.status = "inativo"
        candidate.motivo_inativacao = motivo.strip()
        candidate.historico.append(
            history_entry("inativacao", f"Inativado: {motivo.strip()}", actor.id, utc_now())
        )
        logger.info("Candidate %s inactivated by %s", candidate.id, actor.id)
        return await self._persist(candidate)

    async def reactivate(self, actor: Actor, candidate_id: UUID) -> Candidate:
        candidate = await self._load(actor, candidate_id, Action.WRITE)
        if candidate.status != "inativo":
            raise ValidationError("Candidato já está ativo")
        candidate.status = "ativo"
        candidate.motivo_inativacao = None
        candidate.historico.append(
            history_entry("reativacao", "Candidato reativado", actor.id, utc_now())
        )
        logger.info("Candidate %s reactivated by %s", candidate.id, actor.id)
        return await self._persist(candidate)

    async def set_responsible_status(
        self,
        actor: Actor,
        candidate_id: UUID,
        user_id: UUID,
        status: str,
    ) -> Candidate:
        candidate = await self._load(actor, candidate_id, Action.WRITE)
        set_responsible_status(candidate, user_id, status, actor.id)
        logger.info("Responsible %s of candidate %s set to %s by %s", user_id, candidate.id, status, actor.id)
        return await self._persist(candidate)
