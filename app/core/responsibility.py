"""
Responsible parties of a candidate.

Entries are never removed: they are switched between ativo and inativo.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from app.core.pipeline import history_entry
from app.errors import NotFoundError, ValidationError
from app.models.candidate import Candidate, CandidateResponsible
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

RESPONSIBLE_STATUSES = ("ativo", "inativo")


def find_responsible(candidate: Candidate, user_id: uuid.UUID) -> Optional[CandidateResponsible]:
    for entry in candidate.responsaveis or []:
        if entry.user_id == user_id:
            return entry
    return None


def is_active_responsible(candidate: Candidate, user_id: uuid.UUID) -> bool:
    entry = find_responsible(candidate, user_id)
    return entry is not None and entry.status == "ativo"


def new_responsible(user_id: uuid.UUID, now: datetime) -> CandidateResponsible:
    return CandidateResponsible(
        id=uuid.uuid4(),
        user_id=user_id,
        data_atribuicao=now,
        status="ativo",
    )


def attach_responsible(
    candidate: Candidate,
    user_id: uuid.UUID,
    author_id: Optional[uuid.UUID] = None,
    author_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Add user_id to the candidate's responsible parties.

    Idempotent: an existing entry, active or not, is left untouched. A
    "sistema" history note is written only when the entry is new.

    Returns:
        True if a new entry was added
    """
    if find_responsible(candidate, user_id) is not None:
        return False

    now = now or utc_now()
    candidate.responsaveis.append(new_responsible(user_id, now))
    candidate.historico.append(
        history_entry(
            "sistema",
            f"Novo responsável adicionado: {author_name or user_id}",
            author_id or user_id,
            now,
        )
    )
    logger.info("User %s attached as responsible of candidate %s", user_id, candidate.id)
    return True


def set_responsible_status(
    candidate: Candidate,
    user_id: uuid.UUID,
    status: str,
    author_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> CandidateResponsible:
    """
    Activate or deactivate a responsible party.

    Raises:
        ValidationError: unknown status, or the last active party would be
            deactivated
        NotFoundError: user_id is not a responsible party of the candidate
    """
    if status not in RESPONSIBLE_STATUSES:
        raise ValidationError(f"Status inválido: {status!r}")

    entry = find_responsible(candidate, user_id)
    if entry is None:
        raise NotFoundError("Responsável não encontrado")
    if entry.status == status:
        return entry

    if status == "inativo":
        others = [
            r for r in candidate.responsaveis if r.status == "ativo" and r.user_id != user_id
        ]
        if not others:
            raise ValidationError("O candidato deve manter pelo menos um responsável ativo")

    now = now or utc_now()
    entry.status = status
    candidate.historico.append(
        history_entry(
            "sistema",
            f"Responsável {user_id} {'reativado' if status == 'ativo' else 'desativado'}",
            author_id,
            now,
        )
    )
    return entry
