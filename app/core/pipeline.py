"""
Candidate pipeline state machine.

Owns ``pipeline_status``: every move stamps the entry time of the new stage,
records how long the candidate sat in the previous one and appends a history
entry. The caller persists the candidate.
"""

import enum
import logging
import uuid
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from app.core.config import settings
from app.errors import DependencyError, ValidationError
from app.models.candidate import Candidate, CandidateHistory
from app.services.notification_service import NotificationSink, referral_success_event
from app.utils.time import utc_now, elapsed_ms

logger = logging.getLogger(__name__)


class PipelineStatus(str, enum.Enum):
    IDENTIFICACAO = "identificacao"
    LEAD = "lead"
    CHAMADA = "chamada"
    AGENDAMENTO = "agendamento"
    ENTREVISTA = "entrevista"
    TESTE_PRATICO = "teste_pratico"
    OFERTA = "oferta"
    RECRUTADO = "recrutado"
    INATIVO = "inativo"


# Funnel order, used by reports
FUNNEL_STAGES = tuple(PipelineStatus)

INITIAL_STATUS = PipelineStatus.IDENTIFICACAO

_FORWARD = {
    PipelineStatus.IDENTIFICACAO: {PipelineStatus.LEAD},
    PipelineStatus.LEAD: {PipelineStatus.CHAMADA, PipelineStatus.AGENDAMENTO},
    PipelineStatus.CHAMADA: {PipelineStatus.AGENDAMENTO, PipelineStatus.LEAD},
    PipelineStatus.AGENDAMENTO: {PipelineStatus.ENTREVISTA, PipelineStatus.CHAMADA},
    PipelineStatus.ENTREVISTA: {
        PipelineStatus.TESTE_PRATICO,
        PipelineStatus.OFERTA,
        PipelineStatus.RECRUTADO,
        PipelineStatus.AGENDAMENTO,
    },
    PipelineStatus.TESTE_PRATICO: {PipelineStatus.OFERTA, PipelineStatus.RECRUTADO},
    PipelineStatus.OFERTA: {PipelineStatus.RECRUTADO},
    PipelineStatus.RECRUTADO: set(),
    PipelineStatus.INATIVO: {PipelineStatus.IDENTIFICACAO, PipelineStatus.LEAD},
}

# inativo is reachable from any stage
ALLOWED_TRANSITIONS: Dict[PipelineStatus, FrozenSet[PipelineStatus]] = {
    status: frozenset(targets | {PipelineStatus.INATIVO}) - {status}
    for status, targets in _FORWARD.items()
}


def parse_status(value) -> PipelineStatus:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Novo status é obrigatório")
    if isinstance(value, PipelineStatus):
        return value
    try:
        return PipelineStatus(value.strip())
    except ValueError:
        raise ValidationError(
            f"Status inválido: {value!r}",
            details={"allowed": [s.value for s in PipelineStatus]},
        )


def _parse_timestamp(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable stage timestamp %r", value)
        return None


def stamp_stage_entry(metricas: Optional[dict], stage: str, now: datetime) -> dict:
    """Return a new metrics map with stage entered at now."""
    updated = {k: dict(v) for k, v in (metricas or {}).items()}
    entry = updated.setdefault(stage, {})
    entry["entered_at"] = now.isoformat()
    entry.pop("dwell_ms", None)
    return updated


def history_entry(tipo: str, conteudo: str, autor_id: Optional[uuid.UUID], now: datetime) -> CandidateHistory:
    return CandidateHistory(
        id=uuid.uuid4(),
        tipo=tipo,
        conteudo=conteudo,
        data=now,
        autor_id=autor_id,
    )


class PipelineStateMachine:
    """Moves candidates between pipeline stages."""

    def __init__(
        self,
        notification_sink: Optional[NotificationSink] = None,
        enforce_transitions: Optional[bool] = None,
        clock=utc_now,
    ):
        self.notification_sink = notification_sink
        if enforce_transitions is None:
            enforce_transitions = settings.PIPELINE_ENFORCE_TRANSITIONS
        self.enforce_transitions = enforce_transitions
        self.clock = clock

    def check_transition(self, old_status: Optional[str], new_status: PipelineStatus) -> None:
        if not self.enforce_transitions or old_status is None:
            return
        try:
            old = PipelineStatus(old_status)
        except ValueError:
            return
        if new_status not in ALLOWED_TRANSITIONS[old]:
            raise ValidationError(
                f"Transição não permitida: {old.value} -> {new_status.value}",
                details={"allowed": sorted(s.value for s in ALLOWED_TRANSITIONS[old])},
            )

    async def transition(
        self,
        candidate: Candidate,
        new_status,
        actor,
        note: Optional[str] = None,
    ) -> Candidate:
        """
        Move candidate to new_status.

        Args:
            candidate: Loaded candidate (already access-checked)
            new_status: Target stage name
            actor: Actor performing the move
            note: Optional observation appended to the history text

        Returns:
            The same candidate, mutated

        Raises:
            ValidationError: new_status empty, unknown, or not allowed while
                transitions are enforced
        """
        new_status = parse_status(new_status)
        old_status = candidate.pipeline_status
        self.check_transition(old_status, new_status)

        now = self.clock()
        metricas = stamp_stage_entry(candidate.metricas, new_status.value, now)
        if old_status and old_status in metricas and old_status != new_status.value:
            entered = _parse_timestamp(metricas[old_status].get("entered_at"))
            if entered is not None:
                metricas[old_status]["dwell_ms"] = elapsed_ms(entered, now)

        candidate.pipeline_status = new_status.value
        candidate.metricas = metricas

        text = f"Status alterado de {old_status} para {new_status.value}"
        if note:
            text += f": {note}"
        candidate.historico.append(history_entry("mudanca_status", text, actor.id, now))

        logger.info(
            "Candidate %s moved %s -> %s by %s",
            candidate.id, old_status, new_status.value, actor.id,
        )

        if (
            new_status == PipelineStatus.RECRUTADO
            and candidate.indicacao
            and candidate.responsavel_indicacao
        ):
            await self._notify_referrer(candidate)

        return candidate

    async def _notify_referrer(self, candidate: Candidate) -> None:
        if self.notification_sink is None:
            return
        try:
            await self.notification_sink.emit(referral_success_event(candidate))
        except DependencyError as e:
            logger.warning("Referral notification for candidate %s failed: %s", candidate.id, e)
