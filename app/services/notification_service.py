"""
Notification sink.

Emission is fire-and-forget from the caller's point of view: callers catch
and log failures, the sink itself raises DependencyError.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import flush_or_conflict
from app.errors import DependencyError
from app.models.notification import Notification
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

REFERRAL_SUCCESS = "indicacao_sucesso"


@dataclass(frozen=True)
class NotificationEvent:
    user_id: uuid.UUID
    tipo: str
    conteudo: str


def referral_success_event(candidate) -> NotificationEvent:
    return NotificationEvent(
        user_id=candidate.responsavel_indicacao,
        tipo=REFERRAL_SUCCESS,
        conteudo=(
            f"Sua indicação para {candidate.nome} foi recrutada com sucesso! "
            "Você receberá sua recompensa em breve."
        ),
    )


class NotificationSink:
    """Interface for delivering notification events."""

    async def emit(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class DatabaseNotificationSink(NotificationSink):
    """Stores notifications as rows, inside a SAVEPOINT of the caller's session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def emit(self, event: NotificationEvent) -> None:
        # Flushes caller writes first; a stale version raises ConflictError here
        await flush_or_conflict(self.db)
        try:
            async with self.db.begin_nested():
                self.db.add(
                    Notification(
                        id=uuid.uuid4(),
                        user_id=event.user_id,
                        tipo=event.tipo,
                        conteudo=event.conteudo,
                        data=utc_now(),
                        lida=False,
                    )
                )
        except SQLAlchemyError as e:
            raise DependencyError(
                "Failed to store notification",
                details={"user_id": str(event.user_id), "tipo": event.tipo},
            ) from e
        logger.info("Notification %s stored for user %s", event.tipo, event.user_id)
