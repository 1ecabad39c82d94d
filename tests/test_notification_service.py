"""Database notification sink."""

import asyncio
import uuid

import pytest
from sqlalchemy.orm.exc import StaleDataError

from app.core.pipeline import PipelineStateMachine
from app.errors import ConflictError
from app.models.candidate import Candidate
from app.services.notification_service import DatabaseNotificationSink, referral_success_event

from conftest import FakeSession, make_actor


pytestmark = pytest.mark.unit


class StaleFlushSession(FakeSession):
    """Flush fails the way a version-checked UPDATE does after a concurrent write."""

    def __init__(self):
        super().__init__()
        self.nested = 0

    async def flush(self) -> None:
        raise StaleDataError("UPDATE statement on table 'candidate' expected to update 1 row(s); 0 were matched.")

    def begin_nested(self):
        self.nested += 1
        raise StaleDataError("savepoint on a failed flush")


def referred_candidate():
    return Candidate(
        id=uuid.uuid4(),
        nome="Ana",
        email="a@x.com",
        telefone="911000000",
        pipeline_status="oferta",
        metricas={},
        indicacao=True,
        nivel_indicacao="1",
        responsavel_indicacao=uuid.uuid4(),
    )


def test_stale_pending_write_is_a_conflict():
    db = StaleFlushSession()
    sink = DatabaseNotificationSink(db)

    with pytest.raises(ConflictError):
        asyncio.run(sink.emit(referral_success_event(referred_candidate())))

    assert db.rollbacks == 1
    assert db.nested == 0


def test_conflict_during_referral_notification_fails_the_transition():
    machine = PipelineStateMachine(DatabaseNotificationSink(StaleFlushSession()), enforce_transitions=False)

    with pytest.raises(ConflictError):
        asyncio.run(machine.transition(referred_candidate(), "recrutado", make_actor()))
