"""
User administration against a migrated PostgreSQL database.

Run with RUN_DB_TESTS=1 after `alembic upgrade head`.
"""

import asyncio
import uuid

import pytest

from app.core.roles import Role
from app.db.session import AsyncSessionLocal
from app.models.user import User
from app.schemas.user import BrokerAssignmentRequest, UserUpdate
from app.services.user_service import UserService

from conftest import FakeMirror, actor_for, make_user


def _user(role, departamento, **kwargs):
    suffix = uuid.uuid4().hex[:10]
    return make_user(role, departamento, username=f"db-{suffix}", email=f"{suffix}@example.com", **kwargs)


async def _store(*users):
    async with AsyncSessionLocal() as db:
        db.add_all(users)
        await db.commit()


async def _cleanup(users):
    async with AsyncSessionLocal() as db:
        for user in users:
            stored = await db.get(User, user.id)
            if stored is not None:
                await db.delete(stored)
                await db.commit()


@pytest.mark.db
def test_user_mutations_mirror_after_commit():
    async def main():
        admin = _user(Role.ADMIN, None)
        broker = _user(Role.BROKER_EQUIPA, "Comercial")
        target = _user(Role.EMPLOYEE, "Comercial")
        users = [target, broker, admin]
        await _store(admin, broker, target)
        actor = actor_for(admin)
        mirror = FakeMirror()
        try:
            async with AsyncSessionLocal() as db:
                svc = UserService(db, mirror=mirror)
                await svc.update_user(actor, target.id, UserUpdate(nome="Novo Nome"))
                await svc.assign_broker(actor, BrokerAssignmentRequest(user_id=target.id, broker_id=broker.id))
                await svc.inactivate_user(actor, target.id, "Saiu")
                await svc.reactivate_user(actor, target.id)

            assert [table for table, _ in mirror.rows] == ["user"] * 4
            first, *_, last = (row for _, row in mirror.rows)
            assert first["nome"] == "Novo Nome"
            assert first["updated_at"] is not None
            assert last["status"] == "ativo"
            assert last["broker_equipa_id"] == str(broker.id)

            async with AsyncSessionLocal() as db:
                stored = await db.get(User, target.id)
                assert stored.nome == "Novo Nome"
                assert stored.broker_equipa_id == broker.id
        finally:
            await _cleanup(users)

    asyncio.run(main())
