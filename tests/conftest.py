"""
Pytest configuration and shared fixtures.

Unit tests run services against the in-memory fakes below; nothing here
touches a database.
"""

import os
import uuid
from functools import lru_cache
from typing import Dict, List, Optional

import pytest

from app.core.access_policy import Actor, department_of, owner_ids_of
from app.core.roles import Role
from app.core.security import hash_password
from app.errors import DependencyError
from app.models.user import User
from app.utils.time import utc_now


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


# Factories


@lru_cache(maxsize=None)
def hashed(password: str) -> str:
    return hash_password(password)


def make_actor(role=Role.RECRUTADOR, departamento="RH", **kwargs) -> Actor:
    return Actor(
        id=kwargs.pop("id", None) or uuid.uuid4(),
        role=role,
        departamento=departamento,
        nome=kwargs.pop("nome", f"{role.value} user"),
        **kwargs,
    )


def make_user(
    role=Role.RECRUTADOR,
    departamento: Optional[str] = "RH",
    password: str = "secret123",
    **kwargs,
) -> User:
    user_id = kwargs.pop("id", None) or uuid.uuid4()
    now = utc_now()
    fields = dict(
        id=user_id,
        username=f"user-{str(user_id)[:8]}",
        hashed_password=hashed(password),
        nome=f"User {str(user_id)[:8]}",
        email=f"{str(user_id)[:8]}@example.com",
        role=role.value if isinstance(role, Role) else role,
        departamento=departamento,
        status="ativo",
        created_at=now,
        updated_at=now,
        agencias=[],
    )
    fields.update(kwargs)
    return User(**fields)


def actor_for(user: User, team_ids=()) -> Actor:
    return Actor.from_user(user, team_ids=team_ids)


# Fakes


class FakeSession:
    """Stands in for AsyncSession; services only commit, roll back and flush."""

    def __init__(self, commit_error: Optional[Exception] = None):
        self.commits = 0
        self.rollbacks = 0
        self.added: List[object] = []
        self.commit_error = commit_error

    def add(self, obj) -> None:
        self.added.append(obj)

    async def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    async def flush(self) -> None:
        return None

    async def refresh(self, obj) -> None:
        return None


def _stamp(obj) -> None:
    now = utc_now()
    if getattr(obj, "created_at", None) is None:
        obj.created_at = now
    if getattr(obj, "updated_at", None) is None:
        obj.updated_at = now


class FakeRepository:
    """Dict-backed repository with policy-based visibility, like the SQL clauses."""

    def __init__(self):
        self.items: Dict[uuid.UUID, object] = {}

    def _visible(self, scope, obj) -> bool:
        return scope is None or scope.allows(department_of(obj), owner_ids_of(obj))

    async def get_by_id(self, obj_id):
        return self.items.get(obj_id)

    async def add(self, obj):
        _stamp(obj)
        self.items[obj.id] = obj
        return obj

    async def save(self, obj):
        return obj

    async def delete(self, obj) -> None:
        self.items.pop(obj.id, None)

    async def list_created_between(self, scope, start, end, pipeline_status=None):
        return [
            obj for obj in self.items.values()
            if self._visible(scope, obj)
            and start <= obj.created_at < end
            and (pipeline_status is None or obj.pipeline_status == pipeline_status)
        ]


class FakeCandidateRepository(FakeRepository):
    async def add(self, candidate):
        if candidate.version is None:
            candidate.version = 1
        return await super().add(candidate)

    async def find_by_natural_key(self, email, telefone):
        for candidate in self.items.values():
            if candidate.email == email and candidate.telefone == telefone:
                return candidate
        return None

    async def list(self, scope, status=None, pipeline_status=None, departamento=None,
                   origem_contato=None, skills=None, sort=None, limit=100, offset=0):
        result = [
            c for c in self.items.values()
            if self._visible(scope, c)
            and (status is None or c.status == status)
            and (pipeline_status is None or c.pipeline_status == pipeline_status)
            and (departamento is None or c.departamento == departamento)
            and (origem_contato is None or c.origem_contato == origem_contato)
            and (not skills or set(skills) & set(c.skills or []))
        ]
        if sort is not None:
            result.sort(key=lambda c: getattr(c, sort[0]) or "", reverse=sort[1])
        return result[offset:offset + limit]


class FakeCVAnalysisRepository(FakeRepository):
    async def list(self, scope, candidato_id=None, status=None, limit=100, offset=0):
        return [
            a for a in self.items.values()
            if self._visible(scope, a)
            and (candidato_id is None or a.candidato_id == candidato_id)
            and (status is None or a.status == status)
        ][offset:offset + limit]

    async def list_created_between(self, scope, start, end):
        return [
            a for a in self.items.values()
            if self._visible(scope, a) and start <= a.created_at < end
        ]


class FakeTaskRepository(FakeRepository):
    async def list(self, scope, status=None, limit=100, offset=0):
        return [
            t for t in self.items.values()
            if self._visible(scope, t) and (status is None or t.status == status)
        ][offset:offset + limit]


class FakeAppointmentRepository(FakeRepository):
    async def list(self, start_date=None, end_date=None, status=None, member_id=None):
        result = [
            a for a in self.items.values()
            if (start_date is None or a.data >= start_date)
            and (end_date is None or a.data <= end_date)
            and (status is None or a.status == status)
            and (member_id is None or a.organizador_id == member_id or member_id in a.participantes)
        ]
        return sorted(result, key=lambda a: (a.data, a.horario))


class FakeUserRepository(FakeRepository):
    def __init__(self, users=()):
        super().__init__()
        for user in users:
            self.items[user.id] = user

    async def get_by_username(self, username):
        for user in self.items.values():
            if user.username == username:
                return user
        return None

    async def get_by_email(self, email):
        for user in self.items.values():
            if user.email.lower() == email.strip().lower():
                return user
        return None

    async def count(self):
        return len(self.items)

    async def get_many(self, user_ids):
        return [self.items[i] for i in set(user_ids) if i in self.items]

    async def team_ids(self, broker_id):
        return [u.id for u in self.items.values() if u.broker_equipa_id == broker_id]

    async def list(self, scope, status="ativo", skip=0, limit=100):
        return [
            u for u in self.items.values()
            if self._visible(scope, u) and (status is None or u.status == status)
        ][skip:skip + limit]

    async def get_membership(self, user_id, agencia_id):
        user = self.items.get(user_id)
        for membership in (user.agencias if user else []):
            if membership.agencia_id == agencia_id:
                return membership
        return None


class FakeAgencyRepository(FakeRepository):
    async def list(self, agency_ids=None, status="ativo"):
        return [
            a for a in self.items.values()
            if (agency_ids is None or a.id in agency_ids)
            and (status is None or a.status == status)
        ]

    async def get_by_nome(self, nome):
        for item in self.items.values():
            if item.nome == nome.strip():
                return item
        return None


class FakeMirror:
    """Records writes; set fail to make every call raise DependencyError."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.rows: List[tuple] = []
        self.deleted: List[tuple] = []

    async def write(self, table, row):
        if self.fail:
            raise DependencyError(f"Mirror write on {table} failed")
        self.rows.append((table, row))

    async def mark_deleted(self, table, record_id):
        if self.fail:
            raise DependencyError(f"Mirror delete on {table} failed")
        self.deleted.append((table, record_id))


class FakeNotificationSink:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events = []

    async def emit(self, event):
        if self.fail:
            raise DependencyError("Notification sink down")
        self.events.append(event)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def mirror():
    return FakeMirror()


@pytest.fixture
def sink():
    return FakeNotificationSink()
