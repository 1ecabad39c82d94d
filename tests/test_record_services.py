"""CV analysis and task services."""

import asyncio
import uuid

import pytest

from app.core.roles import Role
from app.errors import NotFoundError, PermissionDeniedError
from app.schemas.cv_analysis import CVAnalysisCreate, CVAnalysisUpdate
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.cv_analysis_service import CVAnalysisService
from app.services.task_service import TaskService

from conftest import (
    FakeCVAnalysisRepository,
    FakeMirror,
    FakeSession,
    FakeTaskRepository,
    make_actor,
)


pytestmark = pytest.mark.unit


def cv_service(mirror=None):
    return CVAnalysisService(FakeSession(), repository=FakeCVAnalysisRepository(), mirror=mirror or FakeMirror())


def task_service(mirror=None):
    return TaskService(FakeSession(), repository=FakeTaskRepository(), mirror=mirror or FakeMirror())


def test_analysis_owned_by_creator_and_department():
    actor = make_actor(departamento="RH")
    analysis = asyncio.run(cv_service().create_analysis(actor, CVAnalysisCreate(analise="Bom perfil", pontuacao=8)))

    assert analysis.dono_id == actor.id
    assert analysis.departamento_dono == "RH"
    assert analysis.analisado_por_id == actor.id
    assert analysis.status == "Em análise"
    assert analysis.data_analise is not None


def test_analysis_visibility():
    svc = cv_service()
    owner = make_actor(departamento="RH")
    analysis = asyncio.run(svc.create_analysis(owner, CVAnalysisCreate(analise="ok")))

    assert asyncio.run(svc.get_analysis(make_actor(Role.DIRETOR_RH, "RH"), analysis.id)) is analysis
    with pytest.raises(PermissionDeniedError):
        asyncio.run(svc.get_analysis(make_actor(Role.DIRETOR_COMERCIAL, "Comercial"), analysis.id))
    with pytest.raises(PermissionDeniedError):
        asyncio.run(svc.update_analysis(make_actor(departamento="RH"), analysis.id, CVAnalysisUpdate(pontuacao=3)))
    assert asyncio.run(svc.list_analyses(make_actor(departamento="RH"))) == []


def test_analysis_delete_is_mirrored():
    mirror = FakeMirror()
    svc = cv_service(mirror)
    owner = make_actor()
    analysis = asyncio.run(svc.create_analysis(owner, CVAnalysisCreate(analise="ok")))

    asyncio.run(svc.delete_analysis(owner, analysis.id))

    assert mirror.deleted == [("cv_analysis", analysis.id)]
    with pytest.raises(NotFoundError):
        asyncio.run(svc.get_analysis(owner, analysis.id))


def test_analysis_owner_cannot_be_changed():
    with pytest.raises(Exception):
        CVAnalysisUpdate(dono_id=str(uuid.uuid4()))
    with pytest.raises(Exception):
        CVAnalysisUpdate(analisado_por_id=str(uuid.uuid4()))


def test_analyst_is_always_the_creator():
    actor = make_actor(departamento="RH")
    other = uuid.uuid4()
    data = CVAnalysisCreate.model_validate({"analise": "ok", "analisado_por_id": str(other)})

    analysis = asyncio.run(cv_service().create_analysis(actor, data))

    assert analysis.analisado_por_id == actor.id


def test_task_defaults():
    actor = make_actor(departamento="Financeiro")
    assignee = uuid.uuid4()
    task = asyncio.run(
        task_service().create_task(
            actor,
            TaskCreate(titulo="Relatório", descricao="Fechar mês", responsaveis=[assignee, assignee]),
        )
    )

    assert task.status == "Pendente"
    assert task.criador_id == actor.id
    assert task.departamento == "Financeiro"
    assert task.responsaveis == [assignee]


def test_task_visible_to_observer_and_editable():
    svc = task_service()
    creator, observer, stranger = make_actor(), make_actor(), make_actor()
    task = asyncio.run(
        svc.create_task(creator, TaskCreate(titulo="t", descricao="d", acompanhantes=[observer.id]))
    )

    assert [t.id for t in asyncio.run(svc.list_tasks(observer))] == [task.id]
    asyncio.run(svc.update_task(observer, task.id, TaskUpdate(status="Concluída")))
    assert task.status == "Concluída"
    with pytest.raises(PermissionDeniedError):
        asyncio.run(svc.get_task(stranger, task.id))


def test_task_delete():
    mirror = FakeMirror()
    svc = task_service(mirror)
    creator = make_actor()
    task = asyncio.run(svc.create_task(creator, TaskCreate(titulo="t", descricao="d")))

    asyncio.run(svc.delete_task(creator, task.id))

    assert asyncio.run(svc.list_tasks(make_actor(Role.ADMIN, None))) == []
    assert mirror.deleted == [("task", task.id)]
