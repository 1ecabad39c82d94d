import asyncio
import uuid
from datetime import datetime, timezone

import pytest

from app.core.pipeline import stamp_stage_entry
from app.core.responsibility import new_responsible
from app.core.roles import Role
from app.models.candidate import Candidate
from app.models.cv_analysis import CVAnalysis
from app.services.report_service import ReportService

from conftest import (
    FakeCVAnalysisRepository,
    FakeCandidateRepository,
    FakeMirror,
    FakeSession,
    FakeUserRepository,
    make_actor,
    make_user,
)


pytestmark = pytest.mark.unit

NOW = datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc)
THIS_WEEK = datetime(2026, 10, 13, 9, 0, tzinfo=timezone.utc)
LAST_MONTH = datetime(2026, 9, 20, 9, 0, tzinfo=timezone.utc)


def candidate(stage, created_at, departamento="RH", responsibles=()):
    return Candidate(
        id=uuid.uuid4(),
        nome="C",
        email=f"{uuid.uuid4().hex[:6]}@x.com",
        telefone="9",
        departamento=departamento,
        status="ativo",
        pipeline_status=stage,
        metricas=stamp_stage_entry({}, stage, created_at),
        responsaveis=[new_responsible(u, created_at) for u in responsibles],
        created_at=created_at,
        updated_at=created_at,
    )


def analysis(pontuacao, created_at, owner, departamento="RH", analyst=None):
    return CVAnalysis(
        id=uuid.uuid4(),
        analise="x",
        pontuacao=pontuacao,
        status="Concluída",
        dono_id=owner,
        departamento_dono=departamento,
        analisado_por_id=analyst,
        created_at=created_at,
        updated_at=created_at,
    )


def service(candidates=(), analyses=(), users=(), mirror=None):
    candidate_repository = FakeCandidateRepository()
    for c in candidates:
        candidate_repository.items[c.id] = c
    cv_repository = FakeCVAnalysisRepository()
    for a in analyses:
        cv_repository.items[a.id] = a
    return ReportService(
        FakeSession(),
        candidate_repository=candidate_repository,
        cv_repository=cv_repository,
        user_repository=FakeUserRepository(users),
        mirror=mirror or FakeMirror(),
        clock=lambda: NOW,
    )


def test_dashboard_counts_window_and_scope():
    owner = uuid.uuid4()
    mirror = FakeMirror()
    svc = service(
        candidates=[
            candidate("lead", THIS_WEEK, responsibles=[owner]),
            candidate("recrutado", THIS_WEEK, departamento="Comercial", responsibles=[owner]),
            candidate("lead", LAST_MONTH, responsibles=[owner]),
        ],
        analyses=[analysis(6, THIS_WEEK, owner), analysis(9, THIS_WEEK, owner, departamento="Comercial")],
        mirror=mirror,
    )

    manager_view = asyncio.run(svc.dashboard(make_actor(Role.MANAGER, None)))
    assert manager_view.periodo == "semana"
    assert manager_view.candidatos.total == 2
    assert manager_view.cv_analises.pontuacao_media == 7.5

    director_view = asyncio.run(svc.dashboard(make_actor(Role.DIRETOR_RH, "RH"), "mes"))
    assert director_view.candidatos.total == 1
    assert director_view.candidatos.leads == 1
    assert director_view.cv_analises.total_analises == 1

    assert [t for t, _ in mirror.rows] == ["report_dashboard", "report_dashboard"]


def test_funnel_lists_every_stage():
    svc = service(candidates=[candidate("entrevista", THIS_WEEK), candidate("entrevista", LAST_MONTH)])
    funnel = asyncio.run(svc.funnel(make_actor(Role.ADMIN, None), "ano"))
    assert funnel.etapas["entrevista"] == 2
    assert funnel.etapas["identificacao"] == 0
    assert len(funnel.etapas) == 9


def test_rankings_credit_every_responsible():
    ana, bruno = make_user(nome="Ana"), make_user(nome="Bruno")
    svc = service(
        candidates=[
            candidate("recrutado", THIS_WEEK, responsibles=[ana.id, bruno.id]),
            candidate("recrutado", THIS_WEEK, responsibles=[ana.id]),
            candidate("lead", THIS_WEEK, responsibles=[bruno.id]),
            candidate("recrutado", LAST_MONTH, responsibles=[bruno.id]),
        ],
        analyses=[analysis(5, THIS_WEEK, owner=ana.id, analyst=bruno.id)],
        users=[ana, bruno],
    )

    report = asyncio.run(svc.rankings())

    assert (report.mes, report.ano) == (10, 2026)
    assert [(e.nome, e.recrutados, e.analises_feitas, e.pontuacao, e.posicao) for e in report.ranking] == [
        ("Ana", 2, 0, 4, 1),
        ("Bruno", 1, 1, 3, 2),
    ]


def test_rankings_for_previous_month():
    ana = make_user(nome="Ana")
    svc = service(candidates=[candidate("recrutado", LAST_MONTH, responsibles=[ana.id])], users=[ana])
    report = asyncio.run(svc.rankings(month=9, year=2026))
    assert [e.recrutados for e in report.ranking] == [1]
