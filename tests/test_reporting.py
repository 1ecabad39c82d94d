"""Period windows, dashboard math and rankings."""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from app.core.reporting import (
    build_rankings,
    dashboard_metrics,
    month_window,
    resolve_period,
    score_counts,
    stage_counts,
)
from app.errors import ValidationError


pytestmark = pytest.mark.unit

NOW = datetime(2026, 10, 15, 14, 30, tzinfo=timezone.utc)  # a Thursday


def test_week_starts_monday_midnight():
    period = resolve_period("semana", NOW)
    assert period.start == datetime(2026, 10, 12, tzinfo=timezone.utc)
    assert period.end == datetime(2026, 10, 19, tzinfo=timezone.utc)
    assert period.contains(NOW)
    assert not period.contains(period.end)


def test_month_and_year_windows():
    assert resolve_period("mes", NOW).start == datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert resolve_period("month", NOW).end == datetime(2026, 11, 1, tzinfo=timezone.utc)
    year = resolve_period("ano", NOW)
    assert (year.start, year.end) == (
        datetime(2026, 1, 1, tzinfo=timezone.utc),
        datetime(2027, 1, 1, tzinfo=timezone.utc),
    )


def test_december_window_rolls_over():
    start, end = month_window(2026, 12)
    assert end == datetime(2027, 1, 1, tzinfo=timezone.utc)


def test_default_period_is_week():
    assert resolve_period(None, NOW).name == "semana"


def test_invalid_period_and_month():
    with pytest.raises(ValidationError):
        resolve_period("trimestre", NOW)
    with pytest.raises(ValidationError):
        month_window(2026, 13)


def test_stage_counts_cover_every_stage():
    counts = stage_counts(["lead", "lead", "recrutado"])
    assert counts["lead"] == 2
    assert counts["recrutado"] == 1
    assert counts["identificacao"] == 0


def test_dashboard_metrics_mean_rounded():
    metrics = dashboard_metrics(
        ["lead", "entrevista", "recrutado", "inativo", "oferta"],
        [7.0, 8.0, 8.0],
    )
    assert metrics["candidatos"] == {
        "total": 5,
        "leads": 1,
        "entrevistas": 1,
        "recrutados": 1,
        "inativos": 1,
    }
    assert metrics["cv_analises"] == {"total_analises": 3, "pontuacao_media": 7.67}


def test_dashboard_metrics_empty_mean_is_zero():
    assert dashboard_metrics([], [])["cv_analises"]["pontuacao_media"] == 0


def user(nome):
    return SimpleNamespace(id=uuid.uuid4(), nome=nome, email=f"{nome.lower()}@x.com")


def test_recruitment_credited_to_every_responsible():
    a, b = uuid.uuid4(), uuid.uuid4()
    recruited, analyses = score_counts([[a, b], [a]], [b, None])
    assert recruited == {a: 2, b: 1}
    assert analyses == {b: 1}


def test_standard_competition_ranking():
    ana, bruno, carla, duarte = user("Ana"), user("Bruno"), user("Carla"), user("Duarte")
    recruited = {ana.id: 2, bruno.id: 1, carla.id: 1}
    analyses = {bruno.id: 2, carla.id: 2, duarte.id: 1}

    ranking = build_rankings([duarte, carla, bruno, ana], recruited, analyses)

    assert [(e.nome, e.pontuacao, e.posicao) for e in ranking] == [
        ("Ana", 4, 1),
        ("Bruno", 4, 1),
        ("Carla", 4, 1),
        ("Duarte", 1, 4),
    ]


def test_rankings_are_stable_across_calls():
    users = [user("Ana"), user("Bruno"), user("Carla")]
    recruited = {users[1].id: 1, users[2].id: 1}
    first = [(e.user_id, e.posicao) for e in build_rankings(users, recruited, {})]
    second = [(e.user_id, e.posicao) for e in build_rankings(list(reversed(users)), recruited, {})]
    assert first == second


def test_extra_recruitment_never_lowers_rank():
    users = [user("Ana"), user("Bruno"), user("Carla")]
    target = users[2]
    recruited = {users[0].id: 2, users[1].id: 1, target.id: 1}

    before = {e.user_id: e.posicao for e in build_rankings(users, dict(recruited), {})}
    recruited[target.id] += 1
    after = {e.user_id: e.posicao for e in build_rankings(users, dict(recruited), {})}

    assert after[target.id] <= before[target.id]
