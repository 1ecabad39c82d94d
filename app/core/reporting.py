"""
Pure helpers for the reports: period windows, counts and rankings.

Windows are half-open ``[start, end)`` and computed in UTC.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from app.core.pipeline import FUNNEL_STAGES, PipelineStatus
from app.errors import ValidationError

PERIOD_ALIASES = {
    "semana": "semana",
    "week": "semana",
    "mes": "mes",
    "month": "mes",
    "ano": "ano",
    "year": "ano",
}

DEFAULT_PERIOD = "semana"

RECRUITED_WEIGHT = 2
CV_ANALYSIS_WEIGHT = 1


@dataclass(frozen=True)
class Period:
    name: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def month_window(year: int, month: int) -> Tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValidationError(f"Mês inválido: {month}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def resolve_period(period: Optional[str], now: datetime) -> Period:
    """
    Resolve a period name into its window.

    semana: Monday 00:00 of the current week through the next Monday.
    mes: first of the month through the first of the next month.
    ano: Jan 1 through the next Jan 1.
    """
    name = PERIOD_ALIASES.get((period or DEFAULT_PERIOD).strip().lower())
    if name is None:
        raise ValidationError(
            f"Período inválido: {period!r}",
            details={"allowed": sorted(PERIOD_ALIASES)},
        )

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if name == "mes":
        start, end = month_window(now.year, now.month)
    elif name == "ano":
        start = datetime(now.year, 1, 1, tzinfo=timezone.utc)
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        start = _midnight(now) - timedelta(days=now.weekday())
        end = start + timedelta(days=7)
    return Period(name=name, start=start, end=end)


def stage_counts(statuses: Iterable[str]) -> Dict[str, int]:
    """Snapshot count of candidates currently in each stage."""
    counts = {stage.value: 0 for stage in FUNNEL_STAGES}
    for status in statuses:
        if status in counts:
            counts[status] += 1
    return counts


def dashboard_metrics(
    candidate_statuses: List[str],
    cv_scores: List[Optional[float]],
) -> Dict[str, Dict[str, float]]:
    counts = stage_counts(candidate_statuses)
    total_cv = len(cv_scores)
    mean = sum(s or 0 for s in cv_scores) / total_cv if total_cv else 0
    return {
        "candidatos": {
            "total": len(candidate_statuses),
            "leads": counts[PipelineStatus.LEAD.value],
            "entrevistas": counts[PipelineStatus.ENTREVISTA.value],
            "recrutados": counts[PipelineStatus.RECRUTADO.value],
            "inativos": counts[PipelineStatus.INATIVO.value],
        },
        "cv_analises": {
            "total_analises": total_cv,
            "pontuacao_media": round(mean, 2),
        },
    }


@dataclass
class RankingEntry:
    user_id: uuid.UUID
    nome: str
    email: str
    recrutados: int
    analises_feitas: int
    pontuacao: int
    posicao: int = 0


def score_counts(
    recruited_responsibles: Iterable[Iterable[uuid.UUID]],
    cv_authors: Iterable[uuid.UUID],
) -> Tuple[Dict[uuid.UUID, int], Dict[uuid.UUID, int]]:
    """
    Count recruitments and CV analyses per user.

    recruited_responsibles has one item per recruited candidate: the ids of
    every responsible party, each of which is credited.
    """
    recruited: Dict[uuid.UUID, int] = {}
    for responsibles in recruited_responsibles:
        for user_id in set(responsibles):
            recruited[user_id] = recruited.get(user_id, 0) + 1

    analyses: Dict[uuid.UUID, int] = {}
    for user_id in cv_authors:
        if user_id is None:
            continue
        analyses[user_id] = analyses.get(user_id, 0) + 1
    return recruited, analyses


def assign_competition_ranks(entries: List[RankingEntry]) -> List[RankingEntry]:
    """Sort by score desc (name breaks ties) and assign 1-2-2-4 style ranks."""
    entries.sort(key=lambda e: (-e.pontuacao, e.nome.lower(), str(e.user_id)))
    previous_score = None
    rank = 0
    for index, entry in enumerate(entries):
        if entry.pontuacao != previous_score:
            rank = index + 1
            previous_score = entry.pontuacao
        entry.posicao = rank
    return entries


def build_rankings(
    users: Iterable,
    recruited: Dict[uuid.UUID, int],
    analyses: Dict[uuid.UUID, int],
) -> List[RankingEntry]:
    """Only users that exist are listed."""
    entries = []
    for user in users:
        r = recruited.get(user.id, 0)
        a = analyses.get(user.id, 0)
        entries.append(
            RankingEntry(
                user_id=user.id,
                nome=user.nome,
                email=user.email,
                recrutados=r,
                analises_feitas=a,
                pontuacao=r * RECRUITED_WEIGHT + a * CV_ANALYSIS_WEIGHT,
            )
        )
    return assign_competition_ranks(entries)
