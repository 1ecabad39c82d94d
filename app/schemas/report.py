"""
Report Pydantic schemas.
"""

from datetime import datetime
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CandidateCounts(BaseModel):
    total: int
    leads: int
    entrevistas: int
    recrutados: int
    inativos: int


class CVAnalysisSummary(BaseModel):
    total_analises: int
    pontuacao_media: float


class DashboardRead(BaseModel):
    periodo: str
    data_inicio: datetime
    data_fim: datetime
    candidatos: CandidateCounts
    cv_analises: CVAnalysisSummary


class FunnelRead(BaseModel):
    periodo: str
    data_inicio: datetime
    data_fim: datetime
    etapas: Dict[str, int]


class RankingEntryRead(BaseModel):
    user_id: UUID
    nome: str
    email: str
    recrutados: int
    analises_feitas: int
    pontuacao: int
    posicao: int

    model_config = ConfigDict(from_attributes=True)


class RankingRead(BaseModel):
    mes: int
    ano: int
    ranking: List[RankingEntryRead]
