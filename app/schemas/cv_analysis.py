"""
CV analysis Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import TimestampedRead, AllowListUpdate


class CVAnalysisCreate(BaseModel):
    candidato_id: Optional[UUID] = None
    analise: str = Field(min_length=1)
    pontuacao: Optional[float] = None
    classificacao: Optional[str] = None
    status: Optional[str] = None
    data_analise: Optional[datetime] = None


class CVAnalysisUpdate(AllowListUpdate):
    """dono_id, departamento_dono and analisado_por_id are fixed at creation."""

    candidato_id: Optional[UUID] = None
    analise: Optional[str] = Field(default=None, min_length=1)
    pontuacao: Optional[float] = None
    classificacao: Optional[str] = None
    status: Optional[str] = None
    data_analise: Optional[datetime] = None


class CVAnalysisRead(TimestampedRead):
    candidato_id: Optional[UUID] = None
    analise: str
    pontuacao: Optional[float] = None
    classificacao: Optional[str] = None
    status: str
    dono_id: UUID
    departamento_dono: Optional[str] = None
    analisado_por_id: Optional[UUID] = None
    data_analise: Optional[datetime] = None
