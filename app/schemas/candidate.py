"""
Candidate Pydantic schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from app.core.roles import DepartmentName
from app.schemas.base import TimestampedRead, AllowListUpdate


class CandidateBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    nif: Optional[str] = None
    tipo_contato: Optional[str] = None
    importancia: Optional[str] = None
    origem_contato: Optional[str] = None
    departamento: Optional[DepartmentName] = None
    agencia_id: Optional[UUID] = None
    skills: List[str] = Field(default_factory=list)
    cidade: Optional[str] = None
    distrito: Optional[str] = None
    anos_experiencia: Optional[int] = Field(default=None, ge=0)
    indicacao: bool = False
    nivel_indicacao: Optional[str] = None
    responsavel_indicacao: Optional[UUID] = None


def _check_referral(indicacao, nivel, responsavel) -> None:
    if indicacao and (not nivel or not responsavel):
        raise ValueError(
            "nivel_indicacao e responsavel_indicacao são obrigatórios quando indicacao é verdadeiro"
        )


class CandidateCreate(CandidateBase):
    """Create-or-attach request. nome, email and telefone form the identity."""

    nome: str = Field(min_length=1)
    email: EmailStr
    telefone: str = Field(min_length=1)

    @model_validator(mode="after")
    def referral_fields_together(self):
        _check_referral(self.indicacao, self.nivel_indicacao, self.responsavel_indicacao)
        return self


class CandidateUpdate(AllowListUpdate):
    """
    Editable candidate fields.

    status, pipeline_status, responsaveis, historico and metricas change only
    through their dedicated operations.
    """

    nome: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    telefone: Optional[str] = Field(default=None, min_length=1)
    nif: Optional[str] = None
    tipo_contato: Optional[str] = None
    importancia: Optional[str] = None
    origem_contato: Optional[str] = None
    departamento: Optional[DepartmentName] = None
    agencia_id: Optional[UUID] = None
    skills: Optional[List[str]] = None
    cidade: Optional[str] = None
    distrito: Optional[str] = None
    anos_experiencia: Optional[int] = Field(default=None, ge=0)
    indicacao: Optional[bool] = None
    nivel_indicacao: Optional[str] = None
    responsavel_indicacao: Optional[UUID] = None


class StatusChangeRequest(BaseModel):
    novo_status: Optional[str] = None
    observacao: Optional[str] = None


class InteractionRequest(BaseModel):
    tipo: str = Field(min_length=1)
    conteudo: str = Field(min_length=1)


class CandidateInactivate(BaseModel):
    motivo: Optional[str] = None


class ResponsibleStatusRequest(BaseModel):
    status: Literal["ativo", "inativo"]


class CandidateResponsibleRead(BaseModel):
    user_id: UUID
    data_atribuicao: datetime
    status: str

    model_config = ConfigDict(from_attributes=True)


class CandidateHistoryRead(BaseModel):
    tipo: str
    conteudo: str
    data: datetime
    autor_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class CandidateRead(TimestampedRead):
    nome: str
    email: str
    telefone: str
    nif: Optional[str] = None
    tipo_contato: Optional[str] = None
    importancia: Optional[str] = None
    origem_contato: Optional[str] = None
    departamento: Optional[str] = None
    agencia_id: Optional[UUID] = None
    skills: List[str] = Field(default_factory=list)
    cidade: Optional[str] = None
    distrito: Optional[str] = None
    anos_experiencia: Optional[int] = None
    status: str
    motivo_inativacao: Optional[str] = None
    pipeline_status: str
    metricas: Dict[str, Any] = Field(default_factory=dict)
    indicacao: bool = False
    nivel_indicacao: Optional[str] = None
    responsavel_indicacao: Optional[UUID] = None
    criado_por: Optional[UUID] = None
    version: int
    responsaveis: List[CandidateResponsibleRead] = Field(default_factory=list)
    historico: List[CandidateHistoryRead] = Field(default_factory=list)
