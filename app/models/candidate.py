"""
Candidate model.

Represents a person being tracked through the recruitment funnel.
Candidates are never physically deleted; removal is status="inativo".
"""

import uuid
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB, ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.models.base_model import TimestampedModel


class Candidate(TimestampedModel):
    """
    Candidate table - identity, classification and pipeline state.

    Responsible parties and history live in child tables; stage metrics are a
    JSONB map of stage -> {"entered_at": iso8601, "dwell_ms": int}.
    """

    __tablename__ = "candidate"

    # Identity
    nome: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    telefone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    nif: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Classification
    tipo_contato: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    importancia: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    origem_contato: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    departamento: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    agencia_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("agency.id"),
        nullable=True,
    )

    skills: Mapped[List[str]] = mapped_column(
        ARRAY(String),
        nullable=False,
        default=list,
    )

    cidade: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    distrito: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    anos_experiencia: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    # Activation flag (ativo / inativo)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )

    motivo_inativacao: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Funnel stage, see app.core.pipeline.PipelineStatus
    pipeline_status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="identificacao",
        index=True,
    )

    metricas: Mapped[Dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
    )

    # Referral
    indicacao: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    nivel_indicacao: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    responsavel_indicacao: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
    )

    criado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
    )

    # Optimistic lock counter
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    responsaveis: Mapped[List["CandidateResponsible"]] = relationship(
        "CandidateResponsible",
        back_populates="candidate",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="CandidateResponsible.data_atribuicao",
    )

    historico: Mapped[List["CandidateHistory"]] = relationship(
        "CandidateHistory",
        back_populates="candidate",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="CandidateHistory.data",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_candidate_natural_key", "email", "telefone"),
    )


class CandidateResponsible(TimestampedModel):
    """A user responsible for a candidate. Deactivated, never deleted."""

    __tablename__ = "candidate_responsible"

    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=False,
        index=True,
    )

    data_atribuicao: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )

    candidate: Mapped["Candidate"] = relationship(
        "Candidate",
        back_populates="responsaveis",
    )

    __table_args__ = (
        UniqueConstraint("candidate_id", "user_id", name="uq_candidate_responsible"),
    )


class CandidateHistory(TimestampedModel):
    """
    Append-only history entry.

    tipo is one of: sistema, atualizacao, interacao, inativacao, reativacao,
    mudanca_status.
    """

    __tablename__ = "candidate_history"

    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tipo: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    conteudo: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    data: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    autor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
    )

    candidate: Mapped["Candidate"] = relationship(
        "Candidate",
        back_populates="historico",
    )
