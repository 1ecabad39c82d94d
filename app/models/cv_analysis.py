"""
CV analysis model.

An analysis of a CV, optionally linked to a candidate. The owner's
department is copied at creation time and never re-derived.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Float, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base_model import TimestampedModel


class CVAnalysis(TimestampedModel):
    """CV analysis table."""

    __tablename__ = "cv_analysis"

    candidato_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidate.id"),
        nullable=True,
        index=True,
    )

    analise: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    pontuacao: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )

    # e.g. "Interessante", "Não se adequa"
    classificacao: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Em análise",
    )

    dono_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=False,
        index=True,
    )

    departamento_dono: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    analisado_por_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
    )

    data_analise: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
