"""
Appointment model.

Dates and times are kept as the strings the client sent (YYYY-MM-DD and
HH:mm). History is an append-only JSONB list of
{"tipo": criacao|atualizacao|cancelamento, "data": iso8601, "autor": uuid}.
"""

import uuid
from typing import Optional, List, Dict, Any

from sqlalchemy import String, Text, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB, ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base_model import TimestampedModel


class Appointment(TimestampedModel):
    """Appointment table."""

    __tablename__ = "appointment"

    titulo: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    descricao: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    data: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    horario: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
    )

    participantes: Mapped[List[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)),
        nullable=False,
        default=list,
    )

    # entrevista, reuniao, treinamento, outro
    tipo: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="outro",
    )

    local: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    # pendente, confirmado, cancelado
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pendente",
        index=True,
    )

    organizador_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=False,
        index=True,
    )

    historico: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    google_calendar_event_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_appointment_data_horario", "data", "horario"),
    )
