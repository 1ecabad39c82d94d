"""
Agency and Department models.

Agencies group users; departments are the business areas users belong to.
"""

import uuid
from typing import List

from sqlalchemy import String, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base_model import TimestampedModel


class Agency(TimestampedModel):
    """Agency table."""

    __tablename__ = "agency"

    nome: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    manager_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=False,
    )

    diretores: Mapped[List[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)),
        nullable=False,
        default=list,
    )

    departamentos: Mapped[List[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)),
        nullable=False,
        default=list,
    )

    employees: Mapped[List[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)),
        nullable=False,
        default=list,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )


class Department(TimestampedModel):
    """Department table."""

    __tablename__ = "department"

    nome: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    manager_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=False,
    )

    agencias: Mapped[List[uuid.UUID]] = mapped_column(
        ARRAY(UUID(as_uuid=True)),
        nullable=False,
        default=list,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )
