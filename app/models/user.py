"""
User model for authentication and authorization.

A user is the actor behind every request: its role, department and broker
team drive the access policy.
"""

import uuid
from datetime import datetime
from typing import Optional, List

from sqlalchemy import String, DateTime, ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.models.base_model import TimestampedModel


class User(TimestampedModel):
    """
    User table - represents authenticated employees of the company.

    Users have roles that determine their permissions.
    """

    __tablename__ = "user"

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    nome: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    telefone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # One of app.core.roles.Role
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    # One of app.core.roles.DepartmentName; null only for Admin / Manager
    departamento: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
    )

    # Hierarchical manager
    responsavel_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
    )

    # Team broker (mandatory for Consultor)
    broker_equipa_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id"),
        nullable=True,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )

    # Audit fields
    criado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    atualizado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    inativado_em: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    inativado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    motivo_inativacao: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    agencias: Mapped[List["UserAgency"]] = relationship(
        "UserAgency",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_user_role_departamento", "role", "departamento"),
    )


class UserAgency(TimestampedModel):
    """
    Membership of a user in an agency.

    Memberships are never deleted, only switched between ativo / inativo.
    """

    __tablename__ = "user_agency"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    agencia_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("agency.id"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ativo",
    )

    data_associacao: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    associado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    data_inativacao: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    inativado_por: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="agencias",
    )
