"""
Notification model.

In-app notifications addressed to a single user (e.g. referral success).
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.models.base_model import TimestampedModel


class Notification(TimestampedModel):
    """Notification table."""

    __tablename__ = "notification"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user.id", ondelete="CASCADE"),
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

    lida: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
