"""
Appointment Pydantic schemas.
"""

from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import TimestampedRead, AllowListUpdate

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

AppointmentType = Literal["entrevista", "reuniao", "treinamento", "outro"]
AppointmentStatus = Literal["pendente", "confirmado", "cancelado"]


class AppointmentCreate(BaseModel):
    titulo: str = Field(min_length=3)
    descricao: Optional[str] = None
    data: str = Field(pattern=DATE_PATTERN)
    horario: str = Field(pattern=TIME_PATTERN)
    participantes: List[UUID] = Field(default_factory=list)
    tipo: AppointmentType = "outro"
    local: Optional[str] = None


class AppointmentUpdate(AllowListUpdate):
    """organizador_id, historico and the calendar id are not editable."""

    titulo: Optional[str] = Field(default=None, min_length=3)
    descricao: Optional[str] = None
    data: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    horario: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    participantes: Optional[List[UUID]] = None
    tipo: Optional[AppointmentType] = None
    local: Optional[str] = None
    status: Optional[AppointmentStatus] = None


class AppointmentRead(TimestampedRead):
    titulo: str
    descricao: Optional[str] = None
    data: str
    horario: str
    participantes: List[UUID] = Field(default_factory=list)
    tipo: str
    local: Optional[str] = None
    status: str
    organizador_id: UUID
    historico: List[Dict[str, Any]] = Field(default_factory=list)
    google_calendar_event_id: Optional[str] = None
