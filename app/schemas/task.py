"""
Task Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.roles import DepartmentName
from app.schemas.base import TimestampedRead, AllowListUpdate


class TaskCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    titulo: str = Field(min_length=1)
    descricao: str = Field(min_length=1)
    data: Optional[datetime] = None
    prazo: Optional[datetime] = None
    status: Optional[str] = None
    destinatario_id: Optional[UUID] = None
    responsaveis: List[UUID] = Field(default_factory=list)
    acompanhantes: List[UUID] = Field(default_factory=list)
    departamento: Optional[DepartmentName] = None


class TaskUpdate(AllowListUpdate):
    titulo: Optional[str] = Field(default=None, min_length=1)
    descricao: Optional[str] = Field(default=None, min_length=1)
    prazo: Optional[datetime] = None
    status: Optional[str] = None
    destinatario_id: Optional[UUID] = None
    responsaveis: Optional[List[UUID]] = None
    acompanhantes: Optional[List[UUID]] = None
    departamento: Optional[DepartmentName] = None


class TaskRead(TimestampedRead):
    titulo: str
    descricao: str
    data: datetime
    prazo: Optional[datetime] = None
    status: str
    criador_id: UUID
    destinatario_id: Optional[UUID] = None
    responsaveis: List[UUID] = Field(default_factory=list)
    acompanhantes: List[UUID] = Field(default_factory=list)
    departamento: Optional[str] = None
