"""
Agency and Department Pydantic schemas.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.base import TimestampedRead, AllowListUpdate


class AgencyCreate(BaseModel):
    nome: str = Field(min_length=1)
    manager_id: UUID
    diretores: List[UUID] = Field(default_factory=list)
    departamentos: List[UUID] = Field(default_factory=list)
    employees: List[UUID] = Field(default_factory=list)


class AgencyUpdate(AllowListUpdate):
    nome: Optional[str] = Field(default=None, min_length=1)
    manager_id: Optional[UUID] = None
    diretores: Optional[List[UUID]] = None
    departamentos: Optional[List[UUID]] = None
    employees: Optional[List[UUID]] = None


class AgencyRead(TimestampedRead):
    nome: str
    manager_id: UUID
    diretores: List[UUID] = Field(default_factory=list)
    departamentos: List[UUID] = Field(default_factory=list)
    employees: List[UUID] = Field(default_factory=list)
    status: str


class DepartmentCreate(BaseModel):
    nome: str = Field(min_length=1)
    manager_id: UUID
    agencias: List[UUID] = Field(default_factory=list)


class DepartmentUpdate(AllowListUpdate):
    nome: Optional[str] = Field(default=None, min_length=1)
    manager_id: Optional[UUID] = None
    agencias: Optional[List[UUID]] = None


class DepartmentRead(TimestampedRead):
    nome: str
    manager_id: UUID
    agencias: List[UUID] = Field(default_factory=list)
    status: str
