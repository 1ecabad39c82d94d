"""
User Pydantic schemas.
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, EmailStr, ConfigDict, Field

from app.core.roles import Role, DepartmentName
from app.schemas.base import TimestampedRead, AllowListUpdate


class UserCreate(BaseModel):
    """Schema for registering a new user."""

    model_config = ConfigDict(use_enum_values=True)

    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    nome: str = Field(min_length=1)
    email: EmailStr
    telefone: Optional[str] = None
    role: Role
    departamento: Optional[DepartmentName] = None
    responsavel_id: Optional[UUID] = None
    broker_equipa_id: Optional[UUID] = None
    agencias: List[UUID] = Field(default_factory=list)


class BootstrapAdminRequest(BaseModel):
    """First Admin of an empty installation."""

    username: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6)
    nome: str = Field(min_length=1)
    email: EmailStr


class UserUpdate(AllowListUpdate):
    """
    Fields another user's manager may change.

    role and password have their own flows and are not accepted here.
    """

    nome: Optional[str] = None
    email: Optional[EmailStr] = None
    telefone: Optional[str] = None
    departamento: Optional[DepartmentName] = None
    responsavel_id: Optional[UUID] = None
    broker_equipa_id: Optional[UUID] = None


# Fields a user may change on their own record
SELF_EDITABLE_FIELDS = frozenset({"nome", "email", "telefone"})


class PasswordChange(BaseModel):
    senha_atual: Optional[str] = None
    nova_senha: str = Field(min_length=6)


class UserInactivate(BaseModel):
    motivo: Optional[str] = None


class AgencyMembershipRequest(BaseModel):
    user_id: UUID
    agencia_id: UUID


class BrokerAssignmentRequest(BaseModel):
    user_id: UUID
    broker_id: UUID


class UserAgencyRead(BaseModel):
    agencia_id: UUID
    status: str
    data_associacao: datetime
    data_inativacao: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserRead(TimestampedRead):
    """Schema for reading user data (API response)."""

    username: str
    nome: str
    email: str
    telefone: Optional[str] = None
    role: str
    departamento: Optional[str] = None
    responsavel_id: Optional[UUID] = None
    broker_equipa_id: Optional[UUID] = None
    status: str
    criado_por: Optional[UUID] = None
    inativado_em: Optional[datetime] = None
    motivo_inativacao: Optional[str] = None
    agencias: List[UserAgencyRead] = Field(default_factory=list)


class LoginRequest(BaseModel):
    """Schema for login request."""

    username: str
    password: str


class LoginResponse(BaseModel):
    """Schema for login response."""

    access_token: str
    token_type: str = "bearer"
    user: UserRead
