"""
Role registry.

Defines the closed set of actor roles, the departments they belong to and the
category each role falls in. Policy code works with categories, never with
role name prefixes.
"""

import enum
from typing import Dict, Optional

from app.errors import ValidationError


class Role(str, enum.Enum):
    """Standard roles in the system."""

    ADMIN = "Admin"
    MANAGER = "Manager"
    DIRETOR_RH = "Diretor de RH"
    DIRETOR_COMERCIAL = "Diretor Comercial"
    DIRETOR_MARKETING = "Diretor de Marketing"
    DIRETOR_CREDITO = "Diretor de Crédito"
    DIRETOR_REMODELACOES = "Diretor de Remodelações"
    DIRETOR_FINANCEIRO = "Diretor Financeiro"
    DIRETOR_JURIDICO = "Diretor Jurídico"
    BROKER_EQUIPA = "Broker de Equipa"
    RECRUTADOR = "Recrutador"
    CONSULTOR = "Consultor"
    EMPLOYEE = "Employee"


class RoleCategory(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    DIRECTOR = "director"
    BROKER = "broker"
    INDIVIDUAL_CONTRIBUTOR = "individual_contributor"


class DepartmentName(str, enum.Enum):
    RH = "RH"
    COMERCIAL = "Comercial"
    MARKETING = "Marketing"
    CREDITO = "Crédito"
    REMODELACOES = "Remodelações"
    FINANCEIRO = "Financeiro"
    JURIDICO = "Jurídico"


ROLE_CATEGORIES: Dict[Role, RoleCategory] = {
    Role.ADMIN: RoleCategory.ADMIN,
    Role.MANAGER: RoleCategory.MANAGER,
    Role.DIRETOR_RH: RoleCategory.DIRECTOR,
    Role.DIRETOR_COMERCIAL: RoleCategory.DIRECTOR,
    Role.DIRETOR_MARKETING: RoleCategory.DIRECTOR,
    Role.DIRETOR_CREDITO: RoleCategory.DIRECTOR,
    Role.DIRETOR_REMODELACOES: RoleCategory.DIRECTOR,
    Role.DIRETOR_FINANCEIRO: RoleCategory.DIRECTOR,
    Role.DIRETOR_JURIDICO: RoleCategory.DIRECTOR,
    Role.BROKER_EQUIPA: RoleCategory.BROKER,
    Role.RECRUTADOR: RoleCategory.INDIVIDUAL_CONTRIBUTOR,
    Role.CONSULTOR: RoleCategory.INDIVIDUAL_CONTRIBUTOR,
    Role.EMPLOYEE: RoleCategory.INDIVIDUAL_CONTRIBUTOR,
}

TOP_TIER_CATEGORIES = frozenset({RoleCategory.ADMIN, RoleCategory.MANAGER})


def parse_role(value) -> Role:
    """Coerce a stored/incoming role string into a Role, raising ValidationError."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Invalid role: {value!r}")


def category_of(role) -> RoleCategory:
    return ROLE_CATEGORIES[parse_role(role)]


def is_top_tier(role) -> bool:
    """Admin and Manager see and manage everything."""
    return category_of(role) in TOP_TIER_CATEGORIES


def requires_department(role) -> bool:
    return not is_top_tier(role)


def requires_broker(role) -> bool:
    return parse_role(role) == Role.CONSULTOR


def validate_actor_fields(role, departamento: Optional[str], broker_equipa_id) -> None:
    """
    Enforce the per-role mandatory fields of a user record.

    Raises:
        ValidationError: department missing for a non top-tier role, or broker
            missing for a Consultor.
    """
    role = parse_role(role)
    if departamento is not None:
        try:
            DepartmentName(departamento)
        except ValueError:
            raise ValidationError(f"Invalid department: {departamento!r}")
    if requires_department(role) and not departamento:
        raise ValidationError("Departamento é obrigatório exceto para Admin e Manager")
    if requires_broker(role) and not broker_equipa_id:
        raise ValidationError("Consultor must be linked to a Broker de Equipa")
