"""
Access policy for users, candidates, CV analyses and tasks.

Every decision follows the same precedence, first match wins:

1. Admin / Manager: always permitted.
2. Directors: permitted iff the target's department equals the actor's.
3. Broker de Equipa: permitted iff the target is owned by the broker or by a
   member of the broker's team.
4. Individual contributors: permitted iff the actor is one of the target's
   owners (active responsible, creator, assignee, observer...).
5. Otherwise denied.

The same table is exposed as a ``VisibilityScope`` so repositories can apply
it as a query predicate instead of filtering in memory.
"""

import enum
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Set

from app.core.roles import Role, RoleCategory, category_of, parse_role, is_top_tier
from app.errors import PermissionDeniedError, ValidationError
from app.models.candidate import Candidate
from app.models.cv_analysis import CVAnalysis
from app.models.task import Task
from app.models.user import User


class Action(str, enum.Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class Actor:
    """
    The authenticated caller as seen by the policy.

    team_ids holds the users whose broker is this actor; agency_ids holds the
    agencies the actor is an active member of.
    """

    id: uuid.UUID
    role: Role
    departamento: Optional[str] = None
    broker_equipa_id: Optional[uuid.UUID] = None
    team_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    agency_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)
    nome: str = ""

    @classmethod
    def from_user(
        cls,
        user: User,
        team_ids: Iterable[uuid.UUID] = (),
    ) -> "Actor":
        agency_ids = frozenset(
            m.agencia_id for m in (user.agencias or []) if m.status == "ativo"
        )
        return cls(
            id=user.id,
            role=parse_role(user.role),
            departamento=user.departamento,
            broker_equipa_id=user.broker_equipa_id,
            team_ids=frozenset(team_ids),
            agency_ids=agency_ids,
            nome=user.nome or "",
        )

    @property
    def category(self) -> RoleCategory:
        return category_of(self.role)

    @property
    def is_top_tier(self) -> bool:
        return is_top_tier(self.role)

    @property
    def is_malformed(self) -> bool:
        """Non top-tier actors must carry a department."""
        return not self.is_top_tier and not self.departamento


class ScopeKind(str, enum.Enum):
    ALL = "all"
    DEPARTMENT = "department"
    OWNERS = "owners"
    NONE = "none"


@dataclass(frozen=True)
class VisibilityScope:
    kind: ScopeKind
    departamento: Optional[str] = None
    owner_ids: FrozenSet[uuid.UUID] = field(default_factory=frozenset)

    def allows(self, department: Optional[str], owners: Set[uuid.UUID]) -> bool:
        if self.kind == ScopeKind.ALL:
            return True
        if self.kind == ScopeKind.DEPARTMENT:
            return department is not None and department == self.departamento
        if self.kind == ScopeKind.OWNERS:
            return bool(self.owner_ids & owners)
        return False


def visibility_scope(actor: Actor) -> VisibilityScope:
    """Resolve the precedence table for an actor."""
    if actor.is_top_tier:
        return VisibilityScope(ScopeKind.ALL)
    if actor.is_malformed:
        return VisibilityScope(ScopeKind.NONE)

    category = actor.category
    if category == RoleCategory.DIRECTOR:
        return VisibilityScope(ScopeKind.DEPARTMENT, departamento=actor.departamento)
    if category == RoleCategory.BROKER:
        return VisibilityScope(
            ScopeKind.OWNERS,
            owner_ids=frozenset({actor.id}) | actor.team_ids,
        )
    if category == RoleCategory.INDIVIDUAL_CONTRIBUTOR:
        return VisibilityScope(ScopeKind.OWNERS, owner_ids=frozenset({actor.id}))
    return VisibilityScope(ScopeKind.NONE)


def active_responsible_ids(candidate: Candidate) -> Set[uuid.UUID]:
    return {r.user_id for r in (candidate.responsaveis or []) if r.status == "ativo"}


def department_of(target) -> Optional[str]:
    """The department a target is judged by."""
    if isinstance(target, CVAnalysis):
        return target.departamento_dono
    if isinstance(target, (User, Candidate, Task)):
        return target.departamento
    raise TypeError(f"Unsupported policy target: {type(target).__name__}")


def owner_ids_of(target) -> Set[uuid.UUID]:
    """The users a target belongs to for broker and individual rules."""
    if isinstance(target, User):
        return {target.id}
    if isinstance(target, Candidate):
        return active_responsible_ids(target)
    if isinstance(target, CVAnalysis):
        return {target.dono_id}
    if isinstance(target, Task):
        owners = {i for i in (target.criador_id, target.destinatario_id) if i}
        owners.update(target.responsaveis or [])
        owners.update(target.acompanhantes or [])
        return owners
    raise TypeError(f"Unsupported policy target: {type(target).__name__}")


def can_access(actor: Actor, target, action: Action = Action.READ) -> bool:
    """
    Decide whether actor may perform action on target.

    Candidate writes require an active responsible party for individual
    contributors, which is also what grants them read access. CV analysis
    and task writes equal reads. Writes on user records go through
    can_manage_user, except on the actor's own record.
    """
    if isinstance(target, User):
        if target.id == actor.id:
            return True
        if action == Action.WRITE:
            return can_manage_user(actor, target)

    scope = visibility_scope(actor)
    return scope.allows(department_of(target), owner_ids_of(target))


def ensure_access(actor: Actor, target, action: Action = Action.READ) -> None:
    """Raise PermissionDeniedError if actor may not act on target."""
    if not can_access(actor, target, action):
        raise PermissionDeniedError(
            f"Sem permissão para {'alterar' if action == Action.WRITE else 'aceder a'} este registo"
        )


def can_assign_role(
    actor: Actor,
    role,
    departamento: Optional[str] = None,
    broker_equipa_id: Optional[uuid.UUID] = None,
) -> bool:
    """
    Whether actor may create (or move) a user with the given role.

    Only Admin may assign Admin; Manager may assign anything else.
    Directors and Recrutadores stay inside their own department and below top
    tier. A Broker de Equipa may only create Consultores of its own team.
    """
    try:
        role = parse_role(role)
    except ValidationError:
        return False

    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.MANAGER:
        return role != Role.ADMIN
    if actor.is_malformed or is_top_tier(role):
        return False

    if actor.category == RoleCategory.DIRECTOR or actor.role == Role.RECRUTADOR:
        return departamento == actor.departamento
    if actor.category == RoleCategory.BROKER:
        return (
            role == Role.CONSULTOR
            and broker_equipa_id == actor.id
            and departamento == actor.departamento
        )
    return False


def can_manage_user(actor: Actor, target: User) -> bool:
    """Update / inactivate / reactivate another user's record."""
    target_role = parse_role(target.role)
    if actor.role == Role.ADMIN:
        return True
    if actor.role == Role.MANAGER:
        return target_role != Role.ADMIN
    if actor.category == RoleCategory.DIRECTOR and not actor.is_malformed:
        return not is_top_tier(target_role) and target.departamento == actor.departamento
    return False


def can_list_users(actor: Actor) -> bool:
    """Consultores have no access to the user directory."""
    return actor.role != Role.CONSULTOR


def can_manage_organization(actor: Actor) -> bool:
    """Agencies and departments are written by Admin / Manager only."""
    return actor.is_top_tier


def can_access_agency(actor: Actor, agency_id: uuid.UUID) -> bool:
    if actor.is_top_tier:
        return True
    return agency_id in actor.agency_ids
