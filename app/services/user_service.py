"""
User business logic: bootstrap, login, registration and administration.
"""

import logging
import uuid
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import (
    Action,
    Actor,
    can_access_agency,
    can_assign_role,
    can_list_users,
    can_manage_user,
    ensure_access,
    visibility_scope,
)
from app.core.roles import Role, validate_actor_fields, is_top_tier
from app.core.security import create_access_token, hash_password, verify_password
from app.db.mirror import NullMirror, SecondaryMirror, mirror_best_effort
from app.db.session import commit_or_conflict
from app.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.models.user import User, UserAgency
from app.repositories.agency_repository import AgencyRepository
from app.repositories.user_repository import UserRepository
from app.schemas.user import (
    AgencyMembershipRequest,
    BootstrapAdminRequest,
    BrokerAssignmentRequest,
    LoginRequest,
    LoginResponse,
    PasswordChange,
    SELF_EDITABLE_FIELDS,
    UserCreate,
    UserRead,
    UserUpdate,
)
from app.utils.canonical_json import row_payload
from app.utils.time import utc_now

logger = logging.getLogger(__name__)

MIRROR_TABLE = "user"
MIRROR_EXCLUDED = {"hashed_password"}


def user_mirror_row(user: User) -> dict:
    row = row_payload(user)
    for key in MIRROR_EXCLUDED:
        row.pop(key, None)
    return row


class UserService:
    """Service for user business logic."""

    def __init__(
        self,
        db: AsyncSession,
        repository: Optional[UserRepository] = None,
        agency_repository: Optional[AgencyRepository] = None,
        mirror: Optional[SecondaryMirror] = None,
    ):
        self.db = db
        self.repository = repository or UserRepository(db)
        self.agency_repository = agency_repository or AgencyRepository(db)
        self.mirror = mirror or NullMirror()

    async def _persist(self, user: User) -> User:
        # refresh loads the server-side updated_at before the mirror row is built
        await self.repository.save(user)
        await commit_or_conflict(self.db)
        await mirror_best_effort(self.mirror, MIRROR_TABLE, user_mirror_row(user))
        return user

    async def _get(self, user_id: UUID) -> User:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Utilizador não encontrado")
        return user

    async def _ensure_unique(self, username: Optional[str], email: Optional[str], exclude_id=None) -> None:
        if username:
            found = await self.repository.get_by_username(username)
            if found is not None and found.id != exclude_id:
                raise ConflictError(f"Username já existe: {username}")
        if email:
            found = await self.repository.get_by_email(email)
            if found is not None and found.id != exclude_id:
                raise ConflictError(f"Email já registado: {email}")

    async def _ensure_broker(self, broker_id: Optional[UUID]) -> None:
        if broker_id is None:
            return
        broker = await self.repository.get_by_id(broker_id)
        if broker is None or broker.role != Role.BROKER_EQUIPA.value or broker.status != "ativo":
            raise ValidationError("broker_equipa_id deve referir um Broker de Equipa ativo")

    # Authentication

    async def bootstrap_admin(self, data: BootstrapAdminRequest) -> User:
        """Create the first Admin. Only allowed while there are no users."""
        if await self.repository.count() > 0:
            raise ConflictError("O sistema já foi inicializado")
        user = User(
            id=uuid.uuid4(),
            username=data.username.strip(),
            hashed_password=hash_password(data.password),
            nome=data.nome.strip(),
            email=data.email.strip().lower(),
            role=Role.ADMIN.value,
            departamento=None,
            status="ativo",
            agencias=[],
        )
        await self.repository.add(user)
        logger.info("Bootstrap Admin %s created", user.id)
        return await self._persist(user)

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        user = await self.repository.get_by_username(username)
        if user is None or user.status != "ativo":
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    def create_token_for_user(self, user: User) -> str:
        # Department and team are re-read on every request
        return create_access_token({"user_id": str(user.id), "role": user.role})

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        user = await self.authenticate(credentials.username, credentials.password)
        if user is None:
            raise AuthenticationError("Credenciais inválidas")
        logger.info("User %s logged in", user.id)
        return LoginResponse(
            access_token=self.create_token_for_user(user),
            token_type="bearer",
            user=UserRead.model_validate(user),
        )

    # Directory

    async def register(self, actor: Actor, data: UserCreate) -> User:
        validate_actor_fields(data.role, data.departamento, data.broker_equipa_id)
        if not can_assign_role(actor, data.role, data.departamento, data.broker_equipa_id):
            raise PermissionDeniedError(f"Sem permissão para criar utilizadores com a função {data.role}")
        await self._ensure_unique(data.username, data.email)
        await self._ensure_broker(data.broker_equipa_id)

        now = utc_now()
        memberships = []
        for agencia_id in dict.fromkeys(data.agencias):
            if await self.agency_repository.get_by_id(agencia_id) is None:
                raise ValidationError(f"Agência não encontrada: {agencia_id}")
            memberships.append(
                UserAgency(
                    id=uuid.uuid4(),
                    agencia_id=agencia_id,
                    status="ativo",
                    data_associacao=now,
                    associado_por=actor.id,
                )
            )

        user = User(
            id=uuid.uuid4(),
            username=data.username.strip(),
            hashed_password=hash_password(data.password),
            nome=data.nome.strip(),
            email=data.email.strip().lower(),
            telefone=data.telefone,
            role=data.role,
            departamento=data.departamento,
            responsavel_id=data.responsavel_id,
            broker_equipa_id=data.broker_equipa_id,
            status="ativo",
            criado_por=actor.id,
            agencias=memberships,
        )
        await self.repository.add(user)
        logger.info("User %s (%s) registered by %s", user.id, user.role, actor.id)
        return await self._persist(user)

    async def list_users(self, actor: Actor, status: Optional[str] = "ativo") -> List[User]:
        if not can_list_users(actor):
            raise PermissionDeniedError("Sem permissão para aceder à lista de utilizadores")
        return await self.repository.list(visibility_scope(actor), status=status)

    async def get_user(self, actor: Actor, user_id: UUID) -> User:
        user = await self._get(user_id)
        ensure_access(actor, user, Action.READ)
        return user

    async def update_user(self, actor: Actor, user_id: UUID, data: UserUpdate) -> User:
        user = await self._get(user_id)
        update_data = data.model_dump(exclude_unset=True)

        manages = can_manage_user(actor, user)
        if not manages:
            if user.id != actor.id:
                raise PermissionDeniedError("Sem permissão para alterar este utilizador")
            forbidden = set(update_data) - SELF_EDITABLE_FIELDS
            if forbidden:
                raise PermissionDeniedError(
                    "Sem permissão para alterar estes campos do próprio perfil",
                    details={"fields": sorted(forbidden)},
                )

        if "departamento" in update_data or "broker_equipa_id" in update_data:
            departamento = update_data.get("departamento", user.departamento)
            broker_id = update_data.get("broker_equipa_id", user.broker_equipa_id)
            validate_actor_fields(user.role, departamento, broker_id)
            if not can_assign_role(actor, user.role, departamento, broker_id):
                raise PermissionDeniedError("Sem permissão para mover o utilizador para este departamento")
            await self._ensure_broker(broker_id)

        if update_data.get("email"):
            update_data["email"] = update_data["email"].strip().lower()
            await self._ensure_unique(None, update_data["email"], exclude_id=user.id)

        for field, value in update_data.items():
            setattr(user, field, value)
        user.atualizado_por = actor.id
        logger.info("User %s updated by %s: %s", user.id, actor.id, sorted(update_data))
        return await self._persist(user)

    async def inactivate_user(self, actor: Actor, user_id: UUID, motivo: Optional[str] = None) -> User:
        user = await self._get(user_id)
        if user.id == actor.id:
            raise ValidationError("Não é possível inativar o próprio utilizador")
        if not can_manage_user(actor, user):
            raise PermissionDeniedError("Sem permissão para inativar este utilizador")
        user.status = "inativo"
        user.inativado_em = utc_now()
        user.inativado_por = actor.id
        user.motivo_inativacao = motivo
        logger.info("User %s inactivated by %s", user.id, actor.id)
        return await self._persist(user)

    async def reactivate_user(self, actor: Actor, user_id: UUID) -> User:
        user = await self._get(user_id)
        if not can_manage_user(actor, user):
            raise PermissionDeniedError("Sem permissão para reativar este utilizador")
        if user.status == "ativo":
            raise ValidationError("Utilizador já está ativo")
        user.status = "ativo"
        user.inativado_em = None
        user.inativado_por = None
        user.motivo_inativacao = None
        user.atualizado_por = actor.id
        logger.info("User %s reactivated by %s", user.id, actor.id)
        return await self._persist(user)

    async def change_password(self, actor: Actor, user_id: UUID, data: PasswordChange) -> User:
        """
        Change a password.

        Users changing their own password must confirm the current one; a
        manager resetting someone else's does not.
        """
        user = await self._get(user_id)
        if user.id == actor.id:
            if not data.senha_atual or not verify_password(data.senha_atual, user.hashed_password):
                raise ValidationError("Senha atual incorreta")
        elif not can_manage_user(actor, user):
            raise PermissionDeniedError("Sem permissão para alterar a senha deste utilizador")

        user.hashed_password = hash_password(data.nova_senha)
        user.atualizado_por = actor.id
        await commit_or_conflict(self.db)
        logger.info("Password of user %s changed by %s", user.id, actor.id)
        return user

    # Memberships

    async def assign_agency(self, actor: Actor, data: AgencyMembershipRequest) -> User:
        user = await self._get(data.user_id)
        if not (can_manage_user(actor, user) and can_access_agency(actor, data.agencia_id)):
            raise PermissionDeniedError("Sem permissão para associar este utilizador à agência")
        agency = await self.agency_repository.get_by_id(data.agencia_id)
        if agency is None or agency.status != "ativo":
            raise NotFoundError("Agência não encontrada")

        membership = await self.repository.get_membership(user.id, agency.id)
        if membership is None:
            user.agencias.append(
                UserAgency(
                    id=uuid.uuid4(),
                    agencia_id=agency.id,
                    status="ativo",
                    data_associacao=utc_now(),
                    associado_por=actor.id,
                )
            )
        elif membership.status != "ativo":
            membership.status = "ativo"
            membership.data_associacao = utc_now()
            membership.associado_por = actor.id
            membership.data_inativacao = None
            membership.inativado_por = None
        logger.info("User %s assigned to agency %s by %s", user.id, agency.id, actor.id)
        return await self._persist(user)

    async def remove_agency(self, actor: Actor, data: AgencyMembershipRequest) -> User:
        user = await self._get(data.user_id)
        if not (can_manage_user(actor, user) and can_access_agency(actor, data.agencia_id)):
            raise PermissionDeniedError("Sem permissão para remover este utilizador da agência")
        membership = await self.repository.get_membership(user.id, data.agencia_id)
        if membership is None or membership.status != "ativo":
            raise NotFoundError("Associação à agência não encontrada")
        membership.status = "inativo"
        membership.data_inativacao = utc_now()
        membership.inativado_por = actor.id
        logger.info("User %s removed from agency %s by %s", user.id, data.agencia_id, actor.id)
        return await self._persist(user)

    async def assign_broker(self, actor: Actor, data: BrokerAssignmentRequest) -> User:
        user = await self._get(data.user_id)
        if not can_manage_user(actor, user):
            raise PermissionDeniedError("Sem permissão para alterar a equipa deste utilizador")
        if is_top_tier(user.role):
            raise ValidationError("Admin e Manager não pertencem a equipas")
        await self._ensure_broker(data.broker_id)
        broker = await self.repository.get_by_id(data.broker_id)
        if broker.departamento != user.departamento:
            raise ValidationError("O broker deve pertencer ao mesmo departamento do utilizador")
        user.broker_equipa_id = broker.id
        user.atualizado_por = actor.id
        logger.info("User %s assigned to broker %s by %s", user.id, broker.id, actor.id)
        return await self._persist(user)
