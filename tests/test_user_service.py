import asyncio
import uuid

import pytest

from app.core.roles import Role
from app.core.security import decode_access_token, verify_password
from app.errors import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from app.models.agency import Agency
from app.schemas.user import (
    AgencyMembershipRequest,
    BootstrapAdminRequest,
    BrokerAssignmentRequest,
    LoginRequest,
    PasswordChange,
    UserCreate,
    UserUpdate,
)
from app.services.user_service import UserService

from conftest import (
    FakeAgencyRepository,
    FakeMirror,
    FakeSession,
    FakeUserRepository,
    actor_for,
    make_actor,
    make_user,
)


pytestmark = pytest.mark.unit


def service(*users, agencies=(), mirror=None):
    agency_repository = FakeAgencyRepository()
    for agency in agencies:
        agency_repository.items[agency.id] = agency
    return UserService(
        FakeSession(),
        repository=FakeUserRepository(users),
        agency_repository=agency_repository,
        mirror=mirror or FakeMirror(),
    )


def new_user(**overrides):
    fields = dict(
        username="joana",
        password="segredo1",
        nome="Joana",
        email="joana@example.com",
        role=Role.RECRUTADOR,
        departamento="RH",
    )
    fields.update(overrides)
    return UserCreate(**fields)


def test_bootstrap_admin_only_on_empty_directory():
    svc = service()
    data = BootstrapAdminRequest(username="root", password="segredo1", nome="Root", email="root@example.com")

    admin = asyncio.run(svc.bootstrap_admin(data))
    assert admin.role == Role.ADMIN.value
    assert admin.departamento is None

    with pytest.raises(ConflictError):
        asyncio.run(svc.bootstrap_admin(data))


def test_login_returns_token_with_id_and_role():
    user = make_user(Role.DIRETOR_RH, "RH", username="dir", password="segredo1")
    response = asyncio.run(service(user).login(LoginRequest(username="dir", password="segredo1")))

    payload = decode_access_token(response.access_token)
    assert payload["user_id"] == str(user.id)
    assert payload["role"] == Role.DIRETOR_RH.value
    assert response.user.username == "dir"


@pytest.mark.parametrize("username,password", [("dir", "errada"), ("ninguem", "segredo1")])
def test_login_with_bad_credentials(username, password):
    user = make_user(Role.DIRETOR_RH, "RH", username="dir", password="segredo1")
    with pytest.raises(AuthenticationError):
        asyncio.run(service(user).login(LoginRequest(username=username, password=password)))


def test_inactive_user_cannot_log_in():
    user = make_user(username="old", password="segredo1", status="inativo")
    with pytest.raises(AuthenticationError):
        asyncio.run(service(user).login(LoginRequest(username="old", password="segredo1")))


def test_director_registers_inside_own_department():
    director = make_user(Role.DIRETOR_RH, "RH")
    svc = service(director)

    user = asyncio.run(svc.register(actor_for(director), new_user()))

    assert user.criado_por == director.id
    assert verify_password("segredo1", user.hashed_password)
    with pytest.raises(PermissionDeniedError):
        asyncio.run(svc.register(actor_for(director), new_user(username="x100", email="x100@example.com", departamento="Comercial")))


def test_register_rejects_duplicate_username():
    existing = make_user(username="joana")
    admin = make_user(Role.ADMIN, None)
    with pytest.raises(ConflictError):
        asyncio.run(service(existing, admin).register(actor_for(admin), new_user()))


def test_register_requires_department_for_non_top_tier():
    admin = make_user(Role.ADMIN, None)
    with pytest.raises(ValidationError):
        asyncio.run(service(admin).register(actor_for(admin), new_user(departamento=None)))


def test_consultor_needs_active_broker():
    admin = make_user(Role.ADMIN, None)
    not_a_broker = make_user(Role.EMPLOYEE, "Comercial")
    svc = service(admin, not_a_broker)
    data = new_user(role=Role.CONSULTOR, departamento="Comercial", broker_equipa_id=not_a_broker.id)
    with pytest.raises(ValidationError):
        asyncio.run(svc.register(actor_for(admin), data))


def test_broker_registers_consultor_of_own_team():
    broker = make_user(Role.BROKER_EQUIPA, "Comercial")
    svc = service(broker)
    data = new_user(role=Role.CONSULTOR, departamento="Comercial", broker_equipa_id=broker.id)

    consultor = asyncio.run(svc.register(actor_for(broker), data))

    assert consultor.broker_equipa_id == broker.id


def test_register_with_unknown_agency_fails():
    admin = make_user(Role.ADMIN, None)
    with pytest.raises(ValidationError):
        asyncio.run(service(admin).register(actor_for(admin), new_user(agencias=[uuid.uuid4()])))


def test_consultor_cannot_list_users():
    with pytest.raises(PermissionDeniedError):
        asyncio.run(service().list_users(make_actor(Role.CONSULTOR, "Comercial")))


def test_director_lists_own_department_only():
    director = make_user(Role.DIRETOR_RH, "RH")
    rh, comercial = make_user(Role.EMPLOYEE, "RH"), make_user(Role.EMPLOYEE, "Comercial")
    users = asyncio.run(service(director, rh, comercial).list_users(actor_for(director)))
    assert {u.id for u in users} == {director.id, rh.id}


def test_self_update_limited_to_profile_fields():
    user = make_user(Role.EMPLOYEE, "RH")
    svc = service(user)

    updated = asyncio.run(svc.update_user(actor_for(user), user.id, UserUpdate(nome="Novo Nome")))
    assert updated.nome == "Novo Nome"

    with pytest.raises(PermissionDeniedError) as exc:
        asyncio.run(svc.update_user(actor_for(user), user.id, UserUpdate(departamento="Comercial")))
    assert exc.value.details == {"fields": ["departamento"]}


def test_cannot_inactivate_self():
    admin = make_user(Role.ADMIN, None)
    with pytest.raises(ValidationError):
        asyncio.run(service(admin).inactivate_user(actor_for(admin), admin.id))


def test_inactivate_and_reactivate():
    director = make_user(Role.DIRETOR_RH, "RH")
    target = make_user(Role.EMPLOYEE, "RH")
    svc = service(director, target)

    asyncio.run(svc.inactivate_user(actor_for(director), target.id, "Saiu"))
    assert target.status == "inativo"
    assert target.motivo_inativacao == "Saiu"

    asyncio.run(svc.reactivate_user(actor_for(director), target.id))
    assert target.status == "ativo"
    assert target.inativado_em is None


def test_own_password_change_requires_current_password():
    user = make_user(password="segredo1")
    svc = service(user)

    with pytest.raises(ValidationError):
        asyncio.run(svc.change_password(actor_for(user), user.id, PasswordChange(senha_atual="x", nova_senha="novasenha")))

    asyncio.run(svc.change_password(actor_for(user), user.id, PasswordChange(senha_atual="segredo1", nova_senha="novasenha")))
    assert verify_password("novasenha", user.hashed_password)


def test_admin_resets_password_without_current():
    admin = make_user(Role.ADMIN, None)
    user = make_user()
    asyncio.run(service(admin, user).change_password(actor_for(admin), user.id, PasswordChange(nova_senha="reposta1")))
    assert verify_password("reposta1", user.hashed_password)


def test_agency_membership_is_toggled_not_deleted():
    admin = make_user(Role.ADMIN, None)
    user = make_user()
    agency = Agency(id=uuid.uuid4(), nome="Lisboa", manager_id=admin.id, status="ativo")
    svc = service(admin, user, agencies=[agency])
    request = AgencyMembershipRequest(user_id=user.id, agencia_id=agency.id)

    asyncio.run(svc.assign_agency(actor_for(admin), request))
    assert [(m.agencia_id, m.status) for m in user.agencias] == [(agency.id, "ativo")]

    asyncio.run(svc.remove_agency(actor_for(admin), request))
    assert [m.status for m in user.agencias] == ["inativo"]

    asyncio.run(svc.assign_agency(actor_for(admin), request))
    assert [m.status for m in user.agencias] == ["ativo"]


def test_broker_must_share_department():
    admin = make_user(Role.ADMIN, None)
    broker = make_user(Role.BROKER_EQUIPA, "Comercial")
    user = make_user(Role.EMPLOYEE, "RH")
    svc = service(admin, broker, user)
    with pytest.raises(ValidationError):
        asyncio.run(svc.assign_broker(actor_for(admin), BrokerAssignmentRequest(user_id=user.id, broker_id=broker.id)))


def test_mirror_row_omits_password_hash():
    mirror = FakeMirror()
    admin = make_user(Role.ADMIN, None)
    asyncio.run(service(admin, mirror=mirror).register(actor_for(admin), new_user()))
    (table, row), = mirror.rows
    assert table == "user"
    assert "hashed_password" not in row


class OrderedSession(FakeSession):
    def __init__(self, log):
        super().__init__()
        self.log = log

    async def commit(self) -> None:
        self.log.append("commit")
        await super().commit()


class OrderedUserRepository(FakeUserRepository):
    def __init__(self, users, log):
        super().__init__(users)
        self.log = log

    async def save(self, obj):
        self.log.append("save")
        return obj


def _mutations(admin, target, broker):
    actor = actor_for(admin)
    return {
        "update": lambda svc: svc.update_user(actor, target.id, UserUpdate(nome="Novo")),
        "inactivate": lambda svc: svc.inactivate_user(actor, target.id),
        "reactivate": lambda svc: svc.reactivate_user(actor, target.id),
        "assign_broker": lambda svc: svc.assign_broker(
            actor, BrokerAssignmentRequest(user_id=target.id, broker_id=broker.id)
        ),
    }


@pytest.mark.parametrize("mutation", ["update", "inactivate", "reactivate", "assign_broker"])
def test_user_mutations_refresh_before_commit(mutation):
    admin = make_user(Role.ADMIN, None)
    broker = make_user(Role.BROKER_EQUIPA, "Comercial")
    target = make_user(Role.CONSULTOR, "Comercial", status="inativo" if mutation == "reactivate" else "ativo")
    log = []
    svc = UserService(
        OrderedSession(log),
        repository=OrderedUserRepository([admin, broker, target], log),
        agency_repository=FakeAgencyRepository(),
        mirror=FakeMirror(),
    )

    asyncio.run(_mutations(admin, target, broker)[mutation](svc))

    assert log == ["save", "commit"]
