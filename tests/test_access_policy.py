"""Access policy evaluator."""

import uuid

import pytest

from app.core.access_policy import (
    Action,
    Actor,
    ScopeKind,
    can_access,
    can_access_agency,
    can_assign_role,
    can_list_users,
    can_manage_user,
    ensure_access,
    visibility_scope,
)
from app.core.roles import Role, RoleCategory, category_of
from app.errors import PermissionDeniedError
from app.models.candidate import Candidate, CandidateResponsible
from app.models.cv_analysis import CVAnalysis
from app.models.task import Task

from conftest import make_actor, make_user


pytestmark = pytest.mark.unit


def candidate_in(departamento, responsible_ids=(), inactive_ids=()):
    responsaveis = [
        CandidateResponsible(id=uuid.uuid4(), user_id=i, status="ativo") for i in responsible_ids
    ] + [
        CandidateResponsible(id=uuid.uuid4(), user_id=i, status="inativo") for i in inactive_ids
    ]
    return Candidate(
        id=uuid.uuid4(),
        nome="Ana",
        email="a@x.com",
        telefone="911000000",
        departamento=departamento,
        responsaveis=responsaveis,
    )


def all_targets(departamento="Marketing"):
    owner = uuid.uuid4()
    return [
        candidate_in(departamento, [owner]),
        CVAnalysis(id=uuid.uuid4(), analise="ok", dono_id=owner, departamento_dono=departamento),
        Task(
            id=uuid.uuid4(),
            titulo="t",
            descricao="d",
            criador_id=owner,
            responsaveis=[],
            acompanhantes=[],
            departamento=departamento,
        ),
        make_user(Role.RECRUTADOR, departamento),
    ]


@pytest.mark.parametrize("role", [Role.ADMIN, Role.MANAGER])
def test_top_tier_accesses_everything(role):
    actor = make_actor(role, departamento=None)
    for target in all_targets() + all_targets(None):
        assert can_access(actor, target, Action.READ)
        assert can_access(actor, target, Action.WRITE)


@pytest.mark.parametrize("role", [r for r in Role if category_of(r) == RoleCategory.DIRECTOR])
def test_director_access_is_department_equality(role):
    actor = make_actor(role, departamento="Comercial")
    for target in all_targets("Comercial"):
        assert can_access(actor, target)
    for target in all_targets("Marketing"):
        assert not can_access(actor, target)


def test_director_in_comercial_denied_marketing_candidate():
    actor = make_actor(Role.DIRETOR_COMERCIAL, departamento="Comercial")
    candidate = candidate_in("Marketing", [uuid.uuid4()])
    with pytest.raises(PermissionDeniedError):
        ensure_access(actor, candidate)


def test_individual_contributor_needs_active_responsibility():
    actor = make_actor(Role.RECRUTADOR, departamento="RH")
    assert can_access(actor, candidate_in("RH", [actor.id]), Action.WRITE)
    assert not can_access(actor, candidate_in("RH", [uuid.uuid4()]))
    assert not can_access(actor, candidate_in("RH", [uuid.uuid4()], inactive_ids=[actor.id]))


def test_broker_sees_team_members_candidates():
    member = uuid.uuid4()
    broker = make_actor(Role.BROKER_EQUIPA, departamento="Comercial", team_ids=frozenset({member}))
    assert can_access(broker, candidate_in("Comercial", [member]))
    assert can_access(broker, candidate_in("Comercial", [broker.id]))
    assert not can_access(broker, candidate_in("Comercial", [uuid.uuid4()]))


def test_task_visible_to_assignee_and_observer():
    actor = make_actor(Role.EMPLOYEE, departamento="Financeiro")
    base = dict(titulo="t", descricao="d", criador_id=uuid.uuid4(), departamento="Financeiro")
    assert can_access(actor, Task(id=uuid.uuid4(), destinatario_id=actor.id, responsaveis=[], acompanhantes=[], **base))
    assert can_access(actor, Task(id=uuid.uuid4(), responsaveis=[], acompanhantes=[actor.id], **base))
    assert not can_access(actor, Task(id=uuid.uuid4(), responsaveis=[], acompanhantes=[], **base))


def test_analysis_reached_through_owner_only():
    analyst = make_actor(Role.CONSULTOR, departamento="Comercial")
    analysis = CVAnalysis(
        id=uuid.uuid4(),
        analise="ok",
        dono_id=uuid.uuid4(),
        departamento_dono="RH",
        analisado_por_id=analyst.id,
    )
    assert not can_access(analyst, analysis, Action.READ)
    assert not can_access(analyst, analysis, Action.WRITE)
    assert not visibility_scope(analyst).allows("RH", {analysis.dono_id})


def test_malformed_actor_is_denied_without_error():
    actor = make_actor(Role.DIRETOR_RH, departamento=None)
    assert visibility_scope(actor).kind == ScopeKind.NONE
    for target in all_targets():
        assert not can_access(actor, target)


def test_user_may_always_read_and_edit_self():
    user = make_user(Role.CONSULTOR, "Comercial", broker_equipa_id=uuid.uuid4())
    actor = Actor.from_user(user)
    assert can_access(actor, user, Action.READ)
    assert can_access(actor, user, Action.WRITE)


def test_only_admin_assigns_admin():
    assert can_assign_role(make_actor(Role.ADMIN, None), Role.ADMIN)
    assert not can_assign_role(make_actor(Role.MANAGER, None), Role.ADMIN)
    assert can_assign_role(make_actor(Role.MANAGER, None), Role.DIRETOR_RH, "RH")


def test_director_and_recruiter_assign_inside_own_department():
    for role in (Role.DIRETOR_RH, Role.RECRUTADOR):
        actor = make_actor(role, departamento="RH")
        assert can_assign_role(actor, Role.EMPLOYEE, "RH")
        assert not can_assign_role(actor, Role.EMPLOYEE, "Comercial")
        assert not can_assign_role(actor, Role.MANAGER, None)


def test_broker_only_creates_consultores_of_own_team():
    broker = make_actor(Role.BROKER_EQUIPA, departamento="Comercial")
    assert can_assign_role(broker, Role.CONSULTOR, "Comercial", broker.id)
    assert not can_assign_role(broker, Role.CONSULTOR, "Comercial", uuid.uuid4())
    assert not can_assign_role(broker, Role.EMPLOYEE, "Comercial", broker.id)


def test_consultor_and_employee_cannot_assign_roles():
    for role in (Role.CONSULTOR, Role.EMPLOYEE):
        actor = make_actor(role, departamento="Comercial")
        assert not can_assign_role(actor, Role.EMPLOYEE, "Comercial")


def test_manage_user_rules():
    admin_target = make_user(Role.ADMIN, None)
    rh_employee = make_user(Role.EMPLOYEE, "RH")
    assert can_manage_user(make_actor(Role.ADMIN, None), admin_target)
    assert not can_manage_user(make_actor(Role.MANAGER, None), admin_target)
    assert can_manage_user(make_actor(Role.DIRETOR_RH, "RH"), rh_employee)
    assert not can_manage_user(make_actor(Role.DIRETOR_COMERCIAL, "Comercial"), rh_employee)
    assert not can_manage_user(make_actor(Role.RECRUTADOR, "RH"), rh_employee)


def test_consultor_cannot_list_users():
    assert not can_list_users(make_actor(Role.CONSULTOR, "Comercial"))
    assert can_list_users(make_actor(Role.EMPLOYEE, "Comercial"))


def test_agency_access_requires_membership():
    agency_id = uuid.uuid4()
    assert can_access_agency(make_actor(Role.MANAGER, None), agency_id)
    member = make_actor(Role.RECRUTADOR, "RH", agency_ids=frozenset({agency_id}))
    assert can_access_agency(member, agency_id)
    assert not can_access_agency(make_actor(Role.RECRUTADOR, "RH"), agency_id)
