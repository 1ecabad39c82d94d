"""
FastAPI dependencies for the application.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.access_policy import Actor
from app.core.roles import Role
from app.core.security import decode_access_token
from app.db.mirror import SecondaryMirror, get_mirror
from app.db.session import get_db
from app.errors import AuthenticationError, PermissionDeniedError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.agency_service import AgencyService, DepartmentService
from app.services.appointment_service import AppointmentService
from app.services.calendar_sink import CalendarSink, get_calendar_sink
from app.services.candidate_service import CandidateService
from app.services.cv_analysis_service import CVAnalysisService
from app.services.report_service import ReportService
from app.services.task_service import TaskService
from app.services.user_service import UserService

# Security scheme for JWT bearer tokens; missing tokens are reported as 401
security = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_current_user", "get_current_actor"]


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from JWT token.

    Validates the JWT token, loads the user from database,
    and ensures the user is active.

    Raises:
        AuthenticationError: token missing or invalid, or user not found
        PermissionDeniedError: user is inactive
    """
    if credentials is None:
        raise AuthenticationError("Token de acesso não fornecido")

    payload = decode_access_token(credentials.credentials)
    user_id_str = payload.get("user_id")
    if not user_id_str:
        raise AuthenticationError("Invalid token payload")
    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if user.status != "ativo":
        raise PermissionDeniedError("Utilizador inativo")
    return user


async def get_current_actor(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """The caller as the access policy sees it, with a fresh team set."""
    team_ids = ()
    if user.role == Role.BROKER_EQUIPA.value:
        team_ids = await UserRepository(db).team_ids(user.id)
    return Actor.from_user(user, team_ids=team_ids)


# Service factories


def get_user_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> UserService:
    return UserService(db, mirror=mirror)


def get_candidate_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> CandidateService:
    return CandidateService(db, mirror=mirror)


def get_cv_analysis_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> CVAnalysisService:
    return CVAnalysisService(db, mirror=mirror)


def get_task_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> TaskService:
    return TaskService(db, mirror=mirror)


def get_appointment_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
    calendar: CalendarSink = Depends(get_calendar_sink),
) -> AppointmentService:
    return AppointmentService(db, calendar=calendar, mirror=mirror)


def get_agency_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> AgencyService:
    return AgencyService(db, mirror=mirror)


def get_department_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> DepartmentService:
    return DepartmentService(db, mirror=mirror)


def get_report_service(
    db: AsyncSession = Depends(get_db),
    mirror: SecondaryMirror = Depends(get_mirror),
) -> ReportService:
    return ReportService(db, mirror=mirror)
