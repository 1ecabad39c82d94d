"""
Schemas package.

Import all schemas here for easy access.
"""

from app.schemas.user import UserCreate, UserUpdate, UserRead, LoginRequest, LoginResponse
from app.schemas.agency import (
    AgencyCreate, AgencyUpdate, AgencyRead,
    DepartmentCreate, DepartmentUpdate, DepartmentRead,
)
from app.schemas.candidate import CandidateCreate, CandidateUpdate, CandidateRead
from app.schemas.cv_analysis import CVAnalysisCreate, CVAnalysisUpdate, CVAnalysisRead
from app.schemas.task import TaskCreate, TaskUpdate, TaskRead
from app.schemas.appointment import AppointmentCreate, AppointmentUpdate, AppointmentRead
from app.schemas.report import DashboardRead, FunnelRead, RankingRead

__all__ = [
    # User
    "UserCreate", "UserUpdate", "UserRead", "LoginRequest", "LoginResponse",
    # Agency / Department
    "AgencyCreate", "AgencyUpdate", "AgencyRead",
    "DepartmentCreate", "DepartmentUpdate", "DepartmentRead",
    # Candidate
    "CandidateCreate", "CandidateUpdate", "CandidateRead",
    # CV analysis
    "CVAnalysisCreate", "CVAnalysisUpdate", "CVAnalysisRead",
    # Task
    "TaskCreate", "TaskUpdate", "TaskRead",
    # Appointment
    "AppointmentCreate", "AppointmentUpdate", "AppointmentRead",
    # Reports
    "DashboardRead", "FunnelRead", "RankingRead",
]
