"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from app.models.user import User, UserAgency
from app.models.agency import Agency, Department
from app.models.candidate import Candidate, CandidateResponsible, CandidateHistory
from app.models.cv_analysis import CVAnalysis
from app.models.task import Task
from app.models.appointment import Appointment
from app.models.notification import Notification

# Export all models
__all__ = [
    "User",
    "UserAgency",
    "Agency",
    "Department",
    "Candidate",
    "CandidateResponsible",
    "CandidateHistory",
    "CVAnalysis",
    "Task",
    "Appointment",
    "Notification",
]
