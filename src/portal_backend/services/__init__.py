"""Service layer for business logic."""

from .auth_service import AuthService
from .job_service import JobService
from .application_service import ApplicationService
from .company_service import CompanyService
from .candidate_service import CandidateService
from .employer_service import EmployerService
from .chat_service import ChatService
from .user_service import UserService
from .report_service import ReportService
from .content_service import ContentService
from .notification_service import NotificationService

__all__ = [
    "AuthService",
    "JobService",
    "ApplicationService",
    "CompanyService",
    "CandidateService",
    "EmployerService",
    "ChatService",
    "UserService",
    "ReportService",
    "ContentService",
    "NotificationService",
]
