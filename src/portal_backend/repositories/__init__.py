"""Repository pattern implementations for data access."""

from .base import BaseRepository
from .user import UserRepository
from .company import CompanyRepository
from .job import JobRepository
from .application import ApplicationRepository
from .candidate_profile import CandidateProfileRepository
from .notification import NotificationRepository, DeviceTokenRepository
from .message import MessageRepository
from .content import ContentRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "CompanyRepository",
    "JobRepository",
    "ApplicationRepository",
    "CandidateProfileRepository",
    "NotificationRepository",
    "DeviceTokenRepository",
    "MessageRepository",
    "ContentRepository",
]
