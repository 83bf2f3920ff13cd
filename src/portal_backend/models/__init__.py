"""Database models for the job portal."""

from .company import Company
from .job import Job
from .application import Application
from .candidate_profile import CandidateProfile, Resume, saved_jobs
from .notification import Notification
from .device_token import DeviceToken
from .message import Message
from .content import Content

# Import User from auth module
from portal_backend.auth.models import User

__all__ = [
    "User",
    "Company",
    "Job",
    "Application",
    "CandidateProfile",
    "Resume",
    "saved_jobs",
    "Notification",
    "DeviceToken",
    "Message",
    "Content",
]
