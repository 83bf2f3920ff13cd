"""Pydantic schemas for data validation and serialization."""

from .base import CamelModel, dump, success_response, paginated_response
from .user import UserSummary, UserDetail, UserUpdate
from .company import CompanyCreate, CompanyUpdate, CompanyResponse, CompanySummary
from .job import JobCreate, JobUpdate, JobResponse, JobDetailResponse, JobSummary
from .application import ApplicationCreate, ApplicationStatusUpdate, ApplicationResponse
from .candidate import CandidateProfileUpdate, CandidateProfileResponse, ResumeCreate, ResumeResponse
from .notification import NotificationResponse, MarkReadRequest, DeviceTokenRegister, DeviceTokenUnregister
from .chat import SendMessageRequest, InitiateChatRequest, MessageResponse, ConversationResponse
from .content import ContentUpsert, ContentResponse

__all__ = [
    "CamelModel", "dump", "success_response", "paginated_response",
    "UserSummary", "UserDetail", "UserUpdate",
    "CompanyCreate", "CompanyUpdate", "CompanyResponse", "CompanySummary",
    "JobCreate", "JobUpdate", "JobResponse", "JobDetailResponse", "JobSummary",
    "ApplicationCreate", "ApplicationStatusUpdate", "ApplicationResponse",
    "CandidateProfileUpdate", "CandidateProfileResponse", "ResumeCreate", "ResumeResponse",
    "NotificationResponse", "MarkReadRequest", "DeviceTokenRegister", "DeviceTokenUnregister",
    "SendMessageRequest", "InitiateChatRequest", "MessageResponse", "ConversationResponse",
    "ContentUpsert", "ContentResponse",
]
