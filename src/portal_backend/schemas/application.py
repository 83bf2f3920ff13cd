"""Pydantic schemas for Application model."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from portal_backend.core.enums import ApplicationStatus
from .base import CamelModel
from .job import JobSummary
from .user import UserSummary


class ApplicationCreate(CamelModel):
    """Schema for applying to a job."""

    job_id: UUID = Field(..., description="Job to apply to")
    resume_url: Optional[str] = Field(None, max_length=500, description="Resume to attach; defaults to the profile's default resume")


class ApplicationStatusUpdate(CamelModel):
    status: ApplicationStatus


class ApplicationResponse(CamelModel):
    """Schema for application response."""

    id: UUID
    job_id: UUID
    candidate_id: UUID
    employer_id: UUID
    resume_url: Optional[str] = None
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None
    candidate: Optional[UserSummary] = None
