"""Pydantic schemas for Job model."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from portal_backend.core.enums import ExperienceLevel, JobStatus, JobType
from .base import CamelModel
from .company import CompanySummary
from .user import UserSummary


class JobBase(CamelModel):
    """Base job schema with common fields."""

    salary_range: Optional[str] = Field(None, max_length=100, description="Free text salary range")
    min_salary: Optional[int] = Field(None, ge=0, description="Lower salary bound")
    max_salary: Optional[int] = Field(None, ge=0, description="Upper salary bound")


class JobCreate(JobBase):
    """Schema for creating a new job."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    location: str = Field(..., min_length=1, max_length=255)
    type: JobType = JobType.FULL_TIME
    experience_level: ExperienceLevel = ExperienceLevel.ENTRY
    skills_required: List[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.OPEN
    application_deadline: datetime = Field(..., description="Last moment applications are accepted")
    company_id: Optional[UUID] = Field(None, description="Target company, admins only")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        """New jobs are either published or drafts."""
        if v not in (JobStatus.OPEN, JobStatus.DRAFT):
            raise ValueError("New jobs must be Open or Draft")
        return v


class JobUpdate(JobBase):
    """Schema for updating a job. The owning employer cannot be changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=5000)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    skills_required: Optional[List[str]] = None
    status: Optional[JobStatus] = None
    application_deadline: Optional[datetime] = None


class JobSummary(CamelModel):
    id: UUID
    title: str
    location: str
    type: JobType
    status: JobStatus
    application_deadline: datetime
    company: Optional[CompanySummary] = None


class JobResponse(JobBase):
    """Schema for job response."""

    id: UUID
    employer_id: UUID
    company_id: UUID
    title: str
    description: str
    location: str
    type: JobType
    experience_level: ExperienceLevel
    skills_required: List[str] = Field(default_factory=list)
    status: JobStatus
    application_deadline: datetime
    posted_at: datetime
    created_at: datetime
    updated_at: datetime
    company: Optional[CompanySummary] = None
    employer: Optional[UserSummary] = None


class JobDetailResponse(JobResponse):
    is_expired: bool
    can_apply: bool
    applications_count: int = 0
