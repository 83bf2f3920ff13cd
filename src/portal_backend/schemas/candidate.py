"""Pydantic schemas for candidate profiles."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from .base import CamelModel
from .user import UserSummary


class CandidateProfileUpdate(CamelModel):
    """Fields a candidate may set on their own profile."""

    title: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    about: Optional[str] = Field(None, max_length=5000)
    skills: Optional[List[str]] = None
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)
    default_resume_url: Optional[str] = Field(None, max_length=500)


class ResumeCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=500)


class ResumeResponse(CamelModel):
    id: UUID
    name: str
    url: str
    uploaded_at: datetime


class CandidateProfileResponse(CamelModel):
    """Schema for candidate profile response."""

    id: UUID
    user_id: UUID
    title: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    default_resume_url: Optional[str] = None
    resumes: List[ResumeResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None
