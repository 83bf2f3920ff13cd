"""Pydantic schemas for Company model."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from portal_backend.core.enums import EmployeesCount
from .base import CamelModel


def _validate_website(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return value


class CompanyBase(CamelModel):
    description: Optional[str] = Field(None, max_length=5000, description="Company description")
    logo_url: Optional[str] = Field(None, max_length=500, description="Logo URL")
    website: Optional[str] = Field(None, max_length=500, description="Company website")
    location: Optional[str] = Field(None, max_length=255, description="Headquarters location")
    employees_count: Optional[EmployeesCount] = Field(None, description="Company size bucket")

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        """Only http(s) URLs are accepted."""
        return _validate_website(v)


class CompanyCreate(CompanyBase):
    name: str = Field(..., min_length=1, max_length=100, description="Company name")


class CompanyUpdate(CompanyBase):
    name: Optional[str] = Field(None, min_length=1, max_length=100)


class CompanySummary(CamelModel):
    id: UUID
    name: str
    logo_url: Optional[str] = None
    location: Optional[str] = None


class CompanyResponse(CompanyBase):
    """Schema for company response."""

    id: UUID
    owner_id: UUID
    name: str
    created_at: datetime
    updated_at: datetime
