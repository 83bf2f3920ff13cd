"""Pydantic schemas for users as seen by other users and admins."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from portal_backend.core.enums import UserRole, UserStatus
from .base import CamelModel


class UserSummary(CamelModel):
    """Public subset of a user embedded in other resources."""

    id: UUID
    name: str
    email: str
    role: UserRole
    avatar_url: Optional[str] = None


class UserDetail(UserSummary):
    status: UserStatus
    phone: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserUpdate(CamelModel):
    """Admin update; changing ``status`` blocks or unblocks the account."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    phone: Optional[str] = Field(None, max_length=50)
    avatar_url: Optional[str] = Field(None, max_length=500)
