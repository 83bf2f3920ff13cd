"""Authentication models and schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow
from portal_backend.core.enums import UserRole, UserStatus
from portal_backend.schemas.base import CamelModel


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    id = Column(GUID(), primary_key=True, default=uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default=UserRole.CANDIDATE.value, nullable=False, index=True)
    status = Column(String(20), default=UserStatus.ACTIVE.value, nullable=False)
    avatar_url = Column(String(500), nullable=True)
    phone = Column(String(50), nullable=True)
    last_login = Column(DateTime, nullable=True)
    reset_password_token = Column(String(64), nullable=True, index=True)
    reset_password_expires = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    company = relationship("Company", back_populates="owner", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    candidate_profile = relationship("CandidateProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_blocked(self) -> bool:
        return self.status == UserStatus.BLOCKED.value


# Pydantic models for API
class SignupRequest(CamelModel):
    """Signup payload. Admin accounts cannot be self-registered."""
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.CANDIDATE

    @field_validator("role")
    @classmethod
    def role_not_admin(cls, value: UserRole) -> UserRole:
        if value == UserRole.ADMIN:
            raise ValueError("Role must be candidate or employer")
        return value


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    password: str = Field(min_length=6)


class UserResponse(CamelModel):
    """User response schema."""
    id: UUID
    name: str
    email: EmailStr
    role: UserRole
    status: UserStatus
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class Token(CamelModel):
    """Token response schema."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenData(BaseModel):
    """Token data schema for JWT payload."""
    user_id: Optional[UUID] = None
    role: Optional[str] = None
    token_type: str = "access"
