"""Candidate profile, resumes and saved jobs."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, JSON, Table
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow


saved_jobs = Table(
    "saved_jobs",
    Base.metadata,
    Column("profile_id", GUID(), ForeignKey("candidate_profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("job_id", GUID(), ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True),
    Column("saved_at", DateTime, default=utcnow, nullable=False),
)


class CandidateProfile(Base):
    """Profile details a candidate presents to employers."""

    __tablename__ = "candidate_profiles"

    id = Column(GUID(), primary_key=True, default=uuid4)
    user_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    title = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    about = Column(Text, nullable=True)
    skills = Column(JSON, default=list, nullable=False)
    phone = Column(String(50), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    default_resume_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="candidate_profile")
    resumes = relationship(
        "Resume",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="Resume.uploaded_at",
    )
    saved_jobs = relationship("Job", secondary=saved_jobs)

    def __repr__(self) -> str:
        return f"<CandidateProfile(id={self.id}, user_id={self.user_id})>"


class Resume(Base):
    """Resume file reference attached to a profile."""

    __tablename__ = "resumes"

    id = Column(GUID(), primary_key=True, default=uuid4)
    profile_id = Column(GUID(), ForeignKey("candidate_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    uploaded_at = Column(DateTime, default=utcnow, nullable=False)

    profile = relationship("CandidateProfile", back_populates="resumes")

    def __repr__(self) -> str:
        return f"<Resume(id={self.id}, name='{self.name}')>"
