"""Application model linking candidates to jobs."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow
from portal_backend.core.enums import ApplicationStatus


class Application(Base):
    """A candidate's application to a job; one per (job, candidate)."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_applications_job_candidate"),
    )

    id = Column(GUID(), primary_key=True, default=uuid4)
    job_id = Column(GUID(), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    employer_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resume_url = Column(String(500), nullable=True)
    status = Column(String(20), default=ApplicationStatus.APPLIED.value, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    job = relationship("Job", back_populates="applications")
    candidate = relationship("User", foreign_keys=[candidate_id])
    employer = relationship("User", foreign_keys=[employer_id])

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, job_id={self.job_id}, candidate_id={self.candidate_id})>"
