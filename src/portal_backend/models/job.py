"""Job posting model."""

import re
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, JSON
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow
from portal_backend.core.enums import JobStatus, JobType, ExperienceLevel

_NUMBER = re.compile(r"\d+")


def parse_salary_range(salary_range: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """Extract numeric bounds from free text such as ``"20000 - 40000"``.

    Digit groups are read in order; thousands separators are not joined, so
    ``"20,000"`` yields 20 and 0. A single number only sets the minimum.

    Returns:
        ``(min_salary, max_salary)``; ``(None, None)`` when no digits are present
    """
    if not salary_range:
        return None, None
    numbers = [int(match) for match in _NUMBER.findall(salary_range)]
    if not numbers:
        return None, None
    if len(numbers) == 1:
        return numbers[0], None
    return numbers[0], numbers[1]


class Job(Base):
    """Job posting created by an employer for their company."""

    __tablename__ = "jobs"

    id = Column(GUID(), primary_key=True, default=uuid4)
    employer_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    company_id = Column(GUID(), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String(255), nullable=False)
    type = Column(String(20), default=JobType.FULL_TIME.value, nullable=False)
    experience_level = Column(String(20), default=ExperienceLevel.ENTRY.value, nullable=False)
    salary_range = Column(String(100), nullable=True)
    min_salary = Column(Integer, nullable=True)
    max_salary = Column(Integer, nullable=True)
    skills_required = Column(JSON, default=list, nullable=False)
    status = Column(String(20), default=JobStatus.OPEN.value, nullable=False, index=True)
    application_deadline = Column(DateTime, nullable=False, index=True)
    posted_at = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    employer = relationship("User")
    company = relationship("Company", back_populates="jobs")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title='{self.title}', status='{self.status}')>"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.application_deadline < (now or utcnow())

    def can_apply(self, now: Optional[datetime] = None) -> bool:
        return self.status == JobStatus.OPEN.value and not self.is_expired(now)

    @property
    def skills(self) -> List[str]:
        return list(self.skills_required or [])
