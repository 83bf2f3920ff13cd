"""Company model owned by a single employer."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow

DEFAULT_LOGO = "no-photo.jpg"


class Company(Base):
    """Company profile; each employer owns at most one."""

    __tablename__ = "companies"

    id = Column(GUID(), primary_key=True, default=uuid4)
    owner_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    logo_url = Column(String(500), default=DEFAULT_LOGO, nullable=False)
    website = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    employees_count = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="company")
    jobs = relationship("Job", back_populates="company", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"
