"""Editable site content such as the terms page."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow


class Content(Base):
    __tablename__ = "contents"

    id = Column(GUID(), primary_key=True, default=uuid4)
    key = Column(String(20), unique=True, nullable=False)
    value = Column(Text, nullable=False, default="")
    last_updated_by = Column(GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Content(key='{self.key}')>"
