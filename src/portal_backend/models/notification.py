"""Persisted notification records."""

from uuid import uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Boolean, JSON, Index
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow
from portal_backend.core.enums import NotificationType


class Notification(Base):
    """A message addressed to one user, with per-channel delivery outcomes."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_created", "recipient_id", "created_at"),
        Index("ix_notifications_recipient_read", "recipient_id", "is_read"),
    )

    id = Column(GUID(), primary_key=True, default=uuid4)
    recipient_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(40), default=NotificationType.GENERAL.value, nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String(20), nullable=True)
    entity_id = Column(GUID(), nullable=True)
    data = Column(JSON, default=dict, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    delivery_channels = Column(JSON, default=list, nullable=False)
    delivery_results = Column(JSON, default=dict, nullable=False)
    is_sent = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    recipient = relationship("User")

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type='{self.type}', recipient_id={self.recipient_id})>"
