"""Chat messages between two users."""

from uuid import UUID, uuid4

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from portal_backend.core.base import Base
from portal_backend.core.custom_types import GUID, utcnow


def conversation_id_for(first: UUID, second: UUID) -> str:
    """Stable id for the conversation between two users, independent of order."""
    return "_".join(sorted([str(first), str(second)]))


class Message(Base):
    """A direct message; the conversation id is derived from both participants."""

    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
    )

    id = Column(GUID(), primary_key=True, default=uuid4)
    conversation_id = Column(String(80), nullable=False)
    sender_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, conversation_id='{self.conversation_id}')>"
