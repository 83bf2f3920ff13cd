"""Repository for chat messages."""

from typing import List
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from portal_backend.models.message import Message
from .base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    def __init__(self):
        super().__init__(Message)

    def for_conversation(self, db: Session, conversation_id: str) -> List[Message]:
        return (
            db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)
            .all()
        )

    def involving(self, db: Session, user_id: UUID) -> List[Message]:
        """Every message the user sent or received, newest first."""
        return (
            db.query(Message)
            .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc(), Message.id)
            .all()
        )
