"""Pydantic schemas for chat messages."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .base import CamelModel
from .user import UserSummary


class SendMessageRequest(CamelModel):
    receiver_id: UUID
    content: str = Field(..., min_length=1, max_length=2000)


class InitiateChatRequest(CamelModel):
    user_id: UUID


class MessageResponse(CamelModel):
    id: UUID
    conversation_id: str
    sender_id: UUID
    receiver_id: UUID
    content: str
    read_at: Optional[datetime] = None
    created_at: datetime


class ConversationResponse(CamelModel):
    """Latest message of a conversation together with the other participant."""

    conversation_id: str
    other_user: Optional[UserSummary] = None
    last_message: MessageResponse
    unread_count: int = 0
