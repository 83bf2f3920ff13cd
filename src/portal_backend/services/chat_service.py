"""Direct messaging between users."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.core.custom_types import utcnow
from portal_backend.core.error_handling import AuthorizationError, NotFoundError, ValidationError
from portal_backend.models.message import Message, conversation_id_for
from portal_backend.realtime.hub import RealtimeHub, user_room
from portal_backend.repositories.message import MessageRepository
from portal_backend.repositories.user import UserRepository
from portal_backend.schemas.base import dump
from portal_backend.schemas.chat import MessageResponse
from portal_backend.schemas.user import UserSummary

logger = structlog.get_logger(__name__)

RECEIVE_EVENT = "receive_message"


def conversation_room(conversation_id: str) -> str:
    return f"conversation:{conversation_id}"


def is_participant(conversation_id: str, user_id: UUID) -> bool:
    return str(user_id) in conversation_id.split("_")


class ChatService:
    """Conversations are identified by the sorted pair of participant ids."""

    def __init__(self, hub: Optional[RealtimeHub] = None):
        self.hub = hub
        self.repository = MessageRepository()
        self.user_repository = UserRepository()

    def _other_user(self, db: Session, user_id: UUID) -> User:
        other = self.user_repository.get_by_id(db, user_id)
        if other is None:
            raise NotFoundError("User not found")
        return other

    def conversations(self, db: Session, user: User) -> List[Dict[str, Any]]:
        """Latest message of each conversation the user takes part in, newest first."""
        latest: Dict[str, Message] = {}
        unread: Dict[str, int] = {}
        for message in self.repository.involving(db, user.id):
            latest.setdefault(message.conversation_id, message)
            if message.receiver_id == user.id and message.read_at is None:
                unread[message.conversation_id] = unread.get(message.conversation_id, 0) + 1

        other_ids = {
            message.receiver_id if message.sender_id == user.id else message.sender_id
            for message in latest.values()
        }
        others = {}
        if other_ids:
            others = {other.id: other for other in db.query(User).filter(User.id.in_(other_ids)).all()}

        result = []
        for conversation_id, message in latest.items():
            other_id = message.receiver_id if message.sender_id == user.id else message.sender_id
            other = others.get(other_id)
            result.append({
                "conversationId": conversation_id,
                "otherUser": dump(UserSummary.model_validate(other)) if other else None,
                "lastMessage": dump(MessageResponse.model_validate(message)),
                "unreadCount": unread.get(conversation_id, 0),
            })
        return result

    def messages(self, db: Session, user: User, conversation_id: str) -> List[Message]:
        """Messages of a conversation, oldest first; marks the user's incoming ones read.

        Raises:
            AuthorizationError: The user is not a participant
        """
        if not is_participant(conversation_id, user.id):
            raise AuthorizationError("Not authorized to view this conversation")

        messages = self.repository.for_conversation(db, conversation_id)
        now = utcnow()
        changed = False
        for message in messages:
            if message.receiver_id == user.id and message.read_at is None:
                message.read_at = now
                changed = True
        if changed:
            db.commit()
        return messages

    def save_message(self, db: Session, sender: User, receiver_id: UUID, content: str) -> Message:
        """Persist a message.

        Raises:
            ValidationError: Empty content or a message to oneself
            NotFoundError: Unknown receiver
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("Message content is required", field="content")
        if receiver_id == sender.id:
            raise ValidationError("You cannot message yourself", field="receiverId")
        self._other_user(db, receiver_id)

        message = self.repository.create(
            db,
            conversation_id=conversation_id_for(sender.id, receiver_id),
            sender_id=sender.id,
            receiver_id=receiver_id,
            content=content,
        )
        logger.info(
            "Message sent",
            message_id=str(message.id),
            conversation_id=message.conversation_id,
            sender_id=str(sender.id),
        )
        return message

    async def send_message(self, db: Session, sender: User, receiver_id: UUID, content: str) -> Message:
        """Persist a message and relay it to the receiver's live connections."""
        message = self.save_message(db, sender, receiver_id, content)
        if self.hub is not None:
            payload = dump(MessageResponse.model_validate(message))
            delivered = await self.hub.emit_to_rooms(
                [user_room(receiver_id), conversation_room(message.conversation_id)],
                RECEIVE_EVENT,
                payload,
            )
            logger.debug("Message relayed", message_id=str(message.id), connections=delivered)
        return message

    def initiate(self, db: Session, user: User, other_user_id: UUID) -> Dict[str, Any]:
        """Conversation id with another user, without sending anything."""
        if other_user_id == user.id:
            raise ValidationError("You cannot message yourself", field="userId")
        other = self._other_user(db, other_user_id)
        return {
            "id": conversation_id_for(user.id, other.id),
            "otherUser": dump(UserSummary.model_validate(other)),
        }
