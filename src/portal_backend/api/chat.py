"""Chat endpoints; the WebSocket gateway carries the live traffic."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal_backend.auth.dependencies import get_current_user
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.registry import ServiceRegistry
from portal_backend.schemas.base import dump, success_response
from portal_backend.schemas.chat import InitiateChatRequest, MessageResponse, SendMessageRequest
from portal_backend.services.chat_service import ChatService
from .deps import dump_items, get_services

router = APIRouter(prefix="/api/chat", tags=["chat"])


def _chat_service(services: ServiceRegistry = Depends(get_services)) -> ChatService:
    return ChatService(services.hub)


@router.get("/conversations")
async def conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(_chat_service)
):
    data = chat_service.conversations(db, current_user)
    return success_response(count=len(data), data=data)


@router.get("/{conversation_id}/messages")
async def messages(
    conversation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(_chat_service)
):
    data = dump_items(MessageResponse, chat_service.messages(db, current_user, conversation_id))
    return success_response(count=len(data), data=data)


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def send_message(
    data: SendMessageRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(_chat_service)
):
    """Persist a message and relay it to the receiver if they are connected."""
    message = await chat_service.send_message(db, current_user, data.receiver_id, data.content)
    return success_response(data=dump(MessageResponse.model_validate(message)))


@router.post("/initiate")
async def initiate_chat(
    data: InitiateChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(_chat_service)
):
    return success_response(data=chat_service.initiate(db, current_user, data.user_id))
