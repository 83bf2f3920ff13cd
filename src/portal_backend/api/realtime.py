"""WebSocket gateway for chat and live notifications.

Frames in both directions are JSON objects ``{"event": ..., "data": ...}``.
"""

import json
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
import structlog

from portal_backend.auth.dependencies import resolve_user
from portal_backend.core.error_handling import AuthenticationError, PortalError, ValidationError
from portal_backend.core.registry import ServiceRegistry
from portal_backend.models.message import conversation_id_for
from portal_backend.realtime.hub import Connection, user_room
from portal_backend.schemas.base import dump
from portal_backend.schemas.chat import MessageResponse
from portal_backend.services.chat_service import RECEIVE_EVENT, ChatService, conversation_room

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["realtime"])

ERROR_EVENT = "error"


def _handshake_token(websocket: WebSocket) -> Optional[str]:
    token = websocket.query_params.get("token")
    if token:
        return token
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def _parse_uuid(value: Any, field: str) -> UUID:
    if isinstance(value, dict):
        value = value.get(field)
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"A valid {field} is required", field=field)


class RealtimeSession:
    """Handles the client events of one authenticated connection."""

    def __init__(self, services: ServiceRegistry, connection: Connection):
        self.services = services
        self.connection = connection
        self.hub = services.hub

    async def handle(self, event: str, data: Any) -> None:
        handler = {
            "join_room": self.join_room,
            "send_message": self.send_message,
            "notification:read": self.notification_read,
            "notification:read_all": self.notification_read_all,
        }.get(event)
        if handler is None:
            raise ValidationError(f"Unknown event: {event}")
        await handler(data)

    async def join_room(self, data: Any) -> None:
        """Join the conversation room shared with a peer user."""
        peer_id = _parse_uuid(data, "userId")
        room = conversation_room(conversation_id_for(self.connection.user_id, peer_id))
        self.hub.join(self.connection, room)
        logger.debug("Joined conversation room", user_id=str(self.connection.user_id), room=room)

    async def send_message(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise ValidationError("Message payload must be an object")
        receiver_id = _parse_uuid(data, "receiverId")

        with self.services.db.get_session() as db:
            chat = ChatService()
            sender = chat.user_repository.get_by_id(db, self.connection.user_id)
            if sender is None:
                raise AuthenticationError("Not authorized, user not found")
            message = chat.save_message(db, sender, receiver_id, data.get("content", ""))
            payload = dump(MessageResponse.model_validate(message))

        await self.hub.emit_to_rooms(
            [user_room(receiver_id), conversation_room(payload["conversationId"])],
            RECEIVE_EVENT,
            payload,
            skip=self.connection,
        )
        await self.hub.send(self.connection, RECEIVE_EVENT, payload)

    async def notification_read(self, data: Any) -> None:
        notification_id = _parse_uuid(data, "id")
        with self.services.db.get_session() as db:
            self.services.notifications.mark_read(db, self.connection.user_id, notification_id)
        await self.hub.send(self.connection, "notification:updated", {"id": str(notification_id), "isRead": True})

    async def notification_read_all(self, data: Any) -> None:
        with self.services.db.get_session() as db:
            self.services.notifications.mark_all_read(db, self.connection.user_id)
        await self.hub.send(self.connection, "notification:all_read", {})


@router.websocket("/ws")
async def realtime_gateway(websocket: WebSocket):
    """Authenticate on handshake, then serve client events until disconnect."""
    services: ServiceRegistry = websocket.app.state.services

    try:
        with services.db.get_session() as db:
            user = resolve_user(db, _handshake_token(websocket), services.settings)
            user_id, role = user.id, user.role
    except PortalError as e:
        logger.info("Realtime handshake rejected", reason=e.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return

    await websocket.accept()
    connection = services.hub.register(websocket, user_id, role)
    session = RealtimeSession(services, connection)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
                if not isinstance(frame, dict) or not frame.get("event"):
                    raise ValidationError("Frames must be objects with an event name")
                await session.handle(str(frame["event"]), frame.get("data"))
            except json.JSONDecodeError:
                await services.hub.send(connection, ERROR_EVENT, {"message": "Invalid JSON"})
            except PortalError as e:
                await services.hub.send(connection, ERROR_EVENT, {"message": e.message})
            except WebSocketDisconnect:
                raise
            except Exception as e:
                logger.error(
                    "Unhandled realtime event error",
                    user_id=str(user_id),
                    error=str(e),
                    exc_info=e,
                )
                await services.hub.send(connection, ERROR_EVENT, {"message": "Server Error"})
    except WebSocketDisconnect:
        pass
    finally:
        services.hub.unregister(connection)
