"""Process-local registry of WebSocket connections grouped into rooms."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder
import structlog

logger = structlog.get_logger(__name__)

ADMIN_ROOM = "admin"


def user_room(user_id: Any) -> str:
    return f"user:{user_id}"


@dataclass
class Connection:
    websocket: WebSocket
    user_id: UUID
    role: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    rooms: Set[str] = field(default_factory=set)


class RealtimeHub:
    """Room membership and fan-out for live connections.

    Membership is not persisted; clients rebuild it by reconnecting.
    """

    def __init__(self) -> None:
        self.connections: Dict[str, Connection] = {}
        self.rooms: Dict[str, Set[str]] = {}

    def register(self, websocket: WebSocket, user_id: UUID, role: str) -> Connection:
        """Track an accepted socket and join its default rooms."""
        connection = Connection(websocket=websocket, user_id=user_id, role=role)
        self.connections[connection.id] = connection
        self.join(connection, user_room(user_id))
        if role == "admin":
            self.join(connection, ADMIN_ROOM)
        logger.info("Realtime client connected", user_id=str(user_id), connection_id=connection.id)
        return connection

    def join(self, connection: Connection, room: str) -> None:
        self.rooms.setdefault(room, set()).add(connection.id)
        connection.rooms.add(room)

    def leave(self, connection: Connection, room: str) -> None:
        members = self.rooms.get(room)
        if members is not None:
            members.discard(connection.id)
            if not members:
                del self.rooms[room]
        connection.rooms.discard(room)

    def unregister(self, connection: Connection) -> None:
        for room in list(connection.rooms):
            self.leave(connection, room)
        if self.connections.pop(connection.id, None) is not None:
            logger.info("Realtime client disconnected", user_id=str(connection.user_id), connection_id=connection.id)

    def room_size(self, room: str) -> int:
        return len(self.rooms.get(room, ()))

    async def send(self, connection: Connection, event: str, data: Any) -> bool:
        """Send one event to one connection; a broken socket is unregistered."""
        try:
            await connection.websocket.send_json({"event": event, "data": jsonable_encoder(data)})
            return True
        except Exception as e:
            logger.info("Dropping broken realtime connection", connection_id=connection.id, error=str(e))
            self.unregister(connection)
            return False

    async def emit(self, room: str, event: str, data: Any, skip: Optional[Connection] = None) -> int:
        """Send an event to every connection in ``room``.

        Returns:
            Number of connections the event was written to; zero when nobody
            is listening
        """
        return await self.emit_to_rooms([room], event, data, skip=skip)

    async def emit_to_rooms(self, rooms: Iterable[str], event: str, data: Any, skip: Optional[Connection] = None) -> int:
        """Like ``emit`` across several rooms; a connection in more than one gets the event once."""
        targets: List[str] = []
        for room in rooms:
            for connection_id in self.rooms.get(room, ()):
                if connection_id not in targets:
                    targets.append(connection_id)

        delivered = 0
        for connection_id in targets:
            connection = self.connections.get(connection_id)
            if connection is None or connection is skip:
                continue
            if await self.send(connection, event, data):
                delivered += 1
        return delivered

    async def close(self) -> None:
        for connection in list(self.connections.values()):
            self.unregister(connection)
