"""Realtime gateway: authenticated WebSocket connections grouped into rooms."""

from .hub import RealtimeHub, Connection, ADMIN_ROOM, user_room

__all__ = ["RealtimeHub", "Connection", "ADMIN_ROOM", "user_room"]
