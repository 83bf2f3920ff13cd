"""Pydantic schemas for notifications and device tokens."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from portal_backend.core.enums import DevicePlatform, EntityType, NotificationType
from .base import CamelModel


class NotificationResponse(CamelModel):
    id: UUID
    recipient_id: UUID
    type: NotificationType
    title: str
    message: str
    entity_type: Optional[EntityType] = None
    entity_id: Optional[UUID] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    read_at: Optional[datetime] = None
    delivery_channels: List[str] = Field(default_factory=list)
    delivery_results: Dict[str, Any] = Field(default_factory=dict)
    is_sent: bool
    sent_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime


class MarkReadRequest(CamelModel):
    notification_ids: List[UUID] = Field(..., min_length=1)


class DeviceTokenRegister(CamelModel):
    fcm_token: str = Field(..., min_length=1, max_length=512)
    platform: DevicePlatform = DevicePlatform.ANDROID
    device_id: Optional[str] = Field(None, max_length=255)


class DeviceTokenUnregister(CamelModel):
    fcm_token: str = Field(..., min_length=1, max_length=512)
