"""Notification inbox and device token endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.dependencies import get_current_user
from portal_backend.auth.models import User
from portal_backend.core.database import get_db
from portal_backend.core.registry import ServiceRegistry
from portal_backend.schemas.base import dump, paginated_response, success_response
from portal_backend.schemas.notification import (
    DeviceTokenRegister,
    DeviceTokenUnregister,
    MarkReadRequest,
    NotificationResponse,
)
from portal_backend.search import NOTIFICATION_SEARCH, QuerySpec
from portal_backend.services.notification_service import NotificationService
from .deps import dump_items, get_services, search_spec

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


def _notifications(services: ServiceRegistry = Depends(get_services)) -> NotificationService:
    return services.notifications


@router.post("/register-token", status_code=status.HTTP_201_CREATED)
async def register_token(
    data: DeviceTokenRegister,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    """Register (or take over) an FCM token for push delivery."""
    token = notifications.register_token(db, current_user, data.fcm_token, data.platform, data.device_id)
    return success_response(message="Device token registered", data={"id": str(token.id), "platform": token.platform})


@router.delete("/unregister-token")
async def unregister_token(
    data: DeviceTokenUnregister,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    removed = notifications.unregister_token(db, current_user, data.fcm_token)
    return success_response(message="Device token removed" if removed else "Device token not found", removed=removed)


@router.get("")
async def list_notifications(
    spec: QuerySpec = Depends(search_spec(NOTIFICATION_SEARCH)),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    page, unread = notifications.list_notifications(db, current_user.id, spec)
    return paginated_response(dump_items(NotificationResponse, page.items), page, unreadCount=unread)


@router.get("/unread-count")
async def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    return success_response(count=notifications.unread_count(db, current_user.id))


@router.put("/mark-read")
async def mark_many_read(
    data: MarkReadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    updated = notifications.mark_many_read(db, current_user.id, data.notification_ids)
    return success_response(updated=updated)


@router.put("/mark-all-read")
async def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    updated = notifications.mark_all_read(db, current_user.id)
    return success_response(updated=updated)


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    notification = notifications.mark_read(db, current_user.id, notification_id)
    return success_response(data=dump(NotificationResponse.model_validate(notification)))


@router.delete("/clear-all")
async def clear_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    deleted = notifications.clear_all(db, current_user.id)
    return success_response(deleted=deleted)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(_notifications)
):
    notifications.delete(db, current_user.id, notification_id)
    return success_response(data={})
