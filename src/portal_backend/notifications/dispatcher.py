"""Runs queued notification work with its own database session."""

import structlog

from portal_backend.core.database import DatabaseManager
from .outbox import NotificationRequest, OutboxItem, RoleBroadcast

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Error boundary between background notification work and the request.

    Nothing raised while persisting or delivering a notification propagates
    out of ``dispatch``; failures are logged with the item's context.
    """

    def __init__(self, db: DatabaseManager, service):
        """Initialize dispatcher.

        Args:
            db: Database manager used to open a session per item
            service: ``NotificationService`` performing persistence and delivery
        """
        self.db = db
        self.service = service

    async def dispatch(self, item: OutboxItem) -> None:
        try:
            with self.db.get_session() as session:
                if isinstance(item, RoleBroadcast):
                    await self.service.notify_role(
                        session,
                        item.role,
                        item.type,
                        item.title,
                        item.message,
                        entity_type=item.entity_type,
                        entity_id=item.entity_id,
                        data=item.data,
                        channels=item.channels,
                        exclude_user_ids=item.exclude_user_ids,
                    )
                elif isinstance(item, NotificationRequest):
                    await self.service.notify_user(
                        session,
                        item.recipient_id,
                        item.type,
                        item.title,
                        item.message,
                        entity_type=item.entity_type,
                        entity_id=item.entity_id,
                        data=item.data,
                        channels=item.channels,
                    )
        except Exception as e:
            logger.error(
                "Notification dispatch failed",
                kind=type(item).__name__,
                type=item.type.value,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
