"""Process-scoped collaborators shared by every request."""

from typing import Optional

import structlog

from portal_backend.notifications.dispatcher import NotificationDispatcher
from portal_backend.notifications.mailer import EmailSender
from portal_backend.notifications.push import PushProvider, create_push_provider
from portal_backend.realtime.hub import RealtimeHub
from portal_backend.services.notification_service import NotificationService
from .config import Settings
from .database import DatabaseManager
from .migration import init_database

logger = structlog.get_logger(__name__)


class ServiceRegistry:
    """Owns the database manager, realtime hub and delivery channels.

    Created by the application factory and stored on ``app.state.services``;
    ``startup`` and ``shutdown`` run in the lifespan handler.
    """

    def __init__(
        self,
        settings: Settings,
        push_provider: Optional[PushProvider] = None,
        email_sender: Optional[EmailSender] = None,
    ):
        self.settings = settings
        self.db = DatabaseManager(settings.database_url, echo=settings.database_echo)
        self.hub = RealtimeHub()
        self.push_provider = push_provider or create_push_provider(settings)
        self.email_sender = email_sender or EmailSender(settings)
        self.notifications = NotificationService(
            settings,
            self.hub,
            push_provider=self.push_provider,
            email_sender=self.email_sender,
        )
        self.dispatcher = NotificationDispatcher(self.db, self.notifications)

    async def startup(self) -> None:
        self.db.initialize()
        init_database(self.db, self.settings)
        logger.info(
            "Services started",
            environment=self.settings.environment,
            push_enabled=self.push_provider.enabled,
            email_enabled=self.email_sender.enabled,
        )

    async def shutdown(self) -> None:
        await self.hub.close()
        try:
            await self.push_provider.close()
        finally:
            self.db.close()
        logger.info("Services stopped")
