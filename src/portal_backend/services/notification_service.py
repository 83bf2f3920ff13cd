"""Notification persistence, delivery and inbox management."""

import time
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.core.config import Settings
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import DevicePlatform, EntityType, NotificationType, UserRole
from portal_backend.core.error_handling import ExternalServiceError, NotFoundError
from portal_backend.core.logging import performance_logger
from portal_backend.models.device_token import DeviceToken
from portal_backend.models.notification import Notification
from portal_backend.notifications.channels import (
    ChannelResult,
    DeliveryChannel,
    DeliveryStatus,
    normalize_channels,
)
from portal_backend.notifications.mailer import EmailSender
from portal_backend.notifications.push import NullPushProvider, PushPayload, PushProvider
from portal_backend.realtime.hub import RealtimeHub, user_room
from portal_backend.repositories.notification import DeviceTokenRepository, NotificationRepository
from portal_backend.repositories.user import UserRepository
from portal_backend.schemas.base import dump
from portal_backend.schemas.notification import NotificationResponse
from portal_backend.search.params import QuerySpec
from portal_backend.search.query import Page, search
from portal_backend.search.schemas import NOTIFICATION_SEARCH

logger = structlog.get_logger(__name__)

NEW_EVENT = "notification:new"

# Deep-link screen opened by a push tap, per entity type
SCREENS = {
    EntityType.JOB.value: "JobDetails",
    EntityType.APPLICATION.value: "ApplicationDetails",
    EntityType.USER.value: "Profile",
    EntityType.COMPANY.value: "CompanyDetails",
}


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


class NotificationService:
    """Creates notifications and delivers them over in-app, push and email.

    Delivery results are stored on the notification for audit; nothing is
    retried.
    """

    def __init__(
        self,
        settings: Settings,
        hub: RealtimeHub,
        push_provider: Optional[PushProvider] = None,
        email_sender: Optional[EmailSender] = None,
    ):
        self.settings = settings
        self.hub = hub
        self.push_provider = push_provider or NullPushProvider()
        self.email_sender = email_sender
        self.repository = NotificationRepository()
        self.token_repository = DeviceTokenRepository()
        self.user_repository = UserRepository()

    # ------------------------------------------------------------------
    # Creation and delivery
    # ------------------------------------------------------------------

    async def notify_user(
        self,
        db: Session,
        recipient_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        entity_type: Optional[EntityType] = None,
        entity_id: Optional[UUID] = None,
        data: Optional[Dict[str, Any]] = None,
        channels: Optional[Iterable[Any]] = None,
    ) -> Optional[Notification]:
        """Persist one notification, then attempt each requested channel.

        Channels are attempted independently; a failure on one is recorded
        and does not prevent the others.

        Args:
            db: Database session
            recipient_id: User to notify
            type: Notification type
            title: Short title
            message: Body text
            entity_type: Type of the related entity, if any
            entity_id: Id of the related entity, if any
            data: Extra key/value data passed to clients
            channels: Requested channels; defaults to in-app and push

        Returns:
            The stored notification, or None when the recipient does not exist
        """
        recipient = self.user_repository.get_by_id(db, recipient_id)
        if recipient is None:
            logger.warning("Notification recipient not found", recipient_id=str(recipient_id), type=_value(type))
            return None

        requested = normalize_channels(channels, include_email=self.settings.email_notifications_enabled)
        now = utcnow()
        notification = self.repository.create(
            db,
            recipient_id=recipient.id,
            type=_value(type),
            title=title,
            message=message,
            entity_type=_value(entity_type) if entity_type else None,
            entity_id=entity_id,
            data=dict(data or {}),
            delivery_channels=[channel.value for channel in requested],
            delivery_results={},
            expires_at=now + timedelta(days=self.settings.notification_retention_days),
        )

        results: Dict[str, Any] = {}
        any_succeeded = False
        for channel in requested:
            result = await self._deliver(db, channel, recipient, notification)
            results[channel.value] = result.to_dict()
            any_succeeded = any_succeeded or result.succeeded

        self.repository.update(
            db,
            notification,
            delivery_results=results,
            is_sent=any_succeeded,
            sent_at=utcnow() if any_succeeded else None,
        )

        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            recipient_id=str(recipient.id),
            type=notification.type,
            results={name: result["status"] for name, result in results.items()},
        )
        return notification

    async def notify_role(
        self,
        db: Session,
        role: UserRole,
        type: NotificationType,
        title: str,
        message: str,
        entity_type: Optional[EntityType] = None,
        entity_id: Optional[UUID] = None,
        data: Optional[Dict[str, Any]] = None,
        channels: Optional[Iterable[Any]] = None,
        exclude_user_ids: Sequence[UUID] = (),
    ) -> int:
        """Notify every active user holding ``role``, one notification each.

        Excluded users are skipped and each user is notified at most once.
        A failure for one user is logged and does not stop the others.

        Returns:
            Number of notifications created
        """
        started = time.perf_counter()
        recipients = self.user_repository.get_active_by_role(db, _value(role), exclude=exclude_user_ids)

        seen = set()
        created = 0
        failed = 0
        for user in recipients:
            if user.id in seen:
                continue
            seen.add(user.id)
            try:
                notification = await self.notify_user(
                    db,
                    user.id,
                    type,
                    title,
                    message,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    data=data,
                    channels=channels,
                )
            except Exception as e:
                failed += 1
                db.rollback()
                logger.warning(
                    "Role notification failed for user",
                    role=_value(role),
                    user_id=str(user.id),
                    error=str(e),
                )
                continue
            if notification is not None:
                created += 1

        performance_logger.log_processing_metrics(
            "notify_role",
            items_processed=len(seen),
            duration_seconds=time.perf_counter() - started,
            success_count=created,
            error_count=failed,
            role=_value(role),
            type=_value(type),
        )
        return created

    async def _deliver(self, db: Session, channel: DeliveryChannel, recipient: User, notification: Notification) -> ChannelResult:
        try:
            if channel is DeliveryChannel.IN_APP:
                return await self._deliver_in_app(notification)
            if channel is DeliveryChannel.PUSH:
                return await self._deliver_push(db, recipient, notification)
            return await self._deliver_email(recipient, notification)
        except ExternalServiceError as e:
            return ChannelResult(channel, DeliveryStatus.FAILED, failed=1, detail=e.message)
        except Exception as e:
            logger.warning(
                "Notification channel failed",
                channel=channel.value,
                notification_id=str(notification.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            return ChannelResult(channel, DeliveryStatus.FAILED, failed=1, detail=type(e).__name__)

    async def _deliver_in_app(self, notification: Notification) -> ChannelResult:
        payload = dump(NotificationResponse.model_validate(notification))
        delivered = await self.hub.emit(user_room(notification.recipient_id), NEW_EVENT, payload)
        if delivered == 0:
            return ChannelResult(DeliveryChannel.IN_APP, DeliveryStatus.NO_DESTINATIONS)
        return ChannelResult(DeliveryChannel.IN_APP, DeliveryStatus.DELIVERED, delivered=delivered)

    async def _deliver_push(self, db: Session, recipient: User, notification: Notification) -> ChannelResult:
        if not self.push_provider.enabled:
            return ChannelResult(DeliveryChannel.PUSH, DeliveryStatus.DISABLED)

        tokens = self.token_repository.enabled_for_user(db, recipient.id)
        if not tokens:
            return ChannelResult(DeliveryChannel.PUSH, DeliveryStatus.NO_DESTINATIONS)

        payload = PushPayload.build(
            notification.title,
            notification.message,
            data={
                **(notification.data or {}),
                "notificationId": notification.id,
                "type": notification.type,
            },
            screen=SCREENS.get(notification.entity_type),
            entity_id=notification.entity_id,
        )
        token_results = await self.push_provider.send([token.fcm_token for token in tokens], payload)

        succeeded = [result.token for result in token_results if result.success]
        invalid = [result.token for result in token_results if result.invalid]
        for result in token_results:
            if not result.success and not result.invalid:
                logger.warning(
                    "Push delivery failed",
                    user_id=str(recipient.id),
                    error_code=result.error_code,
                    error=result.error_message,
                )

        if invalid:
            disabled = self.token_repository.disable_tokens(db, invalid, utcnow())
            logger.info("Disabled invalid device tokens", user_id=str(recipient.id), count=disabled)
        if succeeded:
            self._touch_tokens(db, tokens, succeeded)

        failed_count = len(token_results) - len(succeeded)
        if not succeeded:
            status = DeliveryStatus.FAILED
        elif failed_count:
            status = DeliveryStatus.PARTIAL
        else:
            status = DeliveryStatus.DELIVERED
        return ChannelResult(
            DeliveryChannel.PUSH,
            status,
            delivered=len(succeeded),
            failed=failed_count,
            invalid_tokens=invalid,
        )

    def _touch_tokens(self, db: Session, tokens: List[DeviceToken], succeeded: List[str]) -> None:
        now = utcnow()
        alive = set(succeeded)
        for token in tokens:
            if token.fcm_token in alive:
                token.last_used = now
        db.commit()

    async def _deliver_email(self, recipient: User, notification: Notification) -> ChannelResult:
        if self.email_sender is None or not self.email_sender.enabled:
            return ChannelResult(DeliveryChannel.EMAIL, DeliveryStatus.DISABLED)
        if not recipient.email:
            return ChannelResult(DeliveryChannel.EMAIL, DeliveryStatus.NO_DESTINATIONS)

        await self.email_sender.send(recipient.email, notification.title, notification.message)
        return ChannelResult(DeliveryChannel.EMAIL, DeliveryStatus.DELIVERED, delivered=1)

    # ------------------------------------------------------------------
    # Inbox
    # ------------------------------------------------------------------

    def list_notifications(self, db: Session, user_id: UUID, spec: QuerySpec) -> Tuple[Page, int]:
        """Page of unexpired notifications, newest first, with the unread count."""
        now = utcnow()
        page = search(self.repository.inbox_query(db, user_id, now), spec, NOTIFICATION_SEARCH)
        return page, self.repository.unread_count(db, user_id, now)

    def unread_count(self, db: Session, user_id: UUID) -> int:
        return self.repository.unread_count(db, user_id, utcnow())

    def mark_read(self, db: Session, user_id: UUID, notification_id: UUID) -> Notification:
        """Mark one of the user's notifications read.

        Raises:
            NotFoundError: If the notification does not belong to the user
        """
        notification = self.repository.get_owned(db, notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        if not notification.is_read:
            self.repository.update(db, notification, is_read=True, read_at=utcnow())
        return notification

    def mark_many_read(self, db: Session, user_id: UUID, notification_ids: Iterable[UUID]) -> int:
        return self.repository.mark_read(db, user_id, utcnow(), ids=notification_ids)

    def mark_all_read(self, db: Session, user_id: UUID) -> int:
        count = self.repository.mark_read(db, user_id, utcnow())
        logger.info("Notifications marked read", user_id=str(user_id), count=count)
        return count

    def delete(self, db: Session, user_id: UUID, notification_id: UUID) -> None:
        notification = self.repository.get_owned(db, notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        self.repository.delete(db, notification)

    def clear_all(self, db: Session, user_id: UUID) -> int:
        return self.repository.delete_for_recipient(db, user_id)

    # ------------------------------------------------------------------
    # Device tokens
    # ------------------------------------------------------------------

    def register_token(
        self,
        db: Session,
        user: User,
        fcm_token: str,
        platform: DevicePlatform,
        device_id: Optional[str] = None,
    ) -> DeviceToken:
        """Register a device token, moving it to ``user`` if another user held it."""
        existing = self.token_repository.get_by_token(db, fcm_token)
        if existing is not None:
            previous_owner = existing.user_id
            token = self.token_repository.update(
                db,
                existing,
                user_id=user.id,
                role=user.role,
                platform=_value(platform),
                device_id=device_id or existing.device_id,
                enabled=True,
                last_used=utcnow(),
            )
            logger.info(
                "Device token updated",
                user_id=str(user.id),
                transferred=str(previous_owner) != str(user.id),
            )
            return token

        token = self.token_repository.create(
            db,
            user_id=user.id,
            role=user.role,
            fcm_token=fcm_token,
            platform=_value(platform),
            device_id=device_id,
            enabled=True,
        )
        logger.info("Device token registered", user_id=str(user.id))
        return token

    def unregister_token(self, db: Session, user: User, fcm_token: str) -> bool:
        token = self.token_repository.get_by_token(db, fcm_token)
        if token is None or str(token.user_id) != str(user.id):
            return False
        self.token_repository.delete(db, token)
        logger.info("Device token unregistered", user_id=str(user.id))
        return True

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def purge_expired(self, db: Session) -> int:
        return self.repository.purge_expired(db, utcnow())

    def purge_disabled_tokens(self, db: Session) -> int:
        cutoff = utcnow() - timedelta(days=self.settings.disabled_token_retention_days)
        return self.token_repository.purge_disabled_before(db, cutoff)
