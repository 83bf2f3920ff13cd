"""Repository for notifications and device tokens."""

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from portal_backend.models.device_token import DeviceToken
from portal_backend.models.notification import Notification
from .base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self):
        super().__init__(Notification)

    def inbox_query(self, db: Session, recipient_id: UUID, now: datetime) -> Query:
        """Unexpired notifications of one user; ordering is left to the caller."""
        return (
            db.query(Notification)
            .filter(
                Notification.recipient_id == recipient_id,
                or_(Notification.expires_at.is_(None), Notification.expires_at > now),
            )
        )

    def unread_count(self, db: Session, recipient_id: UUID, now: datetime) -> int:
        return self.inbox_query(db, recipient_id, now).filter(Notification.is_read.is_(False)).count()

    def get_owned(self, db: Session, notification_id: UUID, recipient_id: UUID) -> Optional[Notification]:
        return db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        ).first()

    def mark_read(self, db: Session, recipient_id: UUID, now: datetime, ids: Optional[Iterable[UUID]] = None) -> int:
        """Mark unread notifications read; all of them when ``ids`` is None."""
        query = db.query(Notification).filter(
            Notification.recipient_id == recipient_id,
            Notification.is_read.is_(False),
        )
        if ids is not None:
            query = query.filter(Notification.id.in_(list(ids)))
        updated = query.update(
            {Notification.is_read: True, Notification.read_at: now},
            synchronize_session=False,
        )
        db.commit()
        return updated

    def delete_for_recipient(self, db: Session, recipient_id: UUID) -> int:
        deleted = db.query(Notification).filter(Notification.recipient_id == recipient_id).delete(
            synchronize_session=False
        )
        db.commit()
        return deleted

    def purge_expired(self, db: Session, now: datetime) -> int:
        deleted = db.query(Notification).filter(
            Notification.expires_at.isnot(None),
            Notification.expires_at <= now,
        ).delete(synchronize_session=False)
        db.commit()
        return deleted


class DeviceTokenRepository(BaseRepository[DeviceToken]):
    conflict_message = "Device token already registered"

    def __init__(self):
        super().__init__(DeviceToken)

    def get_by_token(self, db: Session, fcm_token: str) -> Optional[DeviceToken]:
        return db.query(DeviceToken).filter(DeviceToken.fcm_token == fcm_token).first()

    def enabled_for_user(self, db: Session, user_id: UUID) -> List[DeviceToken]:
        return (
            db.query(DeviceToken)
            .filter(DeviceToken.user_id == user_id, DeviceToken.enabled.is_(True))
            .order_by(DeviceToken.created_at)
            .all()
        )

    def disable_tokens(self, db: Session, tokens: Iterable[str], now: datetime) -> int:
        tokens = list(tokens)
        if not tokens:
            return 0
        updated = db.query(DeviceToken).filter(DeviceToken.fcm_token.in_(tokens)).update(
            {DeviceToken.enabled: False, DeviceToken.updated_at: now},
            synchronize_session=False,
        )
        db.commit()
        return updated

    def purge_disabled_before(self, db: Session, cutoff: datetime) -> int:
        deleted = db.query(DeviceToken).filter(
            DeviceToken.enabled.is_(False),
            DeviceToken.updated_at < cutoff,
        ).delete(synchronize_session=False)
        db.commit()
        return deleted
