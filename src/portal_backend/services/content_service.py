"""Editable site content (about, terms, privacy)."""

from typing import Dict

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.core.enums import ContentKey
from portal_backend.models.content import Content
from portal_backend.repositories.content import ContentRepository
from portal_backend.schemas.content import ContentUpsert

logger = structlog.get_logger(__name__)


class ContentService:
    def __init__(self):
        self.repository = ContentRepository()

    def list_content(self, db: Session) -> Dict[str, str]:
        """Every content key mapped to its text; keys never written map to ''."""
        content = {key.value: "" for key in ContentKey}
        for item in db.query(Content).all():
            content[item.key] = item.value
        return content

    def upsert(self, db: Session, actor: User, data: ContentUpsert) -> Content:
        key = data.key.value
        item = self.repository.get_by_key(db, key)
        if item is None:
            item = self.repository.create(db, key=key, value=data.value, last_updated_by=actor.id)
        else:
            item = self.repository.update(db, item, value=data.value, last_updated_by=actor.id)
        logger.info("Content updated", key=key, actor_id=str(actor.id))
        return item
