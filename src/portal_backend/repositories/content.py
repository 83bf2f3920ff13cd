"""Repository for site content."""

from typing import Optional

from sqlalchemy.orm import Session

from portal_backend.models.content import Content
from .base import BaseRepository


class ContentRepository(BaseRepository[Content]):
    def __init__(self):
        super().__init__(Content)

    def get_by_key(self, db: Session, key: str) -> Optional[Content]:
        return db.query(Content).filter(Content.key == key).first()
