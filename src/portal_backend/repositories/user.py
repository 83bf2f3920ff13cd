"""Repository for users."""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from portal_backend.auth.models import User
from portal_backend.core.enums import UserStatus
from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    conflict_message = "User already exists"

    def __init__(self):
        super().__init__(User)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def get_by_reset_token(self, db: Session, token_hash: str) -> Optional[User]:
        return db.query(User).filter(User.reset_password_token == token_hash).first()

    def get_active_by_role(self, db: Session, role: str, exclude: Iterable[UUID] = ()) -> List[User]:
        """Active users holding a role, minus the excluded ids, ordered for stable fan-out."""
        query = db.query(User).filter(User.role == role, User.status == UserStatus.ACTIVE.value)
        excluded = [user_id for user_id in exclude if user_id is not None]
        if excluded:
            query = query.filter(User.id.notin_(excluded))
        return query.order_by(User.created_at, User.id).all()

    def count_by_role(self, db: Session) -> dict:
        rows = db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}
