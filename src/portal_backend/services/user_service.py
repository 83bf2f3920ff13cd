"""Admin user management service."""

from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from portal_backend.auth.models import User
from portal_backend.core.error_handling import NotFoundError, ValidationError
from portal_backend.repositories.user import UserRepository
from portal_backend.schemas.user import UserUpdate
from portal_backend.search import USER_SEARCH, Page, QuerySpec, search

logger = structlog.get_logger(__name__)


class UserService:
    """Service for administering user accounts."""

    def __init__(self):
        self.repository = UserRepository()

    def list_users(self, db: Session, spec: QuerySpec) -> Page:
        return search(db.query(User), spec, USER_SEARCH)

    def get_user(self, db: Session, user_id: UUID) -> User:
        user = self.repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_user(self, db: Session, actor: User, user_id: UUID, data: UserUpdate) -> User:
        """Apply an admin update. Setting ``status`` to blocked locks the account out.

        Raises:
            NotFoundError: Unknown user
            ValidationError: An admin tried to block or demote themselves
        """
        user = self.get_user(db, user_id)
        changes = {key: value for key, value in data.model_dump(exclude_unset=True).items() if value is not None}

        if user.id == actor.id and ("status" in changes or "role" in changes):
            raise ValidationError("You cannot change your own role or status")

        for key in ("role", "status"):
            if key in changes:
                changes[key] = changes[key].value

        user = self.repository.update(db, user, **changes)
        logger.info("User updated", user_id=str(user.id), actor_id=str(actor.id), fields=sorted(changes))
        return user

    def delete_user(self, db: Session, actor: User, user_id: UUID) -> None:
        user = self.get_user(db, user_id)
        if user.id == actor.id:
            raise ValidationError("You cannot delete your own account")
        self.repository.delete(db, user)
        logger.info("User deleted", user_id=str(user_id), actor_id=str(actor.id))
