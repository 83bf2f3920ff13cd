"""Resource-level authorization checks used by the services."""

from uuid import UUID

import structlog

from portal_backend.core.error_handling import AuthorizationError
from .models import User

logger = structlog.get_logger(__name__)


def is_owner_or_admin(user: User, owner_id: UUID) -> bool:
    return user.is_admin or str(user.id) == str(owner_id)


def ensure_owner_or_admin(user: User, owner_id: UUID, action: str = "modify this resource") -> None:
    """Raise unless ``user`` owns the resource or is an admin.

    Args:
        user: Acting user
        owner_id: Owner recorded on the freshly loaded resource
        action: Phrase used in the error message

    Raises:
        AuthorizationError: If the user is neither owner nor admin
    """
    if not is_owner_or_admin(user, owner_id):
        logger.info("Ownership check failed", user_id=str(user.id), owner_id=str(owner_id), action=action)
        raise AuthorizationError(f"Not authorized to {action}")
