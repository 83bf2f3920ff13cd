"""Hand-off of notification work from request handlers to background delivery."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from fastapi import BackgroundTasks
import structlog

from portal_backend.core.enums import EntityType, NotificationType, UserRole
from .channels import DeliveryChannel

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationRequest:
    """Notify one user."""

    recipient_id: UUID
    type: NotificationType
    title: str
    message: str
    entity_type: Optional[EntityType] = None
    entity_id: Optional[UUID] = None
    data: Dict[str, Any] = field(default_factory=dict)
    channels: Optional[Tuple[DeliveryChannel, ...]] = None


@dataclass(frozen=True)
class RoleBroadcast:
    """Notify every active user holding ``role`` except ``exclude_user_ids``."""

    role: UserRole
    type: NotificationType
    title: str
    message: str
    entity_type: Optional[EntityType] = None
    entity_id: Optional[UUID] = None
    data: Dict[str, Any] = field(default_factory=dict)
    channels: Optional[Tuple[DeliveryChannel, ...]] = None
    exclude_user_ids: Tuple[UUID, ...] = ()


OutboxItem = Union[NotificationRequest, RoleBroadcast]


class NotificationOutbox:
    """Collects notification work produced while handling a request.

    With ``background_tasks`` each item is scheduled to run after the
    response is sent; without, items accumulate in ``pending`` until
    ``flush`` is awaited.
    """

    def __init__(self, dispatcher: Any = None, background_tasks: Optional[BackgroundTasks] = None):
        self.dispatcher = dispatcher
        self.background_tasks = background_tasks
        self.pending: List[OutboxItem] = []

    def add(self, item: OutboxItem) -> None:
        if self.background_tasks is not None and self.dispatcher is not None:
            self.background_tasks.add_task(self.dispatcher.dispatch, item)
        else:
            self.pending.append(item)
        logger.debug("Notification queued", kind=type(item).__name__, type=item.type.value)

    def notify_user(self, recipient_id: UUID, type: NotificationType, title: str, message: str, **kwargs: Any) -> None:
        self.add(NotificationRequest(recipient_id=recipient_id, type=type, title=title, message=message, **kwargs))

    def notify_role(
        self,
        role: UserRole,
        type: NotificationType,
        title: str,
        message: str,
        exclude_user_ids: Sequence[UUID] = (),
        **kwargs: Any
    ) -> None:
        self.add(RoleBroadcast(
            role=role,
            type=type,
            title=title,
            message=message,
            exclude_user_ids=tuple(exclude_user_ids),
            **kwargs
        ))

    async def flush(self) -> int:
        """Dispatch and clear pending items; returns how many were dispatched."""
        items, self.pending = self.pending, []
        for item in items:
            await self.dispatcher.dispatch(item)
        return len(items)
