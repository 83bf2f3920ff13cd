"""Delivery channels and the per-channel outcome recorded on each notification."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class DeliveryChannel(str, Enum):
    IN_APP = "in_app"
    PUSH = "push"
    EMAIL = "email"


DEFAULT_CHANNELS: Tuple[DeliveryChannel, ...] = (DeliveryChannel.IN_APP, DeliveryChannel.PUSH)


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    PARTIAL = "partial"
    NO_DESTINATIONS = "no_destinations"
    DISABLED = "disabled"
    FAILED = "failed"


@dataclass
class ChannelResult:
    """Outcome of one channel for one notification; kept for audit only."""

    channel: DeliveryChannel
    status: DeliveryStatus
    delivered: int = 0
    failed: int = 0
    detail: Optional[str] = None
    invalid_tokens: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status in (DeliveryStatus.DELIVERED, DeliveryStatus.PARTIAL)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "status": self.status.value,
            "delivered": self.delivered,
            "failed": self.failed,
        }
        if self.detail:
            result["detail"] = self.detail
        if self.invalid_tokens:
            result["invalidTokens"] = len(self.invalid_tokens)
        return result


def normalize_channels(channels: Optional[Iterable[Any]], include_email: bool = False) -> List[DeliveryChannel]:
    """Resolve requested channels, in order and without duplicates.

    Unknown names are dropped. ``None`` means the defaults, plus email when
    ``include_email`` is set.
    """
    if channels is None:
        requested: List[Any] = list(DEFAULT_CHANNELS)
        if include_email:
            requested.append(DeliveryChannel.EMAIL)
    else:
        requested = list(channels)

    resolved: List[DeliveryChannel] = []
    for channel in requested:
        try:
            value = DeliveryChannel(channel)
        except ValueError:
            continue
        if value not in resolved:
            resolved.append(value)
    return resolved
