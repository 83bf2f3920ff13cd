"""Notification delivery: channels, providers and background dispatch."""

from .channels import DeliveryChannel, DeliveryStatus, ChannelResult, DEFAULT_CHANNELS, normalize_channels
from .push import (
    PushPayload,
    PushProvider,
    NullPushProvider,
    FcmPushProvider,
    TokenResult,
    INVALID_TOKEN_ERRORS,
    create_push_provider,
)
from .mailer import EmailSender
from .outbox import NotificationOutbox, NotificationRequest, RoleBroadcast
from .dispatcher import NotificationDispatcher

__all__ = [
    "DeliveryChannel",
    "DeliveryStatus",
    "ChannelResult",
    "DEFAULT_CHANNELS",
    "normalize_channels",
    "PushPayload",
    "PushProvider",
    "NullPushProvider",
    "FcmPushProvider",
    "TokenResult",
    "INVALID_TOKEN_ERRORS",
    "create_push_provider",
    "EmailSender",
    "NotificationOutbox",
    "NotificationRequest",
    "RoleBroadcast",
    "NotificationDispatcher",
]
