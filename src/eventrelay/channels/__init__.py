"""Notification channels — email and webhook delivery."""

from eventrelay.channels.base import ChannelRegistry, NotificationChannel
from eventrelay.channels.email import EmailChannel
from eventrelay.channels.exceptions import (
    ChannelError,
    DeliveryError,
    TransportError,
    UnsupportedChannelError,
)
from eventrelay.channels.transports import (
    AiohttpTransport,
    HttpTransport,
    MailTransport,
    SmtpMailTransport,
)
from eventrelay.channels.webhook import WebhookChannel

__all__ = [
    "AiohttpTransport",
    "ChannelError",
    "ChannelRegistry",
    "DeliveryError",
    "EmailChannel",
    "HttpTransport",
    "MailTransport",
    "NotificationChannel",
    "SmtpMailTransport",
    "TransportError",
    "UnsupportedChannelError",
    "WebhookChannel",
]
