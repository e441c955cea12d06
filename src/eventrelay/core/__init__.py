"""Core module — config, types, logging."""

from eventrelay.core.config import Settings, get_settings, load_settings, reset_settings
from eventrelay.core.exceptions import EventRelayError
from eventrelay.core.logging import setup_logging
from eventrelay.core.types import (
    ChannelType,
    DeliveryOutcome,
    DeliveryReport,
    Event,
    EventStatus,
    NotificationRecord,
    NotificationStatus,
    Severity,
    Subscription,
    utc_now,
)

__all__ = [
    "ChannelType",
    "DeliveryOutcome",
    "DeliveryReport",
    "Event",
    "EventRelayError",
    "EventStatus",
    "NotificationRecord",
    "NotificationStatus",
    "Settings",
    "Severity",
    "Subscription",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
    "utc_now",
]
