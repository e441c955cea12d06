"""Store interfaces and in-memory implementations."""

from eventrelay.storage.base import EventStore, NotificationStore, SubscriptionStore
from eventrelay.storage.exceptions import StorageError
from eventrelay.storage.memory import (
    InMemoryEventStore,
    InMemoryNotificationStore,
    InMemorySubscriptionStore,
)

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "InMemoryNotificationStore",
    "InMemorySubscriptionStore",
    "NotificationStore",
    "StorageError",
    "SubscriptionStore",
]
