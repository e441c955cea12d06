"""Store interfaces the delivery pipeline reads from and writes to.

Implementations raise :class:`StorageError` for every failure; callers on
the critical path let it propagate so the message is redelivered.
"""

from __future__ import annotations

import abc

from eventrelay.core.types import Event, NotificationRecord, Subscription


class EventStore(abc.ABC):
    """Durable record of processed events, keyed by ``event_id``."""

    @abc.abstractmethod
    async def put(self, event: Event) -> None:
        """Insert or overwrite *event*."""


class SubscriptionStore(abc.ABC):
    """Subscription registry with an ``event_type`` secondary index."""

    @abc.abstractmethod
    async def query_by_event_type(self, event_type: str) -> list[Subscription]:
        """All subscriptions for *event_type*, active or not, in any order."""

    @abc.abstractmethod
    async def put(self, subscription: Subscription) -> None:
        """Insert or overwrite *subscription*."""


class NotificationStore(abc.ABC):
    """Audit trail of delivery attempts keyed by ``(event_id, subscription_id)``."""

    @abc.abstractmethod
    async def put(self, record: NotificationRecord) -> None:
        """Insert or overwrite *record*."""
