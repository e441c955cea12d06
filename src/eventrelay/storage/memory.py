"""In-process store implementations for local runs and tests."""

from __future__ import annotations

from collections import defaultdict

from eventrelay.core.types import Event, NotificationRecord, Subscription
from eventrelay.storage.base import EventStore, NotificationStore, SubscriptionStore


class InMemoryEventStore(EventStore):
    def __init__(self) -> None:
        self._events: dict[str, Event] = {}

    async def put(self, event: Event) -> None:
        self._events[event.event_id] = event

    def get(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def all(self) -> list[Event]:
        return list(self._events.values())


class InMemorySubscriptionStore(SubscriptionStore):
    """Subscriptions keyed by id, with a per-type index kept in sync on put."""

    def __init__(self, subscriptions: list[Subscription] | None = None) -> None:
        self._subs: dict[str, Subscription] = {}
        self._by_type: dict[str, set[str]] = defaultdict(set)
        for sub in subscriptions or []:
            self._index(sub)

    def _index(self, sub: Subscription) -> None:
        previous = self._subs.get(sub.subscription_id)
        if previous is not None:
            self._by_type[previous.event_type].discard(sub.subscription_id)
        self._subs[sub.subscription_id] = sub
        self._by_type[sub.event_type].add(sub.subscription_id)

    async def put(self, subscription: Subscription) -> None:
        self._index(subscription)

    async def query_by_event_type(self, event_type: str) -> list[Subscription]:
        return [self._subs[sid] for sid in self._by_type.get(event_type, ())]

    def get(self, subscription_id: str) -> Subscription | None:
        return self._subs.get(subscription_id)

    def all(self) -> list[Subscription]:
        return list(self._subs.values())


class InMemoryNotificationStore(NotificationStore):
    def __init__(self) -> None:
        self._records: dict[tuple[str, str], NotificationRecord] = {}

    async def put(self, record: NotificationRecord) -> None:
        self._records[record.key] = record

    def get(self, event_id: str, subscription_id: str) -> NotificationRecord | None:
        return self._records.get((event_id, subscription_id))

    def for_event(self, event_id: str) -> list[NotificationRecord]:
        return [r for (eid, _), r in self._records.items() if eid == event_id]

    def all(self) -> list[NotificationRecord]:
        return list(self._records.values())
