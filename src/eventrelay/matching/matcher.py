"""Candidate retrieval and eligibility filtering for incoming events."""

from __future__ import annotations

import structlog

from eventrelay.core.types import Event, Subscription
from eventrelay.matching.severity import meets_threshold
from eventrelay.storage.base import SubscriptionStore
from eventrelay.storage.exceptions import StorageError

logger = structlog.stdlib.get_logger()


class SubscriptionMatcher:
    """Looks up subscriptions by event type.

    Retrieval is kept separate from business filtering: ``find_candidates``
    returns everything the index holds for the type, and the caller applies
    :func:`is_eligible`.
    """

    def __init__(self, store: SubscriptionStore) -> None:
        self._store = store

    async def find_candidates(self, event_type: str) -> list[Subscription]:
        """All subscriptions registered for *event_type*; empty when none.

        Raises:
            StorageError: if the subscription store cannot be queried.
        """
        try:
            candidates = await self._store.query_by_event_type(event_type)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Subscription lookup failed for {event_type!r}: {exc}") from exc

        # The index is authoritative, but guard against a loose store match.
        matched = [sub for sub in candidates if sub.event_type == event_type]
        logger.debug(
            "subscription_candidates_found",
            event_type=event_type,
            count=len(matched),
        )
        return matched


def is_eligible(event: Event, subscription: Subscription) -> bool:
    """Whether *subscription* should be notified of *event*.

    Raises:
        InvalidSeverityError: if the subscription's severity filter is not a
            known level. Callers treat this as a non-match.
    """
    if not subscription.active:
        return False
    if subscription.event_type != event.event_type:
        return False
    return meets_threshold(event.severity, subscription.severity_filter)
