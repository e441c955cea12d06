"""Audit recorder — one NotificationRecord per delivery attempt."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import structlog

from eventrelay.core.types import NotificationRecord, NotificationStatus, Subscription, utc_now
from eventrelay.storage.base import NotificationStore
from eventrelay.storage.exceptions import StorageError

logger = structlog.get_logger(__name__)


class AuditRecorder:
    """Writes delivery outcomes to the notification store.

    Writes overwrite on ``(event_id, subscription_id)``, so a redelivered
    event replaces the earlier record instead of duplicating it. A failed
    write is retried up to ``max_attempts`` times in total before
    :class:`StorageError` is raised.
    """

    def __init__(
        self,
        store: NotificationStore,
        max_attempts: int = 3,
        retry_backoff_secs: float = 0.05,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff_secs = retry_backoff_secs
        self._clock = clock

    async def record(
        self,
        event_id: str,
        subscription: Subscription,
        status: NotificationStatus,
        error_message: str | None = None,
        attempted_at: datetime | None = None,
    ) -> NotificationRecord:
        """Persist the outcome of one attempt and return the stored record.

        ``channel`` and ``target`` are copied from *subscription* so the
        record reflects what was attempted, regardless of later edits.
        """
        record = NotificationRecord(
            event_id=event_id,
            subscription_id=subscription.subscription_id,
            channel=subscription.channel,
            target=subscription.target,
            status=status,
            attempted_at=attempted_at or self._clock(),
            error_message=error_message,
        )

        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._store.put(record)
                return record
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "notification_record_write_failed",
                    event_id=event_id,
                    subscription_id=subscription.subscription_id,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    error=str(exc),
                )
            if attempt < self._max_attempts and self._retry_backoff_secs > 0:
                await asyncio.sleep(self._retry_backoff_secs * attempt)

        raise StorageError(
            f"Failed to record notification ({event_id}, {subscription.subscription_id}) "
            f"after {self._max_attempts} attempts: {last_error}"
        ) from last_error
