"""DeliveryOrchestrator — drives persist → match → deliver → record for one event."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

import structlog

from eventrelay.channels.base import ChannelRegistry
from eventrelay.channels.exceptions import DeliveryError, UnsupportedChannelError
from eventrelay.core.config import DeliveryConfig, get_settings
from eventrelay.core.types import (
    DeliveryOutcome,
    DeliveryReport,
    Event,
    NotificationStatus,
    Subscription,
    utc_now,
)
from eventrelay.delivery.audit import AuditRecorder
from eventrelay.delivery.exceptions import DeadlineExceededError
from eventrelay.matching.exceptions import InvalidSeverityError
from eventrelay.matching.matcher import SubscriptionMatcher, is_eligible
from eventrelay.storage.base import EventStore
from eventrelay.storage.exceptions import StorageError

logger = structlog.stdlib.get_logger()

T = TypeVar("T")


class DeliveryOrchestrator:
    """Processes one event against every matching subscription.

    Only two failures abort an event: persisting it and looking up its
    subscriptions (both :class:`StorageError`), plus the invocation deadline.
    Everything that goes wrong for a single subscription is caught,
    recorded as FAILED and counted in the :class:`DeliveryReport`.

    Deliveries run concurrently, at most ``max_concurrency`` at a time,
    each bounded by ``attempt_timeout_secs``. With a deadline, storing the
    event and looking up subscriptions are bounded by the time left too, and
    any attempt the deadline cuts short makes the event fail as a whole so
    the queue redelivers it. The orchestrator holds no
    per-event state between calls and may be shared by concurrent workers.

    Usage::

        orchestrator = DeliveryOrchestrator(events, matcher, registry, recorder)
        report = await orchestrator.process(event, deadline=time.monotonic() + 30)
    """

    def __init__(
        self,
        event_store: EventStore,
        matcher: SubscriptionMatcher,
        channels: ChannelRegistry,
        recorder: AuditRecorder,
        config: DeliveryConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._event_store = event_store
        self._matcher = matcher
        self._channels = channels
        self._recorder = recorder
        self._config = config or get_settings().delivery
        self._clock = clock

    async def process(self, event: Event, deadline: float | None = None) -> DeliveryReport:
        """Deliver *event* to all eligible subscriptions.

        Args:
            event: The event taken off the queue.
            deadline: Absolute ``time.monotonic()`` value by which the
                invocation must finish, or None for no deadline.

        Raises:
            StorageError: the event could not be stored or subscriptions
                could not be looked up.
            DeadlineExceededError: the deadline passed before every eligible
                subscription was attempted to completion. Interrupted
                attempts are still recorded as FAILED.
        """
        log = logger.bind(event_id=event.event_id, event_type=event.event_type)

        if _remaining(deadline) == 0.0:
            raise DeadlineExceededError(event.event_id)

        await self._within_deadline(self._persist(event), event, deadline, "persist")
        candidates = await self._within_deadline(
            self._matcher.find_candidates(event.event_type), event, deadline, "lookup"
        )
        report = DeliveryReport(event_id=event.event_id)
        eligible = self._select(event, candidates, report)
        log.info(
            "event_matched",
            severity=str(event.severity),
            candidates=len(candidates),
            eligible=len(eligible),
        )

        if eligible:
            semaphore = asyncio.Semaphore(max(1, self._config.max_concurrency))
            outcomes = await asyncio.gather(
                *(self._attempt(event, sub, semaphore, deadline) for sub in eligible)
            )
        else:
            outcomes = []

        abandoned = 0
        interrupted = 0
        for outcome in outcomes:
            if outcome is None:
                abandoned += 1
                continue
            if outcome.deadline_exceeded:
                interrupted += 1
            report.outcomes.append(outcome)
            report.attempted += 1
            if outcome.status == NotificationStatus.SENT:
                report.sent += 1
            else:
                report.failed += 1
            if not outcome.recorded:
                report.record_failures += 1

        if abandoned or interrupted:
            log.error(
                "event_deadline_exceeded",
                attempted=report.attempted,
                interrupted=interrupted,
                abandoned=abandoned,
            )
            raise DeadlineExceededError(
                event.event_id,
                attempted=report.attempted,
                abandoned=abandoned,
                interrupted=interrupted,
            )

        log.info(
            "event_processed",
            attempted=report.attempted,
            sent=report.sent,
            failed=report.failed,
            skipped=report.skipped,
            record_failures=report.record_failures,
        )
        return report

    # ── Steps ───────────────────────────────────────────────────

    async def _within_deadline(
        self,
        step: Awaitable[T],
        event: Event,
        deadline: float | None,
        name: str,
    ) -> T:
        remaining = _remaining(deadline)
        if remaining is None:
            return await step
        try:
            return await asyncio.wait_for(step, timeout=remaining)
        except asyncio.TimeoutError:
            logger.error("event_deadline_exceeded", event_id=event.event_id, step=name)
            raise DeadlineExceededError(event.event_id) from None

    async def _persist(self, event: Event) -> None:
        processed = event.mark_processed(self._clock())
        try:
            await self._event_store.put(processed)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to store event {event.event_id}: {exc}") from exc
        logger.debug("event_stored", event_id=event.event_id)

    def _select(
        self,
        event: Event,
        candidates: list[Subscription],
        report: DeliveryReport,
    ) -> list[Subscription]:
        eligible: list[Subscription] = []
        for sub in candidates:
            try:
                ok = is_eligible(event, sub)
            except InvalidSeverityError as exc:
                logger.warning(
                    "subscription_invalid_severity",
                    event_id=event.event_id,
                    subscription_id=sub.subscription_id,
                    severity_filter=sub.severity_filter,
                    error=str(exc),
                )
                ok = False
            if ok:
                eligible.append(sub)
                continue
            report.skipped += 1
            logger.debug(
                "subscription_skipped",
                event_id=event.event_id,
                subscription_id=sub.subscription_id,
                active=sub.active,
                severity=str(event.severity),
                severity_filter=sub.severity_filter,
            )
        return eligible

    async def _attempt(
        self,
        event: Event,
        sub: Subscription,
        semaphore: asyncio.Semaphore,
        deadline: float | None,
    ) -> DeliveryOutcome | None:
        """Deliver to one subscription and record the outcome.

        Returns None when the deadline passed before the attempt started;
        nothing is recorded in that case. An attempt whose timeout was
        clipped by the deadline and then expired is recorded as FAILED and
        flagged ``deadline_exceeded``.
        """
        async with semaphore:
            remaining = _remaining(deadline)
            if remaining == 0.0:
                return None
            timeout = self._config.attempt_timeout_secs
            clipped = False
            if remaining is not None and remaining < timeout:
                timeout = remaining
                clipped = True

            attempted_at = self._clock()
            error_message: str | None = None
            deadline_exceeded = False
            try:
                await asyncio.wait_for(self._channels.deliver(sub, event), timeout=timeout)
            except asyncio.TimeoutError:
                if clipped:
                    deadline_exceeded = True
                    error_message = f"invocation deadline reached after {timeout:.2f}s"
                else:
                    error_message = f"timeout after {timeout:.2f}s"
            except (DeliveryError, UnsupportedChannelError) as exc:
                error_message = str(exc) or type(exc).__name__
            except Exception as exc:
                logger.exception(
                    "channel_unexpected_error",
                    event_id=event.event_id,
                    subscription_id=sub.subscription_id,
                    channel=sub.channel,
                )
                error_message = f"{type(exc).__name__}: {exc}"

        if error_message is None:
            status = NotificationStatus.SENT
        else:
            status = NotificationStatus.FAILED
            logger.warning(
                "delivery_failed",
                event_id=event.event_id,
                subscription_id=sub.subscription_id,
                channel=sub.channel,
                target=sub.target,
                error=error_message,
            )

        recorded = True
        try:
            await self._recorder.record(
                event.event_id,
                sub,
                status,
                error_message=error_message,
                attempted_at=attempted_at,
            )
        except StorageError:
            recorded = False
            logger.exception(
                "notification_record_failed",
                event_id=event.event_id,
                subscription_id=sub.subscription_id,
                status=str(status),
            )

        return DeliveryOutcome(
            subscription_id=sub.subscription_id,
            channel=sub.channel,
            status=status,
            error_message=error_message,
            recorded=recorded,
            deadline_exceeded=deadline_exceeded,
        )


def _remaining(deadline: float | None) -> float | None:
    """Seconds left before *deadline* (clamped at 0), or None without one."""
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())
