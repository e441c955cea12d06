"""Accepts event submissions and enqueues them for delivery."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from eventrelay.core.types import Event
from eventrelay.delivery.queue import LocalQueue
from eventrelay.intake.validation import build_event

logger = structlog.get_logger(__name__)


class EventPublisher:
    """Validates a submission and places its wire form on the queue."""

    def __init__(self, queue: LocalQueue) -> None:
        self._queue = queue

    def publish(self, payload: Mapping[str, Any] | str | bytes) -> Event:
        """Validate and enqueue *payload*; return the accepted event.

        Raises:
            IntakeValidationError: the submission is invalid; nothing is queued.
        """
        event = build_event(payload)
        message_id = self._queue.send(json.dumps(event.to_wire()))
        logger.info(
            "event_accepted",
            event_id=event.event_id,
            event_type=event.event_type,
            severity=str(event.severity),
            message_id=message_id,
        )
        return event
