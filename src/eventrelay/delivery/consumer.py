"""Event consumption loop — parses queued payloads and hands them to the orchestrator."""

from __future__ import annotations

import json
import time
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from eventrelay.core.types import DeliveryReport, Event
from eventrelay.delivery.exceptions import MalformedPayloadError
from eventrelay.delivery.orchestrator import DeliveryOrchestrator
from eventrelay.delivery.queue import QueueMessage

logger = structlog.get_logger(__name__)

RawPayload = str | bytes | Mapping[str, Any]


def parse_event(body: RawPayload) -> Event:
    """Deserialize a queue payload into an :class:`Event`.

    Raises:
        MalformedPayloadError: invalid JSON, not an object, or a body that
            does not match the event wire shape.
    """
    data: Any = body
    try:
        if isinstance(body, (bytes, bytearray)):
            data = body.decode("utf-8")
        if isinstance(data, str):
            data = json.loads(data)
    except ValueError as exc:
        raise MalformedPayloadError(f"Payload is not valid JSON: {exc}") from exc

    if not isinstance(data, Mapping):
        raise MalformedPayloadError(f"Payload must be a JSON object, got {type(data).__name__}")

    try:
        return Event.model_validate(data)
    except ValidationError as exc:
        raise MalformedPayloadError(f"Payload is not a valid event: {exc}") from exc


def _preview(body: RawPayload, limit: int = 500) -> str:
    text = body.decode("utf-8", "replace") if isinstance(body, (bytes, bytearray)) else str(body)
    return text[:limit]


class EventConsumer:
    """Processes batches of queued events sequentially.

    A successful return acknowledges the whole batch. The first error is
    logged and re-raised, leaving the rest of the batch unprocessed for the
    queue to redeliver. The consumer keeps no state between batches.
    """

    def __init__(
        self,
        orchestrator: DeliveryOrchestrator,
        invocation_timeout_secs: float | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._invocation_timeout_secs = invocation_timeout_secs

    @property
    def orchestrator(self) -> DeliveryOrchestrator:
        return self._orchestrator

    async def handle_batch(
        self,
        messages: Sequence[QueueMessage | RawPayload],
    ) -> list[DeliveryReport]:
        deadline = None
        if self._invocation_timeout_secs:
            deadline = time.monotonic() + self._invocation_timeout_secs

        logger.info("batch_received", size=len(messages))
        reports: list[DeliveryReport] = []
        for position, message in enumerate(messages):
            if isinstance(message, QueueMessage):
                message_id: str | None = message.message_id
                body: RawPayload = message.body
            else:
                message_id, body = None, message
            try:
                event = parse_event(body)
                reports.append(await self._orchestrator.process(event, deadline=deadline))
            except Exception:
                logger.exception(
                    "message_processing_failed",
                    message_id=message_id,
                    position=position,
                    unprocessed=len(messages) - position - 1,
                    body=_preview(body),
                )
                raise

        logger.info(
            "batch_processed",
            size=len(messages),
            sent=sum(r.sent for r in reports),
            failed=sum(r.failed for r in reports),
        )
        return reports
