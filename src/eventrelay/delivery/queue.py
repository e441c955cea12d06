"""In-process at-least-once queue with a dead-letter list.

Stands in for the external broker: received messages stay in flight until
acknowledged; a negative acknowledgement returns them for redelivery until
``max_receive_count`` receives, after which they move to ``dead_letters``.
"""

from __future__ import annotations

import uuid
from collections import deque

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)


class QueueMessage(BaseModel):
    """One queued payload plus its delivery bookkeeping."""

    message_id: str
    body: str
    receive_count: int = 0


class LocalQueue:
    def __init__(self, max_receive_count: int = 3) -> None:
        self._max_receive_count = max(1, max_receive_count)
        self._ready: deque[QueueMessage] = deque()
        self._in_flight: dict[str, QueueMessage] = {}
        self.dead_letters: list[QueueMessage] = []

    @property
    def pending(self) -> int:
        return len(self._ready)

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def send(self, body: str) -> str:
        """Enqueue *body* and return its message id."""
        message = QueueMessage(message_id=uuid.uuid4().hex, body=body)
        self._ready.append(message)
        return message.message_id

    def receive(self, max_messages: int = 10) -> list[QueueMessage]:
        """Take up to *max_messages* ready messages and mark them in flight."""
        batch: list[QueueMessage] = []
        while self._ready and len(batch) < max_messages:
            message = self._ready.popleft()
            message.receive_count += 1
            self._in_flight[message.message_id] = message
            batch.append(message.model_copy())
        return batch

    def ack(self, message_ids: list[str]) -> None:
        for message_id in message_ids:
            self._in_flight.pop(message_id, None)

    def nack(self, message_ids: list[str]) -> None:
        """Return in-flight messages for redelivery, or dead-letter them."""
        for message_id in message_ids:
            message = self._in_flight.pop(message_id, None)
            if message is None:
                continue
            if message.receive_count >= self._max_receive_count:
                self.dead_letters.append(message)
                logger.warning(
                    "message_dead_lettered",
                    message_id=message_id,
                    receive_count=message.receive_count,
                )
            else:
                self._ready.append(message)
