"""Queue worker — poll loop that feeds batches to the consumer and acks/nacks them."""

from __future__ import annotations

import asyncio
from types import TracebackType

import structlog

from eventrelay.delivery.consumer import EventConsumer
from eventrelay.delivery.queue import LocalQueue

logger = structlog.stdlib.get_logger()


class QueueWorker:
    """Pulls batches from a :class:`LocalQueue` and runs them through a consumer.

    A batch is acknowledged when ``handle_batch`` returns and negatively
    acknowledged as a whole when it raises, so the queue's redelivery and
    dead-letter policy applies.

    Usage::

        worker = QueueWorker(queue, consumer, batch_size=10)
        async with worker:
            await asyncio.sleep(60)  # polls for 60 seconds
    """

    def __init__(
        self,
        queue: LocalQueue,
        consumer: EventConsumer,
        batch_size: int = 10,
        poll_interval_ms: int = 500,
    ) -> None:
        self._queue = queue
        self._consumer = consumer
        self._batch_size = max(1, batch_size)
        self._poll_interval_ms = poll_interval_ms
        self._task: asyncio.Task[None] | None = None
        self._running = False

        # Stats
        self._batches_ok = 0
        self._batches_failed = 0
        self._messages_acked = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stats(self) -> dict[str, int]:
        return {
            "batches_ok": self._batches_ok,
            "batches_failed": self._batches_failed,
            "messages_acked": self._messages_acked,
            "dead_letters": len(self._queue.dead_letters),
        }

    async def run_once(self) -> int:
        """Process one batch. Returns the number of messages received."""
        batch = self._queue.receive(self._batch_size)
        if not batch:
            return 0
        ids = [m.message_id for m in batch]
        try:
            await self._consumer.handle_batch(batch)
        except Exception as exc:
            self._batches_failed += 1
            self._queue.nack(ids)
            logger.warning(
                "batch_returned_for_redelivery",
                size=len(batch),
                error=str(exc),
                error_type=type(exc).__name__,
            )
        else:
            self._batches_ok += 1
            self._messages_acked += len(ids)
            self._queue.ack(ids)
        return len(batch)

    async def drain(self) -> None:
        """Run batches until nothing is left to receive."""
        while await self.run_once():
            pass

    async def start(self) -> None:
        """Start the background poll loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("queue_worker_started", batch_size=self._batch_size)

    async def stop(self) -> None:
        """Stop the poll loop."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("queue_worker_stopped", **self.stats)

    async def _poll_loop(self) -> None:
        interval_secs = self._poll_interval_ms / 1000.0
        while self._running:
            try:
                received = await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("queue_worker_poll_error")
                received = 0

            if received:
                continue
            try:
                await asyncio.sleep(interval_secs)
            except asyncio.CancelledError:
                break

    async def __aenter__(self) -> QueueWorker:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
