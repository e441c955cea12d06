#!/usr/bin/env python3
"""Replay event submissions against a set of subscriptions through the full pipeline.

Subscriptions are validated and loaded into an in-memory store, events are
published to a local queue, and a worker drains the queue through the
delivery stack using the transports configured in settings.

Usage::

    # Subscriptions as a YAML/JSON list, events as JSON lines
    python scripts/replay.py --subscriptions subs.yaml --events events.jsonl

    # Custom config file, console logs
    python scripts/replay.py --config config/settings.yaml --log-format console \\
        --subscriptions subs.yaml --events events.jsonl
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import structlog
import yaml

from eventrelay.core.config import load_settings
from eventrelay.core.logging import setup_logging
from eventrelay.core.types import NotificationStatus
from eventrelay.delivery.factory import create_delivery_stack
from eventrelay.delivery.queue import LocalQueue
from eventrelay.delivery.worker import QueueWorker
from eventrelay.intake.exceptions import IntakeValidationError
from eventrelay.intake.publisher import EventPublisher
from eventrelay.intake.validation import build_subscription
from eventrelay.storage.memory import (
    InMemoryEventStore,
    InMemoryNotificationStore,
    InMemorySubscriptionStore,
)

logger = structlog.get_logger(__name__)


def load_subscription_payloads(path: Path) -> list[dict[str, Any]]:
    with open(path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a list of subscriptions")
    return raw


def load_event_payloads(path: Path) -> list[str]:
    with open(path) as f:
        return [line for line in (ln.strip() for ln in f) if line]


async def run(args: argparse.Namespace) -> int:
    """Publish every event, drain the queue, print a summary."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, fmt=args.log_format)

    subscriptions = InMemorySubscriptionStore()
    for index, payload in enumerate(load_subscription_payloads(args.subscriptions)):
        try:
            await subscriptions.put(build_subscription(payload))
        except IntakeValidationError as exc:
            logger.error("subscription_rejected", index=index, errors=exc.errors)

    events = InMemoryEventStore()
    notifications = InMemoryNotificationStore()
    consumer, registry = create_delivery_stack(
        event_store=events,
        subscription_store=subscriptions,
        notification_store=notifications,
        settings=settings,
    )

    queue = LocalQueue(max_receive_count=settings.queue.max_receive_count)
    publisher = EventPublisher(queue)
    rejected = 0
    for line in load_event_payloads(args.events):
        try:
            publisher.publish(line)
        except IntakeValidationError as exc:
            rejected += 1
            logger.error("event_rejected", errors=exc.errors)

    worker = QueueWorker(
        queue,
        consumer,
        batch_size=settings.queue.batch_size,
        poll_interval_ms=settings.queue.poll_interval_ms,
    )
    try:
        await worker.drain()
    finally:
        await registry.close()

    records = notifications.all()
    summary = {
        "subscriptions": len(subscriptions.all()),
        "events_rejected": rejected,
        "events_processed": len(events.all()),
        "sent": sum(1 for r in records if r.status == NotificationStatus.SENT),
        "failed": sum(1 for r in records if r.status == NotificationStatus.FAILED),
        "dead_lettered": len(queue.dead_letters),
    }
    print(json.dumps(summary, indent=2))
    return 1 if queue.dead_letters else 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Replay events through the notification delivery pipeline.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--subscriptions",
        type=Path,
        required=True,
        help="YAML or JSON file holding a list of subscription requests",
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="JSON-lines file of event submissions",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Log renderer override",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
