"""Delivery pipeline — orchestration, audit recording, queue consumption."""

from eventrelay.delivery.audit import AuditRecorder
from eventrelay.delivery.consumer import EventConsumer, parse_event
from eventrelay.delivery.exceptions import (
    DeadlineExceededError,
    MalformedPayloadError,
    ProcessingError,
)
from eventrelay.delivery.factory import create_channel_registry, create_delivery_stack
from eventrelay.delivery.orchestrator import DeliveryOrchestrator
from eventrelay.delivery.queue import LocalQueue, QueueMessage
from eventrelay.delivery.worker import QueueWorker

__all__ = [
    "AuditRecorder",
    "DeadlineExceededError",
    "DeliveryOrchestrator",
    "EventConsumer",
    "LocalQueue",
    "MalformedPayloadError",
    "ProcessingError",
    "QueueMessage",
    "QueueWorker",
    "create_channel_registry",
    "create_delivery_stack",
    "parse_event",
]
