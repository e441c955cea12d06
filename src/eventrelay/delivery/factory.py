"""Convenience factory for wiring the delivery stack."""

from __future__ import annotations

from eventrelay.channels.base import ChannelRegistry, NotificationChannel
from eventrelay.channels.email import EmailChannel
from eventrelay.channels.transports import (
    AiohttpTransport,
    HttpTransport,
    MailTransport,
    SmtpMailTransport,
)
from eventrelay.channels.webhook import WebhookChannel
from eventrelay.core.config import Settings, get_settings
from eventrelay.delivery.audit import AuditRecorder
from eventrelay.delivery.consumer import EventConsumer
from eventrelay.delivery.orchestrator import DeliveryOrchestrator
from eventrelay.matching.matcher import SubscriptionMatcher
from eventrelay.storage.base import EventStore, NotificationStore, SubscriptionStore


def create_channel_registry(
    settings: Settings,
    mail_transport: MailTransport | None = None,
    http_transport: HttpTransport | None = None,
) -> ChannelRegistry:
    """Build the registry with the channels enabled in *settings*."""
    channels: list[NotificationChannel] = []

    if settings.email.enabled:
        channels.append(EmailChannel(mail_transport or SmtpMailTransport(settings.email)))

    if settings.webhook.enabled:
        channels.append(WebhookChannel(http_transport or AiohttpTransport(settings.webhook)))

    return ChannelRegistry(channels)


def create_delivery_stack(
    event_store: EventStore,
    subscription_store: SubscriptionStore,
    notification_store: NotificationStore,
    settings: Settings | None = None,
    mail_transport: MailTransport | None = None,
    http_transport: HttpTransport | None = None,
) -> tuple[EventConsumer, ChannelRegistry]:
    """Build a consumer (and the registry it delivers through) from config.

    The caller owns the returned registry and should ``await registry.close()``
    on shutdown to release transport sessions.

    Returns:
        (consumer, registry)
    """
    settings = settings or get_settings()
    registry = create_channel_registry(settings, mail_transport, http_transport)

    recorder = AuditRecorder(
        notification_store,
        max_attempts=settings.delivery.record_max_attempts,
        retry_backoff_secs=settings.delivery.record_retry_backoff_secs,
    )
    orchestrator = DeliveryOrchestrator(
        event_store=event_store,
        matcher=SubscriptionMatcher(subscription_store),
        channels=registry,
        recorder=recorder,
        config=settings.delivery,
    )
    consumer = EventConsumer(
        orchestrator,
        invocation_timeout_secs=settings.delivery.invocation_timeout_secs,
    )
    return consumer, registry
