"""Webhook delivery channel — JSON POST, non-2xx is a failure."""

from __future__ import annotations

from http import HTTPStatus

import structlog

from eventrelay.channels.base import NotificationChannel
from eventrelay.channels.exceptions import DeliveryError, TransportError
from eventrelay.channels.formatters import webhook_headers, webhook_payload
from eventrelay.channels.transports import HttpTransport
from eventrelay.core.types import ChannelType, Event, Subscription

logger = structlog.get_logger(__name__)


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


class WebhookChannel(NotificationChannel):
    """POSTs the event payload to ``subscription.target``."""

    channel_type = ChannelType.WEBHOOK

    def __init__(self, transport: HttpTransport) -> None:
        self._transport = transport

    async def deliver(self, subscription: Subscription, event: Event) -> None:
        try:
            status = await self._transport.post(
                subscription.target,
                headers=webhook_headers(event),
                json_body=webhook_payload(event, subscription),
            )
        except TransportError as exc:
            raise DeliveryError(f"Webhook failed: {exc}") from exc

        if not 200 <= status < 300:
            raise DeliveryError(f"Webhook failed: {status} {_reason_phrase(status)}")

        logger.info(
            "webhook_sent",
            event_id=event.event_id,
            subscription_id=subscription.subscription_id,
            target=subscription.target,
            status=status,
        )

    async def close(self) -> None:
        await self._transport.close()
