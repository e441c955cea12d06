"""Email delivery channel."""

from __future__ import annotations

import structlog

from eventrelay.channels.base import NotificationChannel
from eventrelay.channels.exceptions import DeliveryError, TransportError
from eventrelay.channels.formatters import email_html_body, email_subject, email_text_body
from eventrelay.channels.transports import MailTransport
from eventrelay.core.types import ChannelType, Event, Subscription

logger = structlog.get_logger(__name__)


class EmailChannel(NotificationChannel):
    """Sends a formatted HTML + text message to ``subscription.target``."""

    channel_type = ChannelType.EMAIL

    def __init__(self, transport: MailTransport) -> None:
        self._transport = transport

    async def deliver(self, subscription: Subscription, event: Event) -> None:
        try:
            await self._transport.send(
                to=subscription.target,
                subject=email_subject(event),
                html_body=email_html_body(event, subscription),
                text_body=email_text_body(event, subscription),
            )
        except TransportError as exc:
            raise DeliveryError(f"Email failed: {exc}") from exc
        logger.info(
            "email_sent",
            event_id=event.event_id,
            subscription_id=subscription.subscription_id,
            target=subscription.target,
        )

    async def close(self) -> None:
        await self._transport.close()
