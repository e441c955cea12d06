"""Channel abstraction and the closed registry that selects a variant."""

from __future__ import annotations

import abc
from collections.abc import Iterable

import structlog

from eventrelay.channels.exceptions import UnsupportedChannelError
from eventrelay.core.types import ChannelType, Event, Subscription

logger = structlog.get_logger(__name__)


class NotificationChannel(abc.ABC):
    """Base class for delivery channels.

    ``deliver`` either returns normally or raises ``DeliveryError``. Channels
    never retry; retry policy lives with the queue.
    """

    channel_type: ChannelType

    @abc.abstractmethod
    async def deliver(self, subscription: Subscription, event: Event) -> None:
        """Deliver *event* to *subscription*'s target."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class ChannelRegistry:
    """Maps each :class:`ChannelType` to the channel that delivers it.

    Unknown or duplicate variants are rejected when the registry is built,
    so dispatch only has to handle subscription data.
    """

    def __init__(self, channels: Iterable[NotificationChannel]) -> None:
        self._channels: dict[ChannelType, NotificationChannel] = {}
        for ch in channels:
            try:
                channel_type = ChannelType(ch.channel_type)
            except (AttributeError, ValueError) as exc:
                raise UnsupportedChannelError(
                    getattr(ch, "channel_type", None),
                    detail=f"{type(ch).__name__} declares an unknown channel type",
                ) from exc
            if channel_type in self._channels:
                raise ValueError(f"Duplicate channel registered for {channel_type}")
            self._channels[channel_type] = ch

    @property
    def channel_types(self) -> frozenset[ChannelType]:
        return frozenset(self._channels)

    def for_subscription(self, subscription: Subscription) -> NotificationChannel:
        """Select the channel for *subscription* solely by its ``channel`` value.

        Raises:
            UnsupportedChannelError: unknown value, or no channel configured.
        """
        try:
            channel_type = ChannelType(subscription.channel)
        except ValueError:
            raise UnsupportedChannelError(subscription.channel) from None
        channel = self._channels.get(channel_type)
        if channel is None:
            raise UnsupportedChannelError(channel_type.value, detail="channel not configured")
        return channel

    async def deliver(self, subscription: Subscription, event: Event) -> None:
        channel = self.for_subscription(subscription)
        await channel.deliver(subscription, event)

    async def close(self) -> None:
        for ch in self._channels.values():
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=type(ch).__name__)
