"""Exception hierarchy for notification channels and their transports."""

from __future__ import annotations

from eventrelay.core.exceptions import EventRelayError


class ChannelError(EventRelayError):
    """Base exception for channel errors."""


class DeliveryError(ChannelError):
    """A delivery attempt failed (transport error, non-2xx response, timeout)."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class UnsupportedChannelError(ChannelError):
    """No delivery variant exists (or is configured) for a channel value."""

    def __init__(self, channel: object, detail: str = "unsupported channel") -> None:
        super().__init__(f"{detail}: {channel!r}")
        self.channel = channel


class TransportError(ChannelError):
    """The underlying mail or HTTP transport failed."""
