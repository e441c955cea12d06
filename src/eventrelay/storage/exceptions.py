"""Exceptions raised by the event, subscription and notification stores."""

from __future__ import annotations

from eventrelay.core.exceptions import EventRelayError


class StorageError(EventRelayError):
    """Store unavailable, or a read/write was rejected."""
