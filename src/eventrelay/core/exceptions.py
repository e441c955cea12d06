"""Root of the eventrelay exception hierarchy."""

from __future__ import annotations


class EventRelayError(Exception):
    """Base exception for all eventrelay errors."""
