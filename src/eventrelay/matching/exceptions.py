"""Exceptions raised while matching events to subscriptions."""

from __future__ import annotations

from eventrelay.core.exceptions import EventRelayError


class MatchingError(EventRelayError):
    """Base exception for matching errors."""


class InvalidSeverityError(MatchingError):
    """A severity value outside LOW/MEDIUM/HIGH/CRITICAL."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid severity: {value!r}")
        self.value = value
