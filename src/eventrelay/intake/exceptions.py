"""Exceptions raised while validating submissions."""

from __future__ import annotations

from eventrelay.core.exceptions import EventRelayError


class IntakeValidationError(EventRelayError):
    """A submission failed validation. ``errors`` lists every problem found."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Validation failed: " + "; ".join(errors))
        self.errors = errors
