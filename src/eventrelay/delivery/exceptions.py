"""Exceptions that abort processing of a queued message."""

from __future__ import annotations

from eventrelay.core.exceptions import EventRelayError


class ProcessingError(EventRelayError):
    """Base exception for message-level processing failures."""


class MalformedPayloadError(ProcessingError):
    """A queue message body does not deserialize to an Event."""


class DeadlineExceededError(ProcessingError):
    """The invocation deadline passed before every delivery finished."""

    def __init__(
        self,
        event_id: str,
        attempted: int = 0,
        abandoned: int = 0,
        interrupted: int = 0,
    ) -> None:
        super().__init__(
            f"Deadline exceeded for event {event_id}: "
            f"{attempted} attempted ({interrupted} interrupted), {abandoned} abandoned"
        )
        self.event_id = event_id
        self.attempted = attempted
        self.abandoned = abandoned
        self.interrupted = interrupted
