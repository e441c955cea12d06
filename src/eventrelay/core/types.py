"""Domain types shared across the matching and delivery pipeline.

Wire payloads use camelCase keys (``eventId``, ``severityFilter``, ...); the
models expose snake_case attributes and accept either spelling on input.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Severity(StrEnum):
    """Event severity level. Declaration order is the ranking order."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ChannelType(StrEnum):
    """Delivery channel variant selected by a subscription."""

    EMAIL = "EMAIL"
    WEBHOOK = "WEBHOOK"


class EventStatus(StrEnum):
    """Lifecycle status of a stored event."""

    PENDING = "PENDING"
    PROCESSED = "PROCESSED"


class NotificationStatus(StrEnum):
    """Outcome of one delivery attempt."""

    SENT = "SENT"
    FAILED = "FAILED"


class WireModel(BaseModel):
    """Base for models that travel as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the camelCase wire keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Events & subscriptions ──────────────────────────────────────


class Event(WireModel):
    """An ingested event. Immutable; processing produces a marked copy."""

    event_id: str
    event_type: str
    severity: Severity
    title: str
    details: dict[str, Any] = Field(default_factory=dict)
    received_at: datetime
    status: EventStatus = EventStatus.PENDING
    processed_at: datetime | None = None

    @field_validator("event_type", mode="before")
    @classmethod
    def _lower_type(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("severity", mode="before")
    @classmethod
    def _upper_severity(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("details", mode="before")
    @classmethod
    def _default_details(cls, v: Any) -> Any:
        return {} if v is None else v

    def mark_processed(self, at: datetime) -> Event:
        """Return a copy stamped as processed at *at*."""
        return self.model_copy(
            update={"status": EventStatus.PROCESSED, "processed_at": at},
        )


class Subscription(WireModel):
    """A registered interest in events of one type at or above a severity.

    ``severity_filter`` and ``channel`` stay plain strings: the store may
    hold values written before validation tightened, and those must surface
    per subscription rather than fail the whole lookup.
    """

    subscription_id: str
    event_type: str
    severity_filter: str
    channel: str
    target: str
    active: bool = True
    created_at: datetime | None = None

    @field_validator("event_type", mode="before")
    @classmethod
    def _lower_type(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @field_validator("severity_filter", "channel", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


# ── Delivery results ────────────────────────────────────────────


class NotificationRecord(WireModel):
    """Audit entry for one (event, subscription) delivery attempt."""

    event_id: str
    subscription_id: str
    channel: str
    target: str
    status: NotificationStatus
    attempted_at: datetime
    error_message: str | None = None

    @model_validator(mode="after")
    def _error_iff_failed(self) -> NotificationRecord:
        if self.status == NotificationStatus.FAILED and not self.error_message:
            raise ValueError("FAILED records require an error_message")
        if self.status == NotificationStatus.SENT and self.error_message is not None:
            raise ValueError("SENT records must not carry an error_message")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return (self.event_id, self.subscription_id)


class DeliveryOutcome(BaseModel):
    """Result of one delivery attempt as seen by the orchestrator."""

    subscription_id: str
    channel: str
    status: NotificationStatus
    error_message: str | None = None
    recorded: bool = True
    deadline_exceeded: bool = False


class DeliveryReport(BaseModel):
    """Aggregate result of processing one event."""

    event_id: str
    attempted: int = 0
    sent: int = 0
    failed: int = 0
    skipped: int = 0
    record_failures: int = 0
    outcomes: list[DeliveryOutcome] = Field(default_factory=list)
