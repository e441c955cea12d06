"""Tests for domain types — wire aliases, normalisation, record invariants."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from eventrelay.core.types import (
    Event,
    EventStatus,
    NotificationRecord,
    NotificationStatus,
    Severity,
    Subscription,
)

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class TestEvent:
    def test_parses_wire_shape(self) -> None:
        event = Event.model_validate({
            "eventId": "evt_1",
            "eventType": "Deployment",
            "severity": "high",
            "title": "deploy finished",
            "details": {"service": "api"},
            "receivedAt": "2024-05-01T12:00:00.000Z",
            "status": "PENDING",
        })
        assert event.event_id == "evt_1"
        assert event.event_type == "deployment"
        assert event.severity is Severity.HIGH
        assert event.details == {"service": "api"}
        assert event.received_at == T0
        assert event.status is EventStatus.PENDING

    def test_null_details_become_empty(self) -> None:
        event = Event(
            event_id="e", event_type="t", severity="LOW", title="x",
            details=None, received_at=T0,  # type: ignore[arg-type]
        )
        assert event.details == {}

    def test_invalid_severity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Event(event_id="e", event_type="t", severity="URGENT", title="x", received_at=T0)  # type: ignore[arg-type]

    def test_mark_processed_returns_copy(self) -> None:
        event = Event(event_id="e", event_type="t", severity=Severity.LOW, title="x", received_at=T0)
        processed = event.mark_processed(T0)
        assert processed.status is EventStatus.PROCESSED
        assert processed.processed_at == T0
        assert event.status is EventStatus.PENDING
        assert event.processed_at is None

    def test_to_wire_uses_camel_case(self) -> None:
        event = Event(event_id="e", event_type="t", severity=Severity.LOW, title="x", received_at=T0)
        wire = event.to_wire()
        assert wire["eventId"] == "e"
        assert wire["eventType"] == "t"
        assert wire["severity"] == "LOW"
        assert "processedAt" not in wire

    def test_frozen(self) -> None:
        event = Event(event_id="e", event_type="t", severity=Severity.LOW, title="x", received_at=T0)
        with pytest.raises(ValidationError):
            event.title = "changed"  # type: ignore[misc]


class TestSubscription:
    def test_normalises_case(self) -> None:
        sub = Subscription.model_validate({
            "subscriptionId": "sub_1",
            "eventType": "Deployment",
            "severityFilter": "medium",
            "channel": "webhook",
            "target": "https://example.com/hook",
            "active": True,
        })
        assert sub.event_type == "deployment"
        assert sub.severity_filter == "MEDIUM"
        assert sub.channel == "WEBHOOK"

    def test_keeps_unknown_values_for_later_checks(self) -> None:
        sub = Subscription(
            subscription_id="s", event_type="t", severity_filter="urgent",
            channel="sms", target="+100",
        )
        assert sub.severity_filter == "URGENT"
        assert sub.channel == "SMS"
        assert sub.active is True


class TestNotificationRecord:
    def _record(self, **kw: object) -> NotificationRecord:
        defaults: dict[str, object] = {
            "event_id": "evt_1",
            "subscription_id": "sub_1",
            "channel": "EMAIL",
            "target": "a@b.co",
            "status": NotificationStatus.SENT,
            "attempted_at": T0,
        }
        defaults.update(kw)
        return NotificationRecord(**defaults)  # type: ignore[arg-type]

    def test_key(self) -> None:
        assert self._record().key == ("evt_1", "sub_1")

    def test_failed_requires_error_message(self) -> None:
        with pytest.raises(ValidationError):
            self._record(status=NotificationStatus.FAILED)

    def test_sent_rejects_error_message(self) -> None:
        with pytest.raises(ValidationError):
            self._record(error_message="boom")

    def test_failed_with_message(self) -> None:
        rec = self._record(status=NotificationStatus.FAILED, error_message="boom")
        assert rec.to_wire()["errorMessage"] == "boom"
