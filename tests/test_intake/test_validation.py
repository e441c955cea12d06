"""Tests for submission validation and event/subscription construction."""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime

import pytest

from eventrelay.core.types import EventStatus, Severity
from eventrelay.intake.exceptions import IntakeValidationError
from eventrelay.intake.validation import (
    build_event,
    build_subscription,
    generate_id,
    is_valid_email,
    is_valid_webhook_url,
    validate_event_submission,
    validate_subscription_request,
)

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _event_body(**kw: object) -> dict[str, object]:
    defaults: dict[str, object] = {
        "eventType": "Deployment",
        "severity": "high",
        "title": "Deploy finished",
    }
    defaults.update(kw)
    return defaults


def _sub_body(**kw: object) -> dict[str, object]:
    defaults: dict[str, object] = {
        "eventType": "Deployment",
        "severityFilter": "medium",
        "channel": "email",
        "target": "ops@example.com",
    }
    defaults.update(kw)
    return defaults


class TestGenerateId:
    def test_format(self) -> None:
        value = generate_id("evt", T0)
        assert re.fullmatch(r"evt_[0-9a-z]+_[0-9a-z]{6}", value)

    def test_timestamp_part_is_base36_millis(self) -> None:
        stamp = generate_id("sub", T0).split("_")[1]
        assert int(stamp, 36) == int(T0.timestamp() * 1000)

    def test_unique(self) -> None:
        assert generate_id("evt", T0) != generate_id("evt", T0)


class TestTargets:
    @pytest.mark.parametrize("value", ["a@b.co", "first.last@example.org"])
    def test_valid_email(self, value: str) -> None:
        assert is_valid_email(value)

    @pytest.mark.parametrize("value", ["plain", "a@b", "a b@c.com", "@example.com"])
    def test_invalid_email(self, value: str) -> None:
        assert not is_valid_email(value)

    @pytest.mark.parametrize("value", ["https://hooks.example.com/x", "http://localhost:8080"])
    def test_valid_url(self, value: str) -> None:
        assert is_valid_webhook_url(value)

    @pytest.mark.parametrize("value", ["ftp://example.com", "example.com/path", "https://"])
    def test_invalid_url(self, value: str) -> None:
        assert not is_valid_webhook_url(value)


class TestEventSubmission:
    def test_valid(self) -> None:
        assert validate_event_submission(_event_body()) == []

    def test_collects_all_errors(self) -> None:
        errors = validate_event_submission({"severity": "SEVERE", "details": [1]})
        assert "eventType is required and must be a string" in errors
        assert "severity must be one of: LOW, MEDIUM, HIGH, CRITICAL" in errors
        assert "title is required and must be a string" in errors
        assert "details must be an object if provided" in errors

    def test_build_normalises(self) -> None:
        event = build_event(_event_body(details={"service": "api"}), now=T0)
        assert event.event_type == "deployment"
        assert event.severity == Severity.HIGH
        assert event.status == EventStatus.PENDING
        assert event.received_at == T0
        assert event.details == {"service": "api"}
        assert event.event_id.startswith("evt_")

    def test_build_defaults_details(self) -> None:
        assert build_event(_event_body(), now=T0).details == {}

    def test_build_from_json_string(self) -> None:
        event = build_event(json.dumps(_event_body()), now=T0)
        assert event.title == "Deploy finished"

    def test_build_invalid_json(self) -> None:
        with pytest.raises(IntakeValidationError) as exc_info:
            build_event("{nope")
        assert exc_info.value.errors == ["Invalid JSON in request body"]

    def test_build_non_object(self) -> None:
        with pytest.raises(IntakeValidationError, match="JSON object"):
            build_event("[]")

    def test_build_raises_with_errors(self) -> None:
        with pytest.raises(IntakeValidationError, match="Validation failed: ") as exc_info:
            build_event(_event_body(title=""))
        assert exc_info.value.errors == ["title is required and must be a string"]


class TestSubscriptionRequest:
    def test_valid(self) -> None:
        assert validate_subscription_request(_sub_body()) == []

    def test_unknown_channel(self) -> None:
        errors = validate_subscription_request(_sub_body(channel="SMS"))
        assert errors == ["channel must be one of: EMAIL, WEBHOOK"]

    def test_bad_severity_filter(self) -> None:
        errors = validate_subscription_request(_sub_body(severityFilter="SEVERE"))
        assert errors == ["severityFilter must be one of: LOW, MEDIUM, HIGH, CRITICAL"]

    def test_email_target_checked(self) -> None:
        errors = validate_subscription_request(_sub_body(target="not-an-email"))
        assert errors == ["target must be a valid email address for EMAIL channel"]

    def test_webhook_target_checked(self) -> None:
        errors = validate_subscription_request(
            _sub_body(channel="WEBHOOK", target="ops@example.com")
        )
        assert errors == ["target must be a valid HTTP/HTTPS URL for WEBHOOK channel"]

    def test_active_must_be_bool(self) -> None:
        errors = validate_subscription_request(_sub_body(active="yes"))
        assert errors == ["active must be a boolean if provided"]

    def test_build_normalises(self) -> None:
        sub = build_subscription(_sub_body(), now=T0)
        assert sub.event_type == "deployment"
        assert sub.severity_filter == "MEDIUM"
        assert sub.channel == "EMAIL"
        assert sub.active is True
        assert sub.created_at == T0
        assert sub.subscription_id.startswith("sub_")

    def test_build_inactive(self) -> None:
        assert build_subscription(_sub_body(active=False), now=T0).active is False

    def test_build_raises(self) -> None:
        with pytest.raises(IntakeValidationError):
            build_subscription(_sub_body(target=""))
