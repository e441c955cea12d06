"""Validation and normalisation of event submissions and subscription requests.

These produce the wire shapes the delivery pipeline consumes: events are
lower-cased by type and upper-cased by severity, identifiers are assigned
here, and every problem in a payload is reported at once.
"""

from __future__ import annotations

import json
import re
import secrets
import string
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from eventrelay.core.types import (
    ChannelType,
    Event,
    EventStatus,
    Severity,
    Subscription,
    utc_now,
)
from eventrelay.intake.exceptions import IntakeValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ID_ALPHABET = string.digits + string.ascii_lowercase
_SEVERITIES = ", ".join(s.value for s in Severity)
_CHANNELS = ", ".join(c.value for c in ChannelType)


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ID_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str, now: datetime | None = None) -> str:
    """``<prefix>_<base36 epoch millis>_<6 random chars>``, e.g. ``evt_lq2x1k3a_9fk2ma``."""
    millis = int((now or utc_now()).timestamp() * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
    return f"{prefix}_{_base36(millis)}_{suffix}"


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def is_valid_webhook_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def _as_mapping(payload: Mapping[str, Any] | str | bytes) -> Mapping[str, Any]:
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise IntakeValidationError(["Invalid JSON in request body"]) from exc
    if not isinstance(payload, Mapping):
        raise IntakeValidationError(["Request body must be a JSON object"])
    return payload


def _require_str(body: Mapping[str, Any], field: str, errors: list[str]) -> str | None:
    value = body.get(field)
    if not isinstance(value, str) or not value:
        errors.append(f"{field} is required and must be a string")
        return None
    return value


# ── Events ──────────────────────────────────────────────────────


def validate_event_submission(body: Mapping[str, Any]) -> list[str]:
    """Return every validation error for an event submission (empty if valid)."""
    errors: list[str] = []
    _require_str(body, "eventType", errors)
    severity = _require_str(body, "severity", errors)
    if severity is not None and severity.upper() not in Severity.__members__:
        errors.append(f"severity must be one of: {_SEVERITIES}")
    _require_str(body, "title", errors)
    details = body.get("details")
    if details is not None and not isinstance(details, Mapping):
        errors.append("details must be an object if provided")
    return errors


def build_event(
    payload: Mapping[str, Any] | str | bytes,
    now: datetime | None = None,
) -> Event:
    """Validate an event submission and build the queued :class:`Event`.

    Raises:
        IntakeValidationError: with the full list of problems.
    """
    body = _as_mapping(payload)
    errors = validate_event_submission(body)
    if errors:
        raise IntakeValidationError(errors)

    received_at = now or utc_now()
    return Event(
        event_id=generate_id("evt", received_at),
        event_type=body["eventType"].lower(),
        severity=Severity(body["severity"].upper()),
        title=body["title"],
        details=dict(body.get("details") or {}),
        received_at=received_at,
        status=EventStatus.PENDING,
    )


# ── Subscriptions ───────────────────────────────────────────────


def validate_subscription_request(body: Mapping[str, Any]) -> list[str]:
    """Return every validation error for a subscription request (empty if valid)."""
    errors: list[str] = []
    _require_str(body, "eventType", errors)

    severity = _require_str(body, "severityFilter", errors)
    if severity is not None and severity.upper() not in Severity.__members__:
        errors.append(f"severityFilter must be one of: {_SEVERITIES}")

    channel = _require_str(body, "channel", errors)
    if channel is not None and channel.upper() not in ChannelType.__members__:
        errors.append(f"channel must be one of: {_CHANNELS}")

    target = _require_str(body, "target", errors)
    if target is not None and channel is not None:
        if channel.upper() == ChannelType.EMAIL and not is_valid_email(target):
            errors.append("target must be a valid email address for EMAIL channel")
        elif channel.upper() == ChannelType.WEBHOOK and not is_valid_webhook_url(target):
            errors.append("target must be a valid HTTP/HTTPS URL for WEBHOOK channel")

    active = body.get("active")
    if active is not None and not isinstance(active, bool):
        errors.append("active must be a boolean if provided")
    return errors


def build_subscription(
    payload: Mapping[str, Any] | str | bytes,
    now: datetime | None = None,
) -> Subscription:
    """Validate a subscription request and build the stored :class:`Subscription`.

    Raises:
        IntakeValidationError: with the full list of problems.
    """
    body = _as_mapping(payload)
    errors = validate_subscription_request(body)
    if errors:
        raise IntakeValidationError(errors)

    created_at = now or utc_now()
    active = body.get("active")
    return Subscription(
        subscription_id=generate_id("sub", created_at),
        event_type=body["eventType"].lower(),
        severity_filter=body["severityFilter"].upper(),
        channel=body["channel"].upper(),
        target=body["target"],
        active=True if active is None else active,
        created_at=created_at,
    )
