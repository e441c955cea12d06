"""Pure functions that render an event into email and webhook payloads."""

from __future__ import annotations

import json
from html import escape as html_escape
from typing import Any

from eventrelay.core.types import Event, Subscription


def email_subject(event: Event) -> str:
    return f"[{event.severity}] {event.event_type}: {event.title}"


def email_html_body(event: Event, subscription: Subscription) -> str:
    wire = event.to_wire()
    parts = [
        "<h2>Event Notification</h2>",
        f"<p><strong>Type:</strong> {html_escape(event.event_type)}</p>",
        f"<p><strong>Severity:</strong> {event.severity}</p>",
        f"<p><strong>Title:</strong> {html_escape(event.title)}</p>",
        f"<p><strong>Time:</strong> {wire['receivedAt']}</p>",
    ]
    if event.details:
        details = json.dumps(wire["details"], indent=2, sort_keys=True)
        parts.append("<p><strong>Details:</strong></p>")
        parts.append(f"<pre>{html_escape(details)}</pre>")
    parts.append("<hr>")
    parts.append(
        f"<p><small>Subscription ID: {html_escape(subscription.subscription_id)}</small></p>"
    )
    return "\n".join(parts)


def email_text_body(event: Event, subscription: Subscription) -> str:
    wire = event.to_wire()
    lines = [
        "Event Notification",
        "------------------",
        f"Type: {event.event_type}",
        f"Severity: {event.severity}",
        f"Title: {event.title}",
        f"Time: {wire['receivedAt']}",
    ]
    if event.details:
        lines.append(f"Details: {json.dumps(wire['details'], sort_keys=True)}")
    lines.append("")
    lines.append(f"Subscription ID: {subscription.subscription_id}")
    return "\n".join(lines)


def webhook_payload(event: Event, subscription: Subscription) -> dict[str, Any]:
    """JSON body POSTed to a webhook target."""
    wire = event.to_wire()
    return {
        "eventId": wire["eventId"],
        "eventType": wire["eventType"],
        "severity": wire["severity"],
        "title": wire["title"],
        "details": wire["details"],
        "receivedAt": wire["receivedAt"],
        "subscriptionId": subscription.subscription_id,
    }


def webhook_headers(event: Event) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "X-Event-Type": event.event_type,
        "X-Event-Id": event.event_id,
    }
