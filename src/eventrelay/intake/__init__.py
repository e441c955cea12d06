"""Submission intake — validation of events and subscriptions, event publishing."""

from eventrelay.intake.exceptions import IntakeValidationError
from eventrelay.intake.publisher import EventPublisher
from eventrelay.intake.validation import (
    build_event,
    build_subscription,
    generate_id,
    validate_event_submission,
    validate_subscription_request,
)

__all__ = [
    "EventPublisher",
    "IntakeValidationError",
    "build_event",
    "build_subscription",
    "generate_id",
    "validate_event_submission",
    "validate_subscription_request",
]
