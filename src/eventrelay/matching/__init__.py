"""Severity ranking and subscription matching."""

from eventrelay.matching.exceptions import InvalidSeverityError, MatchingError
from eventrelay.matching.matcher import SubscriptionMatcher, is_eligible
from eventrelay.matching.severity import SEVERITY_ORDER, meets_threshold, severity_rank

__all__ = [
    "InvalidSeverityError",
    "MatchingError",
    "SEVERITY_ORDER",
    "SubscriptionMatcher",
    "is_eligible",
    "meets_threshold",
    "severity_rank",
]
