"""Severity ranking and threshold comparison."""

from __future__ import annotations

from eventrelay.core.types import Severity
from eventrelay.matching.exceptions import InvalidSeverityError

SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.LOW,
    Severity.MEDIUM,
    Severity.HIGH,
    Severity.CRITICAL,
)

_RANKS: dict[str, int] = {level.value: rank for rank, level in enumerate(SEVERITY_ORDER)}


def severity_rank(level: str | Severity) -> int:
    """Rank of *level* in ``SEVERITY_ORDER`` (LOW=0 … CRITICAL=3).

    Raises:
        InvalidSeverityError: if *level* is not one of the four levels.
    """
    if not isinstance(level, str):
        raise InvalidSeverityError(level)
    rank = _RANKS.get(level.upper())
    if rank is None:
        raise InvalidSeverityError(level)
    return rank


def meets_threshold(event_severity: str | Severity, filter_severity: str | Severity) -> bool:
    """True when the event is at least as severe as the filter's minimum."""
    return severity_rank(event_severity) >= severity_rank(filter_severity)
