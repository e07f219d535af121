"""Calendar date and time-of-day rules for appointments.

Both validators are pure: they read the clock at most once per call and keep
no state, so the input loop around them may call them as often as it likes.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional

from .errors import Reason
from .models import ACCEPTED, TimeOfDay, Verdict

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

OPENING_HOUR = 8
CLOSING_HOUR = 19
SLOT_MINUTES = 15
DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")


def system_clock() -> datetime:
    return datetime.now()


def parse_date(value: Any, formats: Iterable[str] = DATE_FORMATS) -> Optional[date]:
    """Parse ``dd/mm/yyyy`` or ISO text into a date; None when it is not a real date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    for fmt in formats:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def validate_time_of_day(value: Any, prior: Any = None) -> Verdict:
    """Check a start or end time against business hours and 15 minute steps.

    With ``prior`` (the start time) the value must be strictly later than it.
    """
    parsed = TimeOfDay.parse(value)
    if parsed is None:
        return _reject(value, Reason.UNPARSEABLE)
    if parsed.hour < OPENING_HOUR or parsed.hour >= CLOSING_HOUR:
        return _reject(value, Reason.OUTSIDE_BUSINESS_HOURS)
    if prior is not None:
        start = TimeOfDay.parse(prior)
        if start is None:
            return _reject(prior, Reason.UNPARSEABLE)
        if parsed <= start:
            return _reject(value, Reason.NOT_AFTER_PRIOR)
    if parsed.minute % SLOT_MINUTES != 0:
        return _reject(value, Reason.BAD_GRANULARITY)
    return ACCEPTED


def validate_date(
    value: Any,
    *,
    only_basic: bool = False,
    prior_date: Any = None,
    clock: Clock = system_clock,
) -> Verdict:
    """Check a calendar date.

    ``only_basic`` skips the not-in-the-past rule (agenda range queries).
    A date counts as past when its midnight is earlier than now, so today is
    already past for booking purposes.
    """
    parsed = parse_date(value)
    if parsed is None:
        return _reject(value, Reason.UNPARSEABLE)
    if prior_date is not None:
        start = parse_date(prior_date)
        if start is None:
            return _reject(prior_date, Reason.UNPARSEABLE)
        if parsed < start:
            return _reject(value, Reason.BEFORE_PRIOR)
    if only_basic:
        return ACCEPTED
    if datetime.combine(parsed, time.min) < clock():
        return _reject(value, Reason.IN_PAST)
    return ACCEPTED


def _reject(value: Any, reason: Reason) -> Verdict:
    logger.debug("temporal value %r rejected: %s", value, reason.value)
    return Verdict.reject(reason)
