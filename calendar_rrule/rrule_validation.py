"""Validation of recurrence rules built from user input."""

import logging
from datetime import date, datetime
from typing import Optional, Union

from .rrule_exceptions import RecurrenceValidationError
from .rrule_models import Frequency, RecurrenceRule

logger = logging.getLogger(__name__)

MAX_INTERVAL = 999
MAX_COUNT = 999


def collect_rule_problems(
    rule: RecurrenceRule,
    event_start: Optional[Union[date, datetime]] = None,
    require_weekdays: bool = False,
) -> list[str]:
    """Return every problem found in ``rule``, or an empty list.

    Args:
        rule: Rule to check
        event_start: Start of the owning event, used to check UNTIL
        require_weekdays: Weekly/monthly rules must select at least one day
    """
    problems: list[str] = []

    if rule.interval > MAX_INTERVAL:
        problems.append(f"Interval is too large (max {MAX_INTERVAL})")

    if require_weekdays and rule.frequency in (Frequency.WEEKLY, Frequency.MONTHLY):
        if not rule.weekday_set:
            problems.append("Select at least one day for weekly/monthly recurrence")

    if rule.count is not None and rule.count > MAX_COUNT:
        problems.append(f"Occurrence count is too large (max {MAX_COUNT})")

    if rule.until is not None and event_start is not None:
        start_date = event_start.date() if isinstance(event_start, datetime) else event_start
        if rule.until < start_date:
            problems.append("Recurrence end date cannot be before event start date")

    return problems


def validate_rule(
    rule: RecurrenceRule,
    event_start: Optional[Union[date, datetime]] = None,
    require_weekdays: bool = False,
) -> RecurrenceRule:
    """Validate ``rule`` and return it unchanged.

    Raises:
        RecurrenceValidationError: If any problem is found
    """
    problems = collect_rule_problems(rule, event_start, require_weekdays)
    if problems:
        logger.debug("Recurrence rule rejected: %s", problems)
        raise RecurrenceValidationError(problems)
    return rule
