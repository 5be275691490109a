"""Serialize RecurrenceRule objects to canonical RRULE text and display strings."""

import logging
from typing import Optional

from .date_utils import format_compact_date
from .rrule_models import Frequency, PatternKind, RecurrencePattern, RecurrenceRule

logger = logging.getLogger(__name__)


def _pattern_clause(pattern: RecurrencePattern) -> Optional[str]:
    if pattern.kind == PatternKind.FIRST_DAY:
        return "BYMONTHDAY=1"
    if pattern.kind == PatternKind.LAST_DAY:
        return "BYMONTHDAY=-1"
    if pattern.kind == PatternKind.FIRST_WEEKDAY and pattern.weekday is not None:
        return f"BYDAY=1{pattern.weekday.value}"
    if pattern.kind == PatternKind.LAST_WEEKDAY and pattern.weekday is not None:
        return f"BYDAY=-1{pattern.weekday.value}"
    return None


def build_rrule(
    rule: RecurrenceRule,
    is_recurring: bool = True,
    emit_weekdays: bool = True,
) -> Optional[str]:
    """Serialize a rule to canonical RRULE text.

    Field order is fixed (FREQ, INTERVAL, pattern or BYDAY, COUNT or UNTIL)
    and defaultable fields are omitted, so structurally equal rules always
    produce identical text. Exception dates are not part of RRULE text.

    Args:
        rule: Rule to serialize
        is_recurring: False when the owning event does not repeat
        emit_weekdays: Whether an explicit weekday selection is written out

    Returns:
        RRULE text, or None when the event is not recurring
    """
    if not is_recurring:
        return None

    parts = [f"FREQ={rule.frequency.value}"]
    if rule.interval > 1:
        parts.append(f"INTERVAL={rule.interval}")

    weekday_clause = None
    if emit_weekdays and rule.weekday_set:
        weekday_clause = "BYDAY=" + ",".join(day.value for day in rule.sorted_weekdays)

    if rule.frequency in (Frequency.MONTHLY, Frequency.YEARLY):
        pattern_clause = _pattern_clause(rule.pattern)
        if pattern_clause:
            parts.append(pattern_clause)
        elif weekday_clause:
            parts.append(weekday_clause)
    elif rule.frequency == Frequency.WEEKLY and weekday_clause:
        parts.append(weekday_clause)

    if rule.count is not None:
        parts.append(f"COUNT={rule.count}")
    elif rule.until is not None:
        parts.append(f"UNTIL={format_compact_date(rule.until)}")

    text = ";".join(parts)
    logger.debug("Built RRULE %s", text)
    return text


def describe_rrule(rule: RecurrenceRule) -> str:
    """Human-readable summary, e.g. ``"Every 2 weeks on Mon, Wed, Fri, 10 times"``."""
    unit = rule.frequency.unit
    if rule.interval == 1:
        text = f"Every {unit}"
    else:
        text = f"Every {rule.interval} {unit}s"

    if rule.frequency in (Frequency.MONTHLY, Frequency.YEARLY) and not rule.pattern.is_none:
        text += f" on the {rule.pattern.kind.label.lower()}"
        if rule.pattern.weekday is not None:
            text += f" ({rule.pattern.weekday.label})"
    elif rule.effective_weekdays:
        text += " on " + ", ".join(day.short_label for day in rule.sorted_weekdays)

    if rule.count is not None:
        text += ", 1 time" if rule.count == 1 else f", {rule.count} times"
    elif rule.until is not None:
        text += f", until {rule.until.isoformat()}"

    if rule.exception_dates:
        skipped = len(rule.exception_dates)
        text += f", skipping {skipped} date" + ("" if skipped == 1 else "s")
    return text
