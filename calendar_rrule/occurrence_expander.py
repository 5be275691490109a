"""Occurrence expansion for recurring events.

Turns a base event plus a RecurrenceRule into the concrete occurrences that
intersect a query range. Expansion is pure: every call walks the series
afresh and returns a new result, so ranges may be queried independently and
from several threads at once.
"""

import logging
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

from .date_utils import (
    add_months,
    add_years,
    as_range_bound,
    first_of_month,
    first_weekday_of_month,
    intervals_intersect,
    last_of_month,
    last_weekday_of_month,
    week_start,
    weekdays_in_month,
)
from .rrule_models import (
    EventView,
    ExpandedOccurrence,
    Frequency,
    Occurrence,
    PatternKind,
    RecurrenceRule,
    RecurringEventRecord,
    Weekday,
)
from .rrule_parser import parse_rrule

logger = logging.getLogger(__name__)

RangeBound = Union[date, datetime]

# Longest possible span of one period, in days, per unit of interval.
_MAX_PERIOD_DAYS = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 31,
    Frequency.YEARLY: 366,
}


@dataclass
class ExpanderConfig:
    """Guards bounding the work done by a single expansion.

    Both guards are off by default; a value of 0 disables a guard.
    """

    max_candidates_per_expansion: int = 0
    expansion_time_budget_ms: int = 0

    @classmethod
    def from_settings(cls, settings: Any) -> "ExpanderConfig":
        """Extract expansion guards from a settings object.

        Args:
            settings: Object with expansion attributes (missing ones use defaults)

        Returns:
            ExpanderConfig with values from settings or defaults
        """
        return cls(
            max_candidates_per_expansion=getattr(settings, "max_candidates_per_expansion", 0),
            expansion_time_budget_ms=getattr(settings, "expansion_time_budget_ms", 0),
        )


def _month_dates(rule: RecurrenceRule, period: date) -> list[date]:
    """Dates selected within the month containing ``period``."""
    kind = rule.pattern.kind
    weekday = rule.pattern.weekday
    if kind == PatternKind.FIRST_DAY:
        return [first_of_month(period)]
    if kind == PatternKind.LAST_DAY:
        return [last_of_month(period)]
    if kind == PatternKind.FIRST_WEEKDAY and weekday is not None:
        return [first_weekday_of_month(period, weekday)]
    if kind == PatternKind.LAST_WEEKDAY and weekday is not None:
        return [last_weekday_of_month(period, weekday)]
    if rule.weekday_set:
        return weekdays_in_month(period, rule.weekday_set)
    # add_months/add_years already clamped the base day-of-month
    return [period]


def period_dates(rule: RecurrenceRule, base_date: date, step: int) -> list[date]:
    """Candidate dates of the ``step``-th period of a series, ascending.

    Offsets are measured from ``base_date`` rather than accumulated, so a
    series anchored on the 31st returns to the 31st after a short month.
    Dates before ``base_date`` may be returned for the first period and
    are filtered by the caller.
    """
    offset = step * rule.interval
    if rule.frequency == Frequency.DAILY:
        return [base_date + timedelta(days=offset)]
    if rule.frequency == Frequency.WEEKLY:
        anchor = week_start(base_date) + timedelta(weeks=offset)
        days = rule.weekday_set or frozenset({Weekday.from_date(base_date)})
        return sorted(anchor + timedelta(days=day.python_weekday) for day in days)
    if rule.frequency == Frequency.MONTHLY:
        return _month_dates(rule, add_months(base_date, offset))
    return _month_dates(rule, add_years(base_date, offset))


class OccurrenceExpander:
    """Expand recurring events into occurrences within a query range."""

    def __init__(self, settings: Any = None):
        """Initialize the expander.

        Args:
            settings: Optional settings object; see ExpanderConfig.from_settings
        """
        self.config = ExpanderConfig.from_settings(settings) if settings is not None else ExpanderConfig()

    def _first_useful_step(
        self, rule: RecurrenceRule, event: EventView, range_start: datetime
    ) -> int:
        """Earliest period that can still reach ``range_start``.

        Only valid when no COUNT applies, since skipped periods are never
        counted. The estimate is conservative: it may start early, never late.
        """
        gap_days = (
            (range_start.date() - event.start.date()).days
            - max(event.duration.days, 0)
            - 1
        )
        if gap_days <= 0:
            return 0
        span = _MAX_PERIOD_DAYS[rule.frequency] * rule.interval
        return max(0, gap_days // span - 1)

    def _coerce_bound(self, value: RangeBound, event: EventView, end_of_day: bool) -> datetime:
        bound = as_range_bound(value, end_of_day=end_of_day, tz=event.start.tzinfo)
        if event.start.tzinfo is None and bound.tzinfo is not None:
            # naive events are wall-clock times
            bound = bound.replace(tzinfo=None)
        return bound

    def iter_occurrences(
        self,
        event: EventView,
        rule: Optional[RecurrenceRule],
        range_start: RangeBound,
        range_end: RangeBound,
    ) -> Iterator[Occurrence]:
        """Yield occurrences intersecting ``[range_start, range_end]`` in order.

        Plain dates are accepted as bounds and cover the whole day. The
        generator stops as soon as a candidate starts after ``range_end``,
        so unbounded rules terminate for any finite range.
        """
        start_bound = self._coerce_bound(range_start, event, end_of_day=False)
        end_bound = self._coerce_bound(range_end, event, end_of_day=True)
        if start_bound > end_bound:
            return

        duration = event.duration

        if rule is None:
            if intervals_intersect(event.start, event.end, start_bound, end_bound):
                yield Occurrence(start=event.start, end=event.end, all_day=event.all_day)
            return

        base_date = event.start.date()
        exception_days = rule.exception_days(event.start.tzinfo)
        step = 0 if rule.count is not None else self._first_useful_step(rule, event, start_bound)

        generated = 0
        candidates = 0
        max_candidates = self.config.max_candidates_per_expansion
        budget_ms = self.config.expansion_time_budget_ms
        started = time.monotonic()

        while True:
            for day in period_dates(rule, base_date, step):
                if day < base_date:
                    continue

                candidates += 1
                if max_candidates and candidates > max_candidates:
                    logger.warning(
                        "Expansion stopped after %d candidates (limit %d)", candidates - 1, max_candidates
                    )
                    return
                if budget_ms and (time.monotonic() - started) * 1000 > budget_ms:
                    logger.warning(
                        "Expansion exceeded time budget (%dms) after %d candidates", budget_ms, candidates
                    )
                    return

                if rule.until is not None and day > rule.until:
                    return
                if rule.count is not None and generated >= rule.count:
                    return

                start = event.start + (day - base_date)
                if start > end_bound:
                    return
                if day in exception_days:
                    continue

                generated += 1
                end = start + duration
                if intervals_intersect(start, end, start_bound, end_bound):
                    yield Occurrence(start=start, end=end, all_day=event.all_day)
            step += 1

    def expand(
        self,
        event: EventView,
        rule: Optional[RecurrenceRule],
        range_start: RangeBound,
        range_end: RangeBound,
    ) -> list[Occurrence]:
        """Return the occurrences of ``event`` intersecting the range."""
        occurrences = list(self.iter_occurrences(event, rule, range_start, range_end))
        logger.debug(
            "Expanded %d occurrences for event starting %s between %s and %s",
            len(occurrences),
            event.start,
            range_start,
            range_end,
        )
        return occurrences

    def expand_records(
        self,
        records: Iterable[RecurringEventRecord],
        range_start: RangeBound,
        range_end: RangeBound,
    ) -> list[ExpandedOccurrence]:
        """Expand stored event records and merge the results by start time.

        Records without a usable rule contribute their own interval when it
        falls in range.
        """
        expanded: list[ExpandedOccurrence] = []
        for record in records:
            rule = (
                parse_rrule(record.recurrence_rule, record.recurrence_exceptions)
                if record.is_recurring
                else None
            )
            for occurrence in self.iter_occurrences(record.view(), rule, range_start, range_end):
                expanded.append(
                    ExpandedOccurrence(
                        event_id=record.id,
                        start=occurrence.start,
                        end=occurrence.end,
                        all_day=occurrence.all_day,
                        is_expanded_instance=rule is not None,
                    )
                )

        expanded.sort(key=lambda occurrence: occurrence.start)
        logger.debug("Expanded %d occurrences from stored events", len(expanded))
        return expanded


def _as_event_view(event: Any) -> EventView:
    if isinstance(event, EventView):
        return event
    return EventView(start=event.start, end=event.end, all_day=getattr(event, "all_day", False))


def iter_occurrences(
    event: Any,
    rule: Optional[RecurrenceRule],
    range_start: RangeBound,
    range_end: RangeBound,
    settings: Any = None,
) -> Iterator[Occurrence]:
    """Lazily yield occurrences; see OccurrenceExpander.iter_occurrences."""
    return OccurrenceExpander(settings).iter_occurrences(
        _as_event_view(event), rule, range_start, range_end
    )


def expand_occurrences(
    event: Any,
    rule: Optional[RecurrenceRule],
    range_start: RangeBound,
    range_end: RangeBound,
    settings: Any = None,
) -> list[Occurrence]:
    """Expand one event into the occurrences intersecting a range.

    Args:
        event: EventView, or any object with ``start``, ``end`` and ``all_day``
        rule: Parsed rule, or None for a single non-recurring event
        range_start: Inclusive range start (date or datetime)
        range_end: Inclusive range end (date or datetime)
        settings: Optional settings with expansion guards

    Returns:
        Occurrences in chronological order
    """
    return OccurrenceExpander(settings).expand(_as_event_view(event), rule, range_start, range_end)


def expand_recurring_events(
    records: Iterable[Union[RecurringEventRecord, dict[str, Any]]],
    range_start: RangeBound,
    range_end: RangeBound,
    settings: Any = None,
) -> list[ExpandedOccurrence]:
    """Expand stored event records (models or plain mappings) into occurrences."""
    models = [
        record if isinstance(record, RecurringEventRecord) else RecurringEventRecord.model_validate(record)
        for record in records
    ]
    return OccurrenceExpander(settings).expand_records(models, range_start, range_end)
