"""Calendar arithmetic helpers for recurrence expansion.

Every helper returns a valid calendar date: month and year steps clamp the
day-of-month to the target month's length instead of overflowing.
"""

import calendar
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .rrule_models import Weekday

DateLike = Union[date, datetime]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def last_of_month(value: date) -> date:
    return value.replace(day=days_in_month(value.year, value.month))


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by whole months, clamping to the last valid day.

    >>> add_months(date(2025, 1, 31), 1)
    datetime.date(2025, 2, 28)
    """
    return value + relativedelta(months=months)


def add_years(value: date, years: int) -> date:
    """Shift ``value`` by whole years; Feb 29 clamps to Feb 28 in common years."""
    return value + relativedelta(years=years)


def week_start(value: date) -> date:
    """Monday of the week containing ``value``."""
    return value - timedelta(days=value.weekday())


def first_weekday_of_month(value: date, weekday: Weekday) -> date:
    """First date in ``value``'s month falling on ``weekday``."""
    first = first_of_month(value)
    offset = (weekday.python_weekday - first.weekday()) % 7
    return first + timedelta(days=offset)


def last_weekday_of_month(value: date, weekday: Weekday) -> date:
    """Last date in ``value``'s month falling on ``weekday``."""
    last = last_of_month(value)
    offset = (last.weekday() - weekday.python_weekday) % 7
    return last - timedelta(days=offset)


def weekdays_in_month(value: date, weekdays: frozenset[Weekday]) -> list[date]:
    """All dates in ``value``'s month whose weekday is selected, ascending."""
    wanted = {day.python_weekday for day in weekdays}
    first = first_of_month(value)
    return [
        first + timedelta(days=offset)
        for offset in range(days_in_month(value.year, value.month))
        if (first + timedelta(days=offset)).weekday() in wanted
    ]


def as_range_bound(value: DateLike, *, end_of_day: bool, tz: Optional[tzinfo] = None) -> datetime:
    """Coerce a query bound to a datetime comparable with event instants.

    Plain dates become the start (or end) of that day. Naive values adopt
    ``tz`` so they can be compared with timezone-aware events.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.max if end_of_day else time.min)
    if value.tzinfo is None and tz is not None:
        value = value.replace(tzinfo=tz)
    return value


def intervals_intersect(
    start: datetime, end: datetime, range_start: datetime, range_end: datetime
) -> bool:
    """Closed-interval intersection test."""
    return start <= range_end and end >= range_start


def parse_compact_date(value: str) -> Optional[date]:
    """Parse the leading ``YYYYMMDD`` of a compact RFC 5545 date.

    Returns None when fewer than eight characters are present or the
    digits do not form a real calendar date.
    """
    if len(value) < 8 or not value[:8].isdigit():
        return None
    try:
        return date(int(value[0:4]), int(value[4:6]), int(value[6:8]))
    except ValueError:
        return None


def format_compact_date(value: date) -> str:
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"
