"""Tests for calendar_rrule.rrule_models."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from calendar_rrule.rrule_models import (
    WEEKDAY_ORDER,
    EventView,
    Frequency,
    PatternKind,
    RecurrencePattern,
    RecurrenceRule,
    RecurringEventRecord,
    TerminationKind,
    Weekday,
)

pytestmark = pytest.mark.unit


class TestWeekday:
    """Weekday ordering and lookups."""

    def test_order_is_sunday_first(self):
        assert [day.value for day in WEEKDAY_ORDER] == ["SU", "MO", "TU", "WE", "TH", "FR", "SA"]
        assert Weekday.SUNDAY.index == 0
        assert Weekday.SATURDAY.index == 6

    @pytest.mark.parametrize(
        "weekday,python_weekday",
        [(Weekday.MONDAY, 0), (Weekday.WEDNESDAY, 2), (Weekday.SUNDAY, 6)],
    )
    def test_python_weekday(self, weekday, python_weekday):
        assert weekday.python_weekday == python_weekday

    def test_from_code(self):
        assert Weekday.from_code("fr") == Weekday.FRIDAY
        assert Weekday.from_code("XX") is None

    def test_from_index_wraps(self):
        assert Weekday.from_index(7) == Weekday.SUNDAY
        assert Weekday.from_index(1) == Weekday.MONDAY

    def test_from_date(self):
        assert Weekday.from_date(date(2025, 1, 6)) == Weekday.MONDAY
        assert Weekday.from_date(date(2025, 1, 5)) == Weekday.SUNDAY

    def test_labels(self):
        assert Weekday.THURSDAY.label == "Thursday"
        assert Weekday.THURSDAY.short_label == "Thu"


class TestRecurrencePattern:
    """Pattern variant validation."""

    def test_weekday_kinds_require_weekday(self):
        with pytest.raises(ValidationError):
            RecurrencePattern(kind=PatternKind.FIRST_WEEKDAY)

    def test_day_kinds_reject_weekday(self):
        with pytest.raises(ValidationError):
            RecurrencePattern(kind=PatternKind.LAST_DAY, weekday=Weekday.MONDAY)

    def test_constructors(self):
        assert RecurrencePattern.none().is_none
        assert RecurrencePattern.last_day().kind == PatternKind.LAST_DAY
        pattern = RecurrencePattern.last_weekday(Weekday.FRIDAY)
        assert pattern.kind == PatternKind.LAST_WEEKDAY
        assert pattern.weekday == Weekday.FRIDAY

    def test_labels(self):
        assert PatternKind.FIRST_WEEKDAY.label == "First Weekday"
        assert PatternKind.NONE.label == "None"


class TestRecurrenceRule:
    """Rule invariants."""

    def test_defaults(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY)
        assert rule.interval == 1
        assert rule.pattern.is_none
        assert rule.weekday_set == frozenset()
        assert rule.termination == TerminationKind.UNBOUNDED

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(frequency=Frequency.DAILY, interval=0)

    def test_count_must_not_be_negative(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(frequency=Frequency.DAILY, count=-1)

    def test_zero_count_is_allowed(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY, count=0)
        assert rule.termination == TerminationKind.COUNT

    def test_count_takes_priority_over_until(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY, count=5, until=date(2025, 3, 1))
        assert rule.count == 5
        assert rule.until is None
        assert rule.termination == TerminationKind.COUNT

    def test_until_accepts_datetime(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY, until=datetime(2025, 3, 1, 23, 59))
        assert rule.until == date(2025, 3, 1)
        assert rule.termination == TerminationKind.UNTIL

    def test_exception_dates_accept_plain_dates(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY, exception_dates=[date(2025, 1, 3)])
        assert rule.exception_dates == frozenset({datetime(2025, 1, 3)})

    def test_rule_is_immutable_and_hashable(self):
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, weekday_set={Weekday.MONDAY})
        with pytest.raises(ValidationError):
            rule.interval = 3  # type: ignore[misc]
        assert hash(rule) == hash(RecurrenceRule(frequency=Frequency.WEEKLY, weekday_set={Weekday.MONDAY}))

    def test_sorted_weekdays(self):
        rule = RecurrenceRule(
            frequency=Frequency.WEEKLY,
            weekday_set={Weekday.FRIDAY, Weekday.SUNDAY, Weekday.MONDAY},
        )
        assert rule.sorted_weekdays == (Weekday.SUNDAY, Weekday.MONDAY, Weekday.FRIDAY)

    def test_effective_weekdays_pattern_takes_precedence(self):
        rule = RecurrenceRule(
            frequency=Frequency.MONTHLY,
            pattern=RecurrencePattern.first_weekday(Weekday.MONDAY),
            weekday_set={Weekday.TUESDAY},
        )
        assert rule.effective_weekdays == frozenset()

    def test_effective_weekdays_ignored_for_daily(self):
        rule = RecurrenceRule(frequency=Frequency.DAILY, weekday_set={Weekday.TUESDAY})
        assert rule.effective_weekdays == frozenset()

    def test_exception_days_convert_to_event_timezone(self, test_timezone):
        # 2025-01-03 06:00 UTC is still 2025-01-02 in Los Angeles
        rule = RecurrenceRule(
            frequency=Frequency.DAILY,
            exception_dates=[datetime(2025, 1, 3, 6, 0, tzinfo=timezone.utc)],
        )
        assert rule.exception_days(test_timezone) == frozenset({date(2025, 1, 2)})
        assert rule.exception_days() == frozenset({date(2025, 1, 3)})


class TestEventRecords:
    """Event view and stored record helpers."""

    def test_event_view_duration(self, morning_event):
        assert morning_event.duration.total_seconds() == 3600

    @pytest.mark.parametrize("text,expected", [(None, False), ("", False), ("None", False), ("FREQ=DAILY", True)])
    def test_record_is_recurring(self, text, expected):
        record = RecurringEventRecord(
            id="evt-1",
            start=datetime(2025, 1, 1, 9),
            end=datetime(2025, 1, 1, 10),
            recurrence_rule=text,
        )
        assert record.is_recurring is expected

    def test_record_view(self):
        record = RecurringEventRecord(
            id="evt-1",
            start=datetime(2025, 1, 1),
            end=datetime(2025, 1, 2),
            all_day=True,
            recurrence_exceptions=[date(2025, 1, 8)],
        )
        assert record.view() == EventView(start=datetime(2025, 1, 1), end=datetime(2025, 1, 2), all_day=True)
        assert record.recurrence_exceptions == [datetime(2025, 1, 8)]
