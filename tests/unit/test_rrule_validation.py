"""Tests for calendar_rrule.rrule_validation."""

from datetime import date, datetime

import pytest

from calendar_rrule.rrule_exceptions import RecurrenceError, RecurrenceValidationError
from calendar_rrule.rrule_models import Frequency, RecurrencePattern, RecurrenceRule, Weekday
from calendar_rrule.rrule_validation import MAX_COUNT, MAX_INTERVAL, collect_rule_problems, validate_rule

pytestmark = pytest.mark.unit


def test_valid_rule_has_no_problems():
    rule = RecurrenceRule(frequency=Frequency.WEEKLY, interval=2, weekday_set={Weekday.MONDAY}, count=10)
    assert collect_rule_problems(rule, date(2025, 1, 6), require_weekdays=True) == []
    assert validate_rule(rule) is rule


def test_interval_upper_bound():
    rule = RecurrenceRule(frequency=Frequency.DAILY, interval=MAX_INTERVAL + 1)
    assert collect_rule_problems(rule) == ["Interval is too large (max 999)"]


def test_count_upper_bound():
    rule = RecurrenceRule(frequency=Frequency.DAILY, count=MAX_COUNT + 1)
    assert collect_rule_problems(rule) == ["Occurrence count is too large (max 999)"]


def test_limits_are_inclusive():
    rule = RecurrenceRule(frequency=Frequency.DAILY, interval=MAX_INTERVAL, count=MAX_COUNT)
    assert collect_rule_problems(rule) == []


@pytest.mark.parametrize("frequency", [Frequency.WEEKLY, Frequency.MONTHLY])
def test_weekday_selection_required_when_requested(frequency):
    rule = RecurrenceRule(frequency=frequency)
    assert collect_rule_problems(rule, require_weekdays=True) == [
        "Select at least one day for weekly/monthly recurrence"
    ]
    assert collect_rule_problems(rule) == []


def test_weekday_selection_not_required_for_yearly():
    rule = RecurrenceRule(frequency=Frequency.YEARLY, pattern=RecurrencePattern.last_day())
    assert collect_rule_problems(rule, require_weekdays=True) == []


@pytest.mark.parametrize("event_start", [date(2025, 2, 1), datetime(2025, 2, 1, 9, 0)])
def test_until_before_event_start(event_start):
    rule = RecurrenceRule(frequency=Frequency.DAILY, until=date(2025, 1, 31))
    assert collect_rule_problems(rule, event_start) == [
        "Recurrence end date cannot be before event start date"
    ]


def test_until_on_event_start_is_allowed():
    rule = RecurrenceRule(frequency=Frequency.DAILY, until=date(2025, 2, 1))
    assert collect_rule_problems(rule, datetime(2025, 2, 1, 23, 0)) == []


def test_validate_rule_reports_every_problem():
    rule = RecurrenceRule(frequency=Frequency.WEEKLY, interval=1000, until=date(2024, 1, 1))
    with pytest.raises(RecurrenceValidationError) as exc_info:
        validate_rule(rule, date(2025, 1, 1), require_weekdays=True)
    assert exc_info.value.problems == [
        "Interval is too large (max 999)",
        "Select at least one day for weekly/monthly recurrence",
        "Recurrence end date cannot be before event start date",
    ]
    assert str(exc_info.value).startswith("Interval is too large (max 999); ")
    assert isinstance(exc_info.value, RecurrenceError)
