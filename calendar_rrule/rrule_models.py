"""Data models for recurrence rules and expanded occurrences."""

import logging
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

logger = logging.getLogger(__name__)


class Frequency(str, Enum):
    """Unit of the recurrence interval step."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    @property
    def label(self) -> str:
        """Display label (e.g. "Weekly")."""
        return self.value.capitalize()

    @property
    def unit(self) -> str:
        """Singular unit name used in descriptions (e.g. "week")."""
        return _FREQUENCY_UNITS[self]


_FREQUENCY_UNITS = {
    Frequency.DAILY: "day",
    Frequency.WEEKLY: "week",
    Frequency.MONTHLY: "month",
    Frequency.YEARLY: "year",
}


class Weekday(str, Enum):
    """Day of week, valued by its RFC 5545 two-letter code.

    Members are declared Sunday-first so iteration order matches the
    display order used by rule builders (index 0 = Sunday).
    """

    SUNDAY = "SU"
    MONDAY = "MO"
    TUESDAY = "TU"
    WEDNESDAY = "WE"
    THURSDAY = "TH"
    FRIDAY = "FR"
    SATURDAY = "SA"

    @property
    def index(self) -> int:
        """Sunday-first index (Sunday = 0, Saturday = 6)."""
        return list(Weekday).index(self)

    @property
    def python_weekday(self) -> int:
        """Index compatible with date.weekday() (Monday = 0, Sunday = 6)."""
        return (self.index + 6) % 7

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def short_label(self) -> str:
        return self.name[:3].capitalize()

    @classmethod
    def from_code(cls, code: str) -> Optional["Weekday"]:
        """Look up a weekday by RRULE code, returning None for unknown codes."""
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        """Look up a weekday by Sunday-first index (wraps modulo 7)."""
        return list(cls)[index % 7]

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        return cls.from_index(value.weekday() + 1)


WEEKDAY_ORDER: tuple[Weekday, ...] = tuple(Weekday)


class PatternKind(str, Enum):
    """Day-selection variants for monthly and yearly rules."""

    NONE = "none"
    FIRST_DAY = "first_day"
    LAST_DAY = "last_day"
    FIRST_WEEKDAY = "first_weekday"
    LAST_WEEKDAY = "last_weekday"

    @property
    def label(self) -> str:
        return _PATTERN_LABELS[self]

    @property
    def takes_weekday(self) -> bool:
        return self in (PatternKind.FIRST_WEEKDAY, PatternKind.LAST_WEEKDAY)


_PATTERN_LABELS = {
    PatternKind.NONE: "None",
    PatternKind.FIRST_DAY: "First Day",
    PatternKind.LAST_DAY: "Last Day",
    PatternKind.FIRST_WEEKDAY: "First Weekday",
    PatternKind.LAST_WEEKDAY: "Last Weekday",
}


class RecurrencePattern(BaseModel):
    """Monthly/yearly day pattern.

    ``weekday`` is required for the two weekday kinds and must be absent
    for every other kind.
    """

    model_config = ConfigDict(frozen=True)

    kind: PatternKind = Field(default=PatternKind.NONE, description="Pattern variant")
    weekday: Optional[Weekday] = Field(default=None, description="Weekday for weekday variants")

    @model_validator(mode="after")
    def _check_weekday(self) -> "RecurrencePattern":
        if self.kind.takes_weekday and self.weekday is None:
            raise ValueError(f"pattern {self.kind.value} requires a weekday")
        if not self.kind.takes_weekday and self.weekday is not None:
            raise ValueError(f"pattern {self.kind.value} does not take a weekday")
        return self

    @classmethod
    def none(cls) -> "RecurrencePattern":
        return cls()

    @classmethod
    def first_day(cls) -> "RecurrencePattern":
        return cls(kind=PatternKind.FIRST_DAY)

    @classmethod
    def last_day(cls) -> "RecurrencePattern":
        return cls(kind=PatternKind.LAST_DAY)

    @classmethod
    def first_weekday(cls, weekday: Weekday) -> "RecurrencePattern":
        return cls(kind=PatternKind.FIRST_WEEKDAY, weekday=weekday)

    @classmethod
    def last_weekday(cls, weekday: Weekday) -> "RecurrencePattern":
        return cls(kind=PatternKind.LAST_WEEKDAY, weekday=weekday)

    @property
    def is_none(self) -> bool:
        return self.kind == PatternKind.NONE


class TerminationKind(str, Enum):
    """How a recurring series stops producing occurrences."""

    UNBOUNDED = "unbounded"
    COUNT = "count"
    UNTIL = "until"


class RecurrenceRule(BaseModel):
    """Validated, structured recurrence schedule.

    At most one of ``count`` and ``until`` is ever set. When both are
    supplied the count is kept, matching the tie-break used when the rule
    is serialized.
    """

    model_config = ConfigDict(frozen=True)

    frequency: Frequency = Field(..., description="Recurrence frequency")
    interval: int = Field(default=1, ge=1, description="Every N units of frequency")
    pattern: RecurrencePattern = Field(
        default_factory=RecurrencePattern, description="Monthly/yearly day pattern"
    )
    weekday_set: frozenset[Weekday] = Field(
        default_factory=frozenset, description="Explicit days of week"
    )
    count: Optional[int] = Field(default=None, ge=0, description="Total occurrences in series")
    until: Optional[date] = Field(default=None, description="Last allowed date (inclusive)")
    exception_dates: frozenset[datetime] = Field(
        default_factory=frozenset, description="Instants suppressed from the series"
    )

    @model_validator(mode="before")
    @classmethod
    def _count_takes_priority(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("count") is not None and data.get("until") is not None:
            logger.debug("Rule has both COUNT and UNTIL; keeping COUNT=%s", data["count"])
            data = {**data, "until": None}
        return data

    @field_validator("until", mode="before")
    @classmethod
    def _until_as_date(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value

    @field_validator("exception_dates", mode="before")
    @classmethod
    def _exception_dates_as_datetimes(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        normalized = []
        for item in value:
            if isinstance(item, date) and not isinstance(item, datetime):
                item = datetime.combine(item, time())
            normalized.append(item)
        return frozenset(normalized)

    @property
    def termination(self) -> TerminationKind:
        if self.count is not None:
            return TerminationKind.COUNT
        if self.until is not None:
            return TerminationKind.UNTIL
        return TerminationKind.UNBOUNDED

    @property
    def sorted_weekdays(self) -> tuple[Weekday, ...]:
        """Selected weekdays in Sunday-first order."""
        return tuple(day for day in WEEKDAY_ORDER if day in self.weekday_set)

    @property
    def effective_weekdays(self) -> frozenset[Weekday]:
        """Weekdays the expander consults for this rule.

        Daily rules ignore the set, and a monthly/yearly pattern takes
        precedence over it.
        """
        if self.frequency == Frequency.WEEKLY:
            return self.weekday_set
        if self.frequency in (Frequency.MONTHLY, Frequency.YEARLY) and self.pattern.is_none:
            return self.weekday_set
        return frozenset()

    def exception_days(self, tz: Optional[tzinfo] = None) -> frozenset[date]:
        """Calendar dates of the exception instants.

        Aware instants are converted to ``tz`` first when one is given, so
        they compare against occurrence dates in the event's own timezone.
        """
        days = set()
        for instant in self.exception_dates:
            if tz is not None and instant.tzinfo is not None:
                instant = instant.astimezone(tz)
            days.add(instant.date())
        return frozenset(days)


class EventView(BaseModel):
    """Read-only view of a base event as supplied by the event store."""

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="Event start")
    end: datetime = Field(..., description="Event end")
    all_day: bool = Field(default=False, description="All-day event flag")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class Occurrence(BaseModel):
    """One concrete instance of an event."""

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="Occurrence start")
    end: datetime = Field(..., description="Occurrence end")
    all_day: bool = Field(default=False, description="All-day event flag")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime to ISO format."""
        return dt.isoformat()


class RecurringEventRecord(BaseModel):
    """Event-store record carrying a stored RRULE string and exception list."""

    id: str = Field(..., description="Event ID")
    start: datetime = Field(..., description="Event start")
    end: datetime = Field(..., description="Event end")
    all_day: bool = Field(default=False, description="All-day event flag")
    recurrence_rule: Optional[str] = Field(default=None, description="RRULE text (RFC 5545)")
    recurrence_exceptions: list[datetime] = Field(
        default_factory=list, description="Exception dates"
    )

    @field_validator("recurrence_exceptions", mode="before")
    @classmethod
    def _exceptions_as_datetimes(cls, value: Any) -> Any:
        if value is None:
            return []
        return [
            datetime.combine(item, time())
            if isinstance(item, date) and not isinstance(item, datetime)
            else item
            for item in value
        ]

    @property
    def is_recurring(self) -> bool:
        """True when the stored rule text is present and not a placeholder."""
        text = (self.recurrence_rule or "").strip()
        return bool(text) and text != "None"

    def view(self) -> EventView:
        return EventView(start=self.start, end=self.end, all_day=self.all_day)


class ExpandedOccurrence(BaseModel):
    """Occurrence of a stored event, tagged with the event it came from."""

    event_id: str = Field(..., description="ID of the source event")
    start: datetime = Field(..., description="Occurrence start")
    end: datetime = Field(..., description="Occurrence end")
    all_day: bool = Field(default=False, description="All-day event flag")
    is_expanded_instance: bool = Field(
        default=False, description="True if generated from RRULE expansion"
    )

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        return dt.isoformat()
