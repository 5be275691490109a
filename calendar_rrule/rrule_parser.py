"""RRULE text parsing for calendar_rrule.

Parsing is total: tokens that cannot be understood are dropped and the best
partial rule is returned. Callers wanting to know what was dropped use
parse_rrule_with_diagnostics().
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Optional, Union

from dateutil import parser as date_parser

from .date_utils import parse_compact_date
from .rrule_models import Frequency, PatternKind, RecurrencePattern, RecurrenceRule, Weekday

logger = logging.getLogger(__name__)

RRULE_PREFIX = "RRULE:"


@dataclass
class RRuleParseResult:
    """Parsed rule plus the tokens that were ignored or defaulted.

    Each entry in ``ignored_tokens`` is ``"<token>: <reason>"``.
    """

    rule: RecurrenceRule
    ignored_tokens: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.ignored_tokens


def parse_until_date(value: str) -> Optional[date]:
    """Parse an UNTIL value, returning None when it is short or invalid.

    Only the leading ``YYYYMMDD`` is read, so full RFC 5545 date-times such
    as ``20250131T235959Z`` resolve to their date.
    """
    return parse_compact_date(value.strip())


def _parse_unsigned_int(value: str) -> Optional[int]:
    value = value.strip()
    if not value.isdigit():
        return None
    return int(value)


def _parse_positive_int(value: str) -> Optional[int]:
    number = _parse_unsigned_int(value)
    return number if number is not None and number >= 1 else None


def _classify_byday_token(token: str) -> tuple[Optional[PatternKind], Optional[Weekday]]:
    """Split a BYDAY token into (pattern kind, weekday).

    Bare codes (``MO``) return a None kind; ``1MO``/``+1MO`` and ``-1FR``
    return the first/last weekday kinds. Unrecognised tokens return
    ``(None, None)``.
    """
    if len(token) == 2:
        return None, Weekday.from_code(token)
    if len(token) == 3 and token.startswith("1"):
        return PatternKind.FIRST_WEEKDAY, Weekday.from_code(token[1:])
    if len(token) == 4 and token.startswith("+1"):
        return PatternKind.FIRST_WEEKDAY, Weekday.from_code(token[2:])
    if len(token) == 4 and token.startswith("-1"):
        return PatternKind.LAST_WEEKDAY, Weekday.from_code(token[2:])
    return None, None


def parse_rrule_with_diagnostics(
    text: Optional[str],
    exception_dates: Optional[Iterable[Union[date, datetime]]] = None,
) -> RRuleParseResult:
    """Parse RRULE text into a RecurrenceRule, reporting dropped tokens.

    Supports FREQ, INTERVAL, COUNT, UNTIL (``YYYYMMDD``), BYMONTHDAY
    (``1``/``-1``) and BYDAY (bare or ``1``/``-1`` prefixed codes). Unknown
    keys are ignored. Unknown FREQ values fall back to DAILY.

    Args:
        text: RRULE value, optionally prefixed with ``RRULE:``
        exception_dates: Optional exception instants to attach to the rule

    Returns:
        RRuleParseResult with the rule and any ignored tokens
    """
    ignored: list[str] = []
    fields: dict[str, Any] = {"frequency": Frequency.DAILY}
    frequency_seen = False
    pattern = RecurrencePattern.none()
    weekdays: set[Weekday] = set()

    body = (text or "").strip()
    if body.upper().startswith(RRULE_PREFIX):
        body = body[len(RRULE_PREFIX):]

    for part in body.split(";"):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            ignored.append(f"{part}: not a KEY=VALUE pair")
            continue

        key, value = part.split("=", 1)
        key = key.strip().upper()
        value = value.strip().upper()

        if key == "FREQ":
            frequency_seen = True
            try:
                fields["frequency"] = Frequency(value)
            except ValueError:
                fields["frequency"] = Frequency.DAILY
                ignored.append(f"{part}: unknown frequency, using DAILY")
        elif key == "INTERVAL":
            interval = _parse_positive_int(value)
            if interval is None:
                ignored.append(f"{part}: interval is not a positive integer")
            else:
                fields["interval"] = interval
        elif key == "COUNT":
            count = _parse_unsigned_int(value)
            if count is None:
                ignored.append(f"{part}: count is not an unsigned integer")
            else:
                fields["count"] = count
                if count == 0:
                    ignored.append(f"{part}: series has no occurrences")
        elif key == "UNTIL":
            until = parse_until_date(value)
            if until is None:
                ignored.append(f"{part}: not a YYYYMMDD date")
            else:
                fields["until"] = until
        elif key == "BYMONTHDAY":
            if value == "1":
                pattern = RecurrencePattern.first_day()
            elif value == "-1":
                pattern = RecurrencePattern.last_day()
            else:
                ignored.append(f"{part}: only 1 and -1 are supported")
        elif key == "BYDAY":
            for token in value.split(","):
                token = token.strip()
                if not token:
                    continue
                kind, weekday = _classify_byday_token(token)
                if weekday is None:
                    ignored.append(f"BYDAY={token}: unsupported day token")
                elif kind is None:
                    weekdays.add(weekday)
                else:
                    pattern = RecurrencePattern(kind=kind, weekday=weekday)
        else:
            ignored.append(f"{part}: unsupported key")

    if body and not frequency_seen:
        ignored.append("FREQ: missing, using DAILY")
    if "count" in fields and "until" in fields:
        ignored.append(f"UNTIL={fields['until']:%Y%m%d}: COUNT takes priority")

    rule = RecurrenceRule(
        **fields,
        pattern=pattern,
        weekday_set=frozenset(weekdays),
        exception_dates=frozenset(exception_dates or ()),
    )

    if ignored:
        logger.debug("RRULE %r parsed with ignored tokens: %s", text, ignored)
    return RRuleParseResult(rule=rule, ignored_tokens=ignored)


def parse_rrule(
    text: Optional[str],
    exception_dates: Optional[Iterable[Union[date, datetime]]] = None,
) -> RecurrenceRule:
    """Parse RRULE text into a RecurrenceRule. Never raises.

    >>> parse_rrule("FREQ=MONTHLY;BYDAY=1MO").pattern.kind
    <PatternKind.FIRST_WEEKDAY: 'first_weekday'>
    """
    return parse_rrule_with_diagnostics(text, exception_dates).rule


def _parse_exdate_value(value: str) -> datetime:
    """Parse a single stored exception value.

    Accepts ``YYYYMMDD``, ``YYYYMMDDTHHMMSS`` with optional ``Z`` and any
    ISO 8601 form understood by dateutil.
    """
    value = value.strip()
    if len(value) == 8 and value.isdigit():
        day = parse_compact_date(value)
        if day is None:
            raise ValueError(f"Invalid EXDATE date: {value}")
        return datetime.combine(day, time())
    return date_parser.isoparse(value)


def parse_exdates(values: Optional[Iterable[Union[str, date, datetime]]]) -> list[datetime]:
    """Convert stored EXDATE values into datetimes.

    String entries may hold a comma-separated list. Malformed entries are
    skipped with a warning; dates become midnight datetimes.

    Args:
        values: Exception values as strings, dates or datetimes

    Returns:
        Parsed exception instants in input order
    """
    parsed: list[datetime] = []
    for value in values or ():
        if isinstance(value, datetime):
            parsed.append(value)
            continue
        if isinstance(value, date):
            parsed.append(datetime.combine(value, time()))
            continue
        for piece in str(value).split(","):
            if not piece.strip():
                continue
            try:
                parsed.append(_parse_exdate_value(piece))
            except (ValueError, OverflowError) as e:
                logger.warning("Failed to parse EXDATE %r: %s", piece, e)
                continue
    return parsed
