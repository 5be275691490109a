"""calendar_rrule - recurrence rule model and occurrence expansion.

Parses and builds the RFC 5545 RRULE subset used by calendar event stores
and expands base events into the occurrences visible in a date range.
"""

__version__ = "0.1.0"

import logging
import sys

from colorlog import ColoredFormatter

from .occurrence_expander import (
    ExpanderConfig,
    OccurrenceExpander,
    expand_occurrences,
    expand_recurring_events,
    iter_occurrences,
)
from .rrule_builder import build_rrule, describe_rrule
from .rrule_exceptions import ConfigError, RecurrenceError, RecurrenceValidationError
from .rrule_models import (
    WEEKDAY_ORDER,
    EventView,
    ExpandedOccurrence,
    Frequency,
    Occurrence,
    PatternKind,
    RecurrencePattern,
    RecurrenceRule,
    RecurringEventRecord,
    TerminationKind,
    Weekday,
)
from .rrule_parser import RRuleParseResult, parse_exdates, parse_rrule, parse_rrule_with_diagnostics
from .rrule_validation import collect_rule_problems, validate_rule

__all__ = [
    "WEEKDAY_ORDER",
    "ConfigError",
    "EventView",
    "ExpandedOccurrence",
    "ExpanderConfig",
    "Frequency",
    "Occurrence",
    "OccurrenceExpander",
    "PatternKind",
    "RRuleParseResult",
    "RecurrenceError",
    "RecurrencePattern",
    "RecurrenceRule",
    "RecurrenceValidationError",
    "RecurringEventRecord",
    "TerminationKind",
    "Weekday",
    "build_rrule",
    "collect_rule_problems",
    "describe_rrule",
    "expand_occurrences",
    "expand_recurring_events",
    "iter_occurrences",
    "parse_exdates",
    "parse_rrule",
    "parse_rrule_with_diagnostics",
    "validate_rule",
]


def _init_logging() -> None:
    """Install a colorized stderr handler on the root logger.

    Only adds a handler when the root logger has none. Levels are left to
    rrule_logging.configure_rrule_logging().
    """
    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if root.handlers:
        return

    handler = logging.StreamHandler(stream=sys.stderr)
    # HH:MM:SS  LEVEL   logger.name: message (only the level is colorized)
    fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
    root.addHandler(handler)
    logging.getLogger(__name__).debug("Console log handler installed")
