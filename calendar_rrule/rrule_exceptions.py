"""Exception hierarchy for calendar_rrule.

Parsing, building and expanding recurrence rules never raise; these types are
reserved for the explicit validation API and for configuration loading.
"""

from typing import Optional


class RecurrenceError(Exception):
    """Base exception for all calendar_rrule errors."""


class RecurrenceValidationError(RecurrenceError):
    """A recurrence rule failed validation.

    Raised by validate_rule() when:
    - Interval or count is outside the allowed range
    - UNTIL date falls before the event start date
    - A weekday selection is required but empty

    The individual problems are available on ``problems`` in the order
    they were detected.
    """

    def __init__(self, problems: list[str], message: Optional[str] = None):
        self.problems = list(problems)
        super().__init__(message or "; ".join(self.problems))


class ConfigError(RecurrenceError):
    """Configuration file could not be used.

    Raised when the config file exists but its top level is not a mapping.
    """
