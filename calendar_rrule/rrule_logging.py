"""
Central logging configuration for calendar_rrule.

Sets the level of the package loggers and honours environment overrides so
expansion diagnostics can be surfaced without code changes.
"""

import logging
import os
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

PACKAGE_LOGGERS = [
    "calendar_rrule",
    "calendar_rrule.rrule_parser",
    "calendar_rrule.rrule_builder",
    "calendar_rrule.rrule_validation",
    "calendar_rrule.occurrence_expander",
    "calendar_rrule.config_loader",
]


def configure_rrule_logging(
    debug_mode: bool = False,
    force_debug: Optional[bool] = None,
    log_level: Optional[str] = None,
) -> None:
    """
    Configure logging levels for calendar_rrule.

    Args:
        debug_mode: Whether to enable debug logging for calendar_rrule modules
        force_debug: Override debug mode setting (None to use env var detection)
        log_level: Level name used when debug is off (default INFO)

    Environment Variables:
        CALENDAR_RRULE_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALENDAR_RRULE_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_debug = os.getenv("CALENDAR_RRULE_DEBUG", "").lower() in ("1", "true", "yes")
    env_log_level = os.getenv("CALENDAR_RRULE_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif env_debug:
        final_debug = True
    else:
        final_debug = debug_mode

    base_level = logging.INFO
    if log_level and log_level.upper() in LOG_LEVELS:
        base_level = getattr(logging, log_level.upper())

    root_level = logging.DEBUG if final_debug else base_level
    if env_log_level in LOG_LEVELS:
        root_level = getattr(logging, env_log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(root_level)

    package_level = logging.DEBUG if final_debug else base_level
    for logger_name in PACKAGE_LOGGERS:
        logging.getLogger(logger_name).setLevel(package_level)

    if final_debug:
        root_logger.info("Debug logging enabled for calendar_rrule modules")
    else:
        root_logger.debug("Production logging configuration applied")


def reset_logging_to_debug() -> None:
    """Reset the root and package loggers to DEBUG for troubleshooting."""
    logging.getLogger().setLevel(logging.DEBUG)
    for logger_name in PACKAGE_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.DEBUG)

    logging.getLogger().info("All loggers reset to DEBUG level for troubleshooting")


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in PACKAGE_LOGGERS:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
