"""calendar_rrule.config_loader

Config loader for calendar_rrule.

- Reads YAML with PyYAML; a missing file yields defaults.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
- CALENDAR_RRULE_LOG_LEVEL overrides the configured log level.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .rrule_exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "calendar_rrule" / "config.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class Config:
    """Typed configuration for calendar_rrule.

    Fields:
        max_candidates_per_expansion: candidate dates examined before an
            expansion gives up, 0 disables
        expansion_time_budget_ms: wall-clock budget per expansion, 0 disables
        log_level: logging level name
    """

    max_candidates_per_expansion: int = 0
    expansion_time_budget_ms: int = 0
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int and clamped to their allowed
        range, logging a warning whenever a coercion occurs.
        """
        if data is None:
            data = {}

        def _coerce_int(key: str, default: int, minimum: int) -> int:
            raw = data.get(key, default)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default
            if value < minimum:
                logger.warning("Config %s=%d below minimum; coercing to %d", key, value, minimum)
                return minimum
            return value

        max_candidates = _coerce_int("max_candidates_per_expansion", 0, 0)
        budget_ms = _coerce_int("expansion_time_budget_ms", 0, 0)

        log_level = str(data.get("log_level") or "INFO").upper()
        if log_level not in LOG_LEVELS:
            logger.warning("Config log_level=%r is not recognised; using INFO", log_level)
            log_level = "INFO"

        return cls(
            max_candidates_per_expansion=max_candidates,
            expansion_time_budget_ms=budget_ms,
            log_level=log_level,
        )

    def apply_env_overrides(self) -> Config:
        """Apply environment overrides in place and return self."""
        env_level = os.getenv("CALENDAR_RRULE_LOG_LEVEL", "").upper()
        if env_level in LOG_LEVELS:
            self.log_level = env_level
        return self


def load_config(path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to
              ~/.config/calendar_rrule/config.yaml.

    Returns:
        Config dataclass instance with values from file (or defaults).

    Raises:
        ConfigError: If the file exists but its top level is not a mapping.
    """
    p = Path(path) if path else DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config().apply_env_overrides()

    loaded = yaml.safe_load(p.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, loaded)
        raise ConfigError(f"Config file {p} must contain a mapping at top level")

    cfg = Config.from_dict(loaded).apply_env_overrides()
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
