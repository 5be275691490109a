"""Shared fixtures for calendar_rrule tests."""

from collections.abc import Generator
from datetime import datetime
from types import SimpleNamespace
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from calendar_rrule.rrule_models import EventView


def pytest_configure(config: Any) -> None:
    """Register custom markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")


@pytest.fixture
def simple_settings() -> SimpleNamespace:
    """Lightweight settings object with expansion guards.

    Fields:
      - max_candidates_per_expansion: candidate dates examined per expansion, 0 disables it
      - expansion_time_budget_ms: time budget, 0 disables it
    """
    return SimpleNamespace(
        max_candidates_per_expansion=0,
        expansion_time_budget_ms=0,
    )


@pytest.fixture
def test_timezone() -> ZoneInfo:
    """Deterministic timezone so DST-sensitive tests do not depend on the host."""
    return ZoneInfo("America/Los_Angeles")


@pytest.fixture
def morning_event() -> EventView:
    """One-hour naive event on Wednesday 2025-01-01 at 09:00."""
    return EventView(start=datetime(2025, 1, 1, 9, 0), end=datetime(2025, 1, 1, 10, 0))


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear calendar_rrule environment overrides before and after each test."""
    for name in ("CALENDAR_RRULE_DEBUG", "CALENDAR_RRULE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
