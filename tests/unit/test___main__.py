"""Tests for the calendar_rrule command line."""

import json

import pytest

from calendar_rrule.__main__ import main

pytestmark = pytest.mark.unit


@pytest.fixture
def config_args(tmp_path):
    """Point the CLI at a config file that does not exist."""
    return ["--config", str(tmp_path / "config.yaml")]


def test_parse_prints_rule_and_canonical_text(config_args, capsys):
    assert main([*config_args, "parse", "FREQ=WEEKLY;BYDAY=FR,MO;WKST=SU"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["canonical"] == "FREQ=WEEKLY;BYDAY=MO,FR"
    assert payload["rule"]["frequency"] == "WEEKLY"
    assert sorted(payload["rule"]["weekday_set"]) == ["FR", "MO"]
    assert payload["ignored_tokens"] == ["WKST=SU: unsupported key"]


def test_describe(config_args, capsys):
    assert main([*config_args, "describe", "FREQ=MONTHLY;BYMONTHDAY=-1"]) == 0
    assert capsys.readouterr().out.strip() == "Every month on the last day"


def test_expand_lists_occurrences(config_args, capsys):
    argv = [
        *config_args,
        "expand",
        "FREQ=DAILY",
        "--start", "2025-01-01T09:00",
        "--end", "2025-01-01T10:00",
        "--from", "2025-01-01",
        "--to", "2025-01-04",
        "--exdate", "20250102",
    ]
    assert main(argv) == 0
    assert capsys.readouterr().out.splitlines() == [
        "2025-01-01T09:00:00/2025-01-01T10:00:00",
        "2025-01-03T09:00:00/2025-01-03T10:00:00",
        "2025-01-04T09:00:00/2025-01-04T10:00:00",
    ]


def test_expand_single_event(config_args, capsys):
    argv = [
        *config_args,
        "expand",
        "None",
        "--start", "2025-01-01T09:00",
        "--end", "2025-01-01T10:00",
        "--from", "2025-01-01",
        "--to", "2025-01-31",
    ]
    assert main(argv) == 0
    assert capsys.readouterr().out.splitlines() == ["2025-01-01T09:00:00/2025-01-01T10:00:00"]


def test_expand_honours_configured_guard(tmp_path, capsys):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("max_candidates_per_expansion: 2\n", encoding="utf-8")
    argv = [
        "--config", str(config_path),
        "expand",
        "FREQ=DAILY",
        "--start", "2025-01-01T09:00",
        "--end", "2025-01-01T10:00",
        "--from", "2025-01-01",
        "--to", "2025-01-31",
    ]
    assert main(argv) == 0
    assert len(capsys.readouterr().out.splitlines()) == 2


def test_invalid_datetime_argument_exits(config_args):
    with pytest.raises(SystemExit):
        main([*config_args, "expand", "FREQ=DAILY", "--start", "soon", "--end", "later",
              "--from", "2025-01-01", "--to", "2025-01-02"])
