"""Command-line entry for calendar_rrule.

Inspect stored RRULE text: show how it parses, describe it, or list the
occurrences an event would have within a date range.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date, datetime
from typing import Optional, Sequence

from dateutil import parser as date_parser

from . import _init_logging
from .config_loader import load_config
from .occurrence_expander import OccurrenceExpander
from .rrule_builder import build_rrule, describe_rrule
from .rrule_logging import configure_rrule_logging
from .rrule_models import EventView
from .rrule_parser import parse_exdates, parse_rrule, parse_rrule_with_diagnostics


def _parse_datetime_arg(value: str) -> datetime:
    try:
        return date_parser.isoparse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 date-time: {value!r}") from exc


def _parse_date_arg(value: str) -> date | datetime:
    parsed = _parse_datetime_arg(value)
    # a bare date covers the whole day
    return parsed.date() if len(value.strip()) <= 10 else parsed


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for calendar_rrule CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="calendar_rrule",
        description="Parse, describe and expand RFC 5545 recurrence rules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m calendar_rrule parse "FREQ=MONTHLY;BYDAY=1MO"
  python -m calendar_rrule describe "FREQ=WEEKLY;INTERVAL=2;BYDAY=MO,WE,FR;COUNT=10"
  python -m calendar_rrule expand "FREQ=DAILY" --start 2025-01-01T09:00 \\
      --end 2025-01-01T10:00 --from 2025-01-01 --to 2025-01-05
        """,
    )
    parser.add_argument("--config", metavar="PATH", help="Path to YAML config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Show the parsed rule as JSON")
    parse_cmd.add_argument("rrule", help="RRULE text")

    describe_cmd = subparsers.add_parser("describe", help="Describe a rule in words")
    describe_cmd.add_argument("rrule", help="RRULE text")

    expand_cmd = subparsers.add_parser("expand", help="List occurrences within a range")
    expand_cmd.add_argument("rrule", help="RRULE text ('None' for a single event)")
    expand_cmd.add_argument("--start", required=True, type=_parse_datetime_arg, help="Event start")
    expand_cmd.add_argument("--end", required=True, type=_parse_datetime_arg, help="Event end")
    expand_cmd.add_argument("--all-day", action="store_true", help="Mark the event as all-day")
    expand_cmd.add_argument(
        "--from", dest="range_start", required=True, type=_parse_date_arg, help="Range start"
    )
    expand_cmd.add_argument(
        "--to", dest="range_end", required=True, type=_parse_date_arg, help="Range end"
    )
    expand_cmd.add_argument(
        "--exdate", action="append", default=[], metavar="VALUE", help="Exception date (repeatable)"
    )

    return parser


def _run_parse(args: argparse.Namespace) -> int:
    result = parse_rrule_with_diagnostics(args.rrule)
    payload = {
        "rule": result.rule.model_dump(mode="json"),
        "canonical": build_rrule(result.rule),
        "ignored_tokens": result.ignored_tokens,
    }
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def _run_describe(args: argparse.Namespace) -> int:
    print(describe_rrule(parse_rrule(args.rrule)))
    return 0


def _run_expand(args: argparse.Namespace, settings: object) -> int:
    event = EventView(start=args.start, end=args.end, all_day=args.all_day)
    text = args.rrule.strip()
    rule = None if not text or text == "None" else parse_rrule(text, parse_exdates(args.exdate))
    expander = OccurrenceExpander(settings)
    for occurrence in expander.iter_occurrences(event, rule, args.range_start, args.range_end):
        print(f"{occurrence.start.isoformat()}/{occurrence.end.isoformat()}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the calendar_rrule CLI and return the exit status."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    _init_logging()
    configure_rrule_logging(debug_mode=args.debug, log_level=config.log_level)

    if args.command == "parse":
        return _run_parse(args)
    if args.command == "describe":
        return _run_describe(args)
    return _run_expand(args, config)


if __name__ == "__main__":
    sys.exit(main())
