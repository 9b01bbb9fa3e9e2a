"""Convert a timetable page to an ICS file.

Run with: timetable-ics URL --start 2011-10-03
To file:  timetable-ics URL --start 2011-10-03 --output timetable.ics
Names:    timetable-ics URL --start 2011-10-03 --courses courses.txt

Exit codes:
  0 = success (ICS on stdout, or file written with --output)
  1 = error (message on stderr)
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

import requests

from .config import get_settings, load_course_names
from .errors import TimetableError
from .logging import get_logger, setup_logging
from .timetable_ics import TimetableIcs

log = get_logger(__name__)


def _monday(text: str) -> date:
    """argparse type for the period start date."""
    try:
        day = date.fromisoformat(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{text!r} is not a YYYY-MM-DD date")
    if day.weekday() != 0:
        raise argparse.ArgumentTypeError(f"{text} is a {day:%A}, not a Monday")
    return day


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="timetable-ics",
        description="Convert an HTML class timetable to an iCalendar file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", help="URL of the timetable page.")
    parser.add_argument(
        "--start",
        type=_monday,
        required=True,
        help="Date of the first Monday of the teaching period (YYYY-MM-DD).",
    )
    parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the calendar to this file instead of stdout.",
    )
    parser.add_argument(
        "--courses",
        default=None,
        help="File of CODE=Name lines used to add course names to summaries.",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip events that cannot be built instead of aborting.",
    )
    parser.add_argument(
        "--dtend",
        action="store_true",
        help="Emit DTEND instead of DURATION for each event.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Command line entry point."""
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(json_output=settings.log_json, log_level=settings.log_level)

    try:
        course_names = load_course_names(args.courses) if args.courses else None
        converter = TimetableIcs(
            args.url,
            args.start,
            course_names,
            strict=settings.strict and not args.lenient,
            end_style="dtend" if args.dtend else settings.end_style,
            timeout=settings.request_timeout,
            prodid=settings.prodid,
        )
        if args.output:
            converter.write_ics(args.output)
            log.info("ics_written", path=args.output)
        else:
            sys.stdout.write(converter.get_ics())
    except (TimetableError, requests.RequestException, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
