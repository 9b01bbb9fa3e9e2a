"""TimetableIcs class module.

Provides the :class:`TimetableIcs` converter, which fetches a timetable page
and runs it through the grid walker, event builder and serializer.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Mapping

import requests

from .events import CalendarEvent, EventBuilder
from .grid import Grid, GridWalker
from .html import grid_from_html
from .ics import DEFAULT_PRODID, EndStyle, serialize
from .logging import get_logger

log = get_logger(__name__)


class TimetableIcs:
    """Converts a University of Bath style HTML timetable to ICS.

    The page's largest table is read as the timetable grid. Its header row
    gives the time of each timeslot, and each populated cell becomes one
    weekly recurring event:

    * ``DTSTART`` is the first week the class runs, in UTC.
    * ``RRULE`` counts every week from the first to the last.
    * ``EXDATE`` lists the weeks in between where the class does not run.

    :param url: The URL of the timetable page.
    :param period_start: Date of the first Monday of the teaching period.
    :param course_names: Optional course code to name mapping used to
        extend event summaries.
    :param strict: Abort on the first event that cannot be built. When
        ``False`` such events are logged and skipped. Malformed cells and
        week-lists always abort.
    :param end_style: ``"duration"`` or ``"dtend"``, see
        :func:`timetable_ics.ics.serialize`.
    :param timeout: Timeout in seconds for fetching the page.
    :param prodid: ``PRODID`` of the generated calendar.

    Example usage::

        converter = TimetableIcs(
            url="http://timetables.bath.ac.uk:4090/reporting/individual?...",
            period_start=date(2011, 10, 3),
        )
        converter.write_ics("timetable.ics")
    """

    def __init__(
        self,
        url: str,
        period_start: date,
        course_names: Mapping[str, str] | None = None,
        *,
        strict: bool = True,
        end_style: EndStyle = "duration",
        timeout: float = 30,
        prodid: str = DEFAULT_PRODID,
    ) -> None:
        self.url = url
        self.period_start = period_start
        self.course_names = course_names
        self.strict = strict
        self.end_style = end_style
        self.timeout = timeout
        self.prodid = prodid

    # noinspection PyMethodMayBeStatic
    def _fetch_html(self, url: str) -> str:
        """Fetch and return the HTML content of a URL.

        :param url: The URL to fetch.
        :returns: The response body as a string.
        :raises requests.HTTPError: If the server returns an error status.
        """
        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.text

    def events_for_grid(self, grid: Grid) -> list[CalendarEvent]:
        """Build the calendar events of an already parsed grid.

        :param grid: Rows of cells, header row first.
        :returns: One event per populated cell, in table order.
        :raises TimetableError: If the grid or one of its cells is invalid.
        """
        walker = GridWalker(grid)
        raw_events = list(walker)
        log.info("grid_read", events=len(raw_events))

        builder = EventBuilder(self.period_start, walker.time_labels, self.course_names)
        events = builder.build_all(raw_events, strict=self.strict)
        log.info("calendar_built", events=len(events))
        return events

    def events_for_html(self, html: str) -> list[CalendarEvent]:
        """Build the calendar events of the timetable in *html*."""
        return self.events_for_grid(grid_from_html(html))

    def build_events(self) -> list[CalendarEvent]:
        """Fetch the timetable page and build its calendar events."""
        return self.events_for_html(self._fetch_html(self.url))

    def get_ics(self) -> str:
        """Fetch the timetable and return it as an ICS string.

        :returns: The full calendar in iCalendar (RFC 2445) format, with
            CRLF line endings.
        """
        return serialize(
            self.build_events(), prodid=self.prodid, end_style=self.end_style
        )

    def write_ics(self, path: str | Path) -> None:
        """Fetch the timetable and write the ICS data to a file.

        :param path: Destination file path. Parent directories must exist.
        """
        Path(path).write_text(self.get_ics(), encoding="utf-8", newline="")
