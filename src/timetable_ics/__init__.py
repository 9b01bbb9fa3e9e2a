"""Converts grid-shaped weekly class timetables to iCalendar files.

This package exposes the conversion pipeline:

* :class:`WeekRange` — parsed teaching-week lists.
* :class:`GridWalker` — reads raw class events out of a timetable grid.
* :class:`EventBuilder` — turns them into weekly recurring :class:`CalendarEvent` objects.
* :func:`serialize` — renders events as RFC 2445 text.
* :class:`TimetableIcs` — fetches a timetable page and runs all of the above.
"""

from .events import CalendarEvent, EventBuilder
from .grid import Cell, GridWalker, RawEvent
from .ics import serialize
from .timetable_ics import TimetableIcs
from .weeks import WeekRange

__all__ = [
    "CalendarEvent",
    "Cell",
    "EventBuilder",
    "GridWalker",
    "RawEvent",
    "TimetableIcs",
    "WeekRange",
    "serialize",
]
