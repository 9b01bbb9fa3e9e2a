"""Render calendar events as RFC 2445 iCalendar text.

Property values are encoded with the :mod:`icalendar` value types; the
document layout and line folding are done here so the output is byte-for-byte
reproducible: properties appear in name order, UIDs are derived from the
event rather than random, and every physical line but the last of a folded
line is exactly 75 octets.
"""

from __future__ import annotations

from typing import Iterable, Literal
from uuid import NAMESPACE_URL, uuid5

from icalendar import vDatetime, vDDDLists, vRecur, vText

from .events import CalendarEvent

EndStyle = Literal["duration", "dtend"]

DEFAULT_PRODID = "-//timetable-ics//Timetable to iCalendar//EN"
FOLD_LIMIT = 75
CRLF = "\r\n"

# Europe/London since 1996: BST from 01:00 UTC on the last Sunday of March
# to 01:00 UTC on the last Sunday of October.
EUROPE_LONDON_VTIMEZONE = (
    "BEGIN:VTIMEZONE",
    "TZID:Europe/London",
    "X-LIC-LOCATION:Europe/London",
    "BEGIN:DAYLIGHT",
    "TZOFFSETFROM:+0000",
    "TZOFFSETTO:+0100",
    "TZNAME:BST",
    "DTSTART:19700329T010000",
    "RRULE:FREQ=YEARLY;BYMONTH=3;BYDAY=-1SU",
    "END:DAYLIGHT",
    "BEGIN:STANDARD",
    "TZOFFSETFROM:+0100",
    "TZOFFSETTO:+0000",
    "TZNAME:GMT",
    "DTSTART:19701025T020000",
    "RRULE:FREQ=YEARLY;BYMONTH=10;BYDAY=-1SU",
    "END:STANDARD",
    "END:VTIMEZONE",
)


def fold_line(line: str, limit: int = FOLD_LIMIT) -> str:
    """Fold a logical content line into CRLF-separated physical lines.

    The first physical line holds *limit* octets; continuation lines start
    with a space followed by ``limit - 1`` octets. A UTF-8 sequence is never
    split, so a physical line ending before a multi-byte character may be
    shorter.

    :param line: The unfolded line, without a line terminator.
    :param limit: Maximum octets per physical line.
    :returns: The folded line, without a trailing CRLF.
    """
    data = line.encode("utf-8")
    chunks: list[bytes] = []
    start = 0
    width = limit
    while len(data) - start > width:
        end = start + width
        # Back off continuation bytes (10xxxxxx) to a character boundary
        while end > start and (data[end] & 0xC0) == 0x80:
            end -= 1
        chunks.append(data[start:end])
        start = end
        width = limit - 1
    chunks.append(data[start:])
    return (CRLF + " ").join(chunk.decode("utf-8") for chunk in chunks)


def unfold(text: str) -> list[str]:
    """Split iCalendar text into logical lines, undoing :func:`fold_line`."""
    return text.replace(CRLF + " ", "").split(CRLF)[:-1]


def event_uid(index: int, event: CalendarEvent) -> str:
    """Return a stable UID for the *index*-th event of a document."""
    start = vDatetime(event.start).to_ical().decode("utf-8")
    return str(uuid5(NAMESPACE_URL, f"timetable-ics/{index}/{start}/{event.summary}"))


def event_properties(
    index: int, event: CalendarEvent, end_style: EndStyle = "duration"
) -> dict[str, str]:
    """Return the encoded ``VEVENT`` properties of *event*, keyed by name."""
    props = {
        "DTSTART": vDatetime(event.start).to_ical().decode("utf-8"),
        "RRULE": vRecur({"FREQ": "WEEKLY", "COUNT": event.recurrence_count})
        .to_ical()
        .decode("utf-8"),
        "SUMMARY": vText(event.summary).to_ical().decode("utf-8"),
        "UID": event_uid(index, event),
    }
    if end_style == "dtend":
        props["DTEND"] = vDatetime(event.end).to_ical().decode("utf-8")
    else:
        props["DURATION"] = f"PT{event.duration_minutes}M"
    if event.exceptions:
        props["EXDATE"] = vDDDLists(list(event.exceptions)).to_ical().decode("utf-8")
    if event.location:
        props["LOCATION"] = vText(event.location).to_ical().decode("utf-8")
    return props


def content_lines(
    events: Iterable[CalendarEvent],
    prodid: str = DEFAULT_PRODID,
    end_style: EndStyle = "duration",
) -> list[str]:
    """Return the unfolded content lines of a calendar holding *events*."""
    lines = [
        "BEGIN:VCALENDAR",
        f"PRODID:{prodid}",
        "VERSION:2.0",
        *EUROPE_LONDON_VTIMEZONE,
    ]
    for index, event in enumerate(events):
        lines.append("BEGIN:VEVENT")
        props = event_properties(index, event, end_style)
        lines.extend(f"{name}:{props[name]}" for name in sorted(props))
        lines.append("END:VEVENT")
    lines.append("END:VCALENDAR")
    return lines


def serialize(
    events: Iterable[CalendarEvent],
    *,
    prodid: str = DEFAULT_PRODID,
    end_style: EndStyle = "duration",
) -> str:
    """Render *events* as a folded, CRLF-terminated iCalendar document.

    :param events: The events, in output order.
    :param prodid: Value of the calendar's ``PRODID`` property.
    :param end_style: ``"duration"`` to emit ``DURATION:PT{n}M``, or
        ``"dtend"`` to emit the UTC end of the first occurrence as ``DTEND``.
    :returns: The calendar text.
    """
    return "".join(
        fold_line(line) + CRLF for line in content_lines(events, prodid, end_style)
    )
