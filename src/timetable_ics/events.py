"""Recurring calendar events built from raw grid events.

An event runs weekly from the first to the last week of its week-list.
Weeks inside that span where the class does not run (reading weeks and the
like) become exception instants instead of shortening the recurrence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from types import MappingProxyType
from typing import Iterable, Mapping
from zoneinfo import ZoneInfo

from .errors import ValidationError
from .grid import RawEvent
from .logging import get_logger

log = get_logger(__name__)

LOCAL_TZ = ZoneInfo("Europe/London")
"""Civil timezone the timetable's wall-clock times are given in."""

SLOT_MINUTES = 60
CHANGEOVER_MINUTES = 10

_TIME_LABEL = re.compile(r"^(\d{1,2})[:.](\d{2})$")


@dataclass(frozen=True)
class CalendarEvent:
    """A weekly recurring event, with every instant in UTC.

    :param start: First occurrence.
    :param duration_minutes: Length of each occurrence.
    :param recurrence_count: Number of weeks from first to last occurrence,
        including weeks listed in *exceptions*.
    :param exceptions: Occurrences that do not take place.
    :param summary: Display title.
    :param location: Room, if known.
    """

    start: datetime
    duration_minutes: int
    recurrence_count: int
    exceptions: tuple[datetime, ...]
    summary: str
    location: str | None = None

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    @property
    def end(self) -> datetime:
        """End of the first occurrence."""
        return self.start + self.duration


def course_code(subject: str) -> str:
    """Return the course code of a subject line: everything before the first ``-``.

    :param subject: Subject line such as ``"CM20218-Leca"``.
    :returns: The code, e.g. ``"CM20218"``.
    """
    return subject.split("-", 1)[0].strip()


def parse_time_label(label: str) -> time:
    """Parse a header time label (``"09:15"``, ``"9:15"`` or ``"09.15"``).

    :raises ValidationError: If *label* is not a valid time of day.
    """
    m = _TIME_LABEL.match(label.strip())
    if not m:
        raise ValidationError(f"time label {label!r} is not HH:MM")
    try:
        return time(int(m.group(1)), int(m.group(2)))
    except ValueError as e:
        raise ValidationError(f"time label {label!r}: {e}") from e


def to_utc(day: date, at: time) -> datetime:
    """Convert a Europe/London wall-clock time to an aware UTC datetime."""
    local = datetime.combine(day, at, tzinfo=LOCAL_TZ)
    return local.astimezone(timezone.utc)


class EventBuilder:
    """Turns :class:`~timetable_ics.grid.RawEvent` into :class:`CalendarEvent`.

    :param period_start: Date of the first Monday of the teaching period.
    :param time_labels: Time label for each timeslot index.
    :param course_names: Optional course code to name mapping. When given,
        the course name is appended to event summaries and codes missing from
        it are logged as warnings.
    """

    def __init__(
        self,
        period_start: date,
        time_labels: Iterable[str],
        course_names: Mapping[str, str] | None = None,
    ) -> None:
        self.period_start = period_start
        self.time_labels = tuple(time_labels)
        self.course_names = (
            MappingProxyType(dict(course_names)) if course_names is not None else None
        )

    def build(self, raw: RawEvent) -> CalendarEvent:
        """Build the recurring event for one grid cell.

        :raises ValidationError: If the timeslot has no usable time label,
            the week range is empty, or the dates overflow.
        :raises EmptyRange: If the raw event has no weeks.
        """
        if not 0 <= raw.timeslot < len(self.time_labels):
            raise ValidationError(
                f"{raw.subject!r} starts in timeslot {raw.timeslot}, but the "
                f"header only has {len(self.time_labels)} time(s)"
            )
        at = parse_time_label(self.time_labels[raw.timeslot])

        first_week = raw.weeks.min()
        last_week = raw.weeks.max()

        try:
            first_day = self.period_start + timedelta(
                days=raw.day_of_week, weeks=first_week - 1
            )
            instants = [
                (week, to_utc(first_day + timedelta(weeks=week - first_week), at))
                for week in range(first_week, last_week + 1)
            ]
        except OverflowError as e:
            raise ValidationError(f"date out of range for {raw.subject!r}: {e}") from e

        return CalendarEvent(
            start=instants[0][1],
            duration_minutes=raw.duration_slots * SLOT_MINUTES - CHANGEOVER_MINUTES,
            recurrence_count=last_week - first_week + 1,
            exceptions=tuple(dt for week, dt in instants if week not in raw.weeks),
            summary=self._summary(raw),
            location=raw.room or None,
        )

    def build_all(
        self, raw_events: Iterable[RawEvent], strict: bool = True
    ) -> list[CalendarEvent]:
        """Build every event of a walk.

        :param raw_events: Events from a :class:`~timetable_ics.grid.GridWalker`.
        :param strict: Abort on the first invalid event. When ``False``,
            invalid events are logged and left out.
        :raises ValidationError: In strict mode, for the first invalid event.
        """
        events: list[CalendarEvent] = []
        for raw in raw_events:
            try:
                events.append(self.build(raw))
            except ValidationError as e:
                if strict:
                    raise
                log.warning(
                    "event_skipped",
                    subject=raw.subject,
                    weeks=str(raw.weeks),
                    reason=str(e),
                )
        return events

    def _summary(self, raw: RawEvent) -> str:
        summary = f"{raw.subject} {raw.room}".strip()
        if self.course_names is None:
            return summary

        code = course_code(raw.subject)
        name = self.course_names.get(code)
        if name is None:
            log.warning("course_name_unresolved", code=code, subject=raw.subject)
            return summary
        return f"{summary} ({name})"
