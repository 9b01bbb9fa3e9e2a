"""Tests for iCalendar serialization and line folding."""

from datetime import datetime, timezone

import pytest
from icalendar import Calendar

from timetable_ics.events import CalendarEvent
from timetable_ics.ics import fold_line, serialize, unfold


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


LECTURE = CalendarEvent(
    start=utc(2012, 2, 6, 9, 15),
    duration_minutes=50,
    recurrence_count=15,
    exceptions=(),
    summary="CM20218-Leca 1.1",
    location="1.1",
)

LAB = CalendarEvent(
    start=utc(2012, 2, 7, 11, 15),
    duration_minutes=110,
    recurrence_count=11,
    exceptions=(utc(2012, 3, 13, 11, 15), utc(2012, 4, 3, 10, 15)),
    summary="CM20219-Lab CB 5.13",
    location="CB 5.13",
)


def _event_lines(text):
    """Helper: the logical lines of the first VEVENT, without BEGIN/END."""
    lines = unfold(text)
    begin = lines.index("BEGIN:VEVENT")
    end = lines.index("END:VEVENT")
    return lines[begin + 1 : end]


def test_calendar_frame():
    lines = unfold(serialize([LECTURE]))
    assert lines[:3] == [
        "BEGIN:VCALENDAR",
        "PRODID:-//timetable-ics//Timetable to iCalendar//EN",
        "VERSION:2.0",
    ]
    assert lines[-1] == "END:VCALENDAR"


def test_timezone_block_is_literal():
    lines = unfold(serialize([]))
    begin = lines.index("BEGIN:VTIMEZONE")
    block = lines[begin : lines.index("END:VTIMEZONE") + 1]
    assert "TZID:Europe/London" in block
    assert "RRULE:FREQ=YEARLY;BYMONTH=3;BYDAY=-1SU" in block
    assert "RRULE:FREQ=YEARLY;BYMONTH=10;BYDAY=-1SU" in block
    assert block.index("BEGIN:DAYLIGHT") < block.index("BEGIN:STANDARD")


def test_event_properties():
    lines = _event_lines(serialize([LECTURE]))
    assert lines[:5] == [
        "DTSTART:20120206T091500Z",
        "DURATION:PT50M",
        "LOCATION:1.1",
        "RRULE:FREQ=WEEKLY;COUNT=15",
        "SUMMARY:CM20218-Leca 1.1",
    ]
    assert lines[5].startswith("UID:")
    assert len(lines) == 6


def test_properties_are_in_name_order():
    names = [line.split(":", 1)[0] for line in _event_lines(serialize([LAB]))]
    assert names == sorted(names)
    assert names == ["DTSTART", "DURATION", "EXDATE", "LOCATION", "RRULE", "SUMMARY", "UID"]


def test_exdate_is_comma_joined_utc():
    lines = _event_lines(serialize([LAB]))
    assert "EXDATE:20120313T111500Z,20120403T101500Z" in lines


def test_no_exdate_without_exceptions():
    assert not any(line.startswith("EXDATE") for line in _event_lines(serialize([LECTURE])))


def test_no_location_when_absent():
    event = CalendarEvent(
        start=LECTURE.start,
        duration_minutes=50,
        recurrence_count=1,
        exceptions=(),
        summary="Seminar",
    )
    assert not any(line.startswith("LOCATION") for line in _event_lines(serialize([event])))


def test_dtend_style():
    lines = _event_lines(serialize([LAB], end_style="dtend"))
    assert "DTEND:20120207T130500Z" in lines
    assert not any(line.startswith("DURATION") for line in lines)


def test_long_durations_stay_in_minutes():
    lines = _event_lines(serialize([LAB]))
    assert "DURATION:PT110M" in lines


def test_text_values_are_escaped():
    event = CalendarEvent(
        start=LECTURE.start,
        duration_minutes=50,
        recurrence_count=1,
        exceptions=(),
        summary="Maths; Stats, Probability",
        location="1.1",
    )
    assert "SUMMARY:Maths\\; Stats\\, Probability" in _event_lines(serialize([event]))


def test_custom_prodid():
    assert "PRODID:-//Example//EN" in unfold(serialize([], prodid="-//Example//EN"))


def test_output_is_reproducible():
    assert serialize([LECTURE, LAB]) == serialize([LECTURE, LAB])


def test_uids_are_unique():
    text = serialize([LECTURE, LAB, LECTURE])
    uids = [line for line in unfold(text) if line.startswith("UID:")]
    assert len(set(uids)) == 3


def test_crlf_line_endings():
    text = serialize([LECTURE, LAB])
    assert text.endswith("\r\n")
    assert "\n" not in text.replace("\r\n", "")


def test_round_trip_instants():
    """Re-parsing the output recovers DTSTART and EXDATE instants exactly."""
    cal = Calendar.from_ical(serialize([LECTURE, LAB]))
    vevents = cal.walk("VEVENT")
    assert [ev.decoded("dtstart") for ev in vevents] == [LECTURE.start, LAB.start]
    exdates = [d.dt for d in vevents[1].get("exdate").dts]
    assert exdates == list(LAB.exceptions)
    assert str(vevents[1].get("summary")) == LAB.summary


# --- Folding tests ---


def test_short_line_is_unchanged():
    assert fold_line("SUMMARY:short") == "SUMMARY:short"


def test_exactly_75_octets_is_not_folded():
    line = "X" * 75
    assert fold_line(line) == line


@pytest.mark.parametrize("length", [76, 149, 150, 151, 400])
def test_folded_lines_are_75_octets(length):
    line = "SUMMARY:" + "x" * (length - 8)
    physical = fold_line(line).split("\r\n")
    assert len(physical) > 1
    assert all(len(p.encode("utf-8")) == 75 for p in physical[:-1])
    assert 1 < len(physical[-1].encode("utf-8")) <= 75
    assert all(p.startswith(" ") for p in physical[1:])
    assert physical[0] + "".join(p[1:] for p in physical[1:]) == line


def test_folding_does_not_split_utf8():
    line = "SUMMARY:" + "é" * 80
    physical = fold_line(line).split("\r\n")
    assert all(len(p.encode("utf-8")) <= 75 for p in physical)
    assert physical[0] + "".join(p[1:] for p in physical[1:]) == line


def test_serialized_long_summary_is_folded():
    event = CalendarEvent(
        start=LECTURE.start,
        duration_minutes=50,
        recurrence_count=1,
        exceptions=(),
        summary="CM20218-Leca " + "Very Long Lecture Theatre Name " * 4,
        location="1.1",
    )
    text = serialize([event])
    assert all(len(line.encode("utf-8")) <= 75 for line in text.split("\r\n"))
    assert f"SUMMARY:{event.summary}" in unfold(text)
