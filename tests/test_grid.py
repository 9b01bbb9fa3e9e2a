"""Tests for walking timetable grids."""

import pytest

from timetable_ics.errors import (
    MalformedCell,
    OutOfBoundsWeek,
    SchemaMismatch,
    TableTooSmall,
)
from timetable_ics.grid import Cell, GridWalker

HEADER = [Cell(), Cell(("09:15",)), Cell(("10:15",)), Cell(("11:15",)), Cell(("12:15",))]
EMPTY = Cell()


def _class(subject, room="1.1", weeks="1-10", col_span=1):
    """Helper: a populated class cell."""
    return Cell((subject, room, weeks), col_span=col_span)


def _day(label, rows=1):
    return Cell((label,), row_span=rows)


def test_time_labels():
    walker = GridWalker([HEADER, [_day("Mon"), EMPTY]])
    assert walker.time_labels == ["09:15", "10:15", "11:15", "12:15"]


def test_single_class():
    grid = [HEADER, [_day("Mon"), _class("CM20218-Leca", weeks="6-20")]]
    [event] = list(GridWalker(grid))
    assert event.day_of_week == 0
    assert event.timeslot == 0
    assert event.duration_slots == 1
    assert event.subject == "CM20218-Leca"
    assert event.room == "1.1"
    assert list(event.weeks) == list(range(6, 21))


def test_empty_cells_are_skipped():
    grid = [HEADER, [_day("Mon"), EMPTY, EMPTY, _class("A"), EMPTY]]
    [event] = list(GridWalker(grid))
    assert event.timeslot == 2


def test_wide_cells_advance_timeslot():
    """A two-slot class pushes the following class two timeslots on."""
    grid = [HEADER, [_day("Mon"), _class("A", col_span=2), _class("B"), _class("C")]]
    events = list(GridWalker(grid))
    assert [(e.subject, e.timeslot, e.duration_slots) for e in events] == [
        ("A", 0, 2),
        ("B", 2, 1),
        ("C", 3, 1),
    ]


def test_days_advance_one_row_each():
    grid = [
        HEADER,
        [_day("Mon"), _class("A")],
        [_day("Tue"), EMPTY, _class("B")],
        [_day("Wed"), EMPTY, EMPTY, _class("C")],
    ]
    events = list(GridWalker(grid))
    assert [(e.subject, e.day_of_week, e.timeslot) for e in events] == [
        ("A", 0, 0),
        ("B", 1, 1),
        ("C", 2, 2),
    ]


def test_multi_row_day_continuation_rows_start_at_column_zero():
    """Rows under a row-spanning day label have no label cell of their own."""
    grid = [
        HEADER,
        [_day("Mon", rows=3), _class("A"), EMPTY],
        [EMPTY, _class("B")],
        [_class("C"), EMPTY],
        [_day("Tue"), _class("D")],
    ]
    events = list(GridWalker(grid))
    assert [(e.subject, e.day_of_week, e.timeslot) for e in events] == [
        ("A", 0, 0),
        ("B", 0, 1),
        ("C", 0, 0),
        ("D", 1, 0),
    ]


def test_walker_is_restartable():
    grid = [HEADER, [_day("Mon"), _class("A")], [_day("Tue"), _class("B")]]
    walker = GridWalker(grid)
    assert list(walker) == list(walker)
    assert len(list(walker)) == 2


def test_malformed_cell_aborts():
    grid = [
        HEADER,
        [_day("Mon"), _class("A")],
        [_day("Tue"), Cell(("CM20218-Leca", "1.1"))],
    ]
    walker = iter(GridWalker(grid))
    assert next(walker).subject == "A"
    with pytest.raises(MalformedCell):
        next(walker)


@pytest.mark.parametrize("lines", [("only",), ("a", "b", "c", "d")])
def test_wrong_line_counts_raise(lines):
    grid = [HEADER, [_day("Mon"), Cell(lines)]]
    with pytest.raises(MalformedCell):
        list(GridWalker(grid))


def test_bad_week_list_propagates():
    grid = [HEADER, [_day("Mon"), _class("A", weeks="50-60")]]
    with pytest.raises(OutOfBoundsWeek):
        list(GridWalker(grid))


@pytest.mark.parametrize(
    "grid",
    [
        [],
        [HEADER],
        [[Cell()], [_day("Mon")]],
    ],
)
def test_table_too_small(grid):
    with pytest.raises(TableTooSmall):
        GridWalker(grid)


def test_more_than_five_days_is_a_schema_mismatch():
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    grid = [HEADER] + [[_day(d), _class(d)] for d in days]
    walker = iter(GridWalker(grid))
    assert [next(walker).subject for _ in range(5)] == days[:5]
    with pytest.raises(SchemaMismatch):
        next(walker)


def test_five_days_is_fine():
    days = ["Mon", "Tue", "Wed", "Thu", "Fri"]
    grid = [HEADER] + [[_day(d), _class(d)] for d in days]
    assert [e.day_of_week for e in GridWalker(grid)] == [0, 1, 2, 3, 4]


def test_non_positive_span_is_malformed():
    with pytest.raises(MalformedCell):
        Cell(("A", "B", "1"), col_span=0)


@pytest.mark.parametrize("weeks", ["9-3", "", " , "])
def test_week_list_naming_no_weeks_is_malformed(weeks):
    grid = [HEADER, [_day("Mon"), _class("A", weeks=weeks)]]
    with pytest.raises(MalformedCell, match="names no weeks"):
        list(GridWalker(grid))
