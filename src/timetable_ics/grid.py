"""Walk a timetable grid and pull out one raw event per class.

The grid mirrors the HTML table after parsing: row 0 holds the time labels,
column 0 of each day's first row holds the day label, and that label's
row-span says how many physical rows the day occupies. Rows after the first
of a day do not repeat the label cell, so their first cell is already a
timeslot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from .errors import MalformedCell, SchemaMismatch, TableTooSmall
from .logging import get_logger
from .weeks import WeekRange

log = get_logger(__name__)

DAYS_PER_WEEK = 5
"""Monday to Friday."""

CELL_LINES = 3
"""Subject, room and week-list."""


@dataclass(frozen=True)
class Cell:
    """One table cell after markup parsing.

    :param lines: Text lines of the cell; empty for a free period.
    :param row_span: Number of table rows the cell covers.
    :param col_span: Number of timeslots the cell covers.
    """

    lines: tuple[str, ...] = ()
    row_span: int = 1
    col_span: int = 1

    def __post_init__(self) -> None:
        if self.row_span < 1 or self.col_span < 1:
            raise MalformedCell(
                f"cell spans must be positive, got rowspan={self.row_span} "
                f"colspan={self.col_span}"
            )

    @property
    def text(self) -> str:
        return " ".join(self.lines).strip()


Grid = Sequence[Sequence[Cell]]


@dataclass(frozen=True)
class RawEvent:
    """A class read from the grid, before any date arithmetic.

    :param day_of_week: Days after the period's first Monday (0-4).
    :param timeslot: Index into the header's time labels.
    :param duration_slots: Number of hour-long slots the class spans.
    :param subject: Subject line, e.g. ``"CM20218-Leca"``.
    :param room: Room line, e.g. ``"1.1"``.
    :param weeks: Teaching weeks in which the class runs.
    """

    day_of_week: int
    timeslot: int
    duration_slots: int
    subject: str
    room: str
    weeks: WeekRange


@dataclass
class _WalkState:
    """Position of a walk through the grid's day grouping."""

    day_of_week: int = 0
    rows_until_day_increment: int = 0
    just_incremented_day: bool = True
    timeslot: int = 0
    row: int = 1
    col: int = 0
    events: int = 0


class GridWalker:
    """Iterate over the classes in a timetable grid.

    Each call to :func:`iter` starts a fresh walk, so the walker can be
    consumed more than once. The walk stops at the first malformed cell or
    week-list by raising; it never yields events from a table it could not
    fully understand.

    :param grid: Rows of :class:`Cell`, header row first.
    :raises TableTooSmall: If the grid has fewer than two rows, or its widest
        row has fewer than two cells.
    """

    def __init__(self, grid: Grid) -> None:
        if len(grid) < 2 or max(len(row) for row in grid) < 2:
            raise TableTooSmall(
                f"timetable needs at least 2 rows and 2 columns, got "
                f"{len(grid)} row(s)"
            )
        if not grid[1]:
            raise MalformedCell("first data row has no day label cell")
        self.grid = grid

    @property
    def time_labels(self) -> list[str]:
        """Display times of the timeslots, from the header row."""
        return [cell.text for cell in self.grid[0][1:]]

    def __iter__(self) -> Iterator[RawEvent]:
        state = _WalkState(rows_until_day_increment=self.grid[1][0].row_span)

        while state.row < len(self.grid):
            yield from self._walk_row(state)
            self._finish_row(state)

        log.debug("grid_walked", events=state.events, days=state.day_of_week + 1)

    def _walk_row(self, state: _WalkState) -> Iterator[RawEvent]:
        row = self.grid[state.row]
        state.timeslot = 0
        state.col = 1 if state.just_incremented_day else 0

        while state.col < len(row):
            cell = row[state.col]
            timeslot = state.timeslot
            state.timeslot += cell.col_span
            state.col += 1

            if not cell.lines:
                continue
            if len(cell.lines) != CELL_LINES:
                raise MalformedCell(
                    f"row {state.row} column {state.col - 1}: expected "
                    f"{CELL_LINES} lines, got {len(cell.lines)}: {list(cell.lines)!r}"
                )

            subject, room, week_list = cell.lines
            weeks = WeekRange.parse(week_list)
            if not weeks:
                raise MalformedCell(
                    f"row {state.row} column {state.col - 1}: week-list "
                    f"{week_list!r} of {subject!r} names no weeks"
                )
            state.events += 1
            yield RawEvent(
                day_of_week=state.day_of_week,
                timeslot=timeslot,
                duration_slots=cell.col_span,
                subject=subject,
                room=room,
                weeks=weeks,
            )

    def _finish_row(self, state: _WalkState) -> None:
        state.rows_until_day_increment -= 1
        state.row += 1

        if state.rows_until_day_increment == 0 and state.row < len(self.grid):
            state.day_of_week += 1
            if state.day_of_week >= DAYS_PER_WEEK:
                raise SchemaMismatch(
                    f"row {state.row} starts day {state.day_of_week + 1}, but a "
                    f"timetable week has only {DAYS_PER_WEEK} days"
                )
            next_row = self.grid[state.row]
            if not next_row:
                raise MalformedCell(f"row {state.row} has no day label cell")
            state.just_incremented_day = True
            state.rows_until_day_increment = next_row[0].row_span
        else:
            state.just_incremented_day = False
