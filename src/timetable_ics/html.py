"""Read a timetable grid out of an HTML page.

Timetable pages carry several layout tables; the timetable itself is the one
with the most cells. Within it, each class cell wraps subject, room and
week-list in one ``<font>`` element each.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from .errors import NoTablesFound
from .grid import Cell

_CELL_TAGS = ["td", "th"]


def _rows(table: Tag) -> list[Tag]:
    """Rows belonging to *table* itself, skipping those of nested tables."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def _cells(row: Tag) -> list[Tag]:
    return row.find_all(_CELL_TAGS, recursive=False)


def _span(cell: Tag, attr: str) -> int:
    try:
        span = int(cell.get(attr, 1))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return span if span > 0 else 1


def count_cells(table: Tag) -> int:
    """Return the number of cells in *table*, excluding nested tables."""
    return sum(len(_cells(row)) for row in _rows(table))


def select_table(soup: BeautifulSoup) -> Tag:
    """Return the table with the most cells.

    :raises NoTablesFound: If the document has no ``<table>``.
    """
    tables = soup.find_all("table")
    if not tables:
        raise NoTablesFound("page contains no <table>")
    # max() keeps the first of equally large tables
    return max(tables, key=count_cells)


def cell_lines(cell: Tag) -> tuple[str, ...]:
    """Return the text lines of a cell.

    ``<font>`` elements give one line each, blank ones included, so an empty
    room still holds its place. A cell whose fonts are all blank is a free
    period. A cell without fonts falls back to its non-blank text strings.
    """
    fonts = cell.find_all("font")
    if not fonts:
        return tuple(cell.stripped_strings)
    texts = tuple(f.get_text(" ", True) for f in fonts)  # type: ignore[call-overload]
    return texts if any(texts) else ()


def grid_from_table(table: Tag) -> list[list[Cell]]:
    """Convert a ``<table>`` element into rows of :class:`~timetable_ics.grid.Cell`."""
    return [
        [
            Cell(
                lines=cell_lines(cell),
                row_span=_span(cell, "rowspan"),
                col_span=_span(cell, "colspan"),
            )
            for cell in _cells(row)
        ]
        for row in _rows(table)
    ]


def grid_from_html(html: str) -> list[list[Cell]]:
    """Parse *html* and return the grid of its largest table.

    :raises NoTablesFound: If the page has no tables.
    """
    soup = BeautifulSoup(html, "html.parser")
    return grid_from_table(select_table(soup))
