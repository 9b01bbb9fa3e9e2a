"""Error hierarchy for timetable conversion.

Every error here is a structural problem with the input timetable, never a
transient one, so none of them is retried. Callers that only care whether a
conversion worked can catch :class:`TimetableError`.
"""


class TimetableError(Exception):
    """Base exception for all timetable conversion errors."""

    pass


class ValidationError(TimetableError):
    """A cell, week-list or event could not be turned into a valid value."""

    pass


class MalformedCell(ValidationError):
    """A populated cell does not hold exactly subject, room and week-list."""

    pass


class OutOfBoundsWeek(ValidationError):
    """A week-list names a week outside 1-52."""

    pass


class EmptyRange(ValidationError):
    """A week-list parsed to no weeks at all."""

    pass


class TableError(TimetableError):
    """The selected table does not have the shape of a timetable."""

    pass


class TableTooSmall(TableError):
    """Fewer than two rows, or fewer than two columns in the widest row."""

    pass


class SchemaMismatch(TableError):
    """The day grouping describes more days than a Monday-Friday week."""

    pass


class NoTablesFound(TableError):
    """The page holds no ``<table>`` to read a timetable from."""

    pass
