"""Teaching-week lists such as ``"6,9-15"``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from .errors import EmptyRange, OutOfBoundsWeek, ValidationError

FIRST_WEEK = 1
LAST_WEEK = 52

_TOKEN = re.compile(r"^(\d+)(?:-(\d+))?$")


@dataclass(frozen=True)
class WeekRange:
    """An immutable set of teaching weeks, each in ``1..52``.

    Build one with :meth:`parse`::

        >>> weeks = WeekRange.parse("6, 9-15")
        >>> 6 in weeks, 7 in weeks, weeks.min(), weeks.max()
        (True, False, 6, 15)

    :param weeks: The member week numbers.
    """

    weeks: frozenset[int]

    def __post_init__(self) -> None:
        bad = sorted(w for w in self.weeks if not FIRST_WEEK <= w <= LAST_WEEK)
        if bad:
            raise OutOfBoundsWeek(
                f"week {bad[0]} is outside {FIRST_WEEK}-{LAST_WEEK}"
            )

    @classmethod
    def parse(cls, text: str) -> WeekRange:
        """Parse a comma-separated list of weeks and ``low-high`` spans.

        Whitespace anywhere in *text* is ignored. A span whose low end is
        above its high end contributes no weeks.

        :param text: The week-list, e.g. ``"1-5, 7"``.
        :returns: The parsed range.
        :raises ValidationError: If a token is neither ``n`` nor ``a-b``.
        :raises OutOfBoundsWeek: If any week falls outside 1-52.
        """
        compact = re.sub(r"\s+", "", text)
        weeks: set[int] = set()
        for token in compact.split(","):
            if not token:
                continue
            m = _TOKEN.match(token)
            if not m:
                raise ValidationError(f"bad week-list token {token!r} in {text!r}")
            low = int(m.group(1))
            high = int(m.group(2)) if m.group(2) is not None else low
            if low <= high and (low < FIRST_WEEK or high > LAST_WEEK):
                raise OutOfBoundsWeek(
                    f"weeks {token!r} fall outside {FIRST_WEEK}-{LAST_WEEK}"
                )
            weeks.update(range(low, high + 1))
        return cls(frozenset(weeks))

    def contains(self, week: int) -> bool:
        return week in self.weeks

    __contains__ = contains

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.weeks))

    def __len__(self) -> int:
        return len(self.weeks)

    def min(self) -> int:
        """Return the first week.

        :raises EmptyRange: If the range has no weeks.
        """
        if not self.weeks:
            raise EmptyRange("week range is empty")
        return min(self.weeks)

    def max(self) -> int:
        """Return the last week.

        :raises EmptyRange: If the range has no weeks.
        """
        if not self.weeks:
            raise EmptyRange("week range is empty")
        return max(self.weeks)

    def __str__(self) -> str:
        parts = []
        run: list[int] = []
        for week in self:
            if run and week != run[-1] + 1:
                parts.append(_format_run(run))
                run = []
            run.append(week)
        if run:
            parts.append(_format_run(run))
        return ",".join(parts)


def _format_run(run: list[int]) -> str:
    return str(run[0]) if len(run) == 1 else f"{run[0]}-{run[-1]}"
