"""
The stored program: statements keyed by line number, kept in ascending order.
"""

import bisect
from typing import Iterator, Optional

from tinybasic.basic_datatypes import Statement


class Program:
    """An ordered mapping from line number to Statement.

    Iteration is always in ascending line-number order; it drives both
    LIST and RUN.
    """

    def __init__(self):
        self._lines: dict[int, Statement] = {}
        self._order: list[int] = []

    def put(self, line_number: int, statement: Statement):
        """Inserts a line, replacing any line already stored at that number."""
        if line_number not in self._lines:
            bisect.insort(self._order, line_number)
        self._lines[line_number] = statement

    def get(self, line_number: int) -> Optional[Statement]:
        return self._lines.get(line_number)

    def delete(self, line_number: int) -> bool:
        """Removes a line. Returns False if there was nothing to remove."""
        if line_number not in self._lines:
            return False
        del self._lines[line_number]
        self._order.remove(line_number)
        return True

    def ascending_lines(self) -> list[tuple[int, Statement]]:
        return [(n, self._lines[n]) for n in self._order]

    def lines_in_range(self, first: int, last: int) -> list[tuple[int, Statement]]:
        """Stored lines with first <= number <= last."""
        lo = bisect.bisect_left(self._order, first)
        hi = bisect.bisect_right(self._order, last)
        return [(n, self._lines[n]) for n in self._order[lo:hi]]

    def first_line(self) -> Optional[int]:
        return self._order[0] if self._order else None

    def next_line_after(self, line_number: int) -> Optional[int]:
        """The lowest stored line number greater than line_number, if any."""
        i = bisect.bisect_right(self._order, line_number)
        return self._order[i] if i < len(self._order) else None

    def __contains__(self, line_number) -> bool:
        return line_number in self._lines

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[tuple[int, Statement]]:
        return iter(self.ascending_lines())

    def __repr__(self) -> str:
        return f"<Program lines=[{', '.join(map(str, self._order))}]>"
