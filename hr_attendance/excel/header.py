from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

"""Date-header detection for the time-clock export.

The export has no declared schema; the only anchor is the row that carries
the day labels ("1 St", "2 S", ...). How that row is recognised is format
specific, so it sits behind the HeaderLocator protocol and the rest of the
parser only consumes the located index.
"""

__all__ = [
    "DAY_DATA_OFFSET",
    "HEADER_SCAN_ROWS",
    "SheetHeaderError",
    "HeaderLocator",
    "SubstringHeaderLocator",
    "locate_header",
    "day_labels",
]

DAY_DATA_OFFSET = 2  # Day columns start at the 3rd cell of header/status/time rows
HEADER_SCAN_ROWS = 20


class SheetHeaderError(Exception):
    """Raised when no date-header row can be found; fatal for the import."""


@runtime_checkable
class HeaderLocator(Protocol):
    """Finds the date-header row of a sheet grid."""

    def locate(self, grid: Sequence[Sequence[str]]) -> int | None: ...


def _cell(row: Sequence[str], index: int) -> str:
    return row[index] if index < len(row) else ""


class SubstringHeaderLocator:
    """Header fingerprint of the vendor export this tool targets.

    First row within `scan_rows` whose cell at offset 2 contains "St" and
    whose cell at offset 3 contains "S" (case-sensitive).
    """

    def __init__(
        self,
        scan_rows: int = HEADER_SCAN_ROWS,
        first_marker: str = "St",
        second_marker: str = "S",
    ) -> None:
        self.scan_rows = scan_rows
        self.first_marker = first_marker
        self.second_marker = second_marker

    def locate(self, grid: Sequence[Sequence[str]]) -> int | None:
        for idx in range(min(self.scan_rows, len(grid))):
            row = grid[idx]
            first = _cell(row, DAY_DATA_OFFSET)
            second = _cell(row, DAY_DATA_OFFSET + 1)
            if first and self.first_marker in first and self.second_marker in second:
                return idx
        return None


def locate_header(
    grid: Sequence[Sequence[str]], locator: HeaderLocator | None = None
) -> int:
    """Return the index of the date-header row.

    Raises:
        SheetHeaderError: no row matches the locator's fingerprint
    """
    locator = locator or SubstringHeaderLocator()
    idx = locator.locate(grid)
    if idx is None:
        raise SheetHeaderError("date header row not found")
    return idx


def day_labels(header_row: Sequence[str]) -> list[str]:
    """Day labels from offset 2 onward.

    The reader pads every row to the widest row of the sheet, so trailing
    blank cells are not day columns.
    """
    labels = [str(c).strip() for c in header_row[DAY_DATA_OFFSET:]]
    while labels and not labels[-1]:
        labels.pop()
    return labels
