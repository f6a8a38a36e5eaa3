from __future__ import annotations

import io
import math
from collections.abc import Iterable
from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

"""Workbook reader for the time-clock attendance export.

Only the first sheet is read. The export has no usable header row for
pandas (employee blocks are stacked vertically, several marker rows per
employee), so the sheet is read raw (header=None) and flattened into a
row-major grid of strings with "" for blank cells. Structure recovery is
left to excel.header / excel.blocks.
"""

__all__ = [
    "WorkbookReadError",
    "read_first_sheet",
    "to_grid",
    "cell_text",
    "format_duration",
]

Grid = list[list[str]]


class WorkbookReadError(Exception):
    """Raised when the workbook cannot be opened or has no sheet."""


def format_duration(value: timedelta) -> str:
    """Duration cells ([h]:mm) as HH:MM; hours may exceed 24."""
    seconds = value.total_seconds()
    sign = "-" if seconds < 0 else ""
    hours, mins = divmod(int(abs(seconds)) // 60, 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def cell_text(value: Any) -> str:
    """Render one raw cell as the string the parser works on.

    Excel time cells come back from openpyxl as datetime.time (or as a
    datetime on the 1899/1900 epoch), duration cells as timedelta; both are
    rendered HH:MM so they read the same as text-formatted time cells.
    """
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, time):
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, datetime):
        if value.year <= 1900:
            return f"{value.hour:02d}:{value.minute:02d}"
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    return str(value)


def to_grid(rows: Iterable[Iterable[Any]]) -> Grid:
    """Normalize arbitrary row data into a string grid."""
    return [[cell_text(v) for v in row] for row in rows]


def read_first_sheet(source: Path | str | bytes | BinaryIO) -> Grid:
    """Read the first sheet of a workbook as a string grid.

    Parameters
    ----------
    source: file path, raw bytes of an uploaded workbook, or a binary stream
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        xls = pd.ExcelFile(source)
    except Exception as e:
        raise WorkbookReadError(f"cannot open workbook: {e}") from e
    if not xls.sheet_names:
        raise WorkbookReadError("workbook has no sheets")
    first = xls.sheet_names[0]
    # dtype=object keeps time/datetime cells intact for cell_text; keep_default_na=False
    # stops strings such as "NA" from being turned into NaN
    df = xls.parse(first, header=None, dtype=object, keep_default_na=False)
    return to_grid(df.itertuples(index=False, name=None))
