from __future__ import annotations

import pytest

from conftest import header_row
from hr_attendance.excel.header import (
    HeaderLocator,
    SheetHeaderError,
    SubstringHeaderLocator,
    day_labels,
    locate_header,
)


def test_locates_first_matching_row():
    grid = [["Report"], ["Jan 2024"], header_row(), header_row()]
    assert locate_header(grid) == 2


def test_match_is_case_sensitive():
    grid = [["Days", "", "1 st", "2 s"]]
    with pytest.raises(SheetHeaderError):
        locate_header(grid)


def test_header_beyond_scan_window_is_not_found():
    grid = [[""] for _ in range(20)] + [header_row()]
    with pytest.raises(SheetHeaderError, match="date header row not found"):
        locate_header(grid)
    # A wider window finds it
    assert locate_header(grid, SubstringHeaderLocator(scan_rows=21)) == 20


def test_short_rows_do_not_match():
    grid = [["Days", "", "1 St"], header_row()]
    assert locate_header(grid) == 1


def test_empty_grid():
    with pytest.raises(SheetHeaderError):
        locate_header([])


def test_custom_locator_satisfies_protocol():
    class FixedRow:
        def locate(self, grid):
            return 0

    locator = FixedRow()
    assert isinstance(locator, HeaderLocator)
    assert locate_header([["anything"]], locator) == 0


def test_day_labels_are_trimmed_from_offset_two():
    assert day_labels(["Days", "x", " 1 St ", "2 S"]) == ["1 St", "2 S"]


def test_day_labels_drop_padding_but_keep_inner_blanks():
    assert day_labels(["Days", "", "1 St", "", "3 M", "", "", ""]) == ["1 St", "", "3 M"]
    assert day_labels(["Days", "", "", ""]) == []
