from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..models.attendance import AttendanceSummary, ParsedSheet
from ..models.config_models import AttendanceRules
from ..services.aggregator import aggregate_days
from ..services.classifier import classify_days
from .header import DAY_DATA_OFFSET, HeaderLocator, SubstringHeaderLocator, day_labels, locate_header

"""Employee block assembly for the time-clock export.

Layout handled (one block per employee, blocks stacked vertically; blank
and metadata rows may appear anywhere in between):

    Emp. Code: |   |   | E001 | ... | (offset 12) name
    Status     |   | P | P    | WO  | ...
    InTime     |   | 09:12 | 09:45 | ...
    OutTime    |   | 18:01 | 18:30 | ...
    Total      |   | 08:49 | 08:45 | ...

The first cell drives a small state machine. All state lives on one
BlockAssembler instance, so two sheets never share a half-built block.
"""

__all__ = [
    "BlockState",
    "BlockAssembler",
    "parse_attendance_grid",
    "CODE_MARKER",
    "STATUS_MARKER",
    "IN_TIME_MARKER",
    "OUT_TIME_MARKER",
    "TOTAL_MARKER",
]

logger = logging.getLogger(__name__)

CODE_MARKER = "Emp. Code:"
STATUS_MARKER = "Status"
IN_TIME_MARKER = "InTime"
OUT_TIME_MARKER = "OutTime"
TOTAL_MARKER = "Total"

CODE_OFFSET = 3
NAME_OFFSET = 12


class BlockState(Enum):
    IDLE = "idle"
    HAVE_CODE = "have_code"
    HAVE_STATUS = "have_status"
    HAVE_STATUS_AND_TIMES = "have_status_and_times"


@dataclass
class _OpenBlock:
    code: str
    name: str
    status: list[str] | None = None
    in_times: list[str] | None = None
    out_times: list[str] | None = None

    @property
    def state(self) -> BlockState:
        if self.status is None:
            return BlockState.HAVE_CODE
        if self.in_times is not None and self.out_times is not None:
            return BlockState.HAVE_STATUS_AND_TIMES
        return BlockState.HAVE_STATUS


def _cell(row: Sequence[str], index: int) -> str:
    return str(row[index]) if index < len(row) else ""


class BlockAssembler:
    """Row-by-row state machine emitting one AttendanceSummary per complete block.

    A block is complete when Status, InTime and OutTime were all seen before
    its Total row. Incomplete blocks (Total too early, next Emp. Code row, or
    end of sheet) are dropped without emission; their codes are collected in
    `dropped` so callers can log them.
    """

    def __init__(
        self,
        day_labels: Sequence[str],
        period_key: str,
        rules: AttendanceRules | None = None,
    ) -> None:
        self.day_labels = list(day_labels)
        self.period_key = period_key
        self.rules = rules or AttendanceRules()
        self.dropped: list[str] = []
        self._block: _OpenBlock | None = None

    @property
    def state(self) -> BlockState:
        return self._block.state if self._block is not None else BlockState.IDLE

    def _drop_open_block(self) -> None:
        if self._block is not None:
            self.dropped.append(self._block.code)
        self._block = None

    def feed(self, row: Sequence[str]) -> AttendanceSummary | None:
        """Consume one grid row; returns a summary when a block closes."""
        marker = _cell(row, 0)

        if marker == CODE_MARKER:
            code = _cell(row, CODE_OFFSET).strip()
            if not code:
                return None
            self._drop_open_block()
            name = _cell(row, NAME_OFFSET).strip() or code
            self._block = _OpenBlock(code=code, name=name)
            return None

        block = self._block
        if block is None:
            return None

        if marker == STATUS_MARKER:
            block.status = list(row[DAY_DATA_OFFSET:])
        elif marker == IN_TIME_MARKER and block.status is not None:
            block.in_times = list(row[DAY_DATA_OFFSET:])
        elif marker == OUT_TIME_MARKER and block.status is not None:
            block.out_times = list(row[DAY_DATA_OFFSET:])
        elif marker == TOTAL_MARKER:
            if block.state is not BlockState.HAVE_STATUS_AND_TIMES:
                self._drop_open_block()
                return None
            self._block = None
            days = classify_days(
                self.day_labels,
                block.status or [],
                block.in_times or [],
                block.out_times or [],
                list(row[DAY_DATA_OFFSET:]),
                self.rules,
            )
            return aggregate_days(block.code, self.period_key, days, employee_name=block.name)
        return None

    def close(self) -> None:
        """End of sheet: a block still open was never completed."""
        self._drop_open_block()


def parse_attendance_grid(
    grid: Sequence[Sequence[str]],
    period_key: str,
    locator: HeaderLocator | None = None,
    rules: AttendanceRules | None = None,
) -> ParsedSheet:
    """Parse a full sheet grid into per-employee summaries.

    Raises:
        SheetHeaderError: the date header row was not found
    """
    rules = rules or AttendanceRules()
    locator = locator or SubstringHeaderLocator(scan_rows=rules.header_scan_rows)
    header_idx = locate_header(grid, locator)
    labels = day_labels(grid[header_idx])

    assembler = BlockAssembler(labels, period_key, rules)
    summaries: list[AttendanceSummary] = []
    for row in grid:
        if not row:
            continue
        summary = assembler.feed(row)
        if summary is not None:
            summaries.append(summary)
    assembler.close()

    for code in assembler.dropped:
        logger.warning("incomplete employee block dropped code=%s", code)
    logger.debug(
        "parsed sheet header_row=%d day_columns=%d employees=%d dropped=%d",
        header_idx,
        len(labels),
        len(summaries),
        len(assembler.dropped),
    )
    return ParsedSheet(day_labels=labels, summaries=summaries, dropped_blocks=list(assembler.dropped))
