from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from ..models.attendance import DailyAttendanceRecord
from ..models.config_models import AttendanceRules

"""Day classification for one employee block.

Each day column (status / in-time / out-time / total, aligned with the
header's day labels) becomes one DailyAttendanceRecord plus the counter it
feeds. Status codes are the literal codes of the time-clock export:

    WO   week off      - recorded, not a working day
    P    present       - present, or HD when the in-time is late
    WOP  present on WO - same as P
    A    absent        - leave
    *    anything else - working day, no counter
"""

__all__ = [
    "DayKind",
    "ClassifiedDay",
    "parse_clock_time",
    "is_late_arrival",
    "classify_day",
    "classify_days",
]

WEEK_OFF = "WO"
PRESENT_CODES = frozenset({"P", "WOP"})
ABSENT = "A"
HALF_DAY = "HD"
DEFAULT_TOTAL_HOURS = "00:00"


class DayKind(Enum):
    PRESENT = "present"
    HALF_DAY = "half_day"
    LEAVE = "leave"
    WEEK_OFF = "week_off"
    OTHER = "other"


@dataclass(frozen=True)
class ClassifiedDay:
    record: DailyAttendanceRecord
    kind: DayKind

    @property
    def is_working_day(self) -> bool:
        return self.kind is not DayKind.WEEK_OFF


def parse_clock_time(text: str) -> tuple[int, int] | None:
    """Parse "HH:MM" (trailing ":SS" tolerated). None when malformed."""
    parts = text.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def is_late_arrival(in_time: str, rules: AttendanceRules | None = None) -> bool:
    """True when in_time is strictly after the late cut-off (09:30 by default).

    Empty or malformed times are never late.
    """
    if not in_time or not in_time.strip():
        return False
    parsed = parse_clock_time(in_time)
    if parsed is None:
        return False
    rules = rules or AttendanceRules()
    hour, minute = parsed
    if hour > rules.late_after_hour:
        return True
    return hour == rules.late_after_hour and minute > rules.late_after_minute


def classify_day(
    date_label: str,
    status: str,
    in_time: str,
    out_time: str,
    total: str,
    rules: AttendanceRules | None = None,
) -> ClassifiedDay | None:
    """Classify one day column; None when the status cell is empty."""
    status = status.strip()
    if not status:
        return None
    in_time = in_time.strip()
    late = is_late_arrival(in_time, rules)

    final_status = status
    if status == WEEK_OFF:
        kind = DayKind.WEEK_OFF
    elif status in PRESENT_CODES:
        if late:
            final_status = HALF_DAY
            kind = DayKind.HALF_DAY
        else:
            kind = DayKind.PRESENT
    elif status == ABSENT:
        kind = DayKind.LEAVE
    else:
        kind = DayKind.OTHER

    record = DailyAttendanceRecord(
        date=date_label.strip(),
        status=final_status,
        in_time=in_time,
        out_time=out_time.strip(),
        is_late=late,
        total_hours=total.strip() or DEFAULT_TOTAL_HOURS,
    )
    return ClassifiedDay(record=record, kind=kind)


def _at(row: Sequence[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def classify_days(
    day_labels: Sequence[str],
    status_row: Sequence[str],
    in_row: Sequence[str],
    out_row: Sequence[str],
    total_row: Sequence[str],
    rules: AttendanceRules | None = None,
) -> list[ClassifiedDay]:
    """Classify every day column of one block, in column order.

    The header's label count is the column count; shorter rows read as
    blank past their end.
    """
    days: list[ClassifiedDay] = []
    for j, label in enumerate(day_labels):
        day = classify_day(
            label,
            _at(status_row, j),
            _at(in_row, j),
            _at(out_row, j),
            _at(total_row, j),
            rules,
        )
        if day is not None:
            days.append(day)
    return days
