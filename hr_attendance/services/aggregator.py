from __future__ import annotations

from collections.abc import Iterable

from ..models.attendance import AttendanceSummary
from .classifier import ClassifiedDay, DayKind

"""Reduce one employee's classified days into an AttendanceSummary."""

__all__ = [
    "aggregate_days",
]


def aggregate_days(
    employee_code: str,
    period_key: str,
    days: Iterable[ClassifiedDay],
    employee_name: str | None = None,
) -> AttendanceSummary:
    present = leave = half = working = 0
    records = []
    for day in days:
        records.append(day.record)
        if day.is_working_day:
            working += 1
        if day.kind is DayKind.PRESENT:
            present += 1
        elif day.kind is DayKind.HALF_DAY:
            half += 1
        elif day.kind is DayKind.LEAVE:
            leave += 1
    return AttendanceSummary(
        employee_code=employee_code,
        period_key=period_key,
        days_present=present,
        days_leave=leave,
        half_days=half,
        total_working_days=working,
        daily_records=tuple(records),
        employee_name=employee_name,
    )
