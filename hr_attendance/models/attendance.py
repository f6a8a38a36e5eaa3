from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Attendance domain models for the time-clock import.

DailyAttendanceRecord is one classified day column for one employee;
AttendanceSummary is the per-employee, per-period reduction that gets
persisted by the reconciler (keyed by employee reference + period key).
"""

__all__ = [
    "DailyAttendanceRecord",
    "AttendanceSummary",
    "ParsedSheet",
]


@dataclass(frozen=True)
class DailyAttendanceRecord:
    """One non-empty day column after classification.

    `status` is the final status: a late `P`/`WOP` day is stored as `HD`.
    """
    date: str
    status: str
    in_time: str
    out_time: str
    is_late: bool
    total_hours: str = "00:00"

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "status": self.status,
            "inTime": self.in_time,
            "outTime": self.out_time,
            "isLate": self.is_late,
            "totalHours": self.total_hours,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> DailyAttendanceRecord:
        return DailyAttendanceRecord(
            date=str(data.get("date", "")),
            status=str(data.get("status", "")),
            in_time=str(data.get("inTime", "")),
            out_time=str(data.get("outTime", "")),
            is_late=bool(data.get("isLate", False)),
            total_hours=str(data.get("totalHours") or "00:00"),
        )


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-employee attendance for one period.

    total_working_days excludes week-off (WO) columns while daily_records
    still contains them, so the three counters never have to add up to the
    number of daily records.
    """
    employee_code: str
    period_key: str
    days_present: int
    days_leave: int
    half_days: int
    total_working_days: int
    daily_records: tuple[DailyAttendanceRecord, ...] = ()
    employee_name: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Column values handed to RecordStore.upsert (key columns excluded)."""
        return {
            "employee_code": self.employee_code,
            "days_present": self.days_present,
            "days_leave": self.days_leave,
            "half_days": self.half_days,
            "total_days": self.total_working_days,
            "daily_records": [r.to_dict() for r in self.daily_records],
        }

    @staticmethod
    def from_row(row: dict[str, Any], period_key: str) -> AttendanceSummary:
        """Rebuild a summary from a stored attendance row."""
        records = tuple(
            DailyAttendanceRecord.from_dict(r) for r in (row.get("daily_records") or [])
        )
        return AttendanceSummary(
            employee_code=str(row["employee_code"]),
            period_key=period_key,
            days_present=int(row.get("days_present") or 0),
            days_leave=int(row.get("days_leave") or 0),
            half_days=int(row.get("half_days") or 0),
            total_working_days=int(row.get("total_days") or 0),
            daily_records=records,
        )


@dataclass(frozen=True)
class ParsedSheet:
    """Result of parsing one attendance sheet."""
    day_labels: list[str]
    summaries: list[AttendanceSummary]
    # Codes whose block ended (next code marker / Total) without status+times
    dropped_blocks: list[str] = field(default_factory=list)
