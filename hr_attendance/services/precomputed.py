from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models.attendance import AttendanceSummary
from ..models.employee import coerce_count

"""Pre-aggregated attendance upload.

Some sites export counters only. Such a file is a JSON list of

    {"employeeId": "E001", "daysPresent": 20, "daysLeave": 2,
     "halfDays": 1, "totalDays": 23}

or the same list under an "attendanceData" key. halfDays defaults to 0.
The resulting summaries carry no daily records and go through the same
reconciler as a parsed workbook.
"""

__all__ = [
    "RecordsFormatError",
    "load_summary_records",
    "summaries_from_records",
]


class RecordsFormatError(Exception):
    """Raised when the JSON payload is not a list of records."""


def summaries_from_records(records: Any, period_key: str) -> list[AttendanceSummary]:
    if isinstance(records, dict):
        records = records.get("attendanceData")
    if not isinstance(records, list):
        raise RecordsFormatError("Invalid data format: expected a list of attendance records")
    summaries: list[AttendanceSummary] = []
    for idx, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise RecordsFormatError(f"Invalid data format: record {idx} is not an object")
        summaries.append(
            AttendanceSummary(
                employee_code=str(rec.get("employeeId") or "").strip(),
                period_key=period_key,
                days_present=coerce_count(rec.get("daysPresent")),
                days_leave=coerce_count(rec.get("daysLeave")),
                half_days=coerce_count(rec.get("halfDays")),
                total_working_days=coerce_count(rec.get("totalDays")),
            )
        )
    return summaries


def load_summary_records(path: Path, period_key: str) -> list[AttendanceSummary]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RecordsFormatError(f"Invalid data format: {e}") from e
    return summaries_from_records(data, period_key)
