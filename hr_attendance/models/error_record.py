from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the per-record failure log.

Every failed outcome of an import or salary run is written as one JSON Lines
record. employee_code is "" for run-level failures where no single employee
can be blamed (missing header, unreadable workbook).
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Workbook / JSON file name, or "calculate" for salary runs
        period: Period key the run was started for
        employee_code: Business code of the failed record ("" for run-level)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable reason
    """
    timestamp: str
    source: str
    period: str
    employee_code: str
    error_type: str
    message: str

    @staticmethod
    def create(
        source: str, period: str, employee_code: str, error_type: str, message: str
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            period=period,
            employee_code=employee_code,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
