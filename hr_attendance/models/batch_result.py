from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .salary import SalaryComputation

"""Batch outcome models shared by the attendance import and the salary run.

A batch never aborts on a single bad record: every record yields exactly one
outcome (success or failed) and BatchResult is a pure reduction over them.
"""

__all__ = [
    "OutcomeStatus",
    "RecordOutcome",
    "SalaryOutcome",
    "BatchResult",
    "EMPLOYEE_NOT_FOUND",
    "FailureKind",
]

EMPLOYEE_NOT_FOUND = "Employee not found"


class OutcomeStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


class FailureKind(Enum):
    """Why a record failed; the value is the error-log error_type."""
    EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"
    LOOKUP_ERROR = "LOOKUP_ERROR"
    UPSERT_ERROR = "UPSERT_ERROR"


@dataclass(frozen=True)
class RecordOutcome:
    """Outcome of reconciling one attendance summary."""
    employee_code: str
    status: OutcomeStatus
    reason: str | None = None
    employee_name: str | None = None
    days_present: int | None = None
    days_leave: int | None = None
    half_days: int | None = None
    failure_kind: FailureKind | None = None  # Not part of the reported dict

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "employeeCode": self.employee_code,
            "employeeName": self.employee_name,
            "status": self.status.value,
            "reason": self.reason,
            "daysPresent": self.days_present,
            "daysLeave": self.days_leave,
            "halfDays": self.half_days,
        }
        # Optional keys are omitted rather than emitted as null
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class SalaryOutcome:
    """Outcome of computing and storing one employee's salary."""
    employee_code: str
    status: OutcomeStatus
    employee_name: str | None = None
    reason: str | None = None
    salary: SalaryComputation | None = None
    failure_kind: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "employeeCode": self.employee_code,
            "employeeName": self.employee_name,
            "status": self.status.value,
            "reason": self.reason,
            "salary": self.salary.breakdown() if self.salary is not None else None,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class BatchResult:
    """Aggregated outcome of one batch (one sheet / one period run)."""
    total_processed: int
    successful: int
    failed: int
    results: tuple[Any, ...] = ()  # RecordOutcome | SalaryOutcome, input order

    @staticmethod
    def from_outcomes(outcomes: Iterable[RecordOutcome | SalaryOutcome]) -> BatchResult:
        ordered = tuple(outcomes)
        successful = sum(1 for o in ordered if o.ok)
        return BatchResult(
            total_processed=len(ordered),
            successful=successful,
            failed=len(ordered) - successful,
            results=ordered,
        )

    @property
    def failures(self) -> list[Any]:
        return [o for o in self.results if not o.ok]

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProcessed": self.total_processed,
            "successful": self.successful,
            "failed": self.failed,
            "results": [o.to_dict() for o in self.results],
        }
