from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..db.protocols import ATTENDANCE, EmployeeRegistry, RecordStore
from ..models.attendance import AttendanceSummary
from ..models.batch_result import (
    EMPLOYEE_NOT_FOUND,
    BatchResult,
    FailureKind,
    OutcomeStatus,
    RecordOutcome,
)

"""Match parsed attendance summaries to registered employees and store them.

One sheet is one period. Each summary is handled on its own: an unknown
employee code or a failed write produces a `failed` outcome for that record
only and the batch carries on.
"""

__all__ = [
    "reconcile_summary",
    "reconcile_attendance",
]

logger = logging.getLogger(__name__)


def reconcile_summary(
    summary: AttendanceSummary,
    period_key: str,
    registry: EmployeeRegistry,
    store: RecordStore,
) -> RecordOutcome:
    code = summary.employee_code
    try:
        employee = registry.find_by_code(code)
    except Exception as e:
        logger.warning("employee lookup failed code=%s: %s", code, e)
        return RecordOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            reason=str(e),
            failure_kind=FailureKind.LOOKUP_ERROR,
        )
    if employee is None:
        return RecordOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            reason=EMPLOYEE_NOT_FOUND,
            failure_kind=FailureKind.EMPLOYEE_NOT_FOUND,
        )

    try:
        store.upsert(ATTENDANCE, (employee.ref, period_key), summary.to_row())
    except Exception as e:
        logger.warning("attendance upsert failed code=%s period=%s: %s", code, period_key, e)
        return RecordOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            reason=str(e),
            failure_kind=FailureKind.UPSERT_ERROR,
        )

    return RecordOutcome(
        employee_code=code,
        status=OutcomeStatus.SUCCESS,
        employee_name=summary.employee_name or employee.name,
        days_present=summary.days_present,
        days_leave=summary.days_leave,
        half_days=summary.half_days,
    )


def reconcile_attendance(
    summaries: Iterable[AttendanceSummary],
    period_key: str,
    registry: EmployeeRegistry,
    store: RecordStore,
    progress_callback: Callable[[RecordOutcome], None] | None = None,
) -> BatchResult:
    """Upsert every summary keyed by (employee ref, period_key).

    Returns the per-record outcomes in input order together with
    success / failure totals. progress_callback, when given, is called once
    per record right after its outcome is known.
    """
    outcomes: list[RecordOutcome] = []
    for summary in summaries:
        outcome = reconcile_summary(summary, period_key, registry, store)
        outcomes.append(outcome)
        if progress_callback is not None:
            progress_callback(outcome)
    return BatchResult.from_outcomes(outcomes)
