from __future__ import annotations

import logging
import math
from collections.abc import Callable

from ..db.protocols import ATTENDANCE, SALARY, EmployeeRegistry, RecordStore
from ..models.attendance import AttendanceSummary
from ..models.batch_result import (
    EMPLOYEE_NOT_FOUND,
    BatchResult,
    FailureKind,
    OutcomeStatus,
    SalaryOutcome,
)
from ..models.config_models import SalaryRules
from ..models.salary import SalaryComputation

"""Monthly salary deductions derived from stored attendance summaries.

    per_day      = base / 30
    half_day_ded = half_days * per_day * 0.5
    chargeable   = max(0, days_leave - 2)
    leave_ded    = chargeable * per_day
    deductions   = half_day_ded + leave_ded
    net          = base - deductions

Components stay unrounded floats; only per_day, deductions and net are
rounded (half-up, to whole units) when the result is built.
"""

__all__ = [
    "round_half_up",
    "compute_salary",
    "calculate_salaries",
]

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Nearest integer, .5 rounding toward +inf (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def compute_salary(
    employee_code: str,
    period_key: str,
    base_salary: float,
    days_present: int,
    days_leave: int,
    half_days: int,
    rules: SalaryRules | None = None,
) -> SalaryComputation:
    rules = rules or SalaryRules()
    per_day = base_salary / rules.days_divisor
    half_day_deduction = half_days * per_day * rules.half_day_factor
    chargeable_leaves = max(0, days_leave - rules.free_leave_days)
    leave_deduction = chargeable_leaves * per_day
    total_deductions = half_day_deduction + leave_deduction
    net_salary = base_salary - total_deductions
    return SalaryComputation(
        employee_code=employee_code,
        period_key=period_key,
        base_salary=base_salary,
        days_present=days_present,
        days_leave=days_leave,
        half_days=half_days,
        chargeable_leaves=chargeable_leaves,
        per_day_salary=round_half_up(per_day),
        deductions=round_half_up(total_deductions),
        net_salary=round_half_up(net_salary),
    )


def _calculate_one(
    summary: AttendanceSummary,
    registry: EmployeeRegistry,
    store: RecordStore,
    rules: SalaryRules,
) -> SalaryOutcome:
    code = summary.employee_code
    try:
        employee = registry.find_by_code(code)
    except Exception as e:
        logger.warning("employee lookup failed code=%s: %s", code, e)
        return SalaryOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            reason=str(e),
            failure_kind=FailureKind.LOOKUP_ERROR,
        )
    if employee is None:
        return SalaryOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            reason=EMPLOYEE_NOT_FOUND,
            failure_kind=FailureKind.EMPLOYEE_NOT_FOUND,
        )

    salary = compute_salary(
        code,
        summary.period_key,
        employee.base_salary,
        summary.days_present,
        summary.days_leave,
        summary.half_days,
        rules,
    )
    try:
        store.upsert(SALARY, (employee.ref, summary.period_key), salary.to_row())
    except Exception as e:
        logger.warning("salary upsert failed code=%s period=%s: %s", code, summary.period_key, e)
        return SalaryOutcome(
            employee_code=code,
            status=OutcomeStatus.FAILED,
            employee_name=employee.name,
            reason=str(e),
            failure_kind=FailureKind.UPSERT_ERROR,
        )
    return SalaryOutcome(
        employee_code=code, status=OutcomeStatus.SUCCESS, employee_name=employee.name, salary=salary
    )


def calculate_salaries(
    period_key: str,
    registry: EmployeeRegistry,
    store: RecordStore,
    rules: SalaryRules | None = None,
    progress_callback: Callable[[SalaryOutcome], None] | None = None,
) -> BatchResult:
    """Compute and upsert the salary of every employee with attendance in period_key.

    progress_callback works as in reconcile_attendance.

    Raises:
        StoreError: the period's attendance could not be read at all
    """
    rules = rules or SalaryRules()
    rows = store.list_for_period(ATTENDANCE, period_key)
    summaries = [AttendanceSummary.from_row(r, period_key) for r in rows]
    outcomes: list[SalaryOutcome] = []
    for summary in summaries:
        outcome = _calculate_one(summary, registry, store, rules)
        outcomes.append(outcome)
        if progress_callback is not None:
            progress_callback(outcome)
    return BatchResult.from_outcomes(outcomes)
