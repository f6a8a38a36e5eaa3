from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Salary computation model.

All monetary fields that leave the calculator (per_day_salary, deductions,
net_salary) are already rounded to whole units; chargeable_leaves is kept
alongside for reporting.
"""

__all__ = [
    "SalaryComputation",
]


@dataclass(frozen=True)
class SalaryComputation:
    employee_code: str
    period_key: str
    base_salary: float
    days_present: int
    days_leave: int
    half_days: int
    chargeable_leaves: int
    per_day_salary: int
    deductions: int
    net_salary: int

    def to_row(self) -> dict[str, Any]:
        """Column values handed to RecordStore.upsert (key columns excluded)."""
        return {
            "employee_code": self.employee_code,
            "base_salary": self.base_salary,
            "days_present": self.days_present,
            "days_leave": self.days_leave,
            "half_days": self.half_days,
            "per_day_salary": self.per_day_salary,
            "deductions": self.deductions,
            "net_salary": self.net_salary,
        }

    def breakdown(self) -> dict[str, Any]:
        """Reported `salary` object of a calculation outcome."""
        return {
            "baseSalary": self.base_salary,
            "halfDays": self.half_days,
            "chargeableLeaves": self.chargeable_leaves,
            "totalDeductions": self.deductions,
            "netSalary": self.net_salary,
        }
