from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..models.employee import Employee
from .protocols import ATTENDANCE, SALARY, RecordKey, StoreError

"""Dict-backed registry and record store for tests and dry runs."""

__all__ = [
    "MemoryEmployeeRegistry",
    "MemoryRecordStore",
]


class MemoryEmployeeRegistry:
    """Dict-backed EmployeeRegistry."""

    def __init__(self, employees: Iterable[Employee] = ()) -> None:
        self._by_code: dict[str, Employee] = {e.code: e for e in employees}

    def add(self, employee: Employee) -> None:
        self._by_code[employee.code] = employee

    def find_by_code(self, code: str) -> Employee | None:
        return self._by_code.get(code)


class MemoryRecordStore:
    """Dict-backed RecordStore.

    Rows are keyed by (employee ref, period key) per entity, so a second
    upsert for the same key replaces the first. Status columns mirror the
    PostgreSQL defaults: set on first insert, kept on replace.
    """

    _STATUS_DEFAULTS = {ATTENDANCE: ("verified_status", "pending"), SALARY: ("status", "pending")}

    def __init__(self) -> None:
        self._rows: dict[str, dict[RecordKey, dict[str, Any]]] = {ATTENDANCE: {}, SALARY: {}}

    def upsert(self, entity: str, key: RecordKey, value: Mapping[str, Any]) -> None:
        if entity not in self._rows:
            raise StoreError(f"unknown entity: {entity}")
        table = self._rows[entity]
        status_col, status_default = self._STATUS_DEFAULTS[entity]
        previous = table.get(key)
        row = dict(value)
        row["employee_ref"], row["period_key"] = key
        row[status_col] = previous[status_col] if previous else status_default
        table[key] = row

    def list_for_period(self, entity: str, period_key: str) -> list[dict[str, Any]]:
        if entity not in self._rows:
            raise StoreError(f"unknown entity: {entity}")
        return [dict(r) for (_, p), r in self._rows[entity].items() if p == period_key]

    def get(self, entity: str, key: RecordKey) -> dict[str, Any] | None:
        row = self._rows.get(entity, {}).get(key)
        return dict(row) if row is not None else None

    def count(self, entity: str) -> int:
        return len(self._rows.get(entity, {}))
