"""Collaborator interfaces consumed by the import / payroll core.

Structural typing only: the PostgreSQL implementations and the dict-backed
fakes used in tests both satisfy these without inheritance.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ..models.employee import Employee

__all__ = [
    "ATTENDANCE",
    "SALARY",
    "RecordKey",
    "StoreError",
    "EmployeeRegistry",
    "RecordStore",
]

# Entity types accepted by RecordStore
ATTENDANCE = "attendance"
SALARY = "salary"

RecordKey = tuple[Any, str]  # (employee ref, period key)


class StoreError(Exception):
    """Raised by a RecordStore when a single upsert / read fails."""


@runtime_checkable
class EmployeeRegistry(Protocol):
    """Lookup of registered employees by business code."""

    def find_by_code(self, code: str) -> Employee | None: ...


@runtime_checkable
class RecordStore(Protocol):
    """Per-(employee, period) record storage with replace-on-conflict upsert."""

    def upsert(self, entity: str, key: RecordKey, value: Mapping[str, Any]) -> None: ...

    def list_for_period(self, entity: str, period_key: str) -> list[dict[str, Any]]: ...
