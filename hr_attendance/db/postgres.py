from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2.extras import Json

from ..models.employee import Employee, coerce_amount
from .protocols import ATTENDANCE, SALARY, RecordKey, StoreError

"""PostgreSQL registry / record store on top of a psycopg2 cursor.

Transaction boundaries belong to the caller (the CLI opens the connection
and commits once per run). Every statement issued here runs inside its
own SAVEPOINT so that one failing record rolls back only itself and the
rest of the batch can still commit.

Upsert uses INSERT ... ON CONFLICT (employee_id, period_key) DO UPDATE; the
UNIQUE constraint on that pair is what makes a re-import replace instead of
accumulate. Status columns (verified_status / status) are not in the update
set, so a re-import keeps a record's review state.
"""

__all__ = [
    "SCHEMA_DDL",
    "ensure_schema",
    "PostgresEmployeeRegistry",
    "PostgresRecordStore",
]

logger = logging.getLogger(__name__)

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS employees (
    id SERIAL PRIMARY KEY,
    employee_code TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    base_salary NUMERIC(12, 2) NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS attendance_summaries (
    id SERIAL PRIMARY KEY,
    employee_id INTEGER NOT NULL REFERENCES employees(id),
    period_key TEXT NOT NULL,
    employee_code TEXT NOT NULL,
    days_present INTEGER NOT NULL,
    days_leave INTEGER NOT NULL,
    half_days INTEGER NOT NULL DEFAULT 0,
    total_days INTEGER NOT NULL,
    daily_records JSONB NOT NULL DEFAULT '[]'::jsonb,
    verified_status TEXT NOT NULL DEFAULT 'pending',
    uploaded_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    UNIQUE (employee_id, period_key)
);
CREATE TABLE IF NOT EXISTS salaries (
    id SERIAL PRIMARY KEY,
    employee_id INTEGER NOT NULL REFERENCES employees(id),
    period_key TEXT NOT NULL,
    employee_code TEXT NOT NULL,
    base_salary NUMERIC(12, 2) NOT NULL,
    days_present INTEGER NOT NULL,
    days_leave INTEGER NOT NULL,
    half_days INTEGER NOT NULL DEFAULT 0,
    per_day_salary INTEGER NOT NULL,
    deductions INTEGER NOT NULL DEFAULT 0,
    net_salary INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    UNIQUE (employee_id, period_key)
);
"""

# entity -> (table, writable columns)
_TABLES: dict[str, tuple[str, tuple[str, ...]]] = {
    ATTENDANCE: (
        "attendance_summaries",
        ("employee_code", "days_present", "days_leave", "half_days", "total_days", "daily_records"),
    ),
    SALARY: (
        "salaries",
        (
            "employee_code",
            "base_salary",
            "days_present",
            "days_leave",
            "half_days",
            "per_day_salary",
            "deductions",
            "net_salary",
        ),
    ),
}
_JSON_COLUMNS = {"daily_records"}


def ensure_schema(cursor: Any) -> None:
    """Create the three tables if they do not exist yet."""
    cursor.execute(SCHEMA_DDL)


@contextmanager
def _savepoint(cursor: Any, name: str = "record_op") -> Iterator[None]:
    cursor.execute(f"SAVEPOINT {name}")
    try:
        yield
    except Exception:
        cursor.execute(f"ROLLBACK TO SAVEPOINT {name}")
        raise
    else:
        cursor.execute(f"RELEASE SAVEPOINT {name}")


class PostgresEmployeeRegistry:
    """EmployeeRegistry reading the `employees` table."""

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor

    def find_by_code(self, code: str) -> Employee | None:
        with _savepoint(self.cursor, "employee_lookup"):
            self.cursor.execute(
                "SELECT id, employee_code, name, base_salary FROM employees WHERE employee_code = %s",
                (code,),
            )
            row = self.cursor.fetchone()
        if row is None:
            return None
        return Employee(ref=row[0], code=str(row[1]), name=str(row[2]), base_salary=coerce_amount(row[3]))


class PostgresRecordStore:
    """RecordStore writing `attendance_summaries` / `salaries`."""

    def __init__(self, cursor: Any) -> None:
        self.cursor = cursor

    @staticmethod
    def _table(entity: str) -> tuple[str, tuple[str, ...]]:
        try:
            return _TABLES[entity]
        except KeyError:
            raise StoreError(f"unknown entity: {entity}") from None

    def upsert(self, entity: str, key: RecordKey, value: Mapping[str, Any]) -> None:
        table, columns = self._table(entity)
        present = [c for c in columns if c in value]
        params: list[Any] = list(key)
        for col in present:
            v = value[col]
            params.append(Json(v) if col in _JSON_COLUMNS else v)

        cols_sql = ", ".join(["employee_id", "period_key", *present])
        placeholders = ", ".join(["%s"] * (len(present) + 2))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in present)
        sql = (
            f"INSERT INTO {table} ({cols_sql}) VALUES ({placeholders}) "
            f"ON CONFLICT (employee_id, period_key) DO UPDATE SET {updates}"
        )
        try:
            with _savepoint(self.cursor):
                self.cursor.execute(sql, params)
        except psycopg2.Error as e:
            raise StoreError(str(e).strip() or type(e).__name__) from e

    def list_for_period(self, entity: str, period_key: str) -> list[dict[str, Any]]:
        table, columns = self._table(entity)
        cols_sql = ", ".join(["employee_id", "period_key", *columns])
        try:
            with _savepoint(self.cursor):
                self.cursor.execute(
                    f"SELECT {cols_sql} FROM {table} WHERE period_key = %s ORDER BY employee_code",
                    (period_key,),
                )
                rows = self.cursor.fetchall()
        except psycopg2.Error as e:
            raise StoreError(str(e).strip() or type(e).__name__) from e
        names = ["employee_ref", "period_key", *columns]
        result = [dict(zip(names, r, strict=False)) for r in rows]
        logger.debug("loaded %d %s rows period=%s", len(result), entity, period_key)
        return result
