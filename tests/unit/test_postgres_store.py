from __future__ import annotations

from unittest.mock import MagicMock

import psycopg2
import pytest
from psycopg2.extras import Json

from hr_attendance.db.postgres import (
    PostgresEmployeeRegistry,
    PostgresRecordStore,
    SCHEMA_DDL,
    ensure_schema,
)
from hr_attendance.db.protocols import ATTENDANCE, SALARY, EmployeeRegistry, RecordStore, StoreError
from hr_attendance.models.attendance import AttendanceSummary, DailyAttendanceRecord


def _statements(cursor: MagicMock) -> list[str]:
    return [c.args[0] for c in cursor.execute.call_args_list]


def test_implementations_satisfy_protocols():
    cur = MagicMock()
    assert isinstance(PostgresEmployeeRegistry(cur), EmployeeRegistry)
    assert isinstance(PostgresRecordStore(cur), RecordStore)


def test_ensure_schema_declares_unique_period_keys():
    cur = MagicMock()
    ensure_schema(cur)
    cur.execute.assert_called_once_with(SCHEMA_DDL)
    assert SCHEMA_DDL.count("UNIQUE (employee_id, period_key)") == 2


def test_find_by_code():
    cur = MagicMock()
    cur.fetchone.return_value = (7, "E001", "Asha Rao", "30000.00")
    emp = PostgresEmployeeRegistry(cur).find_by_code("E001")
    assert emp is not None
    assert (emp.ref, emp.code, emp.name, emp.base_salary) == (7, "E001", "Asha Rao", 30000.0)
    stmts = _statements(cur)
    assert stmts[0].startswith("SAVEPOINT")
    assert "WHERE employee_code = %s" in stmts[1]
    assert stmts[-1].startswith("RELEASE SAVEPOINT")


def test_find_by_code_missing():
    cur = MagicMock()
    cur.fetchone.return_value = None
    assert PostgresEmployeeRegistry(cur).find_by_code("E404") is None


def test_attendance_upsert_sql():
    cur = MagicMock()
    record = DailyAttendanceRecord("1 St", "P", "09:00", "18:00", False, "09:00")
    summary = AttendanceSummary("E001", "2024-01", 1, 0, 0, 1, daily_records=(record,))
    PostgresRecordStore(cur).upsert(ATTENDANCE, (7, "2024-01"), summary.to_row())

    stmts = _statements(cur)
    assert stmts[0] == "SAVEPOINT record_op"
    insert = stmts[1]
    assert insert.startswith("INSERT INTO attendance_summaries (employee_id, period_key, employee_code")
    assert "ON CONFLICT (employee_id, period_key) DO UPDATE SET" in insert
    assert "verified_status" not in insert
    assert stmts[2] == "RELEASE SAVEPOINT record_op"

    params = cur.execute.call_args_list[1].args[1]
    assert params[:3] == [7, "2024-01", "E001"]
    json_param = params[-1]
    assert isinstance(json_param, Json)
    assert json_param.adapted[0]["status"] == "P"


def test_salary_upsert_targets_salaries():
    cur = MagicMock()
    PostgresRecordStore(cur).upsert(SALARY, (7, "2024-01"), {"employee_code": "E001", "net_salary": 100})
    insert = _statements(cur)[1]
    assert insert.startswith("INSERT INTO salaries (employee_id, period_key, employee_code, net_salary)")
    assert "net_salary = EXCLUDED.net_salary" in insert
    assert "status" not in insert


def test_database_error_rolls_back_to_savepoint():
    cur = MagicMock()

    def execute(sql, params=None):
        if sql.startswith("INSERT"):
            raise psycopg2.Error("duplicate key")

    cur.execute.side_effect = execute
    with pytest.raises(StoreError, match="duplicate key"):
        PostgresRecordStore(cur).upsert(ATTENDANCE, (7, "2024-01"), {"employee_code": "E001"})
    assert _statements(cur)[-1] == "ROLLBACK TO SAVEPOINT record_op"


def test_unknown_entity():
    with pytest.raises(StoreError, match="unknown entity"):
        PostgresRecordStore(MagicMock()).upsert("payslip", (1, "2024-01"), {})


def test_list_for_period_maps_columns():
    cur = MagicMock()
    cur.fetchall.return_value = [(7, "2024-01", "E001", 20, 2, 1, 23, [])]
    rows = PostgresRecordStore(cur).list_for_period(ATTENDANCE, "2024-01")
    assert rows == [
        {
            "employee_ref": 7,
            "period_key": "2024-01",
            "employee_code": "E001",
            "days_present": 20,
            "days_leave": 2,
            "half_days": 1,
            "total_days": 23,
            "daily_records": [],
        }
    ]
    select = _statements(cur)[1]
    assert "FROM attendance_summaries WHERE period_key = %s" in select


def test_list_for_period_error():
    cur = MagicMock()
    cur.fetchall.side_effect = psycopg2.OperationalError("server closed the connection")
    with pytest.raises(StoreError):
        PostgresRecordStore(cur).list_for_period(SALARY, "2024-01")
