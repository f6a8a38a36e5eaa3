from __future__ import annotations

import json
import re
from pathlib import Path

from hr_attendance.logging.error_log import ErrorLogBuffer
from hr_attendance.models.error_record import ErrorRecord


def test_error_record_create():
    rec = ErrorRecord.create("jan.xlsx", "2024-01", "E999", "EMPLOYEE_NOT_FOUND", "Employee not found")
    assert rec.timestamp.endswith("Z")
    data = json.loads(rec.to_json_line())
    assert data == {
        "timestamp": rec.timestamp,
        "source": "jan.xlsx",
        "period": "2024-01",
        "employee_code": "E999",
        "error_type": "EMPLOYEE_NOT_FOUND",
        "message": "Employee not found",
    }


def test_flush_empty_buffer_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    assert buf.flush() is None
    assert list((temp_workdir / "logs").iterdir()) == []


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs" / "nested")
    buf.append(ErrorRecord.create("jan.xlsx", "2024-01", "E1", "EMPLOYEE_NOT_FOUND", "Employee not found"))
    buf.append(ErrorRecord.create("jan.xlsx", "2024-01", "E2", "UPSERT_ERROR", "名前 too long"))
    path = buf.flush()
    assert path is not None
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["employee_code"] for line in lines] == ["E1", "E2"]
    assert "名前" in lines[1]

    # Second flush of the same run appends to the same file
    buf.append(ErrorRecord.create("jan.xlsx", "2024-01", "E3", "UPSERT_ERROR", "x"))
    assert buf.flush() == path
    assert len(path.read_text(encoding="utf-8").splitlines()) == 3
