# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Sequence
from pathlib import Path

import pandas as pd
import pytest

from hr_attendance.db.memory import MemoryEmployeeRegistry, MemoryRecordStore
from hr_attendance.logging.init import reset_logging
from hr_attendance.models.employee import Employee

DAY_LABELS = ["1 St", "2 S", "3 M", "4 T", "5 W"]


def header_row(labels: Sequence[str] = DAY_LABELS) -> list[str]:
    return ["Days", ""] + list(labels)


def employee_block(
    code: str,
    name: str,
    status: Sequence[str],
    in_times: Sequence[str],
    out_times: Sequence[str],
    totals: Sequence[str] | None = None,
) -> list[list[str]]:
    """Five marker rows of one employee as the time-clock export lays them out."""
    code_row = ["Emp. Code:", "", "", code] + [""] * 8 + [name]  # name at offset 12
    totals = totals if totals is not None else ["08:00"] * len(status)
    return [
        code_row,
        ["Status", ""] + list(status),
        ["InTime", ""] + list(in_times),
        ["OutTime", ""] + list(out_times),
        ["Total", ""] + list(totals),
    ]


def standard_sheet() -> list[list[str]]:
    """Title rows, header, three employees separated by blank rows."""
    rows: list[list[str]] = [
        ["Monthly Status Report (Basic Work Duration)"],
        ["Jan 01 2024 To Jan 05 2024"],
        header_row(),
    ]
    rows += employee_block(
        "E001", "Asha Rao",
        ["P", "P", "WO", "A", "P"],
        ["09:10", "09:45", "", "", "09:30"],
        ["18:00", "18:10", "", "", "18:05"],
    )
    rows.append([""])
    rows += employee_block(
        "E002", "Vikram Das",
        ["A", "A", "WO", "A", "WOP"],
        ["", "", "", "", "10:00"],
        ["", "", "", "", "17:00"],
    )
    rows.append([""])
    rows += employee_block(
        "E999", "Unknown Person",
        ["P", "P", "P", "P", "P"],
        ["09:00", "09:00", "09:00", "09:00", "09:00"],
        ["18:00", "18:00", "18:00", "18:00", "18:00"],
    )
    return rows


def write_workbook(path: Path, rows: list[list[object]], extra_sheets: dict[str, list[list[object]]] | None = None) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Report", header=False, index=False)
        for name, sheet_rows in (extra_sheets or {}).items():
            pd.DataFrame(sheet_rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: hr
  password: secret
  database: hr
header_scan_rows: 20
late_after: "09:30"
salary:
  days_divisor: 30
  free_leave_days: 2
error_log_dir: logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "payroll.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def registry() -> MemoryEmployeeRegistry:
    return MemoryEmployeeRegistry(
        [
            Employee(ref=1, code="E001", name="Asha Rao", base_salary=30000),
            Employee(ref=2, code="E002", name="Vikram Das", base_salary=45000),
        ]
    )


@pytest.fixture()
def store() -> MemoryRecordStore:
    return MemoryRecordStore()


@pytest.fixture()
def sample_workbook(temp_workdir: Path) -> Path:
    return write_workbook(temp_workdir / "data" / "jan.xlsx", standard_sheet())


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()
