from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, resolve_dsn
from ..db.postgres import PostgresEmployeeRegistry, PostgresRecordStore, ensure_schema
from ..logging.init import log_summary, setup_logging
from ..models.config_models import AppConfig
from ..models.processing_result import RunReport
from ..services.orchestrator import (
    ProcessingError,
    import_attendance_file,
    import_summary_file,
    parse_workbook,
    run_salary_calculation,
)
from ..services.summary import render_summary_line

"""CLI entrypoint.

    hr-attendance import attendance.xlsx --period 2024-01
    hr-attendance import-json counters.json --period 2024-01
    hr-attendance calculate --period 2024-01
    hr-attendance inspect attendance.xlsx

Every run prints the batch result as JSON followed by one SUMMARY line.
Exit codes: 0 all records stored, 2 at least one failed record, 1 fatal.
"""

__all__ = [
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
    "main",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


@contextmanager
def _db_cursor(cfg: AppConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper; tested via mocks)
    """psycopg2 connection + cursor for one run.

    Commits once when the run finishes, rolls back when it raises. Records
    that failed individually were already rolled back to their savepoint.
    """
    conn = psycopg2.connect(resolve_dsn(cfg.database))
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so connection settings in it win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="hr-attendance", description="Time-clock attendance import and salary calculation"
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--init-db", action="store_true", help="Create missing tables before running")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a time-clock workbook for one period")
    imp.add_argument("workbook", type=Path)
    imp.add_argument("--period", help="Period key, e.g. 2024-01")

    imp_json = sub.add_parser("import-json", help="Import pre-aggregated attendance counters")
    imp_json.add_argument("records", type=Path)
    imp_json.add_argument("--period", help="Period key, e.g. 2024-01")

    calc = sub.add_parser("calculate", help="Calculate salaries for one period")
    calc.add_argument("--period", help="Period key, e.g. 2024-01")

    insp = sub.add_parser("inspect", help="Parse a workbook and print summaries; no database access")
    insp.add_argument("workbook", type=Path)
    insp.add_argument("--period", default="-", help="Period key shown in the output")
    return p.parse_args(argv)


def _inspect(cfg: AppConfig, workbook: Path, period: str) -> int:
    parsed = parse_workbook(workbook, period, cfg)
    payload = {
        "dayColumns": len(parsed.day_labels),
        "droppedBlocks": parsed.dropped_blocks,
        "employees": [
            {
                "employeeCode": s.employee_code,
                "employeeName": s.employee_name,
                "daysPresent": s.days_present,
                "daysLeave": s.days_leave,
                "halfDays": s.half_days,
                "totalDays": s.total_working_days,
                "dailyRecords": [r.to_dict() for r in s.daily_records],
            }
            for s in parsed.summaries
        ],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return EXIT_SUCCESS_ALL


def _run(cfg: AppConfig, args: argparse.Namespace, cursor: Any) -> RunReport:
    if args.init_db:
        ensure_schema(cursor)
    registry = PostgresEmployeeRegistry(cursor)
    store = PostgresRecordStore(cursor)
    if args.command == "import":
        return import_attendance_file(args.workbook, args.period, registry, store, cfg)
    if args.command == "import-json":
        return import_summary_file(args.records, args.period, registry, store, cfg)
    return run_salary_calculation(args.period, registry, store, cfg)


def main(argv: list[str] | None = None) -> int:
    # Read sys.argv only when argv is None; tests call main([...]) directly
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        try:
            return _inspect(cfg, args.workbook, args.period)
        except ProcessingError as e:
            logger.error(f"inspect: {e}")
            return EXIT_FATAL

    try:
        with _db_cursor(cfg) as cur:
            report = _run(cfg, args, cur)
    except ProcessingError as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {str(e).strip()}")
        return EXIT_FATAL

    print(json.dumps(report.batch.to_dict(), ensure_ascii=False, indent=2))
    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(report)[len("SUMMARY "):])

    if report.has_failures:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
