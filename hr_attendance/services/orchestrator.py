from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO

from ..db.protocols import EmployeeRegistry, RecordStore, StoreError
from ..excel.blocks import parse_attendance_grid
from ..excel.header import HeaderLocator, SheetHeaderError
from ..excel.reader import WorkbookReadError, read_first_sheet
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.attendance import AttendanceSummary, ParsedSheet
from ..models.batch_result import BatchResult, FailureKind
from ..models.config_models import AppConfig
from ..models.processing_result import RunReport
from .precomputed import RecordsFormatError, load_summary_records
from .progress import ProgressTracker
from .reconciler import reconcile_attendance
from .salary_calculator import calculate_salaries

"""Service orchestration for the attendance import and the salary run.

Coordinates one run end to end: fatal pre-checks (period key, workbook,
date header), the record batch, the error log and the run report. Fatal
problems raise ProcessingError before any record is touched; record-level
problems only show up as failed outcomes.

Transaction boundaries belong to the caller (the CLI commits once per run).
"""

__all__ = [
    "ProcessingError",
    "require_period",
    "parse_workbook",
    "import_attendance_file",
    "import_summary_file",
    "run_salary_calculation",
]

logger = logging.getLogger(__name__)

CALCULATE_SOURCE = "calculate"


class ProcessingError(Exception):
    """Fatal error: the whole run is aborted with no partial output."""


def require_period(period_key: str | None) -> str:
    period = (period_key or "").strip()
    if not period:
        raise ProcessingError("period is required (e.g. --period 2024-01)")
    return period


def _source_name(source: Any) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).name
    return getattr(source, "name", None) or "<upload>"


def _fatal(error_log: ErrorLogBuffer, source: str, period: str, error_type: str, message: str) -> None:
    error_log.append(ErrorRecord.create(source, period, "", error_type, message))
    try:
        error_log.flush()
    except OSError as e:
        logger.warning("could not write error log: %s", e)


def _log_failures(error_log: ErrorLogBuffer, source: str, period: str, batch: BatchResult) -> None:
    for outcome in batch.failures:
        error_type = (outcome.failure_kind or FailureKind.UPSERT_ERROR).value
        error_log.append(
            ErrorRecord.create(source, period, outcome.employee_code, error_type, outcome.reason or "")
        )


def _finish(
    operation: str,
    period: str,
    source: str,
    batch: BatchResult,
    start_time: datetime,
    error_log: ErrorLogBuffer,
    dropped_blocks: list[str] | None = None,
) -> RunReport:
    _log_failures(error_log, source, period, batch)
    log_path = None
    try:
        log_path = error_log.flush()
    except OSError as e:
        # Outcomes are already in the report; losing the log file is not fatal
        logger.warning("could not write error log: %s", e)
    if log_path is not None:
        logger.info("failed records written to %s", log_path)

    end_time = datetime.now(UTC)
    return RunReport(
        operation=operation,
        period_key=period,
        source=source,
        batch=batch,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        dropped_blocks=list(dropped_blocks or []),
        error_log_path=log_path,
    )


def parse_workbook(
    source: Path | str | bytes | BinaryIO,
    period_key: str,
    config: AppConfig | None = None,
    locator: HeaderLocator | None = None,
) -> ParsedSheet:
    """Read the first sheet and assemble per-employee summaries (no persistence).

    Raises:
        ProcessingError: unreadable workbook or date header not found
    """
    config = config or AppConfig()
    try:
        grid = read_first_sheet(source)
    except WorkbookReadError as e:
        raise ProcessingError(str(e)) from e
    try:
        return parse_attendance_grid(grid, period_key, locator=locator, rules=config.attendance)
    except SheetHeaderError as e:
        raise ProcessingError(f"{e} (checked first {config.attendance.header_scan_rows} rows)") from e


def _reconcile_with_progress(
    summaries: list[AttendanceSummary],
    period: str,
    registry: EmployeeRegistry,
    store: RecordStore,
) -> BatchResult:
    with ProgressTracker(len(summaries), description="Importing attendance") as progress:
        return reconcile_attendance(summaries, period, registry, store, progress_callback=progress)


def import_attendance_file(
    source: Path | str | bytes | BinaryIO,
    period_key: str | None,
    registry: EmployeeRegistry,
    store: RecordStore,
    config: AppConfig | None = None,
    locator: HeaderLocator | None = None,
) -> RunReport:
    """Import one time-clock workbook for one period.

    Raises:
        ProcessingError: missing period, unreadable workbook, or no date header
    """
    config = config or AppConfig()
    period = require_period(period_key)
    start_time = datetime.now(UTC)
    source_name = _source_name(source)
    error_log = ErrorLogBuffer(config.error_log_dir)

    try:
        parsed = parse_workbook(source, period, config, locator)
    except ProcessingError as e:
        _fatal(error_log, source_name, period, "SHEET_PARSE_ERROR", str(e))
        raise

    logger.info(
        "parsed %s period=%s employees=%d day_columns=%d",
        source_name,
        period,
        len(parsed.summaries),
        len(parsed.day_labels),
    )
    batch = _reconcile_with_progress(parsed.summaries, period, registry, store)
    return _finish("import", period, source_name, batch, start_time, error_log, parsed.dropped_blocks)


def import_summary_file(
    path: Path,
    period_key: str | None,
    registry: EmployeeRegistry,
    store: RecordStore,
    config: AppConfig | None = None,
) -> RunReport:
    """Import pre-aggregated attendance counters from a JSON file.

    Raises:
        ProcessingError: missing period, unreadable file, or malformed payload
    """
    config = config or AppConfig()
    period = require_period(period_key)
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)

    try:
        summaries = load_summary_records(path, period)
    except (OSError, RecordsFormatError) as e:
        _fatal(error_log, path.name, period, "RECORDS_FORMAT_ERROR", str(e))
        raise ProcessingError(str(e)) from e

    batch = _reconcile_with_progress(summaries, period, registry, store)
    return _finish("import-json", period, path.name, batch, start_time, error_log)


def run_salary_calculation(
    period_key: str | None,
    registry: EmployeeRegistry,
    store: RecordStore,
    config: AppConfig | None = None,
) -> RunReport:
    """Compute and store salaries for every attendance summary of a period.

    Raises:
        ProcessingError: missing period, or the period's attendance cannot be read
    """
    config = config or AppConfig()
    period = require_period(period_key)
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)

    try:
        with ProgressTracker(None, description="Calculating salaries") as progress:
            batch = calculate_salaries(period, registry, store, config.salary, progress_callback=progress)
    except StoreError as e:
        _fatal(error_log, CALCULATE_SOURCE, period, "ATTENDANCE_READ_ERROR", str(e))
        raise ProcessingError(f"cannot load attendance for period {period}: {e}") from e

    if batch.total_processed == 0:
        logger.warning("no attendance stored for period=%s", period)
    return _finish("calculate", period, CALCULATE_SOURCE, batch, start_time, error_log)
