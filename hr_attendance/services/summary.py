from __future__ import annotations

from ..models.processing_result import RunReport

"""SUMMARY line rendering.

Format:
SUMMARY op={op} period={period} processed={n} success={n} failed={n}
dropped_blocks={n} elapsed_sec={elapsed}
"""

__all__ = [
    "format_elapsed",
    "render_summary_line",
]


def format_elapsed(seconds: float) -> str:
    """Plain decimal without scientific notation; integers without a dot."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(report: RunReport) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from hr_attendance.models.batch_result import BatchResult
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> report = RunReport(
        ...     operation="import", period_key="2024-01", source="jan.xlsx",
        ...     batch=BatchResult(total_processed=3, successful=2, failed=1),
        ...     start_time=t, end_time=t, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(report)
        'SUMMARY op=import period=2024-01 processed=3 success=2 failed=1 dropped_blocks=0 elapsed_sec=2'
    """
    batch = report.batch
    return (
        f"SUMMARY op={report.operation} "
        f"period={report.period_key} "
        f"processed={batch.total_processed} "
        f"success={batch.successful} "
        f"failed={batch.failed} "
        f"dropped_blocks={len(report.dropped_blocks)} "
        f"elapsed_sec={format_elapsed(report.elapsed_seconds)}"
    )
