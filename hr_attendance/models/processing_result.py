from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .batch_result import BatchResult

"""Run-level result of one import or salary calculation.

Wraps the record-level BatchResult with the metadata needed for the
SUMMARY output line and the exit code.
"""

__all__ = [
    "RunReport",
]


@dataclass(frozen=True)
class RunReport:
    operation: str  # "import" | "import-json" | "calculate"
    period_key: str
    source: str  # Workbook / JSON file name, or "calculate"
    batch: BatchResult
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    dropped_blocks: list[str] = field(default_factory=list)  # Incomplete employee blocks (import only)
    error_log_path: Path | None = None  # Set when failed records were written

    @property
    def has_failures(self) -> bool:
        return self.batch.failed > 0
