from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.batch_result import RecordOutcome, SalaryOutcome

"""Per-record progress display with tqdm (TTY only).

In non-TTY environments (CI, piped output) the bar is disabled so no ANSI
control sequences end up in logs.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar over the records of one batch.

    Instances are callable, so one can be passed straight in as the
    progress_callback of reconcile_attendance / calculate_salaries.
    """

    def __init__(self, total: int | None, *, description: str = "Processing records") -> None:
        self.total = total
        self.description = description
        self.done = 0
        self.success = 0
        self.failed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total,
                desc=description,
                unit="employee",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, outcome: RecordOutcome | SalaryOutcome) -> None:
        self.done += 1
        if outcome.ok:
            self.success += 1
        else:
            self.failed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(success=self.success, failed=self.failed)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
