from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

"""Employee as seen by the import / payroll core.

Only the fields the core consumes are modelled; everything else about an
employee lives behind the registry.
"""

__all__ = [
    "Employee",
    "coerce_amount",
    "coerce_count",
]


@dataclass(frozen=True)
class Employee:
    ref: Any  # Store-side identity (primary key); opaque to the core
    code: str  # Business code printed on the time-clock export
    name: str
    base_salary: float = 0.0


def coerce_amount(value: Any) -> float:
    """Numeric cell/column value as float; malformed or missing text reads as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(str(value).strip().replace(",", ""))
    except ValueError:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def coerce_count(value: Any) -> int:
    """Day counter as int; malformed or missing text reads as 0."""
    return int(coerce_amount(value))
