from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the attendance import / payroll tool.

These are the typed view of config/payroll.yml produced by
hr_attendance.config.loader. Defaults reproduce the time-clock export
template and the payroll policy the tool was written for.
"""

__all__ = [
    "DatabaseConfig",
    "AttendanceRules",
    "SalaryRules",
    "AppConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class AttendanceRules:
    header_scan_rows: int = 20  # Rows searched for the date header
    late_after_hour: int = 9
    late_after_minute: int = 30  # In-time strictly after HH:MM is late


@dataclass(frozen=True)
class SalaryRules:
    days_divisor: int = 30  # Fixed, not the calendar length of the month
    free_leave_days: int = 2
    half_day_factor: float = 0.5


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    attendance: AttendanceRules = field(default_factory=AttendanceRules)
    salary: SalaryRules = field(default_factory=SalaryRules)
    error_log_dir: str = "logs"
