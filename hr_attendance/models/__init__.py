"""Domain models for the time-clock attendance import and payroll run.

This package contains the domain model classes shared by the parser, the
reconciler and the salary calculator.
"""

from .attendance import AttendanceSummary, DailyAttendanceRecord, ParsedSheet
from .batch_result import BatchResult, FailureKind, OutcomeStatus, RecordOutcome, SalaryOutcome
from .config_models import AppConfig, AttendanceRules, DatabaseConfig, SalaryRules
from .employee import Employee
from .salary import SalaryComputation

__all__ = [
    # Configuration models
    "AppConfig",
    "AttendanceRules",
    "DatabaseConfig",
    "SalaryRules",
    # Attendance models
    "AttendanceSummary",
    "DailyAttendanceRecord",
    "ParsedSheet",
    # Payroll models
    "Employee",
    "SalaryComputation",
    # Batch outcomes
    "BatchResult",
    "FailureKind",
    "OutcomeStatus",
    "RecordOutcome",
    "SalaryOutcome",
]
