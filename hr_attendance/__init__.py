"""Time-clock attendance import and payroll deduction engine."""

__version__ = "0.1.0"
