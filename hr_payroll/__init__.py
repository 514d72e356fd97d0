"""
HR payroll engine.

Attendance reconciliation (export parsing, work-value calculation,
timesheet aggregation) and monthly payroll computation.
"""

__version__ = "1.0.0"
