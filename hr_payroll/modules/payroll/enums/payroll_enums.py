from enum import Enum


class EmploymentCategory(str, Enum):
    """Calculation branch, derived once from the position title."""
    REGULAR = "regular"
    INTERN = "intern"
    PROBATION = "probation"


class AllowanceCategory(str, Enum):
    """Fixed monthly allowances; all are prorated by attendance."""
    MEAL = "meal"
    TRANSPORT = "transport"
    PHONE = "phone"
    ATTENDANCE = "attendance"
    HOUSING = "housing"
    POSITION = "position"
    OTHER = "other"


class PayrollRecordStatus(str, Enum):
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"


class BatchSaveOutcome(str, Enum):
    """Result of persisting a payroll batch."""
    CREATED = "created"
    OVERWRITTEN = "overwritten"
    CONFLICT = "conflict"
