# hr_payroll/modules/attendance/schemas/attendance_schemas.py

"""
Attendance schemas.

Covers parsed export rows, the per-day AttendanceRecord, the monthly
summary, and the change/operation types used by the timesheet aggregator.
"""

from datetime import date as Date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.attendance_config import get_attendance_settings
from ..enums.attendance_enums import AttendanceStatus, ChangeSource, OperationType


class ParsedAttendanceRow(BaseModel):
    """One daily row read from a time-clock export."""

    model_config = ConfigDict(frozen=True)

    employee_code: str = Field(..., description="Raw numeric code from the export")
    employee_name: str = Field("", description="Name from the block header, if any")
    date: Date
    check_in: str = Field("", description="Raw check-in text, empty when absent")
    check_out: str = Field("", description="Raw check-out text, empty when absent")
    notes: str = ""
    line_number: Optional[int] = Field(None, description="1-based source line")


class MonthlyGridRow(BaseModel):
    """One employee row of a monthly matrix export."""

    model_config = ConfigDict(frozen=True)

    employee_code: str
    row_number: int
    day_values: Dict[int, str] = Field(default_factory=dict)


class MonthlyGridParseResult(BaseModel):
    rows: List[MonthlyGridRow]
    month: int = Field(..., ge=1, le=12)
    year: int
    day_of_week_labels: Dict[int, str] = Field(default_factory=dict)


class AttendanceRecord(BaseModel):
    """One employee, one calendar day."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    employee_id: int
    date: Date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    work_value: Decimal = Field(Decimal("0.00"), ge=0, le=1)
    late_minutes: int = Field(0, ge=0)
    early_minutes: int = Field(0, ge=0)
    overtime_hours: Decimal = Field(Decimal("0.00"), ge=0)
    total_minutes: int = Field(0, ge=0)
    status: AttendanceStatus = AttendanceStatus.ABSENT
    notes: Optional[str] = None
    day_of_week: str = ""

    @field_validator("work_value", "overtime_hours")
    @classmethod
    def quantize_two_places(cls, v):
        return Decimal(v).quantize(Decimal("0.01"))

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def is_incomplete(self) -> bool:
        """Exactly one of check-in/check-out is present."""
        return (self.check_in_time is None) != (self.check_out_time is None)

    @property
    def checkout_inferred(self) -> bool:
        return self.notes == get_attendance_settings().INFERRED_CHECKOUT_MARKER

    def serialized(self) -> str:
        """Stable serialized form used for change detection (persistence id excluded)."""
        return self.model_dump_json(exclude={"id"})


class LeaveTotals(BaseModel):
    """Paid/unpaid leave days supplied by the leave-request collaborator."""

    paid_days: Decimal = Decimal("0")
    unpaid_days: Decimal = Decimal("0")


class AttendanceSummary(BaseModel):
    """One employee, one month. Derived from records, never edited."""

    employee_id: int
    month: int = Field(..., ge=1, le=12)
    year: int
    total_work_days: Decimal = Decimal("0.00")
    total_overtime_days: Decimal = Decimal("0.00")
    total_paid_leave: Decimal = Decimal("0")
    total_unpaid_leave: Decimal = Decimal("0")
    total_overtime_hours: Decimal = Decimal("0.00")
    # Split consumed by payroll
    present_days: Decimal = Decimal("0.00")
    weekday_overtime_hours: Decimal = Decimal("0.00")
    weekend_overtime_hours: Decimal = Decimal("0.00")

    @classmethod
    def empty(cls, employee_id: int, month: int, year: int) -> "AttendanceSummary":
        return cls(employee_id=employee_id, month=month, year=year)


class ManualCellEdit(BaseModel):
    """Operator correction of a single timesheet cell."""

    model_config = ConfigDict(frozen=True)

    source: ChangeSource = ChangeSource.MANUAL
    employee_id: int
    day: int = Field(..., ge=1, le=31)
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    confirm_inferred_checkout: bool = Field(
        False, description="Write 17:30 explicitly when checkout is blank"
    )
    # Optional operator overrides of the derived figures
    work_value: Optional[Decimal] = None
    late_minutes: Optional[Decimal] = None
    early_minutes: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None


class ImportedCellChange(BaseModel):
    """A parsed export row already resolved to an employee id."""

    model_config = ConfigDict(frozen=True)

    source: ChangeSource = ChangeSource.IMPORT
    employee_id: int
    row: ParsedAttendanceRow


CellChange = Union[ManualCellEdit, ImportedCellChange]


class PendingChanges(BaseModel):
    """Immutable, ordered collection of edits waiting to be applied to a grid."""

    model_config = ConfigDict(frozen=True)

    changes: Tuple[CellChange, ...] = ()

    def add(self, change: CellChange) -> "PendingChanges":
        return PendingChanges(changes=self.changes + (change,))

    def extend(self, changes: List[CellChange]) -> "PendingChanges":
        return PendingChanges(changes=self.changes + tuple(changes))

    def __len__(self) -> int:
        return len(self.changes)


class PersistenceOperation(BaseModel):
    """A create/update the persistence collaborator must carry out."""

    model_config = ConfigDict(frozen=True)

    operation: OperationType
    record_id: Optional[int] = None
    record: AttendanceRecord


class GridApplyReport(BaseModel):
    applied: int = 0
    ignored_out_of_period: int = 0


class ImportRowError(BaseModel):
    row: Optional[int] = None
    employee_code: str
    error: str


class ImportRowWarning(BaseModel):
    row: Optional[int] = None
    employee_code: str
    message: str


class ImportResult(BaseModel):
    """Outcome of turning an export into attendance records."""

    success: int = 0
    failed: int = 0
    errors: List[ImportRowError] = Field(default_factory=list)
    warnings: List[ImportRowWarning] = Field(default_factory=list)
    records: List[AttendanceRecord] = Field(default_factory=list)
    month: Optional[int] = None
    year: Optional[int] = None
