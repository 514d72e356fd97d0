# hr_payroll/modules/attendance/services/timesheet_aggregator.py

"""
Timesheet aggregation.

A TimesheetGrid holds one month of attendance records keyed by
(employee_id, day of month) together with a baseline snapshot taken
when it was loaded. Edits and imported rows are applied as immutable
PendingChanges, and diff_grid() yields the minimal persistence work.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..config.attendance_config import AttendanceSettings, get_attendance_settings
from ..enums.attendance_enums import AttendanceStatus, OperationType, WORKED_STATUSES
from ..schemas.attendance_schemas import (
    AttendanceRecord,
    AttendanceSummary,
    GridApplyReport,
    ImportedCellChange,
    LeaveTotals,
    ManualCellEdit,
    PendingChanges,
    PersistenceOperation,
)
from .work_value_calculator import build_attendance_record

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]


@dataclass(frozen=True)
class BaselineCell:
    record_id: Optional[int]
    serialized: str


@dataclass(frozen=True)
class TimesheetGrid:
    """One month of attendance cells plus the snapshot they were loaded with."""

    month: int
    year: int
    cells: Mapping[CellKey, AttendanceRecord] = field(default_factory=dict)
    baseline: Mapping[CellKey, BaselineCell] = field(default_factory=dict)

    @classmethod
    def load(cls, records: Iterable[AttendanceRecord], month: int, year: int) -> "TimesheetGrid":
        cells: Dict[CellKey, AttendanceRecord] = {}
        for record in records:
            if record.date.month != month or record.date.year != year:
                logger.debug("Record %s outside %02d/%d not loaded", record.date, month, year)
                continue
            cells[(record.employee_id, record.date.day)] = record

        baseline = {
            key: BaselineCell(record_id=record.id, serialized=record.serialized())
            for key, record in cells.items()
        }
        return cls(month=month, year=year, cells=cells, baseline=baseline)

    @property
    def days_in_month(self) -> int:
        return calendar.monthrange(self.year, self.month)[1]

    def contains_date(self, day: date) -> bool:
        return day.month == self.month and day.year == self.year

    def get(self, employee_id: int, day: int) -> Optional[AttendanceRecord]:
        return self.cells.get((employee_id, day))

    def records(self) -> List[AttendanceRecord]:
        return [self.cells[key] for key in sorted(self.cells)]

    def employee_ids(self) -> List[int]:
        return sorted({employee_id for employee_id, _ in self.cells})

    def employee_records(self, employee_id: int) -> List[AttendanceRecord]:
        return [r for (emp, _), r in sorted(self.cells.items()) if emp == employee_id]

    def with_cells(self, cells: Mapping[CellKey, AttendanceRecord]) -> "TimesheetGrid":
        return TimesheetGrid(month=self.month, year=self.year, cells=dict(cells), baseline=self.baseline)


def _existing_id(grid: TimesheetGrid, key: CellKey) -> Optional[int]:
    current = grid.cells.get(key)
    if current is not None and current.id is not None:
        return current.id
    base = grid.baseline.get(key)
    return base.record_id if base else None


def apply_changes(
    grid: TimesheetGrid,
    pending: PendingChanges,
    settings: Optional[AttendanceSettings] = None,
) -> Tuple[TimesheetGrid, GridApplyReport]:
    """
    Apply pending changes in order and return the new grid.

    A manual edit always replaces its cell. An imported row replaces its cell
    only when its date lies in the grid's month; rows for other periods are
    ignored and counted in the report.
    """
    settings = settings or get_attendance_settings()
    cells = dict(grid.cells)
    applied = 0
    ignored = 0

    for change in pending.changes:
        if isinstance(change, ManualCellEdit):
            if change.day > grid.days_in_month:
                logger.warning(
                    "Manual edit for day %d ignored: %02d/%d has %d days",
                    change.day, grid.month, grid.year, grid.days_in_month,
                )
                ignored += 1
                continue
            key = (change.employee_id, change.day)
            cells[key] = build_attendance_record(
                employee_id=change.employee_id,
                day=date(grid.year, grid.month, change.day),
                check_in=change.check_in,
                check_out=change.check_out,
                confirm_inferred_checkout=change.confirm_inferred_checkout,
                record_id=_existing_id(grid, key),
                work_value=change.work_value,
                late_minutes=change.late_minutes,
                early_minutes=change.early_minutes,
                overtime_hours=change.overtime_hours,
                settings=settings,
            )
            applied += 1

        elif isinstance(change, ImportedCellChange):
            row = change.row
            if not grid.contains_date(row.date):
                ignored += 1
                continue
            key = (change.employee_id, row.date.day)
            cells[key] = build_attendance_record(
                employee_id=change.employee_id,
                day=row.date,
                check_in=row.check_in,
                check_out=row.check_out,
                record_id=_existing_id(grid, key),
                notes=row.notes or None,
                settings=settings,
            )
            applied += 1

    if ignored:
        logger.warning(
            "%d change(s) ignored: outside the selected period %02d/%d",
            ignored, grid.month, grid.year,
        )

    report = GridApplyReport(applied=applied, ignored_out_of_period=ignored)
    return grid.with_cells(cells), report


def diff_grid(grid: TimesheetGrid) -> List[PersistenceOperation]:
    """Persistence operations for cells whose serialized value changed since load."""
    operations = []
    for key in sorted(grid.cells):
        record = grid.cells[key]
        base = grid.baseline.get(key)
        if base is not None and base.serialized == record.serialized():
            continue
        if base is not None and base.record_id is not None:
            operations.append(
                PersistenceOperation(
                    operation=OperationType.UPDATE, record_id=base.record_id, record=record
                )
            )
        else:
            operations.append(PersistenceOperation(operation=OperationType.CREATE, record=record))
    return operations


def summarize_month(
    employee_id: int,
    month: int,
    year: int,
    records: Iterable[AttendanceRecord],
    leave_totals: Optional[LeaveTotals] = None,
) -> AttendanceSummary:
    """
    Roll one employee's records for the month into an AttendanceSummary.

    Leave totals are not derived from attendance; they come from the
    leave collaborator.
    """
    leave_totals = leave_totals or LeaveTotals()
    total_work_days = Decimal("0.00")
    total_overtime_days = Decimal("0.00")
    present_days = Decimal("0.00")
    weekday_overtime = Decimal("0.00")
    weekend_overtime = Decimal("0.00")

    for record in records:
        if record.employee_id != employee_id:
            continue
        if record.date.month != month or record.date.year != year:
            continue

        if record.status in WORKED_STATUSES:
            total_work_days += record.work_value
        if record.status == AttendanceStatus.WEEKEND_OVERTIME:
            total_overtime_days += record.work_value
            weekend_overtime += record.overtime_hours
        else:
            weekday_overtime += record.overtime_hours
            if record.status in WORKED_STATUSES:
                present_days += record.work_value

    return AttendanceSummary(
        employee_id=employee_id,
        month=month,
        year=year,
        total_work_days=total_work_days,
        total_overtime_days=total_overtime_days,
        total_paid_leave=leave_totals.paid_days,
        total_unpaid_leave=leave_totals.unpaid_days,
        total_overtime_hours=weekday_overtime + weekend_overtime,
        present_days=present_days,
        weekday_overtime_hours=weekday_overtime,
        weekend_overtime_hours=weekend_overtime,
    )


def summarize_grid(
    grid: TimesheetGrid, leave_totals: Optional[Mapping[int, LeaveTotals]] = None
) -> Dict[int, AttendanceSummary]:
    leave_totals = leave_totals or {}
    records = grid.records()
    return {
        employee_id: summarize_month(
            employee_id, grid.month, grid.year, records, leave_totals.get(employee_id)
        )
        for employee_id in grid.employee_ids()
    }


def count_missing_in_out(records: Iterable[AttendanceRecord]) -> int:
    """Cells with exactly one timestamp, or whose checkout was inferred."""
    return sum(1 for r in records if r.is_incomplete or r.checkout_inferred)
