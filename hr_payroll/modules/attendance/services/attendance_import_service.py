# hr_payroll/modules/attendance/services/attendance_import_service.py

"""
Attendance import service.

Detects the export layout, resolves time-clock codes to employees,
builds attendance records and reports per-row errors and warnings.
Unknown employees and unreadable rows are reported, never raised.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ....core.config import Settings, get_settings
from ....core.context import AsOfContext
from ..config.attendance_config import AttendanceSettings, get_attendance_settings
from ..enums.attendance_enums import ImportFormat
from ..schemas.attendance_schemas import (
    AttendanceRecord,
    ImportedCellChange,
    ImportResult,
    ImportRowError,
    ImportRowWarning,
    MonthlyGridParseResult,
    ParsedAttendanceRow,
    PendingChanges,
)
from ..utils.text_utils import normalize_employee_code
from .attendance_store import AttendanceStore
from .export_parser import parse_attendance_export
from .monthly_grid_parser import build_grid_records, parse_monthly_grid
from .tabular_parser import parse_tabular_export
from .work_value_calculator import build_attendance_record, parse_time_of_day

logger = logging.getLogger(__name__)


class EmployeeDirectory(ABC):
    """Employee master data lookup, owned by the employee collaborator."""

    @abstractmethod
    def find_employee_id(self, employee_code: str) -> Optional[int]:
        """Exact code lookup; None when unknown"""
        pass


class InMemoryEmployeeDirectory(EmployeeDirectory):
    """Directory over a preloaded {employee_code: employee_id} mapping."""

    def __init__(self, codes: Mapping[str, int]):
        self.codes = dict(codes)

    def find_employee_id(self, employee_code):
        return self.codes.get(employee_code)


def code_candidates(raw_code: str, prefix: str = "NV", digits: int = 5) -> List[str]:
    """Lookup order: raw code, normalized '<prefix>NNNNN', bare number."""
    raw = (raw_code or "").strip()
    candidates = [raw, normalize_employee_code(raw, prefix, digits)]
    numeric = "".join(ch for ch in raw if ch.isdigit())
    if numeric:
        candidates.append(str(int(numeric)))
    unique = []
    for candidate in candidates:
        if candidate and candidate not in unique:
            unique.append(candidate)
    return unique


def resolve_employee(
    raw_code: str, directory: EmployeeDirectory, prefix: str = "NV", digits: int = 5
) -> Optional[int]:
    for candidate in code_candidates(raw_code, prefix, digits):
        employee_id = directory.find_employee_id(candidate)
        if employee_id is not None:
            return employee_id
    return None


ParsedImport = Union[List[ParsedAttendanceRow], MonthlyGridParseResult]


class AttendanceImportService:
    """Service turning attendance exports into records."""

    def __init__(
        self,
        directory: EmployeeDirectory,
        store: Optional[AttendanceStore] = None,
        settings: Optional[Settings] = None,
        attendance_settings: Optional[AttendanceSettings] = None,
    ):
        self.directory = directory
        self.store = store
        self.settings = settings or get_settings()
        self.attendance_settings = attendance_settings or get_attendance_settings()

    def resolve(self, raw_code: str) -> Optional[int]:
        return resolve_employee(
            raw_code,
            self.directory,
            self.settings.organization_code_prefix,
            self.attendance_settings.EMPLOYEE_CODE_DIGITS,
        )

    def parse(
        self,
        content: str,
        import_format: ImportFormat = ImportFormat.AUTO,
        context: Optional[AsOfContext] = None,
    ) -> Tuple[ImportFormat, ParsedImport, List[ImportRowError]]:
        """
        Detect the layout and parse.

        The block export is tried first. When it yields nothing, a monthly
        grid is parsed if requested, otherwise the file is read as a flat
        table.

        Raises:
            AttendanceImportError: the file matches no known layout
        """
        if import_format != ImportFormat.MONTHLY:
            rows = parse_attendance_export(content, self.attendance_settings)
            if rows:
                logger.info("Parsed %d rows from block export", len(rows))
                return ImportFormat.DAILY, rows, []

        if import_format == ImportFormat.MONTHLY:
            grid = parse_monthly_grid(content, context)
            logger.info(
                "Parsed monthly grid %02d/%d with %d employees", grid.month, grid.year, len(grid.rows)
            )
            return ImportFormat.MONTHLY, grid, []

        rows, errors = parse_tabular_export(content)
        logger.info("Parsed %d rows from tabular export (%d rejected)", len(rows), len(errors))
        return ImportFormat.DAILY, rows, errors

    def build_daily_records(
        self, rows: List[ParsedAttendanceRow], result: ImportResult
    ) -> List[AttendanceRecord]:
        """Records for resolved rows; the last row wins for a repeated employee-day."""
        records: Dict[Tuple[int, object], AttendanceRecord] = {}
        for row in rows:
            employee_id = self.resolve(row.employee_code)
            if employee_id is None:
                result.failed += 1
                result.errors.append(
                    ImportRowError(
                        row=row.line_number,
                        employee_code=row.employee_code,
                        error=f"Employee not found with code: {row.employee_code}",
                    )
                )
                continue

            for label, value in (("check-in", row.check_in), ("check-out", row.check_out)):
                if value and parse_time_of_day(value) is None:
                    result.warnings.append(
                        ImportRowWarning(
                            row=row.line_number,
                            employee_code=row.employee_code,
                            message=f"Invalid {label} time {value!r} treated as missing",
                        )
                    )

            record = build_attendance_record(
                employee_id=employee_id,
                day=row.date,
                check_in=row.check_in,
                check_out=row.check_out,
                notes=row.notes or None,
                settings=self.attendance_settings,
            )
            if record.is_incomplete:
                missing = "check-out" if record.check_out_time is None else "check-in"
                result.warnings.append(
                    ImportRowWarning(
                        row=row.line_number,
                        employee_code=row.employee_code,
                        message=f"Missing {missing} on {row.date.isoformat()}; day counted as absent",
                    )
                )
            records[(employee_id, row.date)] = record
            result.success += 1
        return list(records.values())

    def build_grid_records(
        self, grid: MonthlyGridParseResult, result: ImportResult
    ) -> List[AttendanceRecord]:
        records: List[AttendanceRecord] = []
        for row in grid.rows:
            employee_id = self.resolve(row.employee_code)
            if employee_id is None:
                result.failed += 1
                result.errors.append(
                    ImportRowError(
                        row=row.row_number,
                        employee_code=row.employee_code,
                        error=f"Employee not found with code: {row.employee_code}",
                    )
                )
                continue
            records.extend(build_grid_records(row, employee_id, grid, self.attendance_settings))
            result.success += 1
        return records

    def import_attendance(
        self,
        content: str,
        import_format: ImportFormat = ImportFormat.AUTO,
        context: Optional[AsOfContext] = None,
        persist: bool = True,
    ) -> ImportResult:
        """
        Parse an export and build (and optionally persist) its records.

        Raises:
            AttendanceImportError: the file matches no known layout
            AttendancePersistenceError: the store rejected the records
        """
        detected, parsed, parse_errors = self.parse(content, import_format, context)
        result = ImportResult(errors=list(parse_errors), failed=len(parse_errors))

        if detected == ImportFormat.MONTHLY:
            result.month, result.year = parsed.month, parsed.year
            records = self.build_grid_records(parsed, result)
        else:
            records = self.build_daily_records(parsed, result)

        for error in result.errors:
            logger.warning("Import row %s (%s): %s", error.row, error.employee_code, error.error)

        if persist and self.store is not None and records:
            records = self.store.upsert_records(records)

        result.records = records
        logger.info(
            "Attendance import finished: %d succeeded, %d failed, %d warnings",
            result.success, result.failed, len(result.warnings),
        )
        return result

    def to_pending_changes(
        self, rows: List[ParsedAttendanceRow]
    ) -> Tuple[PendingChanges, List[ImportRowError]]:
        """Resolve parsed rows into grid changes for the timesheet review workflow."""
        changes = []
        errors = []
        for row in rows:
            employee_id = self.resolve(row.employee_code)
            if employee_id is None:
                errors.append(
                    ImportRowError(
                        row=row.line_number,
                        employee_code=row.employee_code,
                        error=f"Employee not found with code: {row.employee_code}",
                    )
                )
                continue
            changes.append(ImportedCellChange(employee_id=employee_id, row=row))
        return PendingChanges().extend(changes), errors
