# hr_payroll/modules/attendance/services/tabular_parser.py

"""
Parser for flat attendance CSVs: a header row followed by one row per
employee-day. Columns are located by keyword, accent- and case-insensitive.
"""

import csv
import io
import logging
from typing import Dict, List, Optional, Tuple

from ..exceptions import AttendanceImportError
from ..schemas.attendance_schemas import ImportRowError, ParsedAttendanceRow
from ..utils.text_utils import fold, parse_export_date
from .export_parser import normalize_time_field

logger = logging.getLogger(__name__)

# Checked in order; the first matching keyword wins
COLUMN_KEYWORDS = (
    ("notes", ("ghi chu", "note")),
    ("status", ("trang thai", "status")),
    ("total_hours", ("tong", "total")),
    ("employee_code", ("ma", "code")),
    ("employee_name", ("ten", "name")),
    ("date", ("ngay", "date")),
    ("check_in", ("gio vao", "vao", "check in", "checkin", "in")),
    ("check_out", ("gio ra", "ra", "check out", "checkout", "out")),
)

REQUIRED_COLUMNS = ("employee_code", "date")


def map_header(header: str) -> Optional[str]:
    words = fold(header.replace('"', "")).replace("_", " ").replace("-", " ").split()
    text = " ".join(words)
    for column, keywords in COLUMN_KEYWORDS:
        for keyword in keywords:
            if " " in keyword:
                if keyword in text:
                    return column
            elif keyword in words:
                return column
    return None


def _detect_delimiter(content: str) -> str:
    first_line = content.split("\n", 1)[0]
    if "\t" in first_line:
        return "\t"
    if ";" in first_line and "," not in first_line:
        return ";"
    return ","


def parse_tabular_export(content: str) -> Tuple[List[ParsedAttendanceRow], List[ImportRowError]]:
    """
    Parse a flat CSV into rows.

    Rows with an unreadable date or no times are reported as errors and
    skipped; they never abort the import.

    Raises:
        AttendanceImportError: header row lacks an employee code or date column
    """
    reader = csv.reader(io.StringIO(content or ""), delimiter=_detect_delimiter(content or ""))
    rows = [row for row in reader if any(cell.strip() for cell in row)]
    if not rows:
        return [], []

    columns: Dict[str, int] = {}
    for index, header in enumerate(rows[0]):
        column = map_header(header)
        if column and column not in columns:
            columns[column] = index

    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise AttendanceImportError(
            f"Missing required columns: {', '.join(missing)}",
            details=[{"field": c, "message": "column not found"} for c in missing],
        )

    def cell(values: List[str], column: str) -> str:
        index = columns.get(column)
        if index is None or index >= len(values):
            return ""
        return values[index].strip().replace('"', "")

    parsed: List[ParsedAttendanceRow] = []
    errors: List[ImportRowError] = []
    for row_number, values in enumerate(rows[1:], start=2):
        code = cell(values, "employee_code")
        if not code:
            errors.append(ImportRowError(row=row_number, employee_code="", error="Missing employee code"))
            continue

        raw_date = cell(values, "date")
        day = parse_export_date(raw_date)
        if day is None:
            errors.append(
                ImportRowError(row=row_number, employee_code=code, error=f"Invalid date: {raw_date!r}")
            )
            continue

        check_in = normalize_time_field(cell(values, "check_in"))
        check_out = normalize_time_field(cell(values, "check_out"))
        if not check_in and not check_out:
            logger.debug("Row %d: no check-in or check-out, skipped", row_number)
            continue

        parsed.append(
            ParsedAttendanceRow(
                employee_code=code,
                employee_name=cell(values, "employee_name"),
                date=day,
                check_in=check_in,
                check_out=check_out,
                notes=cell(values, "notes"),
                line_number=row_number,
            )
        )

    return parsed, errors
