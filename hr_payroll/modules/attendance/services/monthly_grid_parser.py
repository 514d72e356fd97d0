# hr_payroll/modules/attendance/services/monthly_grid_parser.py

"""
Parser for the monthly matrix export (one row per employee, one column per day).

    Bảng chấm công,,,,
    Từ ngày 01/12/2024 đến ngày 31/12/2024,,,,
    STT,Mã NV,Họ tên,1,2,3,...
    ,,,CN,T2,T3,...
    1,00002,Dung,1,1,0.5,...
"""

import calendar
import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from ....core.context import AsOfContext
from ..config.attendance_config import AttendanceSettings, get_attendance_settings
from ..exceptions import AttendanceImportError
from ..schemas.attendance_schemas import (
    AttendanceRecord,
    MonthlyGridParseResult,
    MonthlyGridRow,
)
from ..utils.text_utils import day_of_week_label, fold, is_weekend_label
from .work_value_calculator import determine_status, is_weekend, to_total_minutes

logger = logging.getLogger(__name__)

_PERIOD_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
EMPLOYEE_CODE_COLUMN = 1


def _detect_period(lines: List[str], context: AsOfContext):
    for line in lines:
        if "tu ngay" not in fold(line):
            continue
        match = _PERIOD_DATE.search(line)
        if match:
            return int(match.group(2)), int(match.group(3))
    logger.warning(
        "No period line found, defaulting to %02d/%d", context.month, context.year
    )
    return context.month, context.year


def _find_day_header(lines: List[str]):
    """Index of the '1,2,3...' row and the column holding day 1."""
    for index, line in enumerate(lines):
        values = [v.strip() for v in line.split(",")]
        if "1" not in values:
            continue
        first = values.index("1")
        if first + 1 < len(values) and values[first + 1] == "2":
            return index, first
    return None, None


def parse_monthly_grid(text: str, context: Optional[AsOfContext] = None) -> MonthlyGridParseResult:
    """
    Parse a monthly matrix export.

    Raises:
        AttendanceImportError: no day-number header row, or no employee rows
    """
    context = context or AsOfContext.current()
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]

    month, year = _detect_period(lines, context)

    header_index, first_day_col = _find_day_header(lines)
    if header_index is None:
        raise AttendanceImportError(
            "Could not determine file structure: no day-number header row (1, 2, 3...)"
        )

    labels = {}
    if header_index + 1 < len(lines):
        label_values = lines[header_index + 1].split(",")
        for day in range(1, 32):
            column = first_day_col + day - 1
            if column < len(label_values) and label_values[column].strip():
                labels[day] = label_values[column].strip()

    rows = []
    for index in range(header_index + 2, len(lines)):
        values = [v.strip() for v in lines[index].split(",")]
        serial = values[0]
        code = values[EMPLOYEE_CODE_COLUMN] if len(values) > EMPLOYEE_CODE_COLUMN else ""
        if not code or not serial.isdigit():
            continue

        day_values = {}
        for day in range(1, 32):
            column = first_day_col + day - 1
            if column < len(values) and values[column]:
                day_values[day] = values[column]
        rows.append(MonthlyGridRow(employee_code=code, row_number=index + 1, day_values=day_values))

    if not rows:
        raise AttendanceImportError("No valid attendance rows found in the monthly export")

    return MonthlyGridParseResult(rows=rows, month=month, year=year, day_of_week_labels=labels)


def _parse_day_value(value: str) -> Optional[Decimal]:
    try:
        parsed = Decimal(value.replace(",", "."))
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def build_grid_records(
    row: MonthlyGridRow,
    employee_id: int,
    grid: MonthlyGridParseResult,
    settings: Optional[AttendanceSettings] = None,
) -> List[AttendanceRecord]:
    """
    Turn one employee's day values into attendance records.

    Non-numeric cells are skipped. Weekend columns (by the export's own
    weekday label, else by calendar) become weekend overtime worth
    value x standard hours.
    """
    settings = settings or get_attendance_settings()
    days_in_month = calendar.monthrange(grid.year, grid.month)[1]

    records = []
    for day_number in range(1, days_in_month + 1):
        raw = row.day_values.get(day_number)
        if raw is None:
            continue
        value = _parse_day_value(raw)
        if value is None:
            logger.debug("Row %d day %d: non-numeric value %r", row.row_number, day_number, raw)
            continue

        value = min(Decimal("1"), max(Decimal("0"), value)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        day = date(grid.year, grid.month, day_number)
        label = grid.day_of_week_labels.get(day_number)
        weekend = is_weekend_label(label) if label else is_weekend(day, settings)

        records.append(
            AttendanceRecord(
                employee_id=employee_id,
                date=day,
                work_value=value,
                overtime_hours=value * settings.STANDARD_WORK_HOURS if weekend else Decimal("0"),
                total_minutes=to_total_minutes(value, settings),
                status=determine_status(value, weekend),
                day_of_week=label or day_of_week_label(day),
            )
        )
    return records
