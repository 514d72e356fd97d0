# hr_payroll/modules/attendance/services/export_parser.py

"""
Parser for the multi-block time-clock export.

The export is a sequence of per-employee blocks:

    Mã nhân viên: 00002      Tên nhân viên: Dung      Phòng ban: ----,,,,
    Ngày,Thứ,Vào 1,Ra 1,Vào 2,Ra 2,...
    ,,Vào,Ra,Vào,Ra,...
    5/12/2024,T5,08:15,17:40,,,...
    6/12/2024,T6,-,-,,,...

Exports frequently lose their diacritics in transit, so every keyword
check runs on the accent-stripped, lower-cased line. The parser never
raises: lines it cannot make sense of are skipped.
"""

import logging
import re
from typing import List, Optional, Tuple

from ..config.attendance_config import AttendanceSettings, get_attendance_settings
from ..enums.attendance_enums import ParserState
from ..schemas.attendance_schemas import ParsedAttendanceRow
from ..utils.text_utils import fold, parse_export_date

logger = logging.getLogger(__name__)

_DATE_FIELD = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_CODE_FIELD = re.compile(r":\s*(\d{5})(?!\d)")
_FIELD_SPLIT = re.compile(r",|\s{2,}|\t")
_TABLE_START = re.compile(r"^ng\S{0,3}\s*,\s*th")
_SUB_HEADER = re.compile(r"v\S{0,2}o\s*\d?\s*,\s*ra")
_SECTION_TITLE = re.compile(r"^b\S{0,2}ng\s*chi\s*ti")

HEADER_KEYWORDS = ("nhan", "vien", "ma", "employee", "code")
NAME_KEYWORDS = ("ten", "name")
DEPARTMENT_KEYWORDS = ("phong", "ban", "department")

EMPTY_TIME_MARKERS = {"-", "--"}


def _code_token(line: str, digits: int) -> Optional[str]:
    match = re.search(r"(?<!\d)(\d{%d})(?!\d)" % digits, line)
    return match.group(1) if match else None


def is_employee_header(line: str, digits: int = 5) -> bool:
    """
    A header carries a code token and either an employee keyword next to a
    ': <code>' field, or at least two 'label: value' markers.
    """
    if _code_token(line, digits) is None:
        return False
    folded = fold(line)
    if _CODE_FIELD.search(folded) and any(k in folded for k in HEADER_KEYWORDS):
        return True
    return folded.count(":") >= 2


def is_table_start(line: str) -> bool:
    return bool(_TABLE_START.match(fold(line).strip()))


def is_sub_header(line: str) -> bool:
    return bool(_SUB_HEADER.search(fold(line)))


def is_section_title(line: str) -> bool:
    return bool(_SECTION_TITLE.match(fold(line).strip()))


def is_date_row(line: str) -> bool:
    first = line.split(",", 1)[0].strip()
    return bool(_DATE_FIELD.match(first))


def extract_employee_context(line: str, digits: int = 5) -> Tuple[Optional[str], str]:
    """Return (code, name) from a header-like line."""
    code = _code_token(line, digits)
    name = ""
    fields = [f.strip() for f in _FIELD_SPLIT.split(line) if f.strip()]

    code_index = None
    for index, field in enumerate(fields):
        if ":" not in field:
            continue
        label, _, value = field.partition(":")
        label, value = fold(label), value.strip()
        if code_index is None and code and code in value:
            code_index = index
            continue
        if value and any(k in label for k in NAME_KEYWORDS):
            name = value
            break

    if not name and code_index is not None:
        # Damaged labels: take the next labelled non-numeric value that is not the department
        for field in fields[code_index + 1:]:
            label, sep, value = field.partition(":")
            value = value.strip()
            if not sep or not value or value.isdigit():
                continue
            if any(k in fold(label) for k in DEPARTMENT_KEYWORDS):
                continue
            name = value
            break

    return code, name


def normalize_time_field(value: str) -> str:
    text = (value or "").strip()
    return "" if text in EMPTY_TIME_MARKERS else text


class AttendanceExportParser:
    """
    Finite-state parser over the lines of a block export.

    States:
        SEEKING_HEADER: no employee context yet
        SEEKING_TABLE: employee known, waiting for the 'Ngày,Thứ' header
        READING_ROWS: consuming 'DD/MM/YYYY,...' rows for the employee

    Transitions:
        any state, employee header      -> SEEKING_TABLE (context reset)
        SEEKING_TABLE, table start       -> READING_ROWS (sub-header consumed)
        READING_ROWS, section title      -> SEEKING_TABLE
        date row without context         -> lookback for a code, then READING_ROWS
    """

    def __init__(self, settings: Optional[AttendanceSettings] = None):
        self.settings = settings or get_attendance_settings()
        self.digits = self.settings.EMPLOYEE_CODE_DIGITS
        self.lookback = self.settings.FALLBACK_LOOKBACK_LINES

    def parse(self, text: Optional[str]) -> List[ParsedAttendanceRow]:
        if not text:
            return []
        lines = text.splitlines()

        rows: List[ParsedAttendanceRow] = []
        state = ParserState.SEEKING_HEADER
        code: Optional[str] = None
        name = ""
        skip_next = False

        for index, raw_line in enumerate(lines):
            if skip_next:
                skip_next = False
                continue
            line = raw_line.strip()
            if not line:
                continue

            if is_date_row(line):
                if code is None:
                    code, name = self._recover_context(lines, index)
                    if code is None:
                        logger.debug("Line %d: date row without employee context", index + 1)
                        continue
                    logger.debug("Line %d: recovered employee %s from preceding lines", index + 1, code)
                    state = ParserState.READING_ROWS
                if state != ParserState.READING_ROWS:
                    logger.debug("Line %d: date row outside a detail table", index + 1)
                    continue
                row = self._parse_row(line, code, name, index + 1)
                if row is not None:
                    rows.append(row)
                continue

            if is_employee_header(line, self.digits):
                code, name = extract_employee_context(line, self.digits)
                state = ParserState.SEEKING_TABLE
                continue

            if is_table_start(line) and code is not None:
                state = ParserState.READING_ROWS
                if index + 1 < len(lines) and is_sub_header(lines[index + 1]):
                    skip_next = True
                continue

            if state == ParserState.READING_ROWS and is_section_title(line):
                state = ParserState.SEEKING_TABLE
                continue

            logger.debug("Line %d ignored in state %s", index + 1, state.value)

        return rows

    def _recover_context(self, lines: List[str], index: int) -> Tuple[Optional[str], str]:
        start = max(0, index - self.lookback)
        for candidate in reversed(lines[start:index]):
            if is_date_row(candidate.strip()):
                continue
            code, name = extract_employee_context(candidate, self.digits)
            if code is not None:
                return code, name
        return None, ""

    def _parse_row(
        self, line: str, code: str, name: str, line_number: int
    ) -> Optional[ParsedAttendanceRow]:
        parts = line.split(",")
        day = parse_export_date(parts[0].strip())
        if day is None:
            logger.debug("Line %d: invalid date %r", line_number, parts[0])
            return None

        check_in = normalize_time_field(parts[2]) if len(parts) > 2 else ""
        check_out = normalize_time_field(parts[3]) if len(parts) > 3 else ""
        if not check_in and not check_out:
            return None

        return ParsedAttendanceRow(
            employee_code=code,
            employee_name=name,
            date=day,
            check_in=check_in,
            check_out=check_out,
            line_number=line_number,
        )


def parse_attendance_export(
    text: Optional[str], settings: Optional[AttendanceSettings] = None
) -> List[ParsedAttendanceRow]:
    """Parse a block export into daily rows. Never raises."""
    try:
        return AttendanceExportParser(settings).parse(text)
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("Attendance export could not be parsed: %s", exc)
        return []

