from enum import Enum


class AttendanceStatus(str, Enum):
    ABSENT = "absent"
    PRESENT_HALF = "present_half"
    PRESENT_FULL = "present_full"
    WEEKEND_OVERTIME = "weekend_overtime"


# Statuses whose work value counts towards worked days
WORKED_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT_FULL,
        AttendanceStatus.PRESENT_HALF,
        AttendanceStatus.WEEKEND_OVERTIME,
    }
)


class ParserState(str, Enum):
    """States of the block export parser."""
    SEEKING_HEADER = "seeking_header"
    SEEKING_TABLE = "seeking_table"
    READING_ROWS = "reading_rows"


class ChangeSource(str, Enum):
    MANUAL = "manual"
    IMPORT = "import"


class OperationType(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class ImportFormat(str, Enum):
    """Attendance file layouts accepted by the import service."""
    AUTO = "auto"
    DAILY = "daily"
    MONTHLY = "monthly"
