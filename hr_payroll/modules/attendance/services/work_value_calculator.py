# hr_payroll/modules/attendance/services/work_value_calculator.py

"""
Work value calculation for a single attendance day.

Turns a raw check-in/check-out pair into lateness, early departure,
the worked fraction of a standard day ("work value") and overtime hours,
measured against the standard workday configured in AttendanceSettings.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from ..config.attendance_config import AttendanceSettings, get_attendance_settings
from ..enums.attendance_enums import AttendanceStatus
from ..schemas.attendance_schemas import AttendanceRecord
from ..utils.text_utils import day_of_week_label

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?$")

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
ONE = Decimal("1.00")

TimeInput = Union[str, time, None]


@dataclass(frozen=True)
class WorkDayMetrics:
    """Derived figures for one day with both timestamps known."""

    work_value: Decimal
    late_minutes: int
    early_minutes: int
    worked_hours: Decimal
    overtime_hours: Decimal
    status: AttendanceStatus
    checkout_inferred: bool = False

    @property
    def total_minutes(self) -> int:
        return to_total_minutes(self.work_value)


def parse_time_of_day(value: TimeInput) -> Optional[time]:
    """
    Parse 'H:MM', 'HH:MM' or 'HH:MM:SS'.

    Out-of-range components and unparseable text yield None; an invalid
    time is treated exactly like a missing one.
    """
    if value is None:
        return None
    if isinstance(value, time):
        return value

    match = _TIME_PATTERN.match(value.strip())
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    if hour > 23 or minute > 59 or second > 59:
        return None
    return time(hour, minute, second)


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


def is_weekend(day: date, settings: Optional[AttendanceSettings] = None) -> bool:
    settings = settings or get_attendance_settings()
    return day.weekday() in settings.WEEKEND_WEEKDAYS


def to_total_minutes(work_value: Decimal, settings: Optional[AttendanceSettings] = None) -> int:
    settings = settings or get_attendance_settings()
    minutes = Decimal(work_value) * settings.minutes_per_standard_day
    return int(minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def determine_status(work_value: Decimal, weekend: bool) -> AttendanceStatus:
    if work_value <= 0:
        return AttendanceStatus.ABSENT
    if weekend:
        return AttendanceStatus.WEEKEND_OVERTIME
    if work_value >= 1:
        return AttendanceStatus.PRESENT_FULL
    return AttendanceStatus.PRESENT_HALF


def calculate_overtime_hours(
    worked_hours: Decimal,
    work_value: Decimal,
    weekend: bool,
    standard_hours: int = 8,
) -> Decimal:
    """Weekend: every worked hour. Weekday: hours beyond the standard day, full days only."""
    if weekend:
        if work_value > 0:
            return worked_hours.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        return ZERO
    if work_value >= 1:
        extra = max(Decimal("0"), worked_hours - standard_hours)
        return extra.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return ZERO


def calculate_work_value(
    check_in: time,
    check_out: time,
    day: date,
    settings: Optional[AttendanceSettings] = None,
) -> WorkDayMetrics:
    """
    Compute work value, lateness, early departure and overtime.

    Args:
        check_in: Observed check-in time of day
        check_out: Observed (or assumed) check-out time of day
        day: Calendar date, used for weekend detection

    Returns:
        WorkDayMetrics with work_value in [0.00, 1.00]
    """
    settings = settings or get_attendance_settings()

    in_minutes = minutes_of_day(check_in)
    out_minutes = minutes_of_day(check_out)
    late_minutes = max(0, in_minutes - settings.workday_start_minutes)
    early_minutes = max(0, settings.workday_end_minutes - out_minutes)

    elapsed = datetime.combine(day, check_out) - datetime.combine(day, check_in)
    # Inverted inputs give a negative span
    worked_hours = max(Decimal("0"), Decimal(int(elapsed.total_seconds())) / Decimal(3600))

    work_value = (worked_hours / settings.STANDARD_WORK_HOURS).quantize(
        TWO_PLACES, rounding=ROUND_HALF_UP
    )
    work_value = min(ONE, max(ZERO, work_value))

    weekend = is_weekend(day, settings)
    return WorkDayMetrics(
        work_value=work_value,
        late_minutes=late_minutes,
        early_minutes=early_minutes,
        worked_hours=worked_hours,
        overtime_hours=calculate_overtime_hours(
            worked_hours, work_value, weekend, settings.STANDARD_WORK_HOURS
        ),
        status=determine_status(work_value, weekend),
    )


def estimate_work_value(
    check_in: TimeInput,
    check_out: TimeInput,
    day: date,
    settings: Optional[AttendanceSettings] = None,
) -> Optional[WorkDayMetrics]:
    """
    Estimate the day's figures for display.

    A missing checkout is assumed to be the end of the standard workday and
    the result is flagged checkout_inferred. Returns None without a usable
    check-in.
    """
    settings = settings or get_attendance_settings()
    parsed_in = parse_time_of_day(check_in)
    if parsed_in is None:
        return None

    parsed_out = parse_time_of_day(check_out)
    if parsed_out is not None:
        return calculate_work_value(parsed_in, parsed_out, day, settings)

    metrics = calculate_work_value(parsed_in, settings.WORKDAY_END, day, settings)
    return WorkDayMetrics(
        work_value=metrics.work_value,
        late_minutes=metrics.late_minutes,
        early_minutes=metrics.early_minutes,
        worked_hours=metrics.worked_hours,
        overtime_hours=metrics.overtime_hours,
        status=metrics.status,
        checkout_inferred=True,
    )


def _as_datetime(day: date, value: Optional[time]) -> Optional[datetime]:
    return datetime.combine(day, value) if value is not None else None


def build_attendance_record(
    employee_id: int,
    day: date,
    check_in: TimeInput,
    check_out: TimeInput,
    confirm_inferred_checkout: bool = False,
    record_id: Optional[int] = None,
    notes: Optional[str] = None,
    work_value: Optional[Decimal] = None,
    late_minutes: Optional[Decimal] = None,
    early_minutes: Optional[Decimal] = None,
    overtime_hours: Optional[Decimal] = None,
    settings: Optional[AttendanceSettings] = None,
) -> AttendanceRecord:
    """
    Build the persisted AttendanceRecord for one day.

    A record with only one timestamp is incomplete: work value 0, status
    absent, no late/early/overtime, but the observed timestamp is kept.
    A check-in without checkout is marked with the inferred-checkout note;
    confirm_inferred_checkout writes the end of the workday explicitly
    instead. Explicit figures (operator overrides) replace the computed
    ones for complete records only.
    """
    settings = settings or get_attendance_settings()
    parsed_in = parse_time_of_day(check_in)
    parsed_out = parse_time_of_day(check_out)

    if parsed_in is not None and parsed_out is None:
        if confirm_inferred_checkout:
            parsed_out = settings.WORKDAY_END
        else:
            notes = settings.INFERRED_CHECKOUT_MARKER

    base = dict(
        id=record_id,
        employee_id=employee_id,
        date=day,
        check_in_time=_as_datetime(day, parsed_in),
        check_out_time=_as_datetime(day, parsed_out),
        notes=notes,
        day_of_week=day_of_week_label(day),
    )

    if parsed_in is None or parsed_out is None:
        return AttendanceRecord(**base)

    metrics = calculate_work_value(parsed_in, parsed_out, day, settings)
    value = metrics.work_value
    if work_value is not None:
        value = min(ONE, max(ZERO, Decimal(work_value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)))

    late = metrics.late_minutes
    if late_minutes is not None:
        late = max(0, int(Decimal(late_minutes).quantize(Decimal("1"), rounding=ROUND_HALF_UP)))

    early = metrics.early_minutes
    if early_minutes is not None:
        early = max(0, int(Decimal(early_minutes).quantize(Decimal("1"), rounding=ROUND_HALF_UP)))

    overtime = metrics.overtime_hours
    if overtime_hours is not None:
        overtime = max(ZERO, Decimal(overtime_hours).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))

    return AttendanceRecord(
        **base,
        work_value=value,
        late_minutes=late,
        early_minutes=early,
        overtime_hours=overtime,
        total_minutes=to_total_minutes(value, settings),
        status=determine_status(value, is_weekend(day, settings)),
    )
