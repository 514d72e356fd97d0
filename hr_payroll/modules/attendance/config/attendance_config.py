# hr_payroll/modules/attendance/config/attendance_config.py

from datetime import time
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class AttendanceSettings(BaseSettings):
    """
    Configuration for the standard workday and attendance import heuristics.

    The standard workday is the reference window against which lateness,
    early departure and overtime are measured.
    """

    model_config = SettingsConfigDict(env_prefix="ATTENDANCE_", case_sensitive=False)

    # Standard workday 08:30 - 17:30, 8 working hours net of lunch
    WORKDAY_START: time = time(8, 30)
    WORKDAY_END: time = time(17, 30)
    STANDARD_WORK_HOURS: int = 8

    # Python weekday numbers (Monday=0): Saturday and Sunday
    WEEKEND_WEEKDAYS: List[int] = [5, 6]

    # Stored in AttendanceRecord.notes when checkout was assumed, not observed
    INFERRED_CHECKOUT_MARKER: str = "auto_checkout_17:30"

    # Export parser heuristics
    EMPLOYEE_CODE_DIGITS: int = 5
    FALLBACK_LOOKBACK_LINES: int = 8

    @property
    def workday_start_minutes(self) -> int:
        return self.WORKDAY_START.hour * 60 + self.WORKDAY_START.minute

    @property
    def workday_end_minutes(self) -> int:
        return self.WORKDAY_END.hour * 60 + self.WORKDAY_END.minute

    @property
    def minutes_per_standard_day(self) -> int:
        return self.STANDARD_WORK_HOURS * 60


@lru_cache()
def get_attendance_settings() -> AttendanceSettings:
    """Get the attendance configuration."""
    return AttendanceSettings()
