"""
Test factories for payroll module.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from ...attendance.schemas.attendance_schemas import AttendanceSummary
from ..enums.payroll_enums import AllowanceCategory
from ..schemas.payroll_schemas import EmployeeCompensationProfile


@dataclass
class CompensationProfileFactory:
    employee_id: int = 1
    employee_code: str = "NV00001"
    employee_name: str = "Test Employee"
    position_title: str = "Accountant"
    base_salary: Decimal = Decimal("10000000")
    allowances: Dict[AllowanceCategory, Decimal] = field(default_factory=dict)
    additional_allowances: Dict[str, Decimal] = field(default_factory=dict)
    bonuses: Dict[str, Decimal] = field(default_factory=dict)
    dependents: Optional[int] = None
    marital_status: Optional[str] = None
    children_count: int = 0
    personal_deduction_override: Optional[Decimal] = None

    def create(self) -> EmployeeCompensationProfile:
        return EmployeeCompensationProfile(
            employee_id=self.employee_id,
            employee_code=self.employee_code,
            employee_name=self.employee_name,
            position_title=self.position_title,
            base_salary=self.base_salary,
            allowances=self.allowances,
            additional_allowances=self.additional_allowances,
            bonuses=self.bonuses,
            dependents=self.dependents,
            marital_status=self.marital_status,
            children_count=self.children_count,
            personal_deduction_override=self.personal_deduction_override,
        )


@dataclass
class AttendanceSummaryFactory:
    employee_id: int = 1
    month: int = 12
    year: int = 2024
    present_days: Decimal = Decimal("22")
    weekday_overtime_hours: Decimal = Decimal("0")
    weekend_overtime_hours: Decimal = Decimal("0")

    def create(self) -> AttendanceSummary:
        return AttendanceSummary(
            employee_id=self.employee_id,
            month=self.month,
            year=self.year,
            total_work_days=self.present_days,
            present_days=self.present_days,
            weekday_overtime_hours=self.weekday_overtime_hours,
            weekend_overtime_hours=self.weekend_overtime_hours,
            total_overtime_hours=self.weekday_overtime_hours + self.weekend_overtime_hours,
        )
