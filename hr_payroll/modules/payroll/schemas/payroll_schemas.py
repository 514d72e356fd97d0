# hr_payroll/modules/payroll/schemas/payroll_schemas.py

"""
Payroll calculation schemas: regulations, employee inputs and results.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..enums.payroll_enums import AllowanceCategory, EmploymentCategory
from ..services.employee_classifier import classify_employee

# Baselines and caps that must be positive to be usable
POSITIVE_FIELDS = (
    "working_days_per_month",
    "working_hours_per_day",
    "insurance_salary_cap",
    "unemployment_insurance_salary_cap",
    "probation_salary_rate",
)


class SalaryRegulations(BaseModel):
    """
    Pay regulations for a period. Rates are percentages (150 = 1.5x, 8 = 8%).

    Any field that is missing, null or (for the working-time baselines)
    non-positive falls back to its default.
    """

    model_config = ConfigDict(frozen=True)

    # Working time
    working_days_per_month: Decimal = Field(Decimal("22"), gt=0)
    working_hours_per_day: Decimal = Field(Decimal("8"), gt=0)

    # Overtime multipliers
    overtime_weekday_rate: Decimal = Field(Decimal("150"), ge=0)
    overtime_weekend_rate: Decimal = Field(Decimal("200"), ge=0)

    # Employee-side insurance rates
    social_insurance_rate: Decimal = Field(Decimal("8"), ge=0)
    health_insurance_rate: Decimal = Field(Decimal("1.5"), ge=0)
    unemployment_insurance_rate: Decimal = Field(Decimal("1"), ge=0)
    union_fee_rate: Decimal = Field(Decimal("0"), ge=0)

    # Employer-side insurance rates
    employer_social_insurance_rate: Decimal = Field(Decimal("17.5"), ge=0)
    employer_health_insurance_rate: Decimal = Field(Decimal("3"), ge=0)
    employer_unemployment_insurance_rate: Decimal = Field(Decimal("1"), ge=0)
    employer_union_fee_rate: Decimal = Field(Decimal("0"), ge=0)

    # Insurance salary caps; unset means the full base salary is insured
    insurance_salary_cap: Optional[Decimal] = Field(None, gt=0)
    unemployment_insurance_salary_cap: Optional[Decimal] = Field(None, gt=0)

    # Personal income tax
    personal_deduction: Decimal = Field(Decimal("11000000"), ge=0)
    dependent_deduction: Decimal = Field(Decimal("4400000"), ge=0)
    flat_tax_rate: Decimal = Field(Decimal("10"), ge=0)
    progressive_tax_enabled: bool = True

    probation_salary_rate: Decimal = Field(Decimal("85"), gt=0)

    effective_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if value is None or value == "":
                continue
            if key in POSITIVE_FIELDS and _non_positive(value):
                continue
            cleaned[key] = value
        return cleaned

    @property
    def total_employee_insurance_rate(self) -> Decimal:
        return (
            self.social_insurance_rate
            + self.health_insurance_rate
            + self.unemployment_insurance_rate
            + self.union_fee_rate
        )


def _non_positive(value: Any) -> bool:
    try:
        return Decimal(str(value)) <= 0
    except ArithmeticError:
        return False


class EmployeeCompensationProfile(BaseModel):
    """Per-employee payroll inputs."""

    model_config = ConfigDict(frozen=True)

    employee_id: int
    employee_code: str = ""
    employee_name: str = ""
    position_title: str = ""
    base_salary: Decimal = Field(..., ge=0)

    # Fixed monthly allowances, prorated by attendance
    allowances: Dict[AllowanceCategory, Decimal] = Field(default_factory=dict)
    # Ad-hoc allowances entered on the payroll form, not prorated
    additional_allowances: Dict[str, Decimal] = Field(default_factory=dict)
    bonuses: Dict[str, Decimal] = Field(default_factory=dict)

    dependents: Optional[int] = Field(None, ge=0, description="Explicit dependent count")
    marital_status: Optional[str] = None
    children_count: int = Field(0, ge=0)
    personal_deduction_override: Optional[Decimal] = Field(None, ge=0)

    employment_category: EmploymentCategory = EmploymentCategory.REGULAR

    @model_validator(mode="before")
    @classmethod
    def derive_category(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("employment_category") is None:
            data = dict(data)
            data["employment_category"] = classify_employee(data.get("position_title"))
        return data

    @field_validator("allowances", "additional_allowances", "bonuses")
    @classmethod
    def drop_negative_amounts(cls, v):
        return {key: amount for key, amount in v.items() if amount > 0}


WHOLE_UNIT = Decimal("1")

MONEY_FIELDS = (
    "base_salary",
    "effective_base_salary",
    "actual_base_salary",
    "standard_daily_rate",
    "fixed_allowances_total",
    "additional_allowances_total",
    "total_allowances",
    "total_bonuses",
    "overtime_weekday_pay",
    "overtime_weekend_pay",
    "total_overtime_pay",
    "gross_salary",
    "insurance_base",
    "unemployment_insurance_base",
    "social_insurance",
    "health_insurance",
    "unemployment_insurance",
    "union_fee",
    "total_insurance",
    "employer_social_insurance",
    "employer_health_insurance",
    "employer_unemployment_insurance",
    "employer_union_fee",
    "total_employer_insurance",
    "meal_allowance_exempt",
    "income_for_tax",
    "personal_deduction",
    "dependent_deduction_total",
    "taxable_income",
    "income_tax",
    "total_deductions",
    "net_salary",
)


def round_currency(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


class PayrollCalculationResult(BaseModel):
    """
    Every intermediate and final figure for one employee and month.

    Amounts are kept unrounded; rounded() and to_payroll_record() round
    currency to whole units for presentation and persistence.
    """

    model_config = ConfigDict(frozen=True)

    employee_id: int
    employee_code: str = ""
    employee_name: str = ""
    month: int = Field(..., ge=1, le=12)
    year: int
    employment_category: EmploymentCategory

    # Attendance
    working_days: Decimal
    present_days: Decimal
    attendance_ratio: Decimal
    weekday_overtime_hours: Decimal = Decimal("0")
    weekend_overtime_hours: Decimal = Decimal("0")

    # Earnings
    base_salary: Decimal
    effective_base_salary: Decimal
    actual_base_salary: Decimal
    standard_daily_rate: Decimal
    allowance_breakdown: Dict[str, Decimal] = Field(default_factory=dict)
    fixed_allowances_total: Decimal = Decimal("0")
    additional_allowances_total: Decimal = Decimal("0")
    total_allowances: Decimal = Decimal("0")
    total_bonuses: Decimal = Decimal("0")
    overtime_weekday_pay: Decimal = Decimal("0")
    overtime_weekend_pay: Decimal = Decimal("0")
    total_overtime_pay: Decimal = Decimal("0")
    gross_salary: Decimal

    # Insurance
    insurance_base: Decimal = Decimal("0")
    unemployment_insurance_base: Decimal = Decimal("0")
    social_insurance: Decimal = Decimal("0")
    health_insurance: Decimal = Decimal("0")
    unemployment_insurance: Decimal = Decimal("0")
    union_fee: Decimal = Decimal("0")
    total_insurance: Decimal = Decimal("0")
    employer_social_insurance: Decimal = Decimal("0")
    employer_health_insurance: Decimal = Decimal("0")
    employer_unemployment_insurance: Decimal = Decimal("0")
    employer_union_fee: Decimal = Decimal("0")
    total_employer_insurance: Decimal = Decimal("0")

    # Tax
    dependents: int = 0
    meal_allowance_exempt: Decimal = Decimal("0")
    income_for_tax: Decimal = Decimal("0")
    personal_deduction: Decimal = Decimal("0")
    dependent_deduction_total: Decimal = Decimal("0")
    taxable_income: Decimal = Decimal("0")
    income_tax: Decimal = Decimal("0")
    progressive_tax: bool = False

    total_deductions: Decimal
    net_salary: Decimal

    @property
    def key(self):
        """Payroll batch key."""
        return (self.employee_id, self.month, self.year)

    def rounded(self) -> "PayrollCalculationResult":
        """Copy with currency rounded to whole units."""
        update = {name: round_currency(getattr(self, name)) for name in MONEY_FIELDS}
        update["allowance_breakdown"] = {
            name: round_currency(amount) for name, amount in self.allowance_breakdown.items()
        }
        return self.model_copy(update=update)

    def to_payroll_record(self) -> Dict[str, Any]:
        """Flat row for persistence as a payroll batch record."""
        record = self.rounded().model_dump(exclude={"allowance_breakdown"})
        record["employment_category"] = self.employment_category.value
        record["attendance_ratio"] = self.attendance_ratio.quantize(
            Decimal("0.000001"), rounding=ROUND_HALF_UP
        )
        record["allowance_breakdown"] = {
            name: str(round_currency(amount)) for name, amount in self.allowance_breakdown.items()
        }
        return record
