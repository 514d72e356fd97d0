# hr_payroll/modules/payroll/services/payroll_calculation_engine.py

"""
Payroll calculation engine.

compute() is a pure function of (profile, attendance summary, regulations):
no I/O, no clock, no shared state. Amounts stay unrounded Decimals; the
result rounds to whole currency units only when presented or persisted.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from ...attendance.schemas.attendance_schemas import AttendanceSummary
from ..enums.payroll_enums import AllowanceCategory, EmploymentCategory
from ..exceptions import PayrollCalculationError
from ..schemas.payroll_schemas import (
    EmployeeCompensationProfile,
    PayrollCalculationResult,
    SalaryRegulations,
)
from .employee_classifier import count_dependents
from .payroll_tax_engine import PayrollTaxEngine

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _capped(amount: Decimal, cap: Optional[Decimal]) -> Decimal:
    return amount if cap is None else min(amount, cap)


@dataclass(frozen=True)
class EarningsBreakdown:
    effective_base_salary: Decimal
    actual_base_salary: Decimal
    standard_daily_rate: Decimal
    attendance_ratio: Decimal
    allowance_breakdown: Dict[str, Decimal]
    fixed_allowances_total: Decimal
    additional_allowances_total: Decimal
    total_bonuses: Decimal
    overtime_weekday_pay: Decimal
    overtime_weekend_pay: Decimal

    @property
    def total_allowances(self) -> Decimal:
        return self.fixed_allowances_total + self.additional_allowances_total

    @property
    def total_overtime_pay(self) -> Decimal:
        return self.overtime_weekday_pay + self.overtime_weekend_pay

    @property
    def gross_salary(self) -> Decimal:
        return self.actual_base_salary + self.total_allowances + self.total_bonuses + self.total_overtime_pay


def calculate_earnings(
    profile: EmployeeCompensationProfile,
    summary: AttendanceSummary,
    regulations: SalaryRegulations,
) -> EarningsBreakdown:
    """
    Prorated base salary, allowances, bonuses and overtime pay.

    Probation employees are paid against probation_salary_rate of their
    base salary, for both the prorated base and the overtime daily rate.
    """
    working_days = regulations.working_days_per_month
    hours_per_day = regulations.working_hours_per_day

    effective_base = profile.base_salary
    if profile.employment_category == EmploymentCategory.PROBATION:
        effective_base = profile.base_salary * regulations.probation_salary_rate / HUNDRED

    attendance_ratio = summary.present_days / working_days
    actual_base = effective_base * attendance_ratio
    daily_rate = effective_base / working_days

    allowance_breakdown = {
        category.value: amount * attendance_ratio
        for category, amount in profile.allowances.items()
    }

    weekday_extra = (regulations.overtime_weekday_rate - HUNDRED) / HUNDRED
    weekend_extra = (regulations.overtime_weekend_rate - HUNDRED) / HUNDRED
    weekday_days = summary.weekday_overtime_hours / hours_per_day
    weekend_days = summary.weekend_overtime_hours / hours_per_day

    return EarningsBreakdown(
        effective_base_salary=effective_base,
        actual_base_salary=actual_base,
        standard_daily_rate=daily_rate,
        attendance_ratio=attendance_ratio,
        allowance_breakdown=allowance_breakdown,
        fixed_allowances_total=sum(allowance_breakdown.values(), ZERO),
        additional_allowances_total=sum(profile.additional_allowances.values(), ZERO),
        total_bonuses=sum(profile.bonuses.values(), ZERO),
        overtime_weekday_pay=weekday_days * daily_rate * weekday_extra,
        overtime_weekend_pay=weekend_days * daily_rate * weekend_extra,
    )


class PayrollCalculationEngine:
    """Computes one employee's payslip for one month."""

    def __init__(self, regulations: SalaryRegulations):
        self.regulations = regulations
        self.tax_engine = PayrollTaxEngine(regulations)

    def compute(
        self, profile: EmployeeCompensationProfile, summary: AttendanceSummary
    ) -> PayrollCalculationResult:
        if summary.employee_id != profile.employee_id:
            raise PayrollCalculationError(
                f"Attendance summary for employee {summary.employee_id} "
                f"does not belong to employee {profile.employee_id}",
                employee_id=profile.employee_id,
            )

        earnings = calculate_earnings(profile, summary, self.regulations)
        common = dict(
            employee_id=profile.employee_id,
            employee_code=profile.employee_code,
            employee_name=profile.employee_name,
            month=summary.month,
            year=summary.year,
            employment_category=profile.employment_category,
            working_days=self.regulations.working_days_per_month,
            present_days=summary.present_days,
            attendance_ratio=earnings.attendance_ratio,
            weekday_overtime_hours=summary.weekday_overtime_hours,
            weekend_overtime_hours=summary.weekend_overtime_hours,
            base_salary=profile.base_salary,
            effective_base_salary=earnings.effective_base_salary,
            actual_base_salary=earnings.actual_base_salary,
            standard_daily_rate=earnings.standard_daily_rate,
            allowance_breakdown=earnings.allowance_breakdown,
            fixed_allowances_total=earnings.fixed_allowances_total,
            additional_allowances_total=earnings.additional_allowances_total,
            total_allowances=earnings.total_allowances,
            total_bonuses=earnings.total_bonuses,
            overtime_weekday_pay=earnings.overtime_weekday_pay,
            overtime_weekend_pay=earnings.overtime_weekend_pay,
            total_overtime_pay=earnings.total_overtime_pay,
            gross_salary=earnings.gross_salary,
        )

        if profile.employment_category == EmploymentCategory.REGULAR:
            return self._compute_regular(profile, earnings, common)
        return self._compute_flat_taxed(earnings, common)

    def _compute_flat_taxed(self, earnings: EarningsBreakdown, common: dict) -> PayrollCalculationResult:
        """Intern and probation: no insurance, no deductions, flat tax on gross."""
        gross = earnings.gross_salary
        taxable_income = max(ZERO, gross)
        tax, progressive = self.tax_engine.calculate(taxable_income, force_flat=True)
        return PayrollCalculationResult(
            **common,
            income_for_tax=gross,
            taxable_income=taxable_income,
            income_tax=tax,
            progressive_tax=progressive,
            total_deductions=tax,
            net_salary=gross - tax,
        )

    def _compute_regular(
        self,
        profile: EmployeeCompensationProfile,
        earnings: EarningsBreakdown,
        common: dict,
    ) -> PayrollCalculationResult:
        regs = self.regulations
        gross = earnings.gross_salary

        insurance_base = _capped(profile.base_salary, regs.insurance_salary_cap)
        unemployment_base = _capped(profile.base_salary, regs.unemployment_insurance_salary_cap)

        social = insurance_base * regs.social_insurance_rate / HUNDRED
        health = insurance_base * regs.health_insurance_rate / HUNDRED
        unemployment = unemployment_base * regs.unemployment_insurance_rate / HUNDRED
        union = insurance_base * regs.union_fee_rate / HUNDRED
        total_insurance = social + health + unemployment + union

        employer_social = insurance_base * regs.employer_social_insurance_rate / HUNDRED
        employer_health = insurance_base * regs.employer_health_insurance_rate / HUNDRED
        employer_unemployment = unemployment_base * regs.employer_unemployment_insurance_rate / HUNDRED
        employer_union = insurance_base * regs.employer_union_fee_rate / HUNDRED

        # Meal allowance is tax-exempt up to its prorated value
        meal_exempt = earnings.allowance_breakdown.get(AllowanceCategory.MEAL.value, ZERO)
        income_for_tax = gross - total_insurance - meal_exempt

        personal_deduction = regs.personal_deduction
        if profile.personal_deduction_override and profile.personal_deduction_override > 0:
            personal_deduction = profile.personal_deduction_override
        dependents = count_dependents(profile.dependents, profile.marital_status, profile.children_count)
        dependent_total = dependents * regs.dependent_deduction

        taxable_income = max(ZERO, income_for_tax - personal_deduction - dependent_total)
        tax, progressive = self.tax_engine.calculate(taxable_income)
        total_deductions = total_insurance + tax

        return PayrollCalculationResult(
            **common,
            insurance_base=insurance_base,
            unemployment_insurance_base=unemployment_base,
            social_insurance=social,
            health_insurance=health,
            unemployment_insurance=unemployment,
            union_fee=union,
            total_insurance=total_insurance,
            employer_social_insurance=employer_social,
            employer_health_insurance=employer_health,
            employer_unemployment_insurance=employer_unemployment,
            employer_union_fee=employer_union,
            total_employer_insurance=employer_social + employer_health + employer_unemployment + employer_union,
            dependents=dependents,
            meal_allowance_exempt=meal_exempt,
            income_for_tax=income_for_tax,
            personal_deduction=personal_deduction,
            dependent_deduction_total=dependent_total,
            taxable_income=taxable_income,
            income_tax=tax,
            progressive_tax=progressive,
            total_deductions=total_deductions,
            net_salary=gross - total_deductions,
        )


def compute(
    profile: EmployeeCompensationProfile,
    summary: AttendanceSummary,
    regulations: SalaryRegulations,
) -> PayrollCalculationResult:
    """Compute one employee's PayrollCalculationResult."""
    return PayrollCalculationEngine(regulations).compute(profile, summary)
