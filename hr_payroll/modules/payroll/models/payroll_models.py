from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Date,
    Boolean,
    Enum,
    JSON,
    UniqueConstraint,
    Index,
)

from ....core.database import Base
from ....core.mixins import TimestampMixin
from ..enums.payroll_enums import EmploymentCategory, PayrollRecordStatus


class PayrollRecord(Base, TimestampMixin):
    __tablename__ = "payroll_records"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(String(64), nullable=False, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    employee_code = Column(String(20), nullable=True)
    employee_name = Column(String(200), nullable=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    employment_category = Column(
        Enum(EmploymentCategory, values_callable=lambda obj: [e.value for e in obj], native_enum=False),
        nullable=False,
    )
    status = Column(
        Enum(PayrollRecordStatus, values_callable=lambda obj: [e.value for e in obj], native_enum=False),
        default=PayrollRecordStatus.CALCULATED,
        nullable=False,
    )

    # Attendance
    working_days = Column(Numeric(5, 2), nullable=False)
    present_days = Column(Numeric(5, 2), nullable=False)
    attendance_ratio = Column(Numeric(8, 6), nullable=False)
    weekday_overtime_hours = Column(Numeric(6, 2), default=0, nullable=False)
    weekend_overtime_hours = Column(Numeric(6, 2), default=0, nullable=False)

    # Earnings
    base_salary = Column(Numeric(14, 0), nullable=False)
    effective_base_salary = Column(Numeric(14, 0), nullable=False)
    actual_base_salary = Column(Numeric(14, 0), nullable=False)
    standard_daily_rate = Column(Numeric(14, 0), nullable=False)
    allowance_breakdown = Column(JSON, nullable=True)
    fixed_allowances_total = Column(Numeric(14, 0), default=0, nullable=False)
    additional_allowances_total = Column(Numeric(14, 0), default=0, nullable=False)
    total_allowances = Column(Numeric(14, 0), default=0, nullable=False)
    total_bonuses = Column(Numeric(14, 0), default=0, nullable=False)
    overtime_weekday_pay = Column(Numeric(14, 0), default=0, nullable=False)
    overtime_weekend_pay = Column(Numeric(14, 0), default=0, nullable=False)
    total_overtime_pay = Column(Numeric(14, 0), default=0, nullable=False)
    gross_salary = Column(Numeric(14, 0), nullable=False)

    # Insurance (employee side)
    insurance_base = Column(Numeric(14, 0), default=0, nullable=False)
    unemployment_insurance_base = Column(Numeric(14, 0), default=0, nullable=False)
    social_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    health_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    unemployment_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    union_fee = Column(Numeric(14, 0), default=0, nullable=False)
    total_insurance = Column(Numeric(14, 0), default=0, nullable=False)

    # Insurance (employer side)
    employer_social_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    employer_health_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    employer_unemployment_insurance = Column(Numeric(14, 0), default=0, nullable=False)
    employer_union_fee = Column(Numeric(14, 0), default=0, nullable=False)
    total_employer_insurance = Column(Numeric(14, 0), default=0, nullable=False)

    # Tax
    dependents = Column(Integer, default=0, nullable=False)
    meal_allowance_exempt = Column(Numeric(14, 0), default=0, nullable=False)
    income_for_tax = Column(Numeric(14, 0), default=0, nullable=False)
    personal_deduction = Column(Numeric(14, 0), default=0, nullable=False)
    dependent_deduction_total = Column(Numeric(14, 0), default=0, nullable=False)
    taxable_income = Column(Numeric(14, 0), default=0, nullable=False)
    income_tax = Column(Numeric(14, 0), default=0, nullable=False)
    progressive_tax = Column(Boolean, default=False, nullable=False)

    total_deductions = Column(Numeric(14, 0), nullable=False)
    net_salary = Column(Numeric(14, 0), nullable=False)

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
        Index("ix_payroll_records_period", "year", "month"),
    )


class SalaryRegulation(Base, TimestampMixin):
    __tablename__ = "salary_regulations"

    id = Column(Integer, primary_key=True, index=True)
    effective_date = Column(Date, nullable=False, index=True)

    working_days_per_month = Column(Numeric(5, 2), nullable=True)
    working_hours_per_day = Column(Numeric(4, 2), nullable=True)
    overtime_weekday_rate = Column(Numeric(6, 2), nullable=True)
    overtime_weekend_rate = Column(Numeric(6, 2), nullable=True)

    social_insurance_rate = Column(Numeric(5, 2), nullable=True)
    health_insurance_rate = Column(Numeric(5, 2), nullable=True)
    unemployment_insurance_rate = Column(Numeric(5, 2), nullable=True)
    union_fee_rate = Column(Numeric(5, 2), nullable=True)
    employer_social_insurance_rate = Column(Numeric(5, 2), nullable=True)
    employer_health_insurance_rate = Column(Numeric(5, 2), nullable=True)
    employer_unemployment_insurance_rate = Column(Numeric(5, 2), nullable=True)
    employer_union_fee_rate = Column(Numeric(5, 2), nullable=True)

    insurance_salary_cap = Column(Numeric(14, 0), nullable=True)
    unemployment_insurance_salary_cap = Column(Numeric(14, 0), nullable=True)

    personal_deduction = Column(Numeric(14, 0), nullable=True)
    dependent_deduction = Column(Numeric(14, 0), nullable=True)
    flat_tax_rate = Column(Numeric(5, 2), nullable=True)
    progressive_tax_enabled = Column(Boolean, nullable=True)
    probation_salary_rate = Column(Numeric(5, 2), nullable=True)
