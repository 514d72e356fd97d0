import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from ..exceptions import PayrollConfigurationError
from ..schemas.payroll_schemas import EmployeeCompensationProfile, SalaryRegulations
from ..services.payroll_configuration_service import (
    PayrollConfigurationService,
    SalaryRegulationRepository,
    regulations_from_row,
)


class TestSalaryRegulationDefaults:

    def test_defaults(self):
        regs = SalaryRegulations()

        assert regs.working_days_per_month == Decimal("22")
        assert regs.working_hours_per_day == Decimal("8")
        assert regs.overtime_weekday_rate == Decimal("150")
        assert regs.overtime_weekend_rate == Decimal("200")
        assert regs.total_employee_insurance_rate == Decimal("10.5")
        assert regs.insurance_salary_cap is None
        assert regs.unemployment_insurance_salary_cap is None
        assert regs.personal_deduction == Decimal("11000000")
        assert regs.dependent_deduction == Decimal("4400000")
        assert regs.probation_salary_rate == Decimal("85")
        assert regs.progressive_tax_enabled is True

    def test_missing_and_null_fields_fall_back(self):
        regs = SalaryRegulations(
            working_days_per_month=None,
            overtime_weekday_rate="",
            working_hours_per_day=0,
            insurance_salary_cap=Decimal("-1"),
            social_insurance_rate=Decimal("7"),
        )

        assert regs.working_days_per_month == Decimal("22")
        assert regs.overtime_weekday_rate == Decimal("150")
        assert regs.working_hours_per_day == Decimal("8")
        assert regs.insurance_salary_cap is None
        assert regs.social_insurance_rate == Decimal("7")

    def test_negative_rate_is_rejected(self):
        with pytest.raises(ValidationError):
            SalaryRegulations(health_insurance_rate=Decimal("-1"))

    def test_profile_category_is_derived(self):
        profile = EmployeeCompensationProfile(
            employee_id=1, base_salary=Decimal("1"), position_title="Intern"
        )
        assert profile.employment_category.value == "intern"


class TestPayrollConfigurationService:

    def test_defaults_without_rows(self, db_session, caplog):
        service = PayrollConfigurationService(db_session)

        with caplog.at_level("WARNING"):
            regs = service.get_latest_regulations(date(2024, 12, 1))

        assert regs == SalaryRegulations()
        assert "using defaults" in caplog.text

    def test_latest_effective_row_wins(self, db_session):
        repository = SalaryRegulationRepository(db_session)
        repository.create(date(2024, 1, 1), working_days_per_month=Decimal("26"))
        repository.create(date(2024, 7, 1), working_days_per_month=Decimal("24"))
        service = PayrollConfigurationService(db_session)

        assert service.get_latest_regulations(date(2024, 3, 1)).working_days_per_month == Decimal("26")
        assert service.get_latest_regulations(date(2024, 12, 1)).working_days_per_month == Decimal("24")
        assert service.get_latest_regulations(date(2023, 12, 31)) == SalaryRegulations()

    def test_same_effective_date_newest_created_wins(self, db_session):
        repository = SalaryRegulationRepository(db_session)
        repository.create(date(2024, 1, 1), overtime_weekday_rate=Decimal("150"))
        repository.create(date(2024, 1, 1), overtime_weekday_rate=Decimal("175"))

        regs = PayrollConfigurationService(db_session).get_latest_regulations(date(2024, 6, 1))

        assert regs.overtime_weekday_rate == Decimal("175")

    def test_partial_row_keeps_other_defaults(self, db_session):
        SalaryRegulationRepository(db_session).create(
            date(2024, 1, 1), personal_deduction=Decimal("15500000"), progressive_tax_enabled=False
        )

        regs = PayrollConfigurationService(db_session).get_latest_regulations(date(2024, 6, 1))

        assert regs.personal_deduction == Decimal("15500000")
        assert regs.progressive_tax_enabled is False
        assert regs.dependent_deduction == Decimal("4400000")
        assert regs.effective_date == date(2024, 1, 1)

    def test_unknown_field(self, db_session):
        with pytest.raises(ValueError):
            SalaryRegulationRepository(db_session).create(date(2024, 1, 1), bogus_rate=Decimal("1"))

    def test_invalid_row_raises_configuration_error(self, db_session):
        row = SalaryRegulationRepository(db_session).create(
            date(2024, 1, 1), flat_tax_rate=Decimal("-10")
        )

        with pytest.raises(PayrollConfigurationError) as exc_info:
            regulations_from_row(row)

        assert exc_info.value.details[0].field == "flat_tax_rate"
