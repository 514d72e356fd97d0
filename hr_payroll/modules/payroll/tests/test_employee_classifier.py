import pytest

from ..enums.payroll_enums import EmploymentCategory
from ..services.employee_classifier import classify_employee, count_dependents, is_married


class TestClassifyEmployee:

    @pytest.mark.parametrize(
        "title,category",
        [
            ("Intern Developer", EmploymentCategory.INTERN),
            ("Nhân viên thực tập", EmploymentCategory.INTERN),
            ("THUC TAP SINH", EmploymentCategory.INTERN),
            ("Kế toán thử việc", EmploymentCategory.PROBATION),
            ("Sales (Probation)", EmploymentCategory.PROBATION),
            ("Thực tập thử việc", EmploymentCategory.INTERN),
            ("Senior Engineer", EmploymentCategory.REGULAR),
            ("", EmploymentCategory.REGULAR),
            (None, EmploymentCategory.REGULAR),
        ],
    )
    def test_keywords(self, title, category):
        assert classify_employee(title) == category


class TestDependents:

    @pytest.mark.parametrize(
        "status,married",
        [
            ("Đã kết hôn", True),
            ("married", True),
            ("Married", True),
            ("Chưa kết hôn", False),
            ("unmarried", False),
            ("single", False),
            (None, False),
        ],
    )
    def test_is_married(self, status, married):
        assert is_married(status) is married

    def test_derived_from_marital_status_and_children(self):
        assert count_dependents(None, "Đã kết hôn", 2) == 3
        assert count_dependents(None, "Chưa kết hôn", 1) == 1
        assert count_dependents(None, None, 0) == 0

    def test_explicit_count_wins(self):
        assert count_dependents(0, "married", 2) == 0
        assert count_dependents(4, None, 0) == 4
