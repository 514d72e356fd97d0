# hr_payroll/modules/payroll/services/employee_classifier.py

"""
Employment category classification from the position title.

This is the only place that interprets free-text titles; everything
downstream works with the closed EmploymentCategory enum.
"""

from typing import Optional

from ...attendance.utils.text_utils import fold
from ..enums.payroll_enums import EmploymentCategory

INTERN_KEYWORDS = ("intern", "thuc tap")
PROBATION_KEYWORDS = ("thu viec", "probation")

MARRIED_MARKERS = ("da ket hon", "married")


def classify_employee(position_title: Optional[str]) -> EmploymentCategory:
    """
    Accent- and case-insensitive keyword match on the title.

    Intern keywords win over probation keywords.
    """
    title = fold(position_title or "")
    if any(keyword in title for keyword in INTERN_KEYWORDS):
        return EmploymentCategory.INTERN
    if any(keyword in title for keyword in PROBATION_KEYWORDS):
        return EmploymentCategory.PROBATION
    return EmploymentCategory.REGULAR


def is_married(marital_status: Optional[str]) -> bool:
    status = fold(marital_status or "").strip()
    if status.startswith("un") or status.startswith("chua"):
        return False
    return any(marker in status for marker in MARRIED_MARKERS)


def count_dependents(
    explicit: Optional[int], marital_status: Optional[str], children_count: int = 0
) -> int:
    """Explicit count when supplied, else spouse (if married) plus children."""
    if explicit is not None:
        return max(0, explicit)
    return (1 if is_married(marital_status) else 0) + max(0, children_count or 0)
