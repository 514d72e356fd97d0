# hr_payroll/modules/payroll/services/payroll_tax_engine.py

"""
Personal income tax calculation.

Progressive taxation is bracket-marginal: each bracket taxes only the
slice of income that falls inside it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from ..exceptions import PayrollCalculationError
from ..schemas.payroll_schemas import SalaryRegulations

ZERO = Decimal("0")

# (lower bound, upper bound or None for unbounded, marginal rate %)
TAX_BRACKETS: Tuple[Tuple[Decimal, Optional[Decimal], Decimal], ...] = (
    (Decimal("0"), Decimal("5000000"), Decimal("5")),
    (Decimal("5000000"), Decimal("10000000"), Decimal("10")),
    (Decimal("10000000"), Decimal("18000000"), Decimal("15")),
    (Decimal("18000000"), Decimal("32000000"), Decimal("20")),
    (Decimal("32000000"), Decimal("52000000"), Decimal("25")),
    (Decimal("52000000"), Decimal("80000000"), Decimal("30")),
    (Decimal("80000000"), None, Decimal("35")),
)


@dataclass(frozen=True)
class TaxBracketContribution:
    """Tax owed on the slice of income inside one bracket."""

    lower: Decimal
    upper: Optional[Decimal]
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


def progressive_tax_breakdown(taxable_income: Decimal) -> List[TaxBracketContribution]:
    """Per-bracket contributions, in ascending bracket order, up to the income."""
    remaining = Decimal(taxable_income)
    contributions = []
    for lower, upper, rate in TAX_BRACKETS:
        if remaining <= 0:
            break
        width = remaining if upper is None else upper - lower
        amount = min(remaining, width)
        contributions.append(
            TaxBracketContribution(
                lower=lower,
                upper=upper,
                rate=rate,
                taxable_amount=amount,
                tax=amount * rate / 100,
            )
        )
        remaining -= amount
    return contributions


def calculate_progressive_tax(taxable_income: Decimal) -> Decimal:
    """
    Bracket-marginal tax.

    Examples:
        4,000,000  -> 200,000
        15,000,000 -> 250,000 + 500,000 + 750,000 = 1,500,000
    """
    return sum((c.tax for c in progressive_tax_breakdown(taxable_income)), ZERO)


def calculate_flat_tax(taxable_income: Decimal, rate: Decimal = Decimal("10")) -> Decimal:
    return max(ZERO, Decimal(taxable_income)) * rate / 100


class PayrollTaxEngine:
    """
    Selects and applies the tax method for a calculation branch.
    """

    def __init__(self, regulations: SalaryRegulations):
        self.regulations = regulations

    def calculate(self, taxable_income: Decimal, force_flat: bool = False) -> Tuple[Decimal, bool]:
        """
        Calculate income tax.

        Args:
            taxable_income: Income after deductions
            force_flat: Always use the flat rate (intern and probation branches)

        Returns:
            (tax, progressive_used)
        """
        if taxable_income < 0:
            raise PayrollCalculationError(f"Taxable income cannot be negative: {taxable_income}")

        if self.regulations.progressive_tax_enabled and not force_flat:
            return calculate_progressive_tax(taxable_income), True
        return calculate_flat_tax(taxable_income, self.regulations.flat_tax_rate), False
