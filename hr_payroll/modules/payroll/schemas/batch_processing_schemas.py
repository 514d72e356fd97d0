# hr_payroll/modules/payroll/schemas/batch_processing_schemas.py

"""
Batch processing schemas.

A PayrollBatch is the in-memory outcome of a batch run. Nothing in it is
persisted until save_batch() is called explicitly.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Tuple
from datetime import datetime
from decimal import Decimal

from ..enums.payroll_enums import BatchSaveOutcome
from .payroll_schemas import PayrollCalculationResult, SalaryRegulations


class EmployeePayrollError(BaseModel):
    """Failure computing one employee within a batch."""

    employee_id: int
    error_message: str
    error_code: Optional[str] = None


class BatchTotals(BaseModel):
    """Whole-unit totals across a batch, as shown on the batch summary."""

    employee_count: int = 0
    total_gross: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")
    total_employer_insurance: Decimal = Decimal("0")


class PayrollBatch(BaseModel):
    """Results of one batch run for a month."""

    batch_id: str = Field(..., description="Unique identifier for the batch run")
    month: int = Field(..., ge=1, le=12)
    year: int
    regulations: SalaryRegulations
    results: List[PayrollCalculationResult] = Field(default_factory=list)
    errors: List[EmployeePayrollError] = Field(default_factory=list)
    requested_count: int = 0
    cancelled: bool = False
    computed_at: datetime

    @property
    def is_complete(self) -> bool:
        return not self.cancelled and not self.errors and len(self.results) == self.requested_count

    def keys(self) -> List[Tuple[int, int, int]]:
        return [result.key for result in self.results]

    def totals(self) -> BatchTotals:
        rounded = [result.rounded() for result in self.results]
        return BatchTotals(
            employee_count=len(rounded),
            total_gross=sum((r.gross_salary for r in rounded), Decimal("0")),
            total_deductions=sum((r.total_deductions for r in rounded), Decimal("0")),
            total_net=sum((r.net_salary for r in rounded), Decimal("0")),
            total_employer_insurance=sum((r.total_employer_insurance for r in rounded), Decimal("0")),
        )


class BatchSaveResult(BaseModel):
    """Outcome of persisting a batch."""

    batch_id: str
    outcome: BatchSaveOutcome
    saved_count: int = 0
    conflicting_employee_ids: List[int] = Field(default_factory=list)

    @property
    def is_conflict(self) -> bool:
        return self.outcome == BatchSaveOutcome.CONFLICT
