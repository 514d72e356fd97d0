# hr_payroll/modules/payroll/schemas/error_schemas.py

"""
Structured error details for payroll exceptions.
"""

from pydantic import BaseModel
from typing import Optional


class ErrorDetail(BaseModel):
    """Detailed error information"""

    field: Optional[str] = None
    message: str
    code: Optional[str] = None


class PayrollErrorCodes:
    """Centralized error codes for payroll module"""

    # Validation errors
    INVALID_AMOUNT = "PAYROLL_INVALID_AMOUNT"

    # Calculation errors
    CALCULATION_FAILED = "PAYROLL_CALCULATION_FAILED"

    # Configuration errors
    INVALID_CONFIG_VALUE = "PAYROLL_INVALID_CONFIG_VALUE"

    # Batch errors
    BATCH_PROCESSING_ERROR = "PAYROLL_BATCH_PROCESSING_ERROR"
    BATCH_CANCELLED = "PAYROLL_BATCH_CANCELLED"

    # Database errors
    DATABASE_ERROR = "PAYROLL_DATABASE_ERROR"
    RECORD_NOT_FOUND = "PAYROLL_RECORD_NOT_FOUND"
