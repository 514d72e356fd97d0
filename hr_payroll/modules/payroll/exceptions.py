# hr_payroll/modules/payroll/exceptions.py

"""
Custom exceptions for payroll module.
"""

from typing import Optional, List, Any
from .schemas.error_schemas import ErrorDetail, PayrollErrorCodes


class PayrollException(Exception):
    """Base exception for payroll module"""
    def __init__(
        self,
        message: str,
        code: str = PayrollErrorCodes.DATABASE_ERROR,
        details: Optional[List[ErrorDetail]] = None,
        status_code: int = 400
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.status_code = status_code


class PayrollValidationError(PayrollException):
    """Validation error for payroll operations"""
    def __init__(self, message: str, field: Optional[str] = None, details: Optional[List[ErrorDetail]] = None):
        if field and not details:
            details = [ErrorDetail(field=field, message=message)]
        super().__init__(
            message=message,
            code=PayrollErrorCodes.INVALID_AMOUNT,
            details=details,
            status_code=422
        )


class PayrollCalculationError(PayrollException):
    """Error during payroll calculations"""
    def __init__(self, message: str, employee_id: Optional[int] = None, details: Optional[List[ErrorDetail]] = None):
        if employee_id is not None and not details:
            details = [ErrorDetail(field="employee_id", message=str(employee_id))]
        super().__init__(
            message=message,
            code=PayrollErrorCodes.CALCULATION_FAILED,
            details=details,
            status_code=400
        )


class PayrollConfigurationError(PayrollException):
    """Configuration-related errors"""
    def __init__(self, message: str, config_key: Optional[str] = None):
        details = []
        if config_key:
            details.append(ErrorDetail(field=config_key, message=message))
        super().__init__(
            message=message,
            code=PayrollErrorCodes.INVALID_CONFIG_VALUE,
            details=details,
            status_code=400
        )


class PayrollNotFoundError(PayrollException):
    """Resource not found error"""
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} with identifier {identifier} not found",
            code=PayrollErrorCodes.RECORD_NOT_FOUND,
            status_code=404
        )


class BatchProcessingError(PayrollException):
    """Error during batch processing operations"""
    def __init__(self, message: str, batch_id: Optional[str] = None, details: Optional[List[ErrorDetail]] = None):
        if batch_id:
            message = f"Batch {batch_id}: {message}"
        super().__init__(
            message=message,
            code=PayrollErrorCodes.BATCH_PROCESSING_ERROR,
            details=details,
            status_code=500
        )


class BatchCancelledError(PayrollException):
    """Raised when saving a batch whose run was cancelled"""
    def __init__(self, batch_id: str):
        super().__init__(
            message=f"Batch {batch_id} was cancelled and cannot be saved",
            code=PayrollErrorCodes.BATCH_CANCELLED,
            status_code=409
        )


class PayrollPersistenceError(PayrollException):
    """Database write failed; the transaction was rolled back"""
    def __init__(self, message: str, original: Optional[Exception] = None):
        details = []
        if original is not None:
            details.append(ErrorDetail(message=str(original), code=type(original).__name__))
        super().__init__(
            message=message,
            code=PayrollErrorCodes.DATABASE_ERROR,
            details=details,
            status_code=500
        )
