# hr_payroll/modules/attendance/exceptions.py

"""
Custom exceptions for attendance module.
"""

from typing import Optional, List, Any, Dict


class AttendanceErrorCodes:
    """Centralized error codes for attendance module"""

    INVALID_TIME = "ATTENDANCE_INVALID_TIME"
    INVALID_DATE = "ATTENDANCE_INVALID_DATE"
    UNKNOWN_FORMAT = "ATTENDANCE_UNKNOWN_FORMAT"
    IMPORT_FAILED = "ATTENDANCE_IMPORT_FAILED"
    DATABASE_ERROR = "ATTENDANCE_DATABASE_ERROR"


class AttendanceException(Exception):
    """Base exception for attendance module"""
    def __init__(
        self,
        message: str,
        code: str = AttendanceErrorCodes.DATABASE_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []


class AttendanceImportError(AttendanceException):
    """Raised when an export cannot be recognised at all"""
    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            code=AttendanceErrorCodes.UNKNOWN_FORMAT,
            details=details,
        )


class AttendancePersistenceError(AttendanceException):
    """Raised when records cannot be written"""
    def __init__(self, message: str, original: Optional[Exception] = None):
        details = []
        if original is not None:
            details.append({"type": type(original).__name__, "message": str(original)})
        super().__init__(
            message=message,
            code=AttendanceErrorCodes.DATABASE_ERROR,
            details=details,
        )
