# hr_payroll/modules/attendance/services/attendance_store.py

"""
Attendance persistence contract and its SQLAlchemy implementation.

The aggregator and import service only depend on the abstract
AttendanceStore; SqlAlchemyAttendanceStore is the shipped implementation.
"""

import calendar
import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import AttendancePersistenceError
from ..enums.attendance_enums import OperationType
from ..models.attendance_models import AttendanceRecordModel
from ..schemas.attendance_schemas import (
    AttendanceRecord,
    LeaveTotals,
    PersistenceOperation,
)

logger = logging.getLogger(__name__)

_RECORD_FIELDS = (
    "employee_id",
    "date",
    "check_in_time",
    "check_out_time",
    "work_value",
    "late_minutes",
    "early_minutes",
    "overtime_hours",
    "total_minutes",
    "status",
    "notes",
    "day_of_week",
)


class AttendanceStore(ABC):
    """Read/write contract for attendance records."""

    @abstractmethod
    def get_month_records(
        self, month: int, year: int, employee_ids: Optional[Iterable[int]] = None
    ) -> List[AttendanceRecord]:
        """Records dated within the month, optionally limited to some employees"""
        pass

    @abstractmethod
    def create_record(self, record: AttendanceRecord) -> AttendanceRecord:
        pass

    @abstractmethod
    def update_record(self, record_id: int, record: AttendanceRecord) -> AttendanceRecord:
        pass

    @abstractmethod
    def apply_operations(self, operations: List[PersistenceOperation]) -> List[AttendanceRecord]:
        """Carry out creates/updates in a single transaction"""
        pass

    @abstractmethod
    def upsert_records(self, records: List[AttendanceRecord]) -> List[AttendanceRecord]:
        """Insert or replace by (employee_id, date) in a single transaction"""
        pass


class LeaveTotalsProvider(ABC):
    """Paid/unpaid leave days, owned by the leave-request collaborator."""

    @abstractmethod
    def get_leave_totals(
        self, employee_ids: List[int], month: int, year: int
    ) -> Dict[int, LeaveTotals]:
        pass


class NoLeaveTotalsProvider(LeaveTotalsProvider):
    """Used when no leave collaborator is wired: every employee has zero leave."""

    def get_leave_totals(self, employee_ids, month, year):
        return {}


def month_bounds(month: int, year: int):
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


class SqlAlchemyAttendanceStore(AttendanceStore):
    """AttendanceStore backed by the attendance_records table."""

    def __init__(self, db: Session):
        self.db = db

    def get_month_records(self, month, year, employee_ids=None):
        start, end = month_bounds(month, year)
        query = self.db.query(AttendanceRecordModel).filter(
            AttendanceRecordModel.date >= start,
            AttendanceRecordModel.date <= end,
        )
        if employee_ids is not None:
            query = query.filter(AttendanceRecordModel.employee_id.in_(list(employee_ids)))
        models = query.order_by(
            AttendanceRecordModel.employee_id, AttendanceRecordModel.date
        ).all()
        return [AttendanceRecord.model_validate(m) for m in models]

    def create_record(self, record):
        saved = self._run_in_transaction(lambda: [self._insert(record)])
        return saved[0]

    def update_record(self, record_id, record):
        saved = self._run_in_transaction(lambda: [self._update(record_id, record)])
        return saved[0]

    def apply_operations(self, operations):
        def work():
            saved = []
            for op in operations:
                if op.operation == OperationType.UPDATE and op.record_id is not None:
                    saved.append(self._update(op.record_id, op.record))
                else:
                    saved.append(self._insert(op.record))
            return saved

        saved = self._run_in_transaction(work)
        logger.info("Applied %d attendance operations", len(saved))
        return saved

    def upsert_records(self, records):
        def work():
            saved = []
            for record in records:
                existing = (
                    self.db.query(AttendanceRecordModel)
                    .filter(
                        AttendanceRecordModel.employee_id == record.employee_id,
                        AttendanceRecordModel.date == record.date,
                    )
                    .first()
                )
                if existing is None:
                    saved.append(self._insert(record))
                else:
                    self._copy_fields(existing, record)
                    saved.append(existing)
            return saved

        saved = self._run_in_transaction(work)
        logger.info("Upserted %d attendance records", len(saved))
        return saved

    def _insert(self, record: AttendanceRecord) -> AttendanceRecordModel:
        model = AttendanceRecordModel()
        self._copy_fields(model, record)
        self.db.add(model)
        self.db.flush()
        return model

    def _update(self, record_id: int, record: AttendanceRecord) -> AttendanceRecordModel:
        model = self.db.get(AttendanceRecordModel, record_id)
        if model is None:
            raise AttendancePersistenceError(f"Attendance record {record_id} not found")
        self._copy_fields(model, record)
        return model

    @staticmethod
    def _copy_fields(model: AttendanceRecordModel, record: AttendanceRecord) -> None:
        for field in _RECORD_FIELDS:
            setattr(model, field, getattr(record, field))

    def _run_in_transaction(self, work) -> List[AttendanceRecord]:
        try:
            models = work()
            self.db.commit()
        except AttendancePersistenceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Attendance write failed: %s", e)
            raise AttendancePersistenceError("Failed to save attendance records", original=e)

        for model in models:
            self.db.refresh(model)
        return [AttendanceRecord.model_validate(m) for m in models]
