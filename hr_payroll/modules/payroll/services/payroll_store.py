# hr_payroll/modules/payroll/services/payroll_store.py

"""
Payroll persistence contract and its SQLAlchemy implementation.

A payroll record is unique per (employee_id, month, year). Writing a
batch that collides with existing records returns a CONFLICT outcome and
writes nothing unless overwrite is requested.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..enums.payroll_enums import BatchSaveOutcome
from ..exceptions import PayrollNotFoundError, PayrollPersistenceError, PayrollValidationError
from ..models.payroll_models import PayrollRecord
from ..schemas.batch_processing_schemas import BatchSaveResult
from ..schemas.payroll_schemas import PayrollCalculationResult

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = frozenset(PayrollRecord.__table__.columns.keys())


class PayrollStore(ABC):
    """Write contract for committed payroll results."""

    @abstractmethod
    def get_payroll_record(self, employee_id: int, month: int, year: int) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def create_payroll_record(self, batch_id: str, result: PayrollCalculationResult) -> int:
        pass

    @abstractmethod
    def update_payroll_record(self, record_id: int, result: PayrollCalculationResult) -> None:
        pass

    @abstractmethod
    def create_payroll_batch(
        self,
        batch_id: str,
        results: List[PayrollCalculationResult],
        overwrite: bool = False,
    ) -> BatchSaveResult:
        """
        Persist all results or none.

        Returns:
            BatchSaveResult with outcome CONFLICT (nothing written) when a key
            exists and overwrite is False, else CREATED or OVERWRITTEN
        """
        pass


def _record_values(batch_id: str, result: PayrollCalculationResult) -> Dict[str, Any]:
    values = {k: v for k, v in result.to_payroll_record().items() if k in _RECORD_COLUMNS}
    values["employment_category"] = result.employment_category
    values["batch_id"] = batch_id
    return values


def _row_to_dict(row: PayrollRecord) -> Dict[str, Any]:
    return {column: getattr(row, column) for column in _RECORD_COLUMNS}


class SqlAlchemyPayrollStore(PayrollStore):
    """PayrollStore backed by the payroll_records table."""

    def __init__(self, db: Session):
        self.db = db

    def get_payroll_record(self, employee_id, month, year):
        row = self._find(employee_id, month, year)
        return _row_to_dict(row) if row is not None else None

    def create_payroll_record(self, batch_id, result):
        row = PayrollRecord(**_record_values(batch_id, result))
        self._commit(lambda: self.db.add(row))
        return row.id

    def update_payroll_record(self, record_id, result):
        row = self.db.get(PayrollRecord, record_id)
        if row is None:
            raise PayrollNotFoundError("Payroll record", record_id)
        values = _record_values(row.batch_id, result)
        self._commit(lambda: self._assign(row, values))

    def create_payroll_batch(self, batch_id, results, overwrite=False):
        if not results:
            return BatchSaveResult(batch_id=batch_id, outcome=BatchSaveOutcome.CREATED)

        periods = {(r.month, r.year) for r in results}
        if len(periods) != 1:
            raise PayrollValidationError("A payroll batch must cover a single month", field="month")
        month, year = periods.pop()

        employee_ids = [r.employee_id for r in results]
        if len(set(employee_ids)) != len(employee_ids):
            raise PayrollValidationError("A payroll batch cannot contain an employee twice", field="employee_id")

        try:
            existing = {
                row.employee_id: row
                for row in self.db.query(PayrollRecord).filter(
                    PayrollRecord.month == month,
                    PayrollRecord.year == year,
                    PayrollRecord.employee_id.in_(employee_ids),
                )
            }
        except SQLAlchemyError as e:
            logger.error("Failed to check existing payroll records: %s", e)
            raise PayrollPersistenceError("Failed to check existing payroll records", original=e)

        if existing and not overwrite:
            conflicts = sorted(existing)
            logger.info(
                "Batch %s conflicts with %d existing payroll records for %02d/%d",
                batch_id, len(conflicts), month, year,
            )
            return BatchSaveResult(
                batch_id=batch_id,
                outcome=BatchSaveOutcome.CONFLICT,
                conflicting_employee_ids=conflicts,
            )

        def write():
            for result in results:
                values = _record_values(batch_id, result)
                row = existing.get(result.employee_id)
                if row is None:
                    self.db.add(PayrollRecord(**values))
                else:
                    self._assign(row, values)

        self._commit(write)
        outcome = BatchSaveOutcome.OVERWRITTEN if existing else BatchSaveOutcome.CREATED
        logger.info("Saved payroll batch %s: %d records (%s)", batch_id, len(results), outcome.value)
        return BatchSaveResult(
            batch_id=batch_id,
            outcome=outcome,
            saved_count=len(results),
            conflicting_employee_ids=sorted(existing),
        )

    def _find(self, employee_id: int, month: int, year: int) -> Optional[PayrollRecord]:
        return (
            self.db.query(PayrollRecord)
            .filter(
                PayrollRecord.employee_id == employee_id,
                PayrollRecord.month == month,
                PayrollRecord.year == year,
            )
            .first()
        )

    @staticmethod
    def _assign(row: PayrollRecord, values: Dict[str, Any]) -> None:
        for key, value in values.items():
            setattr(row, key, value)

    def _commit(self, work) -> None:
        try:
            work()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Payroll write failed, transaction rolled back: %s", e)
            raise PayrollPersistenceError("Failed to save payroll records", original=e)
