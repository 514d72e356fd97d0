# hr_payroll/modules/payroll/services/batch_payroll_service.py

"""
Batch payroll processing service.

Computes payroll for a cohort of employees against a single regulation
snapshot and a single bulk fetch of attendance summaries. Results stay in
memory until save_batch() persists them all-or-nothing.
"""

import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional

from ....core.config import Settings, get_settings
from ....core.context import AsOfContext
from ...attendance.schemas.attendance_schemas import AttendanceSummary
from ...attendance.services.attendance_summary_service import AttendanceSummaryProvider
from ..exceptions import BatchCancelledError, BatchProcessingError, PayrollException
from ..schemas.batch_processing_schemas import (
    BatchSaveResult,
    EmployeePayrollError,
    PayrollBatch,
)
from ..schemas.error_schemas import ErrorDetail
from ..schemas.payroll_schemas import EmployeeCompensationProfile
from .payroll_calculation_engine import PayrollCalculationEngine
from .payroll_configuration_service import PayrollConfigurationService
from .payroll_store import PayrollStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class BatchPayrollService:
    """Service for batch payroll processing."""

    def __init__(
        self,
        configuration_service: PayrollConfigurationService,
        summary_provider: AttendanceSummaryProvider,
        payroll_store: PayrollStore,
        settings: Optional[Settings] = None,
    ):
        """Initialize batch payroll service.

        Args:
            configuration_service: Source of the latest salary regulations
            summary_provider: Bulk attendance summary source
            payroll_store: Persistence for committed results
        """
        self.configuration_service = configuration_service
        self.summary_provider = summary_provider
        self.payroll_store = payroll_store
        self.settings = settings or get_settings()

    def run_batch(
        self,
        profiles: List[EmployeeCompensationProfile],
        month: int,
        year: int,
        context: Optional[AsOfContext] = None,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> PayrollBatch:
        """Compute payroll for every profile.

        Args:
            profiles: Employees selected for payroll
            month: Payroll month
            year: Payroll year
            context: As-of context for the regulation lookup and timestamp;
                defaults to the moment of the run
            cancel_event: Set to abandon the run between employees
            progress_callback: Called with (completed, total) after each employee

        Returns:
            PayrollBatch; flagged cancelled if the run was abandoned

        Raises:
            BatchProcessingError: regulations or summaries could not be loaded
        """
        context = context or AsOfContext.current()
        batch_id = uuid.uuid4().hex
        total = len(profiles)

        try:
            regulations = self.configuration_service.get_latest_regulations(context.today)
            summaries = self.summary_provider.get_monthly_summaries(
                [p.employee_id for p in profiles], month, year
            )
        except PayrollException:
            raise
        except Exception as e:
            logger.error("Batch %s failed to load inputs: %s", batch_id, e)
            raise BatchProcessingError(f"Failed to load batch inputs: {e}", batch_id=batch_id)

        logger.info("Batch %s: computing payroll for %d employees, %02d/%d", batch_id, total, month, year)

        engine = PayrollCalculationEngine(regulations)
        results = []
        errors = []
        cancelled = False
        completed = 0

        with ThreadPoolExecutor(max_workers=self.settings.payroll_max_workers) as executor:
            futures = {
                executor.submit(
                    self._compute_one, engine, profile, summaries, month, year, cancel_event
                ): profile
                for profile in profiles
            }
            for future in as_completed(futures):
                profile = futures[future]
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    for pending in futures:
                        pending.cancel()
                    break

                try:
                    result = future.result()
                except PayrollException as e:
                    errors.append(
                        EmployeePayrollError(
                            employee_id=profile.employee_id, error_message=e.message, error_code=e.code
                        )
                    )
                    logger.warning("Batch %s: employee %s failed: %s", batch_id, profile.employee_id, e.message)
                except Exception as e:
                    logger.error("Batch %s: unexpected failure for employee %s: %s", batch_id, profile.employee_id, e)
                    raise BatchProcessingError(str(e), batch_id=batch_id)
                else:
                    if result is None:
                        cancelled = True
                        continue
                    results.append(result)

                completed += 1
                if progress_callback is not None:
                    progress_callback(completed, total)

        if cancelled:
            logger.info("Batch %s cancelled after %d of %d employees", batch_id, completed, total)

        results.sort(key=lambda r: r.employee_id)
        return PayrollBatch(
            batch_id=batch_id,
            month=month,
            year=year,
            regulations=regulations,
            results=results,
            errors=sorted(errors, key=lambda e: e.employee_id),
            requested_count=total,
            cancelled=cancelled,
            computed_at=context.timestamp,
        )

    @staticmethod
    def _compute_one(
        engine: PayrollCalculationEngine,
        profile: EmployeeCompensationProfile,
        summaries: Dict[int, AttendanceSummary],
        month: int,
        year: int,
        cancel_event: Optional[threading.Event],
    ):
        if cancel_event is not None and cancel_event.is_set():
            return None
        summary = summaries.get(profile.employee_id) or AttendanceSummary.empty(
            profile.employee_id, month, year
        )
        return engine.compute(profile, summary)

    def save_batch(self, batch: PayrollBatch, overwrite: bool = False) -> BatchSaveResult:
        """Persist a computed batch all-or-nothing.

        Raises:
            BatchCancelledError: the batch run was cancelled
            BatchProcessingError: some employees failed to compute
            PayrollPersistenceError: the write failed and was rolled back
        """
        if batch.cancelled:
            raise BatchCancelledError(batch.batch_id)
        if not batch.is_complete:
            failed = [error.employee_id for error in batch.errors]
            raise BatchProcessingError(
                f"Batch is incomplete, {len(failed)} employee(s) failed: {failed}",
                batch_id=batch.batch_id,
                details=[
                    ErrorDetail(field="employee_id", message=error.error_message, code=error.error_code)
                    for error in batch.errors
                ],
            )
        return self.payroll_store.create_payroll_batch(batch.batch_id, batch.results, overwrite=overwrite)
