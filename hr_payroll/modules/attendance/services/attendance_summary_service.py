# hr_payroll/modules/attendance/services/attendance_summary_service.py

"""
Monthly attendance summaries for payroll.

Summaries for a whole cohort are produced from a single records query and
a single leave-totals query, never one round trip per employee.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional

from ..schemas.attendance_schemas import AttendanceSummary
from .attendance_store import AttendanceStore, LeaveTotalsProvider, NoLeaveTotalsProvider
from .timesheet_aggregator import summarize_month

logger = logging.getLogger(__name__)


class AttendanceSummaryProvider(ABC):
    """Source of monthly summaries consumed by the payroll batch."""

    @abstractmethod
    def get_monthly_summaries(
        self, employee_ids: List[int], month: int, year: int
    ) -> Dict[int, AttendanceSummary]:
        """
        Summaries for every requested employee.

        Employees without records get an empty summary.
        """
        pass


class AttendanceSummaryService(AttendanceSummaryProvider):
    def __init__(
        self,
        store: AttendanceStore,
        leave_provider: Optional[LeaveTotalsProvider] = None,
    ):
        self.store = store
        self.leave_provider = leave_provider or NoLeaveTotalsProvider()

    def get_monthly_summaries(self, employee_ids, month, year):
        if not employee_ids:
            return {}

        records = self.store.get_month_records(month, year, employee_ids=employee_ids)
        leave_totals = self.leave_provider.get_leave_totals(list(employee_ids), month, year)

        by_employee = defaultdict(list)
        for record in records:
            by_employee[record.employee_id].append(record)

        summaries = {
            employee_id: summarize_month(
                employee_id, month, year, by_employee.get(employee_id, []), leave_totals.get(employee_id)
            )
            for employee_id in employee_ids
        }
        logger.info(
            "Built %d attendance summaries for %02d/%d from %d records",
            len(summaries), month, year, len(records),
        )
        return summaries
