import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from ..enums.attendance_enums import AttendanceStatus, OperationType
from ..exceptions import AttendanceErrorCodes, AttendancePersistenceError
from ..schemas.attendance_schemas import LeaveTotals, PendingChanges, PersistenceOperation
from ..services.attendance_store import (
    LeaveTotalsProvider,
    SqlAlchemyAttendanceStore,
    month_bounds,
)
from ..services.attendance_summary_service import AttendanceSummaryService
from ..services.timesheet_aggregator import TimesheetGrid, apply_changes, diff_grid
from .factories import AttendanceRecordFactory, ManualEditFactory


@pytest.fixture
def store(db_session):
    return SqlAlchemyAttendanceStore(db_session)


class TestSqlAlchemyAttendanceStore:

    def test_month_bounds(self):
        assert month_bounds(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))

    def test_create_and_read_back(self, store):
        created = store.create_record(AttendanceRecordFactory(check_out="12:30").create())

        records = store.get_month_records(12, 2024)

        assert created.id is not None
        assert len(records) == 1
        assert records[0].id == created.id
        assert records[0].work_value == Decimal("0.50")
        assert records[0].status == AttendanceStatus.PRESENT_HALF
        assert records[0].serialized() == created.serialized()

    def test_month_filter_and_employee_filter(self, store):
        store.create_record(AttendanceRecordFactory(employee_id=1, day=date(2024, 12, 2)).create())
        store.create_record(AttendanceRecordFactory(employee_id=2, day=date(2024, 12, 2)).create())
        store.create_record(AttendanceRecordFactory(employee_id=1, day=date(2025, 1, 2)).create())

        assert len(store.get_month_records(12, 2024)) == 2
        assert [r.employee_id for r in store.get_month_records(12, 2024, employee_ids=[2])] == [2]

    def test_update_record(self, store):
        created = store.create_record(AttendanceRecordFactory().create())

        updated = store.update_record(
            created.id, AttendanceRecordFactory(check_in="09:00").create()
        )

        assert updated.id == created.id
        assert updated.late_minutes == 30

    def test_update_missing_record_rolls_back(self, store):
        with pytest.raises(AttendancePersistenceError):
            store.update_record(999, AttendanceRecordFactory().create())
        assert store.get_month_records(12, 2024) == []

    def test_apply_operations_is_atomic(self, store):
        existing = store.create_record(AttendanceRecordFactory().create())
        operations = [
            PersistenceOperation(
                operation=OperationType.UPDATE,
                record_id=existing.id,
                record=AttendanceRecordFactory(check_in="10:00").create(),
            ),
            PersistenceOperation(
                operation=OperationType.UPDATE,
                record_id=12345,
                record=AttendanceRecordFactory(day=date(2024, 12, 3)).create(),
            ),
        ]

        with pytest.raises(AttendancePersistenceError):
            store.apply_operations(operations)

        assert store.get_month_records(12, 2024)[0].late_minutes == 0

    def test_grid_round_trip_through_store(self, store):
        store.create_record(AttendanceRecordFactory().create())
        grid = TimesheetGrid.load(store.get_month_records(12, 2024), 12, 2024)
        pending = PendingChanges().extend(
            [
                ManualEditFactory(employee_id=1, day=2, check_in="09:00").create(),
                ManualEditFactory(employee_id=1, day=3).create(),
            ]
        )

        new_grid, _ = apply_changes(grid, pending)
        saved = store.apply_operations(diff_grid(new_grid))

        assert len(saved) == 2
        reloaded = TimesheetGrid.load(store.get_month_records(12, 2024), 12, 2024)
        assert diff_grid(reloaded) == []
        assert reloaded.get(1, 2).late_minutes == 30
        assert reloaded.get(1, 3).work_value == Decimal("1.00")

    def test_upsert_replaces_by_employee_and_date(self, store):
        store.upsert_records([AttendanceRecordFactory(check_out="12:30").create()])
        saved = store.upsert_records([AttendanceRecordFactory().create()])

        records = store.get_month_records(12, 2024)
        assert len(records) == 1
        assert records[0].id == saved[0].id
        assert records[0].work_value == Decimal("1.00")

    def test_database_error_is_wrapped(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        store = SqlAlchemyAttendanceStore(mock_db_session)

        with pytest.raises(AttendancePersistenceError) as exc_info:
            store.create_record(AttendanceRecordFactory().create())

        mock_db_session.rollback.assert_called_once()
        assert exc_info.value.code == AttendanceErrorCodes.DATABASE_ERROR
        assert exc_info.value.details[0]["type"] == "OperationalError"


class TestAttendanceSummaryService:

    def test_single_round_trip_per_cohort(self, store):
        store.create_record(AttendanceRecordFactory(employee_id=1).create())
        store.create_record(AttendanceRecordFactory(employee_id=2, check_out="12:30").create())
        leave_provider = Mock(spec=LeaveTotalsProvider)
        leave_provider.get_leave_totals.return_value = {1: LeaveTotals(paid_days=Decimal("2"))}
        store_spy = Mock(wraps=store)

        service = AttendanceSummaryService(store_spy, leave_provider)
        summaries = service.get_monthly_summaries([1, 2, 3], 12, 2024)

        store_spy.get_month_records.assert_called_once()
        leave_provider.get_leave_totals.assert_called_once_with([1, 2, 3], 12, 2024)
        assert summaries[1].present_days == Decimal("1.00")
        assert summaries[1].total_paid_leave == Decimal("2")
        assert summaries[2].present_days == Decimal("0.50")
        assert summaries[3].total_work_days == Decimal("0")

    def test_no_employees(self, store):
        assert AttendanceSummaryService(store).get_monthly_summaries([], 12, 2024) == {}
