# hr_payroll/modules/attendance/tests/test_attendance_import_service.py

"""
Tests for attendance import: format detection, employee resolution and reporting.
"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

from ....core.config import Settings
from ....core.context import AsOfContext
from ..enums.attendance_enums import AttendanceStatus, ImportFormat
from ..exceptions import AttendanceImportError
from ..schemas.attendance_schemas import ImportedCellChange
from ..services.attendance_import_service import (
    AttendanceImportService,
    InMemoryEmployeeDirectory,
    code_candidates,
    resolve_employee,
)
from ..services.attendance_store import AttendanceStore, SqlAlchemyAttendanceStore
from .test_monthly_grid_parser import MONTHLY_EXPORT
from .test_tabular_parser import VIETNAMESE_CSV


@pytest.fixture
def directory():
    return InMemoryEmployeeDirectory({"NV00002": 1, "NV00003": 2, "NV00004": 3, "7": 4})


@pytest.fixture
def import_service(directory, attendance_settings):
    return AttendanceImportService(
        directory, settings=Settings(), attendance_settings=attendance_settings
    )


class TestEmployeeResolution:

    def test_code_candidates_order(self):
        assert code_candidates("00007") == ["00007", "NV00007", "7"]
        assert code_candidates("NV00002") == ["NV00002", "2"]
        assert code_candidates("") == []

    def test_resolves_normalized_code(self, directory):
        assert resolve_employee("00002", directory) == 1
        assert resolve_employee("2", directory) == 1

    def test_resolves_bare_number(self, directory):
        assert resolve_employee("00007", directory) == 4

    def test_unknown_code(self, directory):
        assert resolve_employee("00099", directory) is None


class TestImportAttendance:

    def test_block_export(self, import_service, block_export):
        result = import_service.import_attendance(block_export, persist=False)

        assert result.success == 5
        assert result.failed == 0
        assert result.errors == []
        assert {(r.employee_id, r.date) for r in result.records} == {
            (1, date(2024, 12, 2)),
            (1, date(2024, 12, 3)),
            (1, date(2024, 12, 5)),
            (1, date(2024, 12, 7)),
            (2, date(2024, 12, 2)),
        }

    def test_missing_checkout_is_warned(self, import_service, block_export):
        result = import_service.import_attendance(block_export, persist=False)

        incomplete = [r for r in result.records if r.is_incomplete]
        assert [r.date for r in incomplete] == [date(2024, 12, 5)]
        assert incomplete[0].status == AttendanceStatus.ABSENT
        assert any("Missing check-out" in w.message for w in result.warnings)

    def test_unknown_employee_reported_not_raised(self, attendance_settings, block_export):
        service = AttendanceImportService(
            InMemoryEmployeeDirectory({"NV00003": 2}), attendance_settings=attendance_settings
        )

        result = service.import_attendance(block_export, persist=False)

        assert result.success == 1
        assert result.failed == 4
        assert result.errors[0].error == "Employee not found with code: 00002"

    def test_invalid_time_warning(self, import_service):
        text = "\n".join(
            [
                "Mã nhân viên: 00002         Tên nhân viên: Dung",
                "Ngày,Thứ,Vào 1,Ra 1",
                "2/12/2024,T2,08:30,25:99",
            ]
        )
        result = import_service.import_attendance(text, persist=False)

        assert any("Invalid check-out time" in w.message for w in result.warnings)
        assert result.records[0].check_out_time is None

    def test_last_row_wins_for_repeated_day(self, import_service):
        text = "\n".join(
            [
                "Mã nhân viên: 00002         Tên nhân viên: Dung",
                "Ngày,Thứ,Vào 1,Ra 1",
                "2/12/2024,T2,08:30,12:30",
                "2/12/2024,T2,08:30,17:30",
            ]
        )
        result = import_service.import_attendance(text, persist=False)

        assert len(result.records) == 1
        assert result.records[0].work_value == Decimal("1.00")

    def test_falls_back_to_tabular(self, import_service):
        result = import_service.import_attendance(VIETNAMESE_CSV, persist=False)

        # 00002 and 00003 resolve; two malformed rows are reported
        assert result.success == 2
        assert result.failed == 2
        assert len(result.errors) == 2

    def test_monthly_format(self, import_service):
        result = import_service.import_attendance(
            MONTHLY_EXPORT,
            import_format=ImportFormat.MONTHLY,
            context=AsOfContext(today=date(2024, 12, 1)),
            persist=False,
        )

        assert (result.month, result.year) == (12, 2024)
        assert result.success == 1
        assert result.failed == 1
        assert result.errors[0].employee_code == "99999"
        assert len(result.records) == 5

    def test_unrecognised_structure_raises(self, import_service):
        with pytest.raises(AttendanceImportError):
            import_service.import_attendance("just some text\nwithout columns", persist=False)

    def test_persists_through_store(self, directory, attendance_settings, block_export):
        store = Mock(spec=AttendanceStore)
        store.upsert_records.side_effect = lambda records: records
        service = AttendanceImportService(directory, store=store, attendance_settings=attendance_settings)

        result = service.import_attendance(block_export)

        store.upsert_records.assert_called_once()
        assert len(store.upsert_records.call_args[0][0]) == 5
        assert len(result.records) == 5

    def test_reimport_updates_in_place(self, directory, attendance_settings, block_export, db_session):
        store = SqlAlchemyAttendanceStore(db_session)
        service = AttendanceImportService(directory, store=store, attendance_settings=attendance_settings)

        first = service.import_attendance(block_export)
        second = service.import_attendance(block_export)

        assert sorted(r.id for r in first.records) == sorted(r.id for r in second.records)
        assert len(store.get_month_records(12, 2024)) == 5


class TestToPendingChanges:

    def test_resolved_rows_become_changes(self, import_service, block_export):
        _, rows, _ = import_service.parse(block_export)

        pending, errors = import_service.to_pending_changes(rows)

        assert errors == []
        assert len(pending) == 5
        assert all(isinstance(c, ImportedCellChange) for c in pending.changes)
        assert pending.changes[-1].employee_id == 2
