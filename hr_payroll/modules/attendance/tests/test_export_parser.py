# hr_payroll/modules/attendance/tests/test_export_parser.py

"""
Unit tests for the block export parser.
"""

import pytest
from datetime import date

from ..services.export_parser import (
    AttendanceExportParser,
    extract_employee_context,
    is_employee_header,
    is_sub_header,
    is_table_start,
    parse_attendance_export,
)


class TestLineClassification:

    def test_employee_header(self):
        assert is_employee_header("Mã nhân viên: 00002    Tên nhân viên: Dung")
        assert is_employee_header("Employee code: 00015")
        assert not is_employee_header("Ngày,Thứ,Vào 1,Ra 1")
        assert not is_employee_header("Tổng cộng: 12345")

    def test_header_with_damaged_labels_counts_markers(self):
        assert is_employee_header("M? nh?n vi?n: 00007     T?n nh?n vi?n: Lan")

    def test_table_start_is_accent_insensitive(self):
        assert is_table_start("Ngày,Thứ,Vào 1,Ra 1")
        assert is_table_start("NGAY , THU, VAO 1")
        assert is_table_start("Ng�y,Th�,V�o 1,Ra 1")
        assert not is_table_start("2/12/2024,T2,08:30,17:30")

    def test_sub_header(self):
        assert is_sub_header(",,Vào,Ra,Vào,Ra")
        assert is_sub_header(",,Vao 1, Ra 1")
        assert not is_sub_header("2/12/2024,T2,08:30,17:30")


class TestExtractEmployeeContext:

    def test_code_and_name_from_labels(self):
        code, name = extract_employee_context(
            "Mã nhân viên: 00002         Tên nhân viên: Dung         Phòng ban: --------,,,,,"
        )
        assert code == "00002"
        assert name == "Dung"

    def test_name_recovered_when_labels_are_damaged(self):
        code, name = extract_employee_context(
            "M� nh�n vi�n: 00007     T�n nh�n vi�n: Lan     Ph�ng ban: IT"
        )
        assert code == "00007"
        assert name == "Lan"

    def test_no_code(self):
        assert extract_employee_context("Báo cáo chấm công") == (None, "")


class TestAttendanceExportParser:

    @pytest.fixture
    def parser(self, attendance_settings):
        return AttendanceExportParser(attendance_settings)

    def test_parses_employee_blocks(self, parser, block_export):
        rows = parser.parse(block_export)

        assert [(r.employee_code, r.date) for r in rows] == [
            ("00002", date(2024, 12, 2)),
            ("00002", date(2024, 12, 3)),
            ("00002", date(2024, 12, 5)),
            ("00002", date(2024, 12, 7)),
            ("00003", date(2024, 12, 2)),
        ]
        assert rows[0].employee_name == "Dung"
        assert rows[0].check_in == "08:30"
        assert rows[0].check_out == "17:30"
        assert rows[-1].employee_name == "Lan"

    def test_dash_checkout_becomes_empty(self, parser):
        text = "\n".join(
            [
                "Mã nhân viên: 00002         Tên nhân viên: Dung         Phòng ban: --------,,,,,",
                "Ngày,Thứ,Vào 1,Ra 1,Vào 2,Ra 2",
                ",,Vào,Ra,Vào,Ra",
                "5/12/2024,T5,08:15,-",
            ]
        )
        rows = parser.parse(text)

        assert len(rows) == 1
        assert rows[0].date == date(2024, 12, 5)
        assert rows[0].check_in == "08:15"
        assert rows[0].check_out == ""

    def test_rows_without_any_time_are_dropped(self, parser, block_export):
        rows = parser.parse(block_export)
        assert date(2024, 12, 4) not in {r.date for r in rows if r.employee_code == "00002"}

    def test_section_title_ends_the_table(self, parser, block_export):
        rows = parser.parse(block_export)
        assert date(2024, 12, 9) not in {r.date for r in rows}

    def test_date_rows_before_table_start_are_ignored(self, parser):
        text = "\n".join(
            [
                "Mã nhân viên: 00002         Tên nhân viên: Dung",
                "2/12/2024,T2,08:30,17:30",
                "Ngày,Thứ,Vào 1,Ra 1",
                "3/12/2024,T3,08:30,17:30",
            ]
        )
        rows = parser.parse(text)
        assert [r.date for r in rows] == [date(2024, 12, 3)]

    def test_lookback_recovers_employee_without_header(self, parser):
        text = "\n".join(
            [
                "Employee 00009 Minh",
                "Ngày,Thứ,Vào 1,Ra 1",
                "5/12/2024,T5,08:00,17:00",
                "6/12/2024,T6,08:10,17:00",
            ]
        )
        rows = parser.parse(text)

        assert [r.employee_code for r in rows] == ["00009", "00009"]
        assert rows[1].check_in == "08:10"

    def test_lookback_is_limited(self, parser):
        filler = ["Ghi chú"] * 10
        text = "\n".join(["Employee 00009"] + filler + ["5/12/2024,T5,08:00,17:00"])
        assert parser.parse(text) == []

    def test_corrupted_encoding(self, parser):
        text = "\n".join(
            [
                "M� nh�n vi�n: 00007     T�n nh�n vi�n: Lan     Ph�ng ban: IT",
                "Ng�y,Th�,V�o 1,Ra 1",
                ",,V�o,Ra",
                "2/12/2024,T2,08:30,17:30",
            ]
        )
        rows = parser.parse(text)

        assert len(rows) == 1
        assert rows[0].employee_code == "00007"
        assert rows[0].employee_name == "Lan"

    def test_invalid_date_rows_are_skipped(self, parser):
        text = "\n".join(
            [
                "Mã nhân viên: 00002         Tên nhân viên: Dung",
                "Ngày,Thứ,Vào 1,Ra 1",
                "31/02/2024,T7,08:30,17:30",
                "1/3/2024,T6,08:30,17:30",
            ]
        )
        rows = parser.parse(text)
        assert [r.date for r in rows] == [date(2024, 3, 1)]

    def test_line_numbers_are_one_based(self, parser, block_export):
        rows = parser.parse(block_export)
        assert rows[0].line_number == 5


class TestParseAttendanceExportNeverRaises:

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "\n\n\n",
            ",,,,,,",
            "2/12/2024",
            "2/12/2024,T2",
            "99/99/9999,T2,08:30,17:30",
            "Mã nhân viên: 00002\nNgày,Thứ\n2/12/2024,,,,,,,",
            "\x00\x01\x02::::12345",
            "Ngày,Thứ,Vào 1,Ra 1\n" * 50,
            b"2/12/2024,T2,08:30,17:30",
            12345,
        ],
    )
    def test_garbage_input(self, text):
        assert isinstance(parse_attendance_export(text), list)

    def test_empty_input_gives_no_rows(self):
        assert parse_attendance_export("") == []
        assert parse_attendance_export(None) == []
