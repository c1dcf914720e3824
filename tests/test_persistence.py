import pytest

from vicissicalc.engine import Spreadsheet
from vicissicalc.persistence import (
    BAD_LINE,
    OUT_OF_RANGE,
    dump_grid,
    load_grid,
    parse_grid,
    save_grid,
)
from vicissicalc.storage import CellStatus


class TestDump:
    def test_row_major_non_blank_cells(self, sheet):
        sheet.set_text(2, 3, "hi")
        sheet.set_text(0, 0, "= 1")
        sheet.set_text(1, 0, "   ")
        assert dump_grid(sheet) == "0 0 = 1\n2 3 hi\n"

    def test_empty_sheet(self, sheet):
        assert dump_grid(sheet) == ""


class TestParse:
    def test_loads_cells(self, sheet):
        report = parse_grid(sheet, "0 0 = 2\n0 1 = 0 @ 0 * 3\n")
        assert report.loaded == 2
        assert report.ok
        assert sheet.get_value(0, 1) == 6

    def test_leading_blanks_survive(self, sheet):
        sheet.set_text(0, 0, "  = 1")
        other = Spreadsheet()
        parse_grid(other, dump_grid(sheet))
        assert other.text_of(0, 0) == "  = 1"

    def test_crlf_line_endings(self, sheet):
        report = parse_grid(sheet, "0 0 = 5\r\n1 1 text\r\n")
        assert report.loaded == 2
        assert sheet.text_of(0, 0) == "= 5"
        assert sheet.text_of(1, 1) == "text"

    def test_blank_lines_are_skipped(self, sheet):
        report = parse_grid(sheet, "\n0 0 a\n\n   \n1 0 b")
        assert report.loaded == 2
        assert report.ok

    @pytest.mark.parametrize("line", ["hello", "1 x = 2", "1 2", "1 2 ", "-1 0 = 1", "0 0\t= 1"])
    def test_bad_lines(self, sheet, line):
        report = parse_grid(sheet, f"{line}\n3 3 kept\n")
        assert report.loaded == 1
        assert [p.message for p in report.problems] == [BAD_LINE]
        assert report.problems[0].line_number == 1
        assert report.problems[0].line == line
        assert sheet.text_of(3, 3) == "kept"

    @pytest.mark.parametrize("line", ["20 0 = 1", "0 4 = 1", "100 100 x"])
    def test_out_of_range_lines(self, sheet, line):
        report = parse_grid(sheet, f"0 0 a\n{line}\n")
        assert report.loaded == 1
        assert [p.message for p in report.problems] == [OUT_OF_RANGE]
        assert report.problems[0].line_number == 2

    def test_invalidates_once_loaded(self, sheet):
        sheet.set_text(0, 0, "= 1")
        assert sheet.get_value(0, 0) == 1
        parse_grid(sheet, "0 0 = 9\n")
        assert sheet.status_of(0, 0) == CellStatus.STALE
        assert sheet.get_value(0, 0) == 9

    def test_merge_keeps_other_cells(self, sheet):
        sheet.set_text(1, 1, "old")
        parse_grid(sheet, "0 0 new\n")
        assert sheet.text_of(1, 1) == "old"

    def test_replace_clears_other_cells(self, sheet):
        sheet.set_text(1, 1, "old")
        parse_grid(sheet, "0 0 new\n", replace=True)
        assert sheet.text_of(1, 1) == ""
        assert sheet.text_of(0, 0) == "new"


class TestFiles:
    def test_round_trip(self, sheet, tmp_path):
        sheet.set_text(0, 0, "= 1 + 2")
        sheet.set_text(3, 2, "label")
        sheet.set_text(19, 3, " = 0 @ 0")
        path = tmp_path / "sheet.txt"
        save_grid(sheet, str(path))

        other = Spreadsheet()
        report = load_grid(other, str(path))
        assert report.loaded == 3
        assert not report.fresh
        assert dump_grid(other) == dump_grid(sheet)
        assert other.get_value(19, 3) == 3

    def test_file_format_on_disk(self, sheet, tmp_path):
        sheet.set_text(1, 2, "x")
        path = tmp_path / "sheet.txt"
        save_grid(sheet, str(path))
        assert path.read_bytes() == b"1 2 x\n"

    def test_missing_file_is_fresh(self, sheet, tmp_path):
        report = load_grid(sheet, str(tmp_path / "nope.txt"))
        assert report.fresh
        assert report.loaded == 0
        assert report.ok

    def test_unwritable_path_raises(self, sheet, tmp_path):
        with pytest.raises(OSError):
            save_grid(sheet, str(tmp_path))
