import pytest

from vicissicalc.tui.render import (
    FORMULAS_MARKER,
    SCREEN_WIDTH,
    StatusMessages,
    Style,
    View,
    build_frame,
    cell_text,
    format_value,
    frame_to_text,
    truncate,
)


class TestFormatting:
    @pytest.mark.parametrize("value, expected", [
        (14.0, "14"),
        (0.25, "0.25"),
        (1.0 / 3.0, "0.333333"),
        (1e20, "1e+20"),
        (-2.5, "-2.5"),
        (float("inf"), "inf"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value, 10) == expected.rjust(10)

    def test_truncate(self):
        assert truncate("short", 18) == "short"
        assert truncate("x" * 18, 18) == "x" * 18
        assert truncate("x" * 19, 18) == "x" * 15 + "..."


class TestCellText:
    def test_value(self, sheet):
        sheet.set_text(0, 0, "= 2 + 3 * 4")
        seg = cell_text(sheet, 0, 0, View.VALUES)
        assert seg.text == "14".rjust(18)
        assert seg.style == Style.OK

    def test_formula_view_shows_body(self, sheet):
        sheet.set_text(0, 0, "= 2 + 3 * 4")
        assert cell_text(sheet, 0, 0, View.FORMULAS).text.strip() == "2 + 3 * 4"

    def test_plain_text(self, sheet):
        sheet.set_text(0, 0, "label")
        seg = cell_text(sheet, 0, 0, View.VALUES)
        assert seg.text == "label".rjust(18)
        assert seg.style == Style.OK

    def test_error_shows_message(self, sheet):
        sheet.set_text(0, 0, "= 1 / 0")
        seg = cell_text(sheet, 0, 0, View.VALUES)
        assert seg.text.strip() == "Divide by 0"
        assert seg.style == Style.ERROR

    def test_long_text_is_truncated(self, sheet):
        sheet.set_text(0, 0, "a fairly long label here")
        assert cell_text(sheet, 0, 0, View.VALUES).text == "a fairly long l..."

    def test_upstream_error_is_blank(self, sheet):
        sheet.set_text(0, 0, "= 1 / 0")
        sheet.set_text(0, 1, "= 0 @ 0")
        seg = cell_text(sheet, 0, 1, View.VALUES)
        assert seg.text == " " * 18
        assert seg.style == Style.ERROR


class TestStatusMessages:
    def test_first_message_wins(self):
        messages = StatusMessages()
        messages.oops("")
        messages.oops("first")
        messages.oops("second")
        assert messages.current == "first"
        messages.clear()
        assert messages.current is None


class TestFrame:
    def test_layout(self, sheet):
        sheet.set_text(1, 2, "= 7")
        frame = build_frame(sheet, 1, 2)
        assert frame.header.strip() == "= 7"
        assert len(frame.rows) == sheet.rows
        assert len(frame.rows[0]) == sheet.cols + 1
        assert len(frame.status) == SCREEN_WIDTH
        highlighted = [(r, i) for r, row in enumerate(frame.rows)
                       for i, seg in enumerate(row) if seg.highlighted]
        assert highlighted == [(1, 3)]
        assert frame.rows[1][3].text.strip() == "7"

    def test_ruler_marks_formula_view(self, sheet):
        assert FORMULAS_MARKER in build_frame(sheet, 0, 0, View.FORMULAS).ruler[0].text
        assert FORMULAS_MARKER not in build_frame(sheet, 0, 0, View.VALUES).ruler[0].text

    def test_ruler_lines_up_with_cells(self, sheet):
        frame = build_frame(sheet, 0, 0)
        ruler = frame.ruler[0].text
        row = "".join(seg.text for seg in frame.rows[0])
        assert len(ruler) == len(row)

    def test_status_shows_focused_error(self, sheet):
        sheet.set_text(0, 0, "= (1")
        frame = build_frame(sheet, 0, 0)
        assert frame.status.strip() == "Syntax error: expected ')'"

    def test_status_prefers_messages(self, sheet):
        sheet.set_text(0, 0, "= (1")
        messages = StatusMessages()
        messages.oops("File written")
        assert build_frame(sheet, 0, 0, messages=messages).status.strip() == "File written"

    def test_frame_to_text(self, sheet):
        sheet.set_text(0, 0, "= 1")
        text = frame_to_text(build_frame(sheet, 0, 0))
        lines = text.split("\n")
        assert len(lines) == sheet.rows + 3
        assert lines[2].startswith(" 0")
        assert lines[2].endswith(" 1")
