"""Turns a spreadsheet into a frame of styled text.

Nothing here touches the terminal; terminal.py paints the Frame.
"""

from enum import Enum
from typing import List, NamedTuple, Optional

from vicissicalc.engine import Spreadsheet
from vicissicalc.lexer import find_formula
from vicissicalc.storage import CellStatus

COL_WIDTH = 18
SCREEN_WIDTH = 80
FORMULAS_MARKER = "(formulas)"


class View(str, Enum):
    VALUES = "values"
    FORMULAS = "formulas"


class Style(str, Enum):
    OK = "ok"
    ERROR = "error"
    BORDER = "border"


class Segment(NamedTuple):
    text: str
    style: Style = Style.OK
    highlighted: bool = False


class Frame(NamedTuple):
    header: str
    ruler: List[Segment]
    rows: List[List[Segment]]
    status: str


class StatusMessages:
    """Holds the first message raised since the last clear()."""

    def __init__(self):
        self.current: Optional[str] = None

    def oops(self, message: str) -> None:
        # An empty message (UPSTREAM) never claims the line; the real cause shows instead.
        if self.current is None and message:
            self.current = message

    def clear(self) -> None:
        self.current = None


# ── Formatting ────────────────────────────────────────────────────

def format_value(value: float, width: int = COL_WIDTH) -> str:
    """printf("%*g")."""
    return format(value, f">{width}g")


def truncate(text: str, width: int = COL_WIDTH) -> str:
    if len(text) > width:
        return text[:max(width - 3, 0)] + "..."
    return text


def cell_text(sheet: Spreadsheet, row: int, col: int, view: View,
              width: int = COL_WIDTH) -> Segment:
    """What the cell at (row, col) shows, unhighlighted and right aligned."""
    text = sheet.text_of(row, col)
    body = find_formula(text)
    style = Style.OK
    if view == View.FORMULAS or body is None:
        shown = body if body is not None else text
    else:
        result = sheet.lookup(row, col)
        if result.ok:
            shown = format_value(result.value, width)
        else:
            style = Style.ERROR
            shown = result.error.message
    return Segment(truncate(shown, width).rjust(width), style)


# ── Frame ─────────────────────────────────────────────────────────

def _ruler(sheet: Spreadsheet, view: View, width: int) -> List[Segment]:
    marker = FORMULAS_MARKER if view == View.FORMULAS else " " * len(FORMULAS_MARKER)
    first = f"{0:>{max(width - 7, 1)}}"
    parts = [marker + first] + [f" {c:>{width}}" for c in range(1, sheet.cols)]
    return [Segment("".join(parts), Style.BORDER)]


def focus_message(sheet: Spreadsheet, row: int, col: int) -> str:
    """Error message of the cursor cell, if it has been computed into one."""
    if sheet.status_of(row, col) in (CellStatus.ERROR, CellStatus.NO_FORMULA):
        return sheet.error_of(row, col).message
    return ""


def build_frame(sheet: Spreadsheet, cursor_row: int, cursor_col: int,
                view: View = View.VALUES, messages: Optional[StatusMessages] = None,
                width: int = COL_WIDTH) -> Frame:
    header = sheet.text_of(cursor_row, cursor_col)[:SCREEN_WIDTH - 1].ljust(SCREEN_WIDTH - 1)
    rows = []
    for r in range(sheet.rows):
        line = [Segment(f"{r:2d}", Style.BORDER)]
        for c in range(sheet.cols):
            seg = cell_text(sheet, r, c, view, width)
            line.append(Segment(" " + seg.text, seg.style, r == cursor_row and c == cursor_col))
        rows.append(line)
    # Cells were just computed, so errors raised while rendering are in already.
    status = (messages.current if messages else None) or focus_message(sheet, cursor_row, cursor_col)
    return Frame(header, _ruler(sheet, view, width), rows, status[:SCREEN_WIDTH].ljust(SCREEN_WIDTH))


def frame_to_text(frame: Frame) -> str:
    """Plain-text rendering of a frame, without styles."""
    lines = [frame.header, "".join(s.text for s in frame.ruler)]
    lines.extend("".join(s.text for s in row) for row in frame.rows)
    lines.append(frame.status)
    return "\n".join(line.rstrip() for line in lines)
