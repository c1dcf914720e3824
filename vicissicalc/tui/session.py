"""Modal reactor: cursor, view and the commands bound to keys."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from vicissicalc.engine import Spreadsheet
from vicissicalc.errors import ErrorKind
from vicissicalc.persistence import FRESH_FILE, load_grid, save_grid
from vicissicalc.tui.render import COL_WIDTH, Frame, StatusMessages, View, build_frame

logger = logging.getLogger(__name__)

# prompt(initial_text) -> committed text, or None if the user aborted
Prompt = Callable[[str], Optional[str]]

QUIT_KEY = "q"

MOVES = {
    "left": (0, -1),
    "right": (0, 1),
    "down": (1, 0),
    "up": (-1, 0),
}


class Session:
    def __init__(self, sheet: Spreadsheet, prompt: Prompt, filename: Optional[str] = None,
                 col_width: int = COL_WIDTH):
        self.sheet = sheet
        self.prompt = prompt
        self.filename = filename or ""
        self.col_width = col_width
        self.messages = StatusMessages()
        self.view = View.VALUES
        self.row = 0
        self.col = 0
        sheet.on_error = self._report_error

    def _report_error(self, kind: ErrorKind) -> None:
        self.messages.oops(kind.message)

    def oops(self, message: str) -> None:
        self.messages.oops(message)

    # ── Cursor ────────────────────────────────────────────────────

    def _clamp(self, row: int, col: int) -> tuple[int, int]:
        return (min(max(row, 0), self.sheet.rows - 1),
                min(max(col, 0), self.sheet.cols - 1))

    def move(self, d_row: int, d_col: int) -> None:
        self.row, self.col = self._clamp(self.row + d_row, self.col + d_col)

    def copy_text(self, d_row: int, d_col: int) -> None:
        """Copy the cursor cell's text one step over and follow it there."""
        row, col = self._clamp(self.row + d_row, self.col + d_col)
        self.sheet.set_text(row, col, self.sheet.text_of(self.row, self.col))
        self.row, self.col = row, col

    # ── Commands ──────────────────────────────────────────────────

    def enter_text(self) -> None:
        text = self.prompt(self.sheet.text_of(self.row, self.col))
        if text is None:
            self.oops("Aborted")
            return
        self.sheet.set_text(self.row, self.col, text)

    def toggle_view(self) -> None:
        self.view = View.VALUES if self.view == View.FORMULAS else View.FORMULAS

    def load_file(self, filename: str) -> None:
        self.filename = filename
        try:
            report = load_grid(self.sheet, filename)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read %r: %s", filename, e)
            self.oops(getattr(e, "strerror", None) or str(e))
            return
        if report.fresh:
            self.oops(FRESH_FILE)
        for problem in report.problems:
            self.oops(problem.message)

    def write_file(self) -> None:
        filename = self.prompt(self.filename)
        if filename is None:
            self.oops("Aborted")
            return
        self.filename = filename
        try:
            save_grid(self.sheet, filename)
        except OSError as e:
            logger.error("Could not write %r: %s", filename, e)
            self.oops(e.strerror or str(e))
            return
        self.oops("File written")

    def react(self, key: str) -> None:
        if key == " ":
            self.enter_text()
        elif key == "w":
            self.write_file()
        elif key == "f":
            self.toggle_view()
        elif key in MOVES:
            self.move(*MOVES[key])
        elif key.startswith("ctrl+") and key[5:] in MOVES:
            self.copy_text(*MOVES[key[5:]])
        elif key == "resize":
            pass  # next frame repaints at the new size
        else:
            self.oops("Unknown key")

    # ── Loop ──────────────────────────────────────────────────────

    def frame(self) -> Frame:
        return build_frame(self.sheet, self.row, self.col, self.view, self.messages, self.col_width)

    def run(self, read_key: Callable[[], str], draw: Callable[[Frame], None]) -> None:
        """Show, read a key, react; until the quit key."""
        while True:
            draw(self.frame())
            self.messages.clear()
            key = read_key()
            if key == QUIT_KEY:
                break
            self.react(key)
