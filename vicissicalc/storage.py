from enum import Enum
from typing import Iterator, List, Optional, Tuple

from vicissicalc.errors import ErrorKind
from vicissicalc.lexer import skip_blanks

DEFAULT_ROWS = 20
DEFAULT_COLS = 4


class CellStatus(str, Enum):
    STALE = "stale"
    COMPUTING = "computing"
    OK = "ok"
    ERROR = "error"
    NO_FORMULA = "no_formula"


class Cell:
    __slots__ = ('text', 'status', 'value', 'error')

    def __init__(self, text: str = ""):
        self.text = text
        self.status = CellStatus.STALE
        self.value: Optional[float] = None
        self.error: Optional[ErrorKind] = None

    def mark_stale(self) -> None:
        self.status = CellStatus.STALE
        self.value = None
        self.error = None

    def mark_computing(self) -> None:
        self.status = CellStatus.COMPUTING
        self.value = None
        self.error = None

    def mark_ok(self, value: float) -> None:
        self.status = CellStatus.OK
        self.value = value
        self.error = None

    def mark_no_formula(self) -> None:
        self.status = CellStatus.NO_FORMULA
        self.value = None
        self.error = ErrorKind.NO_FORMULA

    def mark_error(self, kind: ErrorKind) -> None:
        self.status = CellStatus.ERROR
        self.value = None
        self.error = kind

    def __repr__(self) -> str:
        return f"Cell(text={self.text!r}, status={self.status.value}, value={self.value!r}, error={self.error!r})"


class CellStore:
    """Fixed grid of cells: raw text plus the cached result of the last recompute.

    Writes through set_text invalidate every cell; there is no dependency
    tracking. set_text_batch skips the invalidation so bulk loaders can do it
    once at the end with invalidate_all.
    """

    def __init__(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS):
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid must have at least one cell, got {rows}x{cols}")
        self._rows = rows
        self._cols = cols
        self._cells: List[List[Cell]] = [[Cell() for _ in range(cols)] for _ in range(rows)]

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._rows and 0 <= col < self._cols

    def cell(self, row: int, col: int) -> Cell:
        if not self.in_bounds(row, col):
            raise IndexError(f"Cell ({row}, {col}) outside {self._rows}x{self._cols} grid")
        return self._cells[row][col]

    # ── Writes ────────────────────────────────────────────────────

    def set_text_batch(self, row: int, col: int, text: str) -> bool:
        """Replace the text without invalidating. Returns True if it changed."""
        cell = self.cell(row, col)
        if cell.text == text:
            return False
        # str is immutable, so holding the caller's object is already a copy.
        cell.text = str(text)
        return True

    def set_text(self, row: int, col: int, text: str) -> bool:
        changed = self.set_text_batch(row, col, text)
        self.invalidate_all()
        return changed

    def invalidate_all(self) -> None:
        for row in self._cells:
            for cell in row:
                cell.mark_stale()

    # ── Reads ─────────────────────────────────────────────────────

    def text_of(self, row: int, col: int) -> str:
        return self.cell(row, col).text

    def status_of(self, row: int, col: int) -> CellStatus:
        return self.cell(row, col).status

    def value_of(self, row: int, col: int) -> Optional[float]:
        return self.cell(row, col).value

    def error_of(self, row: int, col: int) -> Optional[ErrorKind]:
        return self.cell(row, col).error

    def positions(self) -> Iterator[Tuple[int, int]]:
        """All coordinates in row-major order."""
        for r in range(self._rows):
            for c in range(self._cols):
                yield r, c

    def nonblank(self) -> Iterator[Tuple[int, int, str]]:
        """(row, col, text) for every cell with non-blank text, row-major."""
        for r, c in self.positions():
            text = self._cells[r][c].text
            if skip_blanks(text) < len(text):
                yield r, c, text
