from __future__ import annotations

import logging
from typing import Callable, NamedTuple, Optional

from vicissicalc.errors import (
    CycleError,
    ErrorKind,
    FormulaError,
    OutOfRangeError,
    propagate,
)
from vicissicalc.formula import evaluate
from vicissicalc.lexer import find_formula, is_formula
from vicissicalc.storage import DEFAULT_COLS, DEFAULT_ROWS, Cell, CellStatus, CellStore

logger = logging.getLogger(__name__)

__all__ = ["CellResult", "Spreadsheet", "is_formula"]


class CellResult(NamedTuple):
    """Outcome of reading a cell: a value or an error kind, never both."""
    value: Optional[float] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Spreadsheet:
    """Cell store plus on-demand recompute with cycle detection.

    A stale cell is marked COMPUTING before its formula runs; a reference that
    reaches a COMPUTING cell has closed a cycle. Every edit invalidates the
    whole grid.
    """

    def __init__(self, rows: int = DEFAULT_ROWS, cols: int = DEFAULT_COLS,
                 on_error: Optional[Callable[[ErrorKind], None]] = None):
        self.store = CellStore(rows, cols)
        self.on_error = on_error

    @property
    def rows(self) -> int:
        return self.store.rows

    @property
    def cols(self) -> int:
        return self.store.cols

    def in_bounds(self, row: int, col: int) -> bool:
        return self.store.in_bounds(row, col)

    # ── Store passthrough ─────────────────────────────────────────

    def set_text(self, row: int, col: int, text: str) -> None:
        self.store.set_text(row, col, text)

    def set_text_batch(self, row: int, col: int, text: str) -> None:
        self.store.set_text_batch(row, col, text)

    def invalidate_all(self) -> None:
        self.store.invalidate_all()

    def text_of(self, row: int, col: int) -> str:
        return self.store.text_of(row, col)

    def status_of(self, row: int, col: int) -> CellStatus:
        return self.store.status_of(row, col)

    def value_of(self, row: int, col: int) -> Optional[float]:
        return self.store.value_of(row, col)

    def error_of(self, row: int, col: int) -> Optional[ErrorKind]:
        return self.store.error_of(row, col)

    # ── Recompute ─────────────────────────────────────────────────

    def get_value(self, row: int, col: int) -> float:
        """Value of the cell at (row, col), recomputing it if stale.

        Raises the FormulaError subclass for the cell's error kind; a cell
        without a formula raises NoFormulaError.
        """
        if not self.store.in_bounds(row, col):
            raise OutOfRangeError()
        cell = self.store.cell(row, col)
        if cell.status == CellStatus.STALE:
            self._recompute(row, col, cell)
        if cell.status == CellStatus.OK:
            return cell.value
        if cell.status == CellStatus.COMPUTING:
            raise CycleError()
        raise FormulaError.from_kind(cell.error)

    def lookup(self, row: int, col: int) -> CellResult:
        """Non-raising get_value."""
        try:
            return CellResult(value=self.get_value(row, col))
        except FormulaError as e:
            return CellResult(error=e.kind)

    def _recompute(self, row: int, col: int, cell: Cell) -> None:
        cell.mark_computing()
        try:
            body = find_formula(cell.text)
            if body is None:
                cell.mark_no_formula()
            else:
                try:
                    value = evaluate(body, row, col, self._resolve_reference)
                except FormulaError as e:
                    cell.mark_error(e.kind)
                else:
                    cell.mark_ok(value)
        finally:
            # Plain assignment: this may run right at the recursion limit.
            if cell.status is CellStatus.COMPUTING:
                cell.status = CellStatus.STALE
        logger.debug("Recomputed (%d, %d): %s %r", row, col, cell.status.value,
                     cell.value if cell.error is None else cell.error.value)
        if cell.error is not None and self.on_error is not None:
            self.on_error(cell.error)

    def _resolve_reference(self, row: int, col: int) -> float:
        """get_value as seen from a formula: the referred cell's errors are propagated."""
        if not self.store.in_bounds(row, col):
            raise OutOfRangeError()
        try:
            return self.get_value(row, col)
        except FormulaError as e:
            raise FormulaError.from_kind(propagate(e.kind)) from e
