"""Error kinds for cell evaluation.

Every failure a cell can show is an ``ErrorKind``. Inside one evaluation only
the first error is kept; across cells the propagation policy in
``propagate`` decides what a referring cell sees.
"""

from enum import Enum


class ErrorKind(str, Enum):
    SYNTAX_BAD_TOKEN = "syntax_bad_token"
    SYNTAX_FACTOR_EXPECTED = "syntax_factor_expected"
    SYNTAX_MISSING_PAREN = "syntax_missing_paren"
    SYNTAX_TRAILING_TOKEN = "syntax_trailing_token"
    DIV_BY_ZERO = "div_by_zero"
    NON_INTEGER_COORD = "non_integer_coord"
    OUT_OF_RANGE = "out_of_range"
    CYCLE = "cycle"
    NO_FORMULA = "no_formula"
    UPSTREAM = "upstream"
    TOO_DEEP = "too_deep"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ErrorKind.SYNTAX_BAD_TOKEN: "Syntax error: unknown token type",
    ErrorKind.SYNTAX_FACTOR_EXPECTED: "Syntax error: expected a factor",
    ErrorKind.SYNTAX_MISSING_PAREN: "Syntax error: expected ')'",
    ErrorKind.SYNTAX_TRAILING_TOKEN: "Syntax error: unexpected token",
    ErrorKind.DIV_BY_ZERO: "Divide by 0",
    ErrorKind.NON_INTEGER_COORD: "Non-integer cell coordinate",
    ErrorKind.OUT_OF_RANGE: "Cell out of range",
    ErrorKind.CYCLE: "Cycle",
    ErrorKind.NO_FORMULA: "No value for referred cell",
    # The referred cell already shows the real message.
    ErrorKind.UPSTREAM: "",
    ErrorKind.TOO_DEEP: "Formula nested too deeply",
}


# ── Error types ───────────────────────────────────────────────────

class FormulaError(Exception):
    """Base for all cell errors. `kind` says which one."""
    kind: ErrorKind = ErrorKind.SYNTAX_FACTOR_EXPECTED

    def __init__(self, kind: ErrorKind | None = None):
        if kind is not None:
            self.kind = kind
        super().__init__(self.kind.message)

    @property
    def message(self) -> str:
        return self.kind.message

    @staticmethod
    def from_kind(kind: ErrorKind) -> "FormulaError":
        """Build the exception subclass matching *kind*."""
        return _CLASSES.get(kind, FormulaError)(kind)

class FormulaSyntaxError(FormulaError):
    kind = ErrorKind.SYNTAX_FACTOR_EXPECTED

class DivisionByZeroError(FormulaError):
    kind = ErrorKind.DIV_BY_ZERO

class NonIntegerCoordError(FormulaError):
    kind = ErrorKind.NON_INTEGER_COORD

class OutOfRangeError(FormulaError):
    kind = ErrorKind.OUT_OF_RANGE

class CycleError(FormulaError):
    kind = ErrorKind.CYCLE

class NoFormulaError(FormulaError):
    kind = ErrorKind.NO_FORMULA

class UpstreamError(FormulaError):
    kind = ErrorKind.UPSTREAM

class NestingError(FormulaError):
    kind = ErrorKind.TOO_DEEP


_CLASSES = {
    ErrorKind.SYNTAX_BAD_TOKEN: FormulaSyntaxError,
    ErrorKind.SYNTAX_FACTOR_EXPECTED: FormulaSyntaxError,
    ErrorKind.SYNTAX_MISSING_PAREN: FormulaSyntaxError,
    ErrorKind.SYNTAX_TRAILING_TOKEN: FormulaSyntaxError,
    ErrorKind.DIV_BY_ZERO: DivisionByZeroError,
    ErrorKind.NON_INTEGER_COORD: NonIntegerCoordError,
    ErrorKind.OUT_OF_RANGE: OutOfRangeError,
    ErrorKind.CYCLE: CycleError,
    ErrorKind.NO_FORMULA: NoFormulaError,
    ErrorKind.UPSTREAM: UpstreamError,
    ErrorKind.TOO_DEEP: NestingError,
}


# ── Propagation policy ────────────────────────────────────────────

def propagate(kind: ErrorKind) -> ErrorKind:
    """Kind a referring cell latches when the referred cell failed with *kind*.

    Cycles and missing formulas pass through unchanged; we don't know whom to
    blame for a cycle. Anything else becomes the silent UPSTREAM marker so the
    message is shown once, in the cell that caused it.
    """
    if kind in (ErrorKind.CYCLE, ErrorKind.NO_FORMULA):
        return kind
    return ErrorKind.UPSTREAM
