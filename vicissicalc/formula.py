"""Formula evaluator for Vicissicalc cells.

Supports: numbers, + - * / % ^, unary -, parentheses, the identifiers
``r`` and ``c`` (row and column of the cell being evaluated) and the
reference operator ``row @ col``.

Precedence (left / right; higher binds tighter):
  + -      1 / 2
  * / %    3 / 4
  ^        5 / 5   (right associative)
  @        7 / 8

The parser evaluates as it parses. The first error is latched and the rest
of the input is thrown away, so parsing then finishes as a no-op.
"""

import math
from typing import Callable, Optional

from vicissicalc.errors import ErrorKind, FormulaError
from vicissicalc.lexer import END, Lexer, Token, TokenType

# resolve(row, col) -> value of the referred cell; raises FormulaError.
Resolver = Callable[[int, int], float]

PRECEDENCE: dict[str, tuple[int, int]] = {
    '+': (1, 2),
    '-': (1, 2),
    '*': (3, 4),
    '/': (3, 4),
    '%': (3, 4),
    '^': (5, 5),
    '@': (7, 8),
}


# ── Arithmetic helpers ────────────────────────────────────────────

def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.trunc(x) and math.fmod(x, 2.0) != 0


def power(base: float, exponent: float) -> float:
    """C pow(): overflow and poles give +-inf, other domain errors NaN."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def remainder(lhs: float, rhs: float) -> float:
    """C fmod() for a nonzero divisor."""
    try:
        return math.fmod(lhs, rhs)
    except ValueError:
        return math.nan


def is_integral(v: float) -> bool:
    return math.isfinite(v) and v == math.trunc(v)


# ── Evaluator ─────────────────────────────────────────────────────

class Evaluator:
    """Evaluates one formula body on behalf of the cell at (row, col)."""
    __slots__ = ('row', 'col', 'resolve', 'lexer', 'token', 'error')

    def __init__(self, body: str, row: int, col: int, resolve: Resolver):
        self.row = row
        self.col = col
        self.resolve = resolve
        self.lexer = Lexer(body)
        self.token: Token = END
        self.error: Optional[FormulaError] = None

    def fail(self, error) -> None:
        """Latch *error* (a kind or a FormulaError) unless one is already latched."""
        if self.error is not None:
            return
        if isinstance(error, ErrorKind):
            error = FormulaError.from_kind(error)
        self.error = error
        self.lexer.close()

    def _advance(self) -> None:
        token = self.lexer.next()
        if token.type == TokenType.BAD:
            self.fail(ErrorKind.SYNTAX_BAD_TOKEN)
            token = END
        self.token = token

    def _at(self, op: str) -> bool:
        return self.token.type == TokenType.OP and self.token.text == op

    def parse_factor(self) -> float:
        token = self.token
        if token.type == TokenType.NUMBER:
            self._advance()
            return token.value
        if token.type == TokenType.IDENT:
            self._advance()
            return float(self.col if token.text == 'c' else self.row)
        if self._at('-'):
            self._advance()
            return -self.parse_factor()
        if self._at('('):
            self._advance()
            value = self.parse_expr(0)
            if not self._at(')'):
                self.fail(ErrorKind.SYNTAX_MISSING_PAREN)
            self._advance()
            return value
        self.fail(ErrorKind.SYNTAX_FACTOR_EXPECTED)
        self._advance()
        return 0.0

    def parse_expr(self, precedence: int) -> float:
        """Parse an infix expression in the right context of an operator of *precedence*."""
        lhs = self.parse_factor()
        while self.token.type == TokenType.OP and self.token.text in PRECEDENCE:
            op = self.token.text
            lp, rp = PRECEDENCE[op]
            if lp < precedence:
                break
            self._advance()
            rhs = self.parse_expr(rp)
            lhs = self.apply(op, lhs, rhs)
        return lhs

    def apply(self, op: str, lhs: float, rhs: float) -> float:
        if op == '+':
            return lhs + rhs
        if op == '-':
            return lhs - rhs
        if op == '*':
            return lhs * rhs
        if op in ('/', '%'):
            if rhs == 0:
                self.fail(ErrorKind.DIV_BY_ZERO)
                return 0.0
            return lhs / rhs if op == '/' else remainder(lhs, rhs)
        if op == '^':
            return power(lhs, rhs)
        if op == '@':
            return self.refer(lhs, rhs)
        raise ValueError(f"Unknown operator: {op!r}")

    def refer(self, row: float, col: float) -> float:
        # Operands are already evaluated even if an error was latched on the way.
        if not (is_integral(row) and is_integral(col)):
            self.fail(ErrorKind.NON_INTEGER_COORD)
            return 0.0
        try:
            return self.resolve(int(row), int(col))
        except FormulaError as e:
            self.fail(e)
            return 0.0

    def evaluate(self) -> float:
        """Value of the whole body; raises the latched FormulaError if any."""
        value = 0.0
        try:
            self._advance()
            value = self.parse_expr(0)
            if self.token.type != TokenType.END:
                self.fail(ErrorKind.SYNTAX_TRAILING_TOKEN)
        except RecursionError:
            self.fail(ErrorKind.TOO_DEEP)
        if self.error is not None:
            raise self.error
        return value


def evaluate(body: str, row: int, col: int, resolve: Resolver) -> float:
    """Evaluate a formula body (text after '=') for the cell at (row, col)."""
    return Evaluator(body, row, col, resolve).evaluate()
