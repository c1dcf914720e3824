"""Tokenizer for formula bodies (the text after ``=``)."""

import re
from enum import Enum
from typing import NamedTuple, Optional


class TokenType(str, Enum):
    NUMBER = "number"
    OP = "op"
    IDENT = "ident"
    END = "end"
    BAD = "bad"


class Token(NamedTuple):
    type: TokenType
    text: str = ""
    value: float = 0.0


END = Token(TokenType.END)

OPERATORS = "+-*/%^@()"
IDENTIFIERS = "cr"

BLANKS = " \t\r\n\f\v"

# Greedy decimal literal; a dangling exponent marker is left for the next token.
_NUMBER_RE = re.compile(r'[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?')


def skip_blanks(s: str, pos: int = 0) -> int:
    """Index of the first non-blank character of *s* at or after *pos*."""
    while pos < len(s) and s[pos] in BLANKS:
        pos += 1
    return pos


class Lexer:
    """Single-pass scanner. Once closed (or after a bad token) it only yields END."""
    __slots__ = ('text', 'pos', 'closed')

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.closed = False

    def close(self) -> None:
        """Discard the rest of the input."""
        self.pos = len(self.text)
        self.closed = True

    def next(self) -> Token:
        if self.closed:
            return END
        self.pos = skip_blanks(self.text, self.pos)
        if self.pos >= len(self.text):
            return END
        ch = self.text[self.pos]
        if '0' <= ch <= '9':
            m = _NUMBER_RE.match(self.text, self.pos)
            self.pos = m.end()
            return Token(TokenType.NUMBER, m.group(0), float(m.group(0)))
        if ch in OPERATORS:
            self.pos += 1
            return Token(TokenType.OP, ch)
        if ch in IDENTIFIERS:
            self.pos += 1
            return Token(TokenType.IDENT, ch)
        self.close()
        return Token(TokenType.BAD, ch)

    def __iter__(self):
        while True:
            token = self.next()
            yield token
            if token.type in (TokenType.END, TokenType.BAD):
                return


def tokenize(text: str) -> list[Token]:
    """All tokens of *text*, ending with END or BAD."""
    return list(Lexer(text))


def find_formula(text: str) -> Optional[str]:
    """The formula body after the leading '=', or None if *text* is not a formula."""
    pos = skip_blanks(text)
    if pos < len(text) and text[pos] == '=':
        return text[pos + 1:]
    return None


def is_formula(text: str) -> bool:
    return find_formula(text) is not None
