"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    NUMBER = "number"  # 12, 3.5, .5, 1e-3
    OPERATOR = "operator"  # + - * / ^ % = ! < > & | <= >= == != && ||
    FUNCTION = "function"  # identifier followed by '('
    VARIABLE = "variable"  # any other identifier
    LEFT_PAREN = "left_paren"  # (
    RIGHT_PAREN = "right_paren"  # )
    WHITESPACE = "whitespace"
    UNKNOWN = "unknown"  # any other single character, including ','


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token. ``start`` and ``end`` are inclusive offsets."""

    type: TokenType
    value: str
    start: int
    end: int

    def covers(self, offset: int) -> bool:
        """Return True if *offset* falls inside this token."""
        return self.start <= offset <= self.end


OPERATOR_CHARS = frozenset("+-*/^%=!<>&|")

# Two-character operators, matched greedily before the single-character set
TWO_CHAR_OPERATORS = frozenset({"<=", ">=", "==", "!=", "&&", "||"})

_DIGITS = frozenset("0123456789")


def is_digit(ch: str) -> bool:
    """Return True if ch is an ASCII decimal digit."""
    return ch in _DIGITS


def is_ident_start(ch: str) -> bool:
    """Return True if ch may begin an identifier."""
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def is_ident_char(ch: str) -> bool:
    """Return True if ch may continue an identifier."""
    return is_ident_start(ch) or is_digit(ch)


def is_space(ch: str) -> bool:
    return ch != "" and ch.isspace()
