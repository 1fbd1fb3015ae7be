"""Expression lexer: converts source text into a flat token stream.

The lexer is total: every character of the input ends up in exactly one
token, so joining ``source[t.start : t.end + 1]`` over the result
reconstructs the input.
"""

from __future__ import annotations

from mathexpr.tokens import (
    OPERATOR_CHARS,
    TWO_CHAR_OPERATORS,
    Token,
    TokenType,
    is_digit,
    is_ident_char,
    is_ident_start,
    is_space,
)


class Lexer:
    """Tokenize an expression into a list of Token objects."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_one()
        return self._tokens

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        idx = self._pos + offset
        if idx < len(self._source):
            return self._source[idx]
        return ""

    def _emit(self, tt: TokenType, start: int) -> Token:
        tok = Token(tt, self._source[start : self._pos], start, self._pos - 1)
        self._tokens.append(tok)
        return tok

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _lex_one(self) -> None:
        ch = self._peek()

        if is_space(ch):
            self._lex_whitespace()
            return

        if is_digit(ch) or (ch == "." and is_digit(self._peek(1))):
            self._lex_number()
            return

        if ch in OPERATOR_CHARS:
            self._lex_operator()
            return

        if ch == "(":
            start = self._pos
            self._pos += 1
            self._emit(TokenType.LEFT_PAREN, start)
            return

        if ch == ")":
            start = self._pos
            self._pos += 1
            self._emit(TokenType.RIGHT_PAREN, start)
            return

        if is_ident_start(ch):
            self._lex_identifier()
            return

        start = self._pos
        self._pos += 1
        self._emit(TokenType.UNKNOWN, start)

    def _lex_whitespace(self) -> None:
        start = self._pos
        while is_space(self._peek()):
            self._pos += 1
        self._emit(TokenType.WHITESPACE, start)

    def _lex_number(self) -> None:
        start = self._pos
        seen_dot = False
        while True:
            ch = self._peek()
            if is_digit(ch):
                self._pos += 1
            elif ch == "." and not seen_dot:
                seen_dot = True
                self._pos += 1
            else:
                break

        # Scientific suffix: [eE][+-]?digits, otherwise leave the 'e' alone
        if self._peek() in ("e", "E"):
            mark = self._pos
            self._pos += 1
            if self._peek() in ("+", "-"):
                self._pos += 1
            if is_digit(self._peek()):
                while is_digit(self._peek()):
                    self._pos += 1
            else:
                self._pos = mark

        self._emit(TokenType.NUMBER, start)

    def _lex_operator(self) -> None:
        start = self._pos
        if self._source[start : start + 2] in TWO_CHAR_OPERATORS:
            self._pos += 2
        else:
            self._pos += 1
        self._emit(TokenType.OPERATOR, start)

    def _lex_identifier(self) -> None:
        start = self._pos
        while is_ident_char(self._peek()):
            self._pos += 1

        # Look past whitespace (without consuming it) for a call parenthesis
        look = self._pos
        while look < len(self._source) and is_space(self._source[look]):
            look += 1
        is_call = look < len(self._source) and self._source[look] == "("

        self._emit(TokenType.FUNCTION if is_call else TokenType.VARIABLE, start)


def tokenize(source: str) -> list[Token]:
    """Convenience function: tokenize source text and return token list."""
    return Lexer(source).tokenize()
