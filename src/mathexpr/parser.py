"""Expression parser: converts a token stream into an AST.

Grammar, lowest to highest precedence (all binary levels left-associative)::

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/' | '%') factor)*
    factor     := primary ('^' primary)*
    primary    := ('+' | '-') primary
                | NUMBER | VARIABLE
                | FUNCTION '(' (expression (',' expression)*)? ')'
                | '(' expression ')'

The parser never stops at the first problem. Errors are recorded and the
parser recovers with a placeholder so the rest of the input is still
checked.
"""

from __future__ import annotations

from dataclasses import dataclass

from mathexpr.ast import BinaryOperation, FunctionCall, Node, Number, UnaryOperation, Variable
from mathexpr.errors import ParseError
from mathexpr.lexer import tokenize
from mathexpr.tokens import Token, TokenType


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Tokens (whitespace included), the AST when error-free, and syntax errors."""

    tokens: tuple[Token, ...]
    ast: Node | None = None
    errors: tuple[ParseError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.ast is not None and not self.errors


class Parser:
    """Recursive descent parser over the non-whitespace tokens of an expression."""

    def __init__(self, tokens: list[Token], source: str = "") -> None:
        self._tokens = [t for t in tokens if t.type != TokenType.WHITESPACE]
        self._source = source
        self._pos = 0
        self._errors: list[ParseError] = []

    @property
    def errors(self) -> list[ParseError]:
        return list(self._errors)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at_operator(self, *values: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.type == TokenType.OPERATOR and tok.value in values

    def _at(self, tt: TokenType) -> bool:
        tok = self._peek()
        return tok is not None and tok.type == tt

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        self._pos += 1
        return tok

    def _end_offset(self) -> int:
        """Offset just past the last meaningful token."""
        if self._tokens:
            return self._tokens[-1].end + 1
        return 0

    def _error(self, message: str, position: int) -> None:
        self._errors.append(ParseError(message, position, self._source))

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def parse(self) -> Node | None:
        """Parse the whole token list. Returns None when nothing was parsed."""
        if not self._tokens:
            return None

        try:
            node = self._parse_expression()
            tok = self._peek()
            if tok is not None:
                self._error(f"Unexpected token: {tok.value}", tok.start)
        except Exception as exc:  # noqa: BLE001 - reported as one syntax error
            tok = self._peek()
            position = tok.start if tok is not None else self._end_offset()
            message = str(exc) or type(exc).__name__
            self._error(message, position)
            return None

        return node

    # ------------------------------------------------------------------
    # Precedence levels
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Node:
        left = self._parse_term()
        while self._at_operator("+", "-"):
            op = self._advance().value
            left = BinaryOperation(op, left, self._parse_term())
        return left

    def _parse_term(self) -> Node:
        left = self._parse_factor()
        while self._at_operator("*", "/", "%"):
            op = self._advance().value
            left = BinaryOperation(op, left, self._parse_factor())
        return left

    def _parse_factor(self) -> Node:
        left = self._parse_primary()
        while self._at_operator("^"):
            op = self._advance().value
            left = BinaryOperation(op, left, self._parse_primary())
        return left

    def _parse_primary(self) -> Node:
        tok = self._peek()

        if tok is None:
            self._error("Unexpected end of expression", self._end_offset())
            return Number("0")

        if tok.type == TokenType.OPERATOR and tok.value in ("+", "-"):
            self._advance()
            return UnaryOperation(tok.value, self._parse_primary())

        if tok.type == TokenType.NUMBER:
            self._advance()
            return Number(tok.value)

        if tok.type == TokenType.VARIABLE:
            self._advance()
            return Variable(tok.value)

        if tok.type == TokenType.FUNCTION:
            return self._parse_call()

        if tok.type == TokenType.LEFT_PAREN:
            self._advance()
            expr = self._parse_expression()
            if self._at(TokenType.RIGHT_PAREN):
                self._advance()
            else:
                nxt = self._peek()
                self._error("Expected ')'", nxt.start if nxt is not None else tok.end + 1)
            return expr

        # Skip the offending token and stand in a literal so parsing continues
        self._error(f"Unexpected token: {tok.value}", tok.start)
        self._advance()
        return Number("0")

    def _parse_call(self) -> FunctionCall:
        name_tok = self._advance()
        name = name_tok.value

        if not self._at(TokenType.LEFT_PAREN):
            nxt = self._peek()
            self._error(
                f"Expected '(' after function name '{name}'",
                nxt.start if nxt is not None else name_tok.end + 1,
            )
            return FunctionCall(name, ())

        self._advance()  # consume '('

        args: list[Node] = []
        if self._at(TokenType.RIGHT_PAREN):
            self._advance()
            return FunctionCall(name, ())

        while True:
            args.append(self._parse_expression())

            tok = self._peek()
            if tok is None:
                self._error("Expected ')' or ',' in function arguments", name_tok.end + 1)
                break

            if tok.type == TokenType.RIGHT_PAREN:
                self._advance()
                break

            if tok.value == ",":
                self._advance()
            else:
                # Carry on as though the comma were there
                self._error("Expected ',' between function arguments", tok.start)

        return FunctionCall(name, tuple(args))


def parse(source: str) -> ParseResult:
    """Convenience function: parse source text and return a ParseResult."""
    tokens = tokenize(source)
    parser = Parser(tokens, source)
    node = parser.parse()
    errors = tuple(parser.errors)
    return ParseResult(tuple(tokens), node if not errors else None, errors)
