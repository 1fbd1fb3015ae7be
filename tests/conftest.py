"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from mathexpr.ast import Node
from mathexpr.engine import ExpressionEngine
from mathexpr.eval import EvaluationResult, evaluate
from mathexpr.lexer import tokenize
from mathexpr.parser import ParseResult, parse
from mathexpr.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source and returns tokens."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def lex_solid():
    """Return a helper that tokenizes source and drops whitespace tokens."""

    def _lex(source: str) -> list[Token]:
        return [t for t in tokenize(source) if t.type != TokenType.WHITESPACE]

    return _lex


@pytest.fixture
def parse_ast():
    """Return a helper that parses source and returns the AST, asserting no errors."""

    def _parse(source: str) -> Node:
        result = parse(source)
        assert result.errors == (), f"Unexpected errors: {result.errors}"
        assert result.ast is not None
        return result.ast

    return _parse


@pytest.fixture
def calc():
    """Return a helper that parses and evaluates source with the default context."""

    def _calc(source: str) -> EvaluationResult:
        result = parse(source)
        assert result.ast is not None, f"Parse failed: {result.errors}"
        return evaluate(result.ast)

    return _calc


@pytest.fixture
def engine() -> ExpressionEngine:
    return ExpressionEngine()


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_values(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token values match the expected list."""
    actual = [t.value for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def error_messages(result: ParseResult) -> list[str]:
    return [e.message for e in result.errors]


def reconstruct(source: str, tokens: list[Token]) -> str:
    """Join the source slices covered by *tokens*, in order."""
    return "".join(source[t.start : t.end + 1] for t in tokens)
