"""Context-aware autocompletion for expressions."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from mathexpr.tokens import Token, TokenType, is_ident_char

Category = Literal["function", "variable", "operator", "constant"]

_OPERANDS: frozenset[str] = frozenset({"function", "variable", "constant"})
_OPERATORS: frozenset[str] = frozenset({"operator"})

# Token types whose own text is not a name being typed
_PUNCTUATION = frozenset(
    {TokenType.OPERATOR, TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.UNKNOWN}
)


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A completion candidate. ``text`` is what gets inserted."""

    text: str
    display_text: str
    category: Category
    description: str = ""


def _s(text: str, display: str, category: Category, description: str) -> Suggestion:
    return Suggestion(text, display, category, description)


DEFAULT_SUGGESTIONS: tuple[Suggestion, ...] = (
    # Constants
    _s("pi", "π", "constant", "Pi (3.14159...)"),
    _s("e", "e", "constant", "Euler's number (2.71828...)"),
    # Operators
    _s("+", "+", "operator", "Addition"),
    _s("-", "-", "operator", "Subtraction"),
    _s("*", "×", "operator", "Multiplication"),
    _s("/", "÷", "operator", "Division"),
    _s("^", "^", "operator", "Exponentiation"),
    _s("%", "%", "operator", "Modulo"),
    # Trigonometric
    _s("sin(", "sin", "function", "Sine function"),
    _s("cos(", "cos", "function", "Cosine function"),
    _s("tan(", "tan", "function", "Tangent function"),
    _s("asin(", "asin", "function", "Inverse sine function"),
    _s("acos(", "acos", "function", "Inverse cosine function"),
    _s("atan(", "atan", "function", "Inverse tangent function"),
    # Hyperbolic
    _s("sinh(", "sinh", "function", "Hyperbolic sine function"),
    _s("cosh(", "cosh", "function", "Hyperbolic cosine function"),
    _s("tanh(", "tanh", "function", "Hyperbolic tangent function"),
    # Logarithmic
    _s("log(", "log", "function", "Base-10 logarithm"),
    _s("ln(", "ln", "function", "Natural logarithm"),
    _s("log2(", "log2", "function", "Base-2 logarithm"),
    # Other
    _s("sqrt(", "√", "function", "Square root"),
    _s("abs(", "abs", "function", "Absolute value"),
    _s("exp(", "exp", "function", "Exponential function (e^x)"),
    # Number theory
    _s("gcd(", "gcd", "function", "Greatest common divisor"),
    _s("lcm(", "lcm", "function", "Least common multiple"),
    _s("factorial(", "factorial", "function", "Factorial (n!)"),
    _s("isPrime(", "isPrime", "function", "Check if a number is prime"),
    # Rounding
    _s("floor(", "floor", "function", "Round down to nearest integer"),
    _s("ceil(", "ceil", "function", "Round up to nearest integer"),
    _s("round(", "round", "function", "Round to nearest integer"),
)


class AutoCompletionProvider:
    """Filter and rank a suggestion catalog for a cursor position."""

    def __init__(self, extra: Iterable[Suggestion] = ()) -> None:
        self._catalog: tuple[Suggestion, ...] = DEFAULT_SUGGESTIONS + tuple(extra)

    @property
    def catalog(self) -> tuple[Suggestion, ...]:
        return self._catalog

    def suggest(
        self, source: str, cursor: int, tokens: Sequence[Token] | None = None
    ) -> list[Suggestion]:
        """Return catalog entries that fit at *cursor*, best match first."""
        cursor = max(0, min(cursor, len(source)))
        tokens = [t for t in tokens or () if t.type != TokenType.WHITESPACE]
        current = _token_at(tokens, cursor)

        if current is None:
            prefix = _word_before(source, cursor)
        elif current.type in _PUNCTUATION:
            prefix = ""
        else:
            prefix = source[current.start : cursor]
            if current.type == TokenType.FUNCTION and "(" in prefix:
                prefix = prefix[: prefix.index("(")]
        prefix = prefix.lower()

        matches = [s for s in self._catalog if s.text.lower().startswith(prefix)]

        allowed = _allowed_categories(current, _token_before(tokens, cursor))
        if allowed is not None:
            matches = [s for s in matches if s.category in allowed]

        # sorted() is stable, so equal keys keep catalog order
        return sorted(matches, key=lambda s: (s.text.lower() != prefix, len(s.text)))


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def _allowed_categories(current: Token | None, previous: Token | None) -> frozenset[str] | None:
    """Categories permitted by the surrounding tokens, or None for no narrowing."""
    if current is not None:
        if current.type in (
            TokenType.OPERATOR,
            TokenType.LEFT_PAREN,
            TokenType.FUNCTION,
            TokenType.VARIABLE,
        ):
            return _OPERANDS
        if current.type == TokenType.UNKNOWN and current.value == ",":
            return _OPERANDS
        if current.type == TokenType.RIGHT_PAREN:
            return _OPERATORS
        return None

    if previous is None:
        return None
    if previous.type in (TokenType.OPERATOR, TokenType.LEFT_PAREN):
        return _OPERANDS
    if previous.type == TokenType.UNKNOWN and previous.value == ",":
        return _OPERANDS
    if previous.type in (TokenType.NUMBER, TokenType.RIGHT_PAREN):
        return _OPERATORS
    return None


def _token_at(tokens: Sequence[Token], cursor: int) -> Token | None:
    """First token containing *cursor* or ending right before it."""
    for tok in tokens:
        if tok.start <= cursor <= tok.end + 1:
            return tok
    return None


def _token_before(tokens: Sequence[Token], cursor: int) -> Token | None:
    """Closest token that ends before *cursor*."""
    best: Token | None = None
    for tok in tokens:
        if tok.end < cursor and (best is None or tok.end > best.end):
            best = tok
    return best


def _word_before(source: str, cursor: int) -> str:
    start = cursor
    while start > 0 and is_ident_char(source[start - 1]):
        start -= 1
    return source[start:cursor]
