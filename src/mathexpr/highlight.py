"""Syntax highlighting: style tags per token and HTML rendering."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from mathexpr.errors import ParseError
from mathexpr.tokens import Token, TokenType

ERROR = "error"

StyleKey = Union[TokenType, str]

DEFAULT_STYLES: Mapping[StyleKey, str] = MappingProxyType(
    {
        TokenType.NUMBER: "expression-number",
        TokenType.OPERATOR: "expression-operator",
        TokenType.FUNCTION: "expression-function",
        TokenType.LEFT_PAREN: "expression-paren",
        TokenType.RIGHT_PAREN: "expression-paren",
        TokenType.VARIABLE: "expression-variable",
        TokenType.UNKNOWN: "expression-unknown",
        TokenType.WHITESPACE: "expression-whitespace",
        ERROR: "expression-error",
    }
)


@dataclass(frozen=True, slots=True)
class StyledToken:
    """A token paired with the style class it should be rendered with."""

    token: Token
    style: str

    @property
    def start(self) -> int:
        return self.token.start

    @property
    def end(self) -> int:
        return self.token.end


def style_key(name: str) -> StyleKey:
    """Resolve a config name (``number``, ``left_paren``, ``error``...) to a style key."""
    if name == ERROR:
        return ERROR
    try:
        return TokenType(name)
    except ValueError:
        raise ValueError(f"unknown style name: {name}") from None


class SyntaxHighlighter:
    """Assign style classes to tokens, marking those that contain an error."""

    def __init__(self, styles: Mapping[StyleKey, str] | None = None) -> None:
        self._styles: dict[StyleKey, str] = dict(DEFAULT_STYLES)
        if styles:
            self._styles.update(styles)

    def style_for(self, key: StyleKey) -> str:
        return self._styles[key]

    def highlight(
        self, tokens: Iterable[Token], errors: Iterable[ParseError] = ()
    ) -> list[StyledToken]:
        error_positions = {e.position for e in errors}
        styled: list[StyledToken] = []
        for tok in tokens:
            has_error = any(tok.covers(p) for p in error_positions)
            style = self._styles[ERROR] if has_error else self._styles[tok.type]
            styled.append(StyledToken(tok, style))
        return styled

    def render_to_html(self, source: str, styled: Iterable[StyledToken]) -> str:
        return render_to_html(source, styled)


def render_to_html(source: str, styled: Iterable[StyledToken]) -> str:
    """Rebuild *source* as HTML, wrapping each token in a styled <span>.

    Token text and the text between tokens are HTML-escaped (``&``, ``<``,
    ``>``), so stripping the tags and unescaping gives back *source*. Text
    not covered by any token is copied through unwrapped.
    """
    parts: list[str] = []
    last_end = 0
    for st in sorted(styled, key=lambda s: s.start):
        if st.start > last_end:
            parts.append(_escape_html(source[last_end : st.start]))
        text = _escape_html(source[st.start : st.end + 1])
        parts.append(f'<span class="{_escape_attr(st.style)}">{text}</span>')
        last_end = st.end + 1
    if last_end < len(source):
        parts.append(_escape_html(source[last_end:]))
    return "".join(parts)


# ---------------------------------------------------------------------------
# HTML escaping
# ---------------------------------------------------------------------------


def _escape_html(text: str) -> str:
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        else:
            result.append(ch)
    return "".join(result)


def _escape_attr(text: str) -> str:
    return _escape_html(text).replace('"', "&quot;")
