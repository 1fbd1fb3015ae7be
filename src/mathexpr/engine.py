"""ExpressionEngine: single entry point combining every stage.

Adds two pieces of session state on top of the pure stages: a parse cache
keyed by raw expression text and a bounded, newest-first evaluation
history. Instances are not thread-safe; use one engine per caller or
serialize access.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from mathexpr.builtins import EvaluationContext, Value
from mathexpr.completion import AutoCompletionProvider, Suggestion
from mathexpr.eval import EvaluationResult, Evaluator
from mathexpr.highlight import StyledToken, StyleKey, SyntaxHighlighter
from mathexpr.lexer import tokenize
from mathexpr.parser import ParseResult, parse
from mathexpr.tokens import Token

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A successfully evaluated expression. ``timestamp`` is seconds since the epoch."""

    expression: str
    result: Value
    timestamp: float


class ExpressionEngine:
    """Parse, evaluate, highlight and complete expressions with caching and history."""

    def __init__(
        self,
        context: EvaluationContext | None = None,
        styles: Mapping[StyleKey, str] | None = None,
        suggestions: Iterable[Suggestion] = (),
    ) -> None:
        self._highlighter = SyntaxHighlighter(styles)
        self._evaluator = Evaluator(context)
        self._completer = AutoCompletionProvider(suggestions)
        self._cache: dict[str, ParseResult] = {}
        self._history: list[HistoryEntry] = []

    @property
    def context(self) -> EvaluationContext:
        """The merged context the current evaluator works against."""
        return self._evaluator.context

    @property
    def highlighter(self) -> SyntaxHighlighter:
        return self._highlighter

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def tokenize(self, expression: str) -> list[Token]:
        return tokenize(expression)

    def parse(self, expression: str, use_cache: bool = True) -> ParseResult:
        """Parse *expression*, reusing the cached result when allowed."""
        if use_cache:
            cached = self._cache.get(expression)
            if cached is not None:
                logger.debug("parse cache hit: %r", expression)
                return cached

        result = parse(expression)

        if use_cache and expression.strip():
            self._cache[expression] = result
            logger.debug("parse cache store: %r (%d entries)", expression, len(self._cache))
        return result

    def evaluate(self, expression: str, add_to_history: bool = True) -> EvaluationResult:
        """Parse and evaluate *expression*; successful results go to history."""
        parsed = self.parse(expression)

        if parsed.errors:
            return EvaluationResult(None, "; ".join(e.message for e in parsed.errors))
        if parsed.ast is None:
            return EvaluationResult(None, "Invalid expression")

        result = self._evaluator.evaluate(parsed.ast)
        if result.error is not None:
            logger.debug("evaluation failed for %r: %s", expression, result.error)
        elif add_to_history:
            self._add_to_history(expression, result.value)
        return result

    # ------------------------------------------------------------------
    # Editor support
    # ------------------------------------------------------------------

    def highlight_syntax(self, expression: str) -> list[StyledToken]:
        parsed = self.parse(expression)
        return self._highlighter.highlight(parsed.tokens, parsed.errors)

    def render_highlighted_html(self, expression: str) -> str:
        styled = self.highlight_syntax(expression)
        return self._highlighter.render_to_html(expression, styled)

    def suggest(self, expression: str, cursor: int) -> list[Suggestion]:
        parsed = self.parse(expression)
        return self._completer.suggest(expression, cursor, parsed.tokens)

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def _add_to_history(self, expression: str, value: Value) -> None:
        self._history.insert(0, HistoryEntry(expression, value, time.time()))
        if len(self._history) > HISTORY_LIMIT:
            del self._history[HISTORY_LIMIT:]
            logger.debug("history trimmed to %d entries", HISTORY_LIMIT)

    def get_history(self) -> list[HistoryEntry]:
        """Return a copy of the history, newest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def clear_cache(self) -> None:
        self._cache.clear()

    def update_context(self, context: EvaluationContext) -> None:
        """Replace the evaluator with one built from *context* over the defaults."""
        self._evaluator = Evaluator(context)
        self.clear_cache()
        logger.debug(
            "context replaced: %d variables, %d functions",
            len(self._evaluator.context.variables),
            len(self._evaluator.context.functions),
        )
