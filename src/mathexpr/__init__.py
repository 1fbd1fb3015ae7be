"""Mathematical expression lexer, parser, evaluator and editor tooling."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mathexpr.builtins import EvaluationContext
    from mathexpr.eval import EvaluationResult

__version__ = "0.1.0"


def calculate(source: str, context: EvaluationContext | None = None) -> EvaluationResult:
    """Parse and evaluate a single expression without any session state."""
    from mathexpr.eval import EvaluationResult, evaluate
    from mathexpr.parser import parse

    parsed = parse(source)
    if parsed.errors:
        return EvaluationResult(None, "; ".join(e.message for e in parsed.errors))
    if parsed.ast is None:
        return EvaluationResult(None, "Invalid expression")
    return evaluate(parsed.ast, context)
