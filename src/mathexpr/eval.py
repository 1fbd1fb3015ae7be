"""Tree-walking evaluator for expression ASTs."""

from __future__ import annotations

import math
from dataclasses import dataclass

from mathexpr.ast import BinaryOperation, FunctionCall, Node, Number, UnaryOperation, Variable
from mathexpr.builtins import DEFAULT_CONTEXT, EvaluationContext, Value
from mathexpr.errors import EvalError


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of one evaluation: a value, or None plus an error message."""

    value: Value
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def is_truthy(value: Value) -> bool:
    """Zero, NaN, false and null are falsy; everything else is truthy."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    return bool(value)


class Evaluator:
    """Evaluate ASTs against a context merged over the default one.

    The merged context is fixed at construction; evaluation never mutates it.
    """

    def __init__(self, context: EvaluationContext | None = None) -> None:
        self._context = DEFAULT_CONTEXT.merged(context)

    @property
    def context(self) -> EvaluationContext:
        return self._context

    def evaluate(self, node: Node) -> EvaluationResult:
        """Evaluate *node*. Failures come back as a result, never as an exception."""
        try:
            return EvaluationResult(self._eval(node))
        except EvalError as exc:
            return EvaluationResult(None, exc.message)
        except RecursionError:
            return EvaluationResult(None, "Expression is too deeply nested")
        except Exception as exc:  # noqa: BLE001 - user callables may raise anything
            return EvaluationResult(None, str(exc) or type(exc).__name__)

    # ------------------------------------------------------------------
    # Node dispatch
    # ------------------------------------------------------------------

    def _eval(self, node: Node) -> Value:
        if isinstance(node, Number):
            return self._eval_number(node)
        if isinstance(node, BinaryOperation):
            return self._eval_binary(node)
        if isinstance(node, UnaryOperation):
            return self._eval_unary(node)
        if isinstance(node, FunctionCall):
            return self._eval_call(node)
        if isinstance(node, Variable):
            return self._eval_variable(node)
        raise EvalError(f"Unknown node type: {type(node).__name__}")

    def _eval_number(self, node: Number) -> float:
        try:
            return float(node.value)
        except ValueError:
            raise EvalError(f"Invalid number: {node.value}") from None

    def _eval_binary(self, node: BinaryOperation) -> Value:
        # Left spine is walked iteratively; flat chains like 1+2+...+n take constant stack
        spine: list[BinaryOperation] = []
        current: Node = node
        while isinstance(current, BinaryOperation):
            spine.append(current)
            current = current.left

        value = self._eval(current)
        for op_node in reversed(spine):
            value = self._apply_binary(op_node.operator, value, self._eval(op_node.right))
        return value

    def _apply_binary(self, op: str, left: Value, right: Value) -> Value:
        if op == "&&":
            return is_truthy(left) and is_truthy(right)
        if op == "||":
            return is_truthy(left) or is_truthy(right)
        if op == "==":
            return _strict_equal(left, right)
        if op == "!=":
            return not _strict_equal(left, right)

        a = _operand(op, left)
        b = _operand(op, right)

        if op == "+":
            return a + b
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            if b == 0:
                raise EvalError("Division by zero")
            return a / b
        if op == "%":
            if b == 0:
                raise EvalError("Modulo by zero")
            return math.fmod(a, b)
        if op == "^":
            try:
                return math.pow(a, b)
            except (ValueError, OverflowError) as exc:
                raise EvalError(f"Invalid exponentiation: {exc}") from None
        if op == "<":
            return a < b
        if op == ">":
            return a > b
        if op == "<=":
            return a <= b
        if op == ">=":
            return a >= b
        raise EvalError(f"Unknown binary operator: {op}")

    def _eval_unary(self, node: UnaryOperation) -> Value:
        op = node.operator
        value = self._eval(node.operand)
        if op == "!":
            return not is_truthy(value)
        if op == "+":
            return +_operand(op, value)
        if op == "-":
            return -_operand(op, value)
        raise EvalError(f"Unknown unary operator: {op}")

    def _eval_call(self, node: FunctionCall) -> Value:
        fn = self._context.functions.get(node.name)
        if fn is None:
            raise EvalError(f"Unknown function: {node.name}")
        args = [self._eval(arg) for arg in node.args]
        return fn(*args)

    def _eval_variable(self, node: Variable) -> Value:
        if node.name not in self._context.variables:
            raise EvalError(f"Unknown variable: {node.name}")
        return self._context.variables[node.name]


def _strict_equal(left: Value, right: Value) -> bool:
    """Equality without coercion: a boolean never equals a number."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _operand(op: str, value: Value) -> float:
    """Coerce an operand for arithmetic or ordering; booleans count as 0/1."""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return value
    kind = "null" if value is None else type(value).__name__
    raise EvalError(f"Operator '{op}' expects numbers, got {kind}")


def evaluate(node: Node, context: EvaluationContext | None = None) -> EvaluationResult:
    """Convenience function: evaluate *node* with a fresh Evaluator."""
    return Evaluator(context).evaluate(node)
