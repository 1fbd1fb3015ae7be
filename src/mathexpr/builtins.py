"""Default evaluation context: constants and built-in functions.

Every built-in follows the same calling convention: it receives the
evaluated arguments positionally and validates their count and types
itself, raising EvalError on misuse.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Union

from mathexpr.errors import EvalError

Value = Union[float, bool, None]
Function = Callable[..., Value]


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    """Name-to-value and name-to-callable bindings visible during evaluation."""

    variables: Mapping[str, Value] = field(default_factory=dict)
    functions: Mapping[str, Function] = field(default_factory=dict)

    def merged(self, overrides: EvaluationContext | None) -> EvaluationContext:
        """Return a new context with *overrides* shadowing this one's names."""
        if overrides is None:
            return self
        return EvaluationContext(
            MappingProxyType({**self.variables, **overrides.variables}),
            MappingProxyType({**self.functions, **overrides.functions}),
        )


# ---------------------------------------------------------------------------
# Argument checking
# ---------------------------------------------------------------------------


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def _check_arity(name: str, args: tuple[object, ...], count: int) -> None:
    if len(args) != count:
        noun = "argument" if count == 1 else "arguments"
        raise EvalError(f"{name}() takes {count} {noun} ({len(args)} given)")


def _number_arg(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EvalError(f"{name}() expects a number, got {_type_name(value)}")
    return value


def _unary(name: str, fn: Callable[[float], float]) -> Function:
    """Wrap a one-argument float function in the built-in calling convention."""

    def call(*args: Value) -> Value:
        _check_arity(name, args, 1)
        x = _number_arg(name, args[0])
        try:
            return float(fn(x))
        except (ValueError, OverflowError) as exc:
            raise EvalError(f"{name}(): {exc}") from None

    call.__name__ = name
    return call


# ---------------------------------------------------------------------------
# Number theory
# ---------------------------------------------------------------------------


def _gcd_values(a: float, b: float) -> float:
    x, y = abs(a), abs(b)
    while y > 0:
        x, y = y, x % y
    return x


def gcd(*args: Value) -> Value:
    """Greatest common divisor by the Euclidean algorithm."""
    _check_arity("gcd", args, 2)
    return float(_gcd_values(_number_arg("gcd", args[0]), _number_arg("gcd", args[1])))


def lcm(*args: Value) -> Value:
    """Least common multiple; zero when either operand is zero."""
    _check_arity("lcm", args, 2)
    a = _number_arg("lcm", args[0])
    b = _number_arg("lcm", args[1])
    divisor = _gcd_values(a, b)
    if divisor == 0:
        return 0.0
    return float(abs(a * b) / divisor)


def factorial(*args: Value) -> Value:
    _check_arity("factorial", args, 1)
    n = _number_arg("factorial", args[0])
    if n < 0 or not float(n).is_integer():
        raise EvalError("Factorial is only defined for non-negative integers")
    result = 1.0
    for i in range(2, int(n) + 1):
        result *= i
    return result


def is_prime(*args: Value) -> Value:
    """Trial division up to sqrt(n), testing only 6k +/- 1 candidates."""
    _check_arity("isPrime", args, 1)
    n = _number_arg("isPrime", args[0])
    if n <= 1 or not float(n).is_integer():
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    limit = math.sqrt(n)
    i = 5
    while i <= limit:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def _round_half_up(x: float) -> float:
    return math.floor(x + 0.5)


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------


def _make_functions() -> dict[str, Function]:
    fns: dict[str, Function] = {}

    def u(name: str, fn: Callable[[float], float]) -> None:
        fns[name] = _unary(name, fn)

    # Trigonometric
    u("sin", math.sin)
    u("cos", math.cos)
    u("tan", math.tan)
    u("asin", math.asin)
    u("acos", math.acos)
    u("atan", math.atan)

    # Hyperbolic
    u("sinh", math.sinh)
    u("cosh", math.cosh)
    u("tanh", math.tanh)

    # Logarithmic
    u("log", math.log10)
    u("ln", math.log)
    u("log2", math.log2)

    # Exponential, roots, rounding
    u("exp", math.exp)
    u("sqrt", math.sqrt)
    u("abs", abs)
    u("floor", math.floor)
    u("ceil", math.ceil)
    u("round", _round_half_up)

    # Number theory
    fns["gcd"] = gcd
    fns["lcm"] = lcm
    fns["factorial"] = factorial
    fns["isPrime"] = is_prime

    return fns


DEFAULT_VARIABLES: Mapping[str, Value] = MappingProxyType({"pi": math.pi, "e": math.e})
DEFAULT_FUNCTIONS: Mapping[str, Function] = MappingProxyType(_make_functions())

DEFAULT_CONTEXT = EvaluationContext(DEFAULT_VARIABLES, DEFAULT_FUNCTIONS)
