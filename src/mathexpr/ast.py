"""AST node types for parsed expressions.

The node set is closed: every consumer dispatches over exactly these five
variants and treats anything else as an internal error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class Number:
    """Numeric literal, kept as its source text until evaluation."""

    value: str


@dataclass(frozen=True, slots=True)
class BinaryOperation:
    """Infix operation: left <operator> right."""

    operator: str
    left: Node
    right: Node


@dataclass(frozen=True, slots=True)
class UnaryOperation:
    """Prefix operation: <operator> operand."""

    operator: str
    operand: Node


@dataclass(frozen=True, slots=True)
class FunctionCall:
    """A call: name(arg, ...)."""

    name: str
    args: tuple[Node, ...]


@dataclass(frozen=True, slots=True)
class Variable:
    """A bare identifier resolved against the evaluation context."""

    name: str


Node = Union[Number, BinaryOperation, UnaryOperation, FunctionCall, Variable]
