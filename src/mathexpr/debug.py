"""--debug AST dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from mathexpr.ast import BinaryOperation, FunctionCall, Node, Number, UnaryOperation, Variable


def dump_ast(node: Node, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    _dump_node(node, 0, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_node(node: Node, depth: int, f: TextIO) -> None:
    if isinstance(node, Number):
        f.write(f"{_indent(depth)}Number({node.value})\n")
    elif isinstance(node, Variable):
        f.write(f"{_indent(depth)}Variable {node.name}\n")
    elif isinstance(node, UnaryOperation):
        f.write(f"{_indent(depth)}UnaryOperation {node.operator}\n")
        _dump_node(node.operand, depth + 1, f)
    elif isinstance(node, BinaryOperation):
        f.write(f"{_indent(depth)}BinaryOperation {node.operator}\n")
        _dump_node(node.left, depth + 1, f)
        _dump_node(node.right, depth + 1, f)
    elif isinstance(node, FunctionCall):
        f.write(f"{_indent(depth)}FunctionCall {node.name}/{len(node.args)}\n")
        for arg in node.args:
            _dump_node(arg, depth + 1, f)
