"""Error types with formatted source context."""

from __future__ import annotations


def _line_and_column(source: str, offset: int) -> tuple[int, int]:
    """Convert a 0-based offset into a 1-based (line, column) pair."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


class ParseError(Exception):
    """A syntax error recorded by the parser, with offset and source context.

    The parser collects these in ``ParseResult.errors`` rather than raising
    them, so one parse can report several problems.
    """

    def __init__(self, message: str, position: int, source: str = "") -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(message)

    def __repr__(self) -> str:
        return f"ParseError({self.message!r}, {self.position})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.message, self.position) == (other.message, other.position)

    def __hash__(self) -> int:
        return hash((self.message, self.position))

    def format(self, filename: str = "<expr>") -> str:
        line, col = _line_and_column(self.source, self.position)
        lines = self.source.splitlines()

        if 0 <= line - 1 < len(lines):
            source_line = lines[line - 1]
        else:
            source_line = ""

        pad = " " * (col - 1)

        line_num = str(line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )


class EvalError(Exception):
    """Raised while walking an AST; surfaces only as an evaluation result message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
