"""Command-line interface for mathexpr."""

from __future__ import annotations

import argparse
import logging
import math
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from mathexpr.builtins import EvaluationContext, Value
from mathexpr.engine import ExpressionEngine
from mathexpr.highlight import StyleKey, style_key

logger = logging.getLogger(__name__)

CONFIG_NAME = "mathexpr.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    expressions: list[str]
    variables: dict[str, Value]
    styles: dict[StyleKey, str]
    highlight: bool
    complete: int | None
    show_tokens: bool
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="mathexpr",
        description="Evaluate, highlight and complete mathematical expressions",
    )
    p.add_argument(
        "expressions",
        nargs="*",
        metavar="EXPR",
        help="Expression to evaluate (default: one per line from stdin)",
    )
    p.add_argument(
        "--var",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Define a variable (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--highlight", action="store_true", help="Print highlighted HTML instead of the value"
    )
    p.add_argument(
        "--complete",
        type=int,
        default=None,
        metavar="OFFSET",
        help="Print completions for the cursor at OFFSET",
    )
    p.add_argument("--tokens", action="store_true", help="Print the token stream")
    p.add_argument("--debug", action="store_true", help="Dump AST to stderr")
    p.add_argument("--verbose", action="store_true", help="Log engine activity to stderr")
    return p


def parse_value(raw: str) -> Value:
    """Parse a variable value: ``true``/``false`` or a number."""
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid variable value: {raw!r}") from None


def parse_var_arg(s: str) -> tuple[str, Value]:
    """Parse a NAME=VALUE string into (name, value)."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid variable format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"missing variable name: {s}")
    return name, parse_value(value)


def load_config(config_path: Path | None, search_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else search_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace, search_dir: Path | None = None) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, search_dir if search_dir is not None else Path.cwd())

    # Variables: config < CLI
    variables: dict[str, Value] = {}
    cfg_vars = config.get("variables")
    if isinstance(cfg_vars, dict):
        for k, v in cfg_vars.items():
            if isinstance(v, bool):
                variables[str(k)] = v
            elif isinstance(v, (int, float)):
                variables[str(k)] = float(v)
            else:
                raise argparse.ArgumentTypeError(
                    f"config variable '{k}' must be a number or boolean"
                )
    for raw in args.var:
        name, value = parse_var_arg(raw)
        variables[name] = value

    # Highlight styles: config only
    styles: dict[StyleKey, str] = {}
    cfg_styles = config.get("styles")
    if isinstance(cfg_styles, dict):
        for k, v in cfg_styles.items():
            try:
                styles[style_key(str(k))] = str(v)
            except ValueError as exc:
                raise argparse.ArgumentTypeError(str(exc)) from None

    return CliOptions(
        expressions=list(args.expressions),
        variables=variables,
        styles=styles,
        highlight=args.highlight,
        complete=args.complete,
        show_tokens=args.tokens,
        debug=args.debug,
        verbose=args.verbose,
    )


def format_value(value: Value) -> str:
    """Render a result the way the CLI prints it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return f"{value:.15g}"
    return str(value)


def run_expression(
    engine: ExpressionEngine,
    source: str,
    options: CliOptions,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Process one expression according to *options*. Returns an exit code."""
    from mathexpr.debug import dump_ast

    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    logger.debug("processing %r", source)

    if options.show_tokens:
        for tok in engine.tokenize(source):
            out.write(f"{tok.type.value:<12} {tok.start}-{tok.end} {tok.value!r}\n")

    if options.complete is not None:
        for s in engine.suggest(source, options.complete):
            out.write(f"{s.text}\t{s.category}\t{s.description}\n")
        return 0

    parsed = engine.parse(source)

    if options.debug and parsed.ast is not None:
        dump_ast(parsed.ast, file=err)

    if options.highlight:
        out.write(engine.render_highlighted_html(source) + "\n")
        return 1 if parsed.errors else 0

    if parsed.errors:
        for error in parsed.errors:
            err.write(error.format() + "\n")
        return 1

    result = engine.evaluate(source)
    if result.error is not None:
        err.write(f"error: {result.error}\n")
        return 2

    out.write(format_value(result.value) + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s [%(name)s] %(message)s",
            stream=sys.stderr,
        )

    expressions = options.expressions
    if not expressions:
        expressions = [line.strip() for line in sys.stdin if line.strip()]

    engine = ExpressionEngine(EvaluationContext(variables=options.variables), styles=options.styles)

    status = 0
    for source in expressions:
        status = max(status, run_expression(engine, source, options))
    return status
