"""Minimal LSP server for expression documents.

The whole document is treated as one expression. Offers diagnostics,
completion and semantic highlighting.
"""

from __future__ import annotations

import logging

from lsprotocol.types import (
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from mathexpr import __version__
from mathexpr.engine import ExpressionEngine
from mathexpr.highlight import ERROR
from mathexpr.tokens import TokenType

logger = logging.getLogger(__name__)

SOURCE = "mathexpr"

LEGEND = SemanticTokensLegend(
    token_types=["number", "operator", "function", "variable"],
    token_modifiers=[],
)

_SEMANTIC_INDEX: dict[TokenType, int] = {
    TokenType.NUMBER: 0,
    TokenType.OPERATOR: 1,
    TokenType.FUNCTION: 2,
    TokenType.VARIABLE: 3,
}

_COMPLETION_KINDS: dict[str, CompletionItemKind] = {
    "function": CompletionItemKind.Function,
    "variable": CompletionItemKind.Variable,
    "operator": CompletionItemKind.Operator,
    "constant": CompletionItemKind.Constant,
}

server = LanguageServer(
    "mathexpr-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)
engine = ExpressionEngine()


# ---------------------------------------------------------------------------
# Offset <-> position conversion
# ---------------------------------------------------------------------------


def position_at(source: str, offset: int) -> Position:
    """Convert a 0-based character offset into an LSP (line, character) position."""
    offset = max(0, min(offset, len(source)))
    line = source.count("\n", 0, offset)
    line_start = source.rfind("\n", 0, offset) + 1
    return Position(line=line, character=offset - line_start)


def offset_at(source: str, position: Position) -> int:
    """Convert an LSP position back into a character offset, clamped to the source."""
    lines = source.split("\n")
    if position.line >= len(lines):
        return len(source)
    offset = sum(len(line) + 1 for line in lines[: position.line])
    return offset + min(position.character, len(lines[position.line]))


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse and evaluate the document, then publish diagnostics."""
    source = ls.workspace.get_text_document(uri).source
    diagnostics: list[Diagnostic] = []

    parsed = engine.parse(source)
    for error in parsed.errors:
        start = position_at(source, error.position)
        end = position_at(source, min(error.position + 1, len(source)))
        diagnostics.append(
            Diagnostic(
                range=Range(start=start, end=end),
                message=error.message,
                severity=DiagnosticSeverity.Error,
                source=SOURCE,
            )
        )

    if parsed.ast is not None:
        result = engine.evaluate(source, add_to_history=False)
        if result.error is not None:
            diagnostics.append(
                Diagnostic(
                    range=Range(start=position_at(source, 0), end=position_at(source, len(source))),
                    message=result.error,
                    severity=DiagnosticSeverity.Warning,
                    source=SOURCE,
                )
            )

    logger.debug("publishing %d diagnostics for %s", len(diagnostics), uri)
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


def _complete(ls: LanguageServer, uri: str, position: Position) -> CompletionList:
    source = ls.workspace.get_text_document(uri).source
    cursor = offset_at(source, position)
    items = [
        CompletionItem(
            label=s.text,
            kind=_COMPLETION_KINDS[s.category],
            detail=s.description,
            insert_text=s.text,
        )
        for s in engine.suggest(source, cursor)
    ]
    return CompletionList(is_incomplete=False, items=items)


def _semantic_tokens(ls: LanguageServer, uri: str) -> SemanticTokens:
    """Encode highlighted tokens as LSP relative semantic token data."""
    source = ls.workspace.get_text_document(uri).source
    error_style = engine.highlighter.style_for(ERROR)

    data: list[int] = []
    prev_line = 0
    prev_char = 0
    for styled in engine.highlight_syntax(source):
        index = _SEMANTIC_INDEX.get(styled.token.type)
        if index is None or styled.style == error_style:
            continue
        pos = position_at(source, styled.start)
        delta_line = pos.line - prev_line
        delta_char = pos.character - prev_char if delta_line == 0 else pos.character
        data.extend([delta_line, delta_char, styled.end - styled.start + 1, index, 0])
        prev_line, prev_char = pos.line, pos.character
    return SemanticTokens(data=data)


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    engine.clear_cache()
    _validate(ls, params.text_document.uri)


@server.feature(
    TEXT_DOCUMENT_COMPLETION,
    CompletionOptions(trigger_characters=["(", ",", "+", "-", "*", "/", "^", "%"]),
)
def completions(ls: LanguageServer, params: CompletionParams) -> CompletionList:
    return _complete(ls, params.text_document.uri, params.position)


@server.feature(TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL, LEGEND)
def semantic_tokens(ls: LanguageServer, params: SemanticTokensParams) -> SemanticTokens:
    return _semantic_tokens(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
