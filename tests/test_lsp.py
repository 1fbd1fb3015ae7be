"""Tests for the LSP server: diagnostics, completion and semantic tokens."""

from __future__ import annotations

import pytest
from lsprotocol.types import (
    CompletionItemKind,
    DiagnosticSeverity,
    Position,
    PublishDiagnosticsParams,
    TextDocumentItem,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import Workspace

from mathexpr.lsp import LEGEND, _complete, _semantic_tokens, _validate, offset_at, position_at

URI = "file:///test.expr"


@pytest.fixture
def lsp_env():
    """Create a LanguageServer with an initialized workspace and captured diagnostics."""
    ls = LanguageServer("test", "v0", text_document_sync_kind=TextDocumentSyncKind.Full)
    ws = Workspace(None)
    ls.protocol._workspace = ws

    published: list[PublishDiagnosticsParams] = []
    ls.text_document_publish_diagnostics = lambda params: published.append(params)

    def put(source: str, uri: str = URI) -> None:
        ws.put_text_document(
            TextDocumentItem(uri=uri, language_id="mathexpr", version=0, text=source)
        )

    return ls, published, put


# ---------------------------------------------------------------------------
# Syntax errors → Error severity
# ---------------------------------------------------------------------------


class TestSyntaxDiagnostics:
    def test_incomplete_expression(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("1 +")
        _validate(ls, URI)

        assert len(published) == 1
        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Error
        assert d.message == "Unexpected end of expression"
        assert d.source == "mathexpr"
        assert d.range.start == Position(line=0, character=3)

    def test_every_error_reported(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("1 + * 2")
        _validate(ls, URI)

        diags = published[0].diagnostics
        assert [d.message for d in diags] == ["Unexpected token: *", "Unexpected token: 2"]
        assert [d.range.start.character for d in diags] == [4, 6]
        assert diags[0].range.end.character == 5

    def test_error_on_second_line(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("1 +\n* 2")
        _validate(ls, URI)

        d = published[0].diagnostics[0]
        assert d.range.start == Position(line=1, character=0)


# ---------------------------------------------------------------------------
# Evaluation errors → Warning severity
# ---------------------------------------------------------------------------


class TestEvalDiagnostics:
    def test_division_by_zero(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("1/0")
        _validate(ls, URI)

        diags = published[0].diagnostics
        assert len(diags) == 1
        d = diags[0]
        assert d.severity == DiagnosticSeverity.Warning
        assert d.message == "Division by zero"
        assert d.range.start == Position(line=0, character=0)
        assert d.range.end == Position(line=0, character=3)

    def test_unknown_variable(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("answer * 2")
        _validate(ls, URI)

        assert published[0].diagnostics[0].message == "Unknown variable: answer"


class TestCleanDocument:
    def test_valid_expression(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("2 * sin(pi / 2)")
        _validate(ls, URI)

        assert len(published) == 1
        assert published[0].uri == URI
        assert published[0].diagnostics == []

    def test_empty_document(self, lsp_env) -> None:
        ls, published, put = lsp_env
        put("")
        _validate(ls, URI)

        assert published[0].diagnostics == []


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


class TestCompletion:
    def test_function_prefix(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("sq")
        result = _complete(ls, URI, Position(line=0, character=2))

        assert result.is_incomplete is False
        assert [i.label for i in result.items] == ["sqrt("]
        item = result.items[0]
        assert item.kind == CompletionItemKind.Function
        assert item.detail == "Square root"
        assert item.insert_text == "sqrt("

    def test_operators_after_number(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("2 ")
        result = _complete(ls, URI, Position(line=0, character=2))

        assert [i.label for i in result.items] == ["+", "-", "*", "/", "^", "%"]
        assert {i.kind for i in result.items} == {CompletionItemKind.Operator}

    def test_constant_kind(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("1 + p")
        result = _complete(ls, URI, Position(line=0, character=5))

        assert [i.label for i in result.items] == ["pi"]
        assert result.items[0].kind == CompletionItemKind.Constant


# ---------------------------------------------------------------------------
# Semantic tokens
# ---------------------------------------------------------------------------


class TestSemanticTokens:
    def test_legend(self) -> None:
        assert LEGEND.token_types == ["number", "operator", "function", "variable"]

    def test_single_line(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("sin(x) + 1")
        result = _semantic_tokens(ls, URI)

        # parens and whitespace have no semantic type
        assert result.data == [
            0, 0, 3, 2, 0,
            0, 4, 1, 3, 0,
            0, 3, 1, 1, 0,
            0, 2, 1, 0, 0,
        ]  # fmt: skip

    def test_multi_line(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("10 +\n  2")
        result = _semantic_tokens(ls, URI)

        assert result.data == [
            0, 0, 2, 0, 0,
            0, 3, 1, 1, 0,
            1, 2, 1, 0, 0,
        ]  # fmt: skip

    def test_error_tokens_skipped(self, lsp_env) -> None:
        ls, _, put = lsp_env
        put("1 + * 2")
        result = _semantic_tokens(ls, URI)

        assert result.data == [0, 0, 1, 0, 0, 0, 2, 1, 1, 0]


# ---------------------------------------------------------------------------
# Position conversion
# ---------------------------------------------------------------------------


class TestPositionConversion:
    def test_position_at(self) -> None:
        assert position_at("ab\ncd", 4) == Position(line=1, character=1)
        assert position_at("ab\ncd", 3) == Position(line=1, character=0)

    def test_position_at_clamps(self) -> None:
        assert position_at("ab", 10) == Position(line=0, character=2)

    def test_offset_at(self) -> None:
        assert offset_at("ab\ncd", Position(line=1, character=1)) == 4

    def test_offset_at_clamps(self) -> None:
        assert offset_at("ab", Position(line=0, character=99)) == 2
        assert offset_at("ab", Position(line=5, character=0)) == 2
