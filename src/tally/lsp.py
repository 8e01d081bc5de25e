"""Tally language server: pygls-based LSP for .tly files.

Provides diagnostics, hover, completion, go-to-definition and document
symbols via stdio transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from tally import __version__
from tally.ast_nodes import BindingDecl, DeclStmt, File, FunDecl
from tally.errors import ParseError
from tally.evaluator import BUILTINS
from tally.lexer import Lexer
from tally.parser import Parser
from tally.source import SourceFile
from tally.tokens import KEYWORDS

logger = logging.getLogger(__name__)

_KEYWORD_COMPLETIONS = sorted(KEYWORDS.keys())

_BUILTIN_DOCS = {
    "print": "`print(values...)` writes the values separated by spaces",
    "println": "`println(values...)` writes the values separated by spaces, then a newline",
}

# ── Conversion helpers ────────────────────────────────────────────


def offset_to_position(source: SourceFile, offset: int) -> lsp.Position:
    """Convert a source offset to a 0-indexed LSP Position."""
    line, col = source.location(offset)
    return lsp.Position(line=line - 1, character=col - 1)


def span_to_range(source: SourceFile, begin: int, end: int) -> lsp.Range:
    return lsp.Range(
        start=offset_to_position(source, begin),
        end=offset_to_position(source, max(begin, end)),
    )


def _error_diag(source: SourceFile, err: ParseError) -> lsp.Diagnostic:
    """Convert a ParseError to an LSP Diagnostic."""
    return lsp.Diagnostic(
        range=span_to_range(source, err.offset, err.offset + 1),
        severity=lsp.DiagnosticSeverity.Error,
        source="tally",
        code=err.code,
        message=f"[{err.code}] {err.message}",
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached analysis results for a single open document."""

    source: SourceFile = field(default_factory=lambda: SourceFile(""))
    file: File | None = None
    errors: list[ParseError] = field(default_factory=list)
    declarations: dict[str, BindingDecl | FunDecl] = field(default_factory=dict)
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


def _index_declarations(file: File) -> dict[str, BindingDecl | FunDecl]:
    """Map each declared name to its first declaration."""
    decls: dict[str, BindingDecl | FunDecl] = {}
    for stmt in file.stmts:
        if isinstance(stmt, DeclStmt) and isinstance(stmt.decl, (BindingDecl, FunDecl)):
            decls.setdefault(stmt.decl.name.name, stmt.decl)
    decls.pop("_", None)
    return decls


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "tally-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, text: str) -> DocumentState:
    """Run Lexer → Parser, cache results, return state."""
    source = SourceFile(text, uri)
    file, errors = Parser(Lexer(text), uri).parse_file()
    ds = DocumentState(
        source=source,
        file=file,
        errors=errors,
        declarations=_index_declarations(file),
        diagnostics=[_error_diag(source, e) for e in errors],
    )
    logger.debug("analyzed %s: %d statement(s), %d error(s)", uri, len(file.stmts), len(errors))
    _state[uri] = ds
    return ds


def _get_word_at(text: str, line: int, character: int) -> str:
    """Extract the word at the given 0-indexed position."""
    lines = text.split('\n')
    if line < 0 or line >= len(lines):
        return ""
    row = lines[line]
    if character < 0 or character >= len(row):
        # Try character-1 in case cursor is right after the word
        if character > 0 and character <= len(row):
            character -= 1
        else:
            return ""

    start = character
    while start > 0 and (row[start - 1].isalnum() or row[start - 1] == "_"):
        start -= 1

    end = character
    while end < len(row) and (row[end].isalnum() or row[end] == "_"):
        end += 1

    return row[start:end]


def _describe_decl(ds: DocumentState, decl: BindingDecl | FunDecl) -> str:
    if isinstance(decl, FunDecl):
        return f"**fun** `{decl.name.name}`"
    keyword = "var" if decl.mutable else "val"
    if decl.value is None:
        return f"**{keyword}** `{decl.name.name}`"
    init = ds.source.content[decl.value.begin:decl.value.end]
    return f"**{keyword}** `{decl.name.name} = {init}`"


# ── LSP Feature Handlers ─────────────────────────────────────────


def _publish(uri: str, ds: DocumentState) -> None:
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=ds.diagnostics,
    ))


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    logger.info("opened %s", uri)
    _publish(uri, _analyze(uri, params.text_document.text))


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole document
    text = params.content_changes[-1].text if params.content_changes else ""
    _publish(uri, _analyze(uri, text))


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    logger.info("closed %s", params.text_document.uri)
    _state.pop(params.text_document.uri, None)


def hover_for(ds: DocumentState, line: int, character: int) -> lsp.Hover | None:
    word = _get_word_at(ds.source.content, line, character)
    if not word:
        return None

    if word in ds.declarations:
        content = _describe_decl(ds, ds.declarations[word])
    elif word in _BUILTIN_DOCS:
        content = f"**builtin** {_BUILTIN_DOCS[word]}"
    elif word in KEYWORDS:
        content = f"**keyword** `{word}`"
    else:
        return None
    return lsp.Hover(contents=lsp.MarkupContent(
        kind=lsp.MarkupKind.Markdown,
        value=content,
    ))


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return None
    return hover_for(ds, params.position.line, params.position.character)


def completion_items(ds: DocumentState | None) -> list[lsp.CompletionItem]:
    items = [
        lsp.CompletionItem(label=kw, kind=lsp.CompletionItemKind.Keyword)
        for kw in _KEYWORD_COMPLETIONS
    ]
    items.extend(
        lsp.CompletionItem(label=name, kind=lsp.CompletionItemKind.Function)
        for name in BUILTINS
    )
    if ds is not None:
        for name, decl in sorted(ds.declarations.items()):
            if isinstance(decl, FunDecl):
                kind = lsp.CompletionItemKind.Function
            elif decl.mutable:
                kind = lsp.CompletionItemKind.Variable
            else:
                kind = lsp.CompletionItemKind.Constant
            items.append(lsp.CompletionItem(label=name, kind=kind))
    return items


@server.feature(lsp.TEXT_DOCUMENT_COMPLETION)
def completion(params: lsp.CompletionParams) -> lsp.CompletionList:
    ds = _state.get(params.text_document.uri)
    return lsp.CompletionList(is_incomplete=False, items=completion_items(ds))


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(params: lsp.DefinitionParams) -> lsp.Location | None:
    uri = params.text_document.uri
    ds = _state.get(uri)
    if ds is None:
        return None
    word = _get_word_at(ds.source.content, params.position.line, params.position.character)
    decl = ds.declarations.get(word)
    if decl is None:
        return None
    return lsp.Location(
        uri=uri,
        range=span_to_range(ds.source, decl.name.begin, decl.name.end),
    )


def document_symbols(ds: DocumentState) -> list[lsp.DocumentSymbol]:
    symbols: list[lsp.DocumentSymbol] = []
    for name, decl in ds.declarations.items():
        if isinstance(decl, FunDecl):
            kind = lsp.SymbolKind.Function
        elif decl.mutable:
            kind = lsp.SymbolKind.Variable
        else:
            kind = lsp.SymbolKind.Constant
        symbols.append(lsp.DocumentSymbol(
            name=name,
            kind=kind,
            range=span_to_range(ds.source, decl.begin, decl.end),
            selection_range=span_to_range(ds.source, decl.name.begin, decl.name.end),
        ))
    return symbols


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    ds = _state.get(params.text_document.uri)
    if ds is None:
        return []
    return document_symbols(ds)


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the Tally language server on stdio."""
    server.start_io()
