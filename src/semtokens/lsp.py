"""Minimal LSP server for semtokens: syntax diagnostics and semantic tokens."""

from __future__ import annotations

import argparse
import logging

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    SemanticTokens,
    SemanticTokensParams,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from semtokens.cli import EvaluatorFactory, load_evaluator_factory
from semtokens.errors import EvaluatorLoadError, SourceSyntaxError
from semtokens.parser import parse
from semtokens.semantic_tokens import collect_semantic_tokens
from semtokens.tokens import LEGEND, LineIndex, SemanticTokenItem, TokenKind, TokenModifier

logger = logging.getLogger(__name__)


class SemtokensServer(LanguageServer):
    """Language server carrying the evaluator factory used for token requests."""

    def __init__(self, *args, evaluator_factory: EvaluatorFactory | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        # None means syntactic classification only.
        self.evaluator_factory = evaluator_factory


server = SemtokensServer("semtokens-lsp", "0.1.0", text_document_sync_kind=TextDocumentSyncKind.Full)

_TYPE_INDEX = {kind: i for i, kind in enumerate(TokenKind)}
_MODIFIER_BIT = {modifier: 1 << i for i, modifier in enumerate(TokenModifier)}


def _utf16_len(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _filename(uri: str) -> str:
    return uri.rsplit("/", 1)[-1] if "/" in uri else uri


def encode_semantic_tokens(items: list[SemanticTokenItem], source: str) -> list[int]:
    """Relative LSP encoding of *items*, in UTF-16 code units.

    Each token contributes (deltaLine, deltaStartChar, length, tokenType,
    tokenModifiers). Tokens crossing a line break are not representable and
    are skipped.
    """
    lines = LineIndex(source)
    data: list[int] = []
    prev_line = 0
    prev_char = 0

    for item in items:
        pos = lines.position_of(item.start)
        text = lines.line_text(pos.line)
        col = pos.column - 1
        if col + item.length > len(text):
            continue
        line = pos.line - 1
        char = _utf16_len(text[:col])
        length = _utf16_len(text[col : col + item.length])
        modifiers = 0
        for modifier in item.modifiers:
            modifiers |= _MODIFIER_BIT[modifier]

        delta_line = line - prev_line
        delta_char = char - prev_char if delta_line == 0 else char
        data.extend((delta_line, delta_char, length, _TYPE_INDEX[item.kind], modifiers))
        prev_line, prev_char = line, char

    return data


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the document and publish syntax diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    diagnostics: list[Diagnostic] = []

    try:
        parse(doc.source, _filename(uri))
    except SourceSyntaxError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="semtokens",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL, LEGEND)
def semantic_tokens_full(ls: SemtokensServer, params: SemanticTokensParams) -> SemanticTokens:
    uri = params.text_document.uri
    source = ls.workspace.get_text_document(uri).source
    try:
        tree = parse(source, _filename(uri))
    except SourceSyntaxError as exc:
        logger.debug("no semantic tokens for %s: %s", uri, exc.message)
        return SemanticTokens(data=[])

    factory = ls.evaluator_factory
    evaluator = factory(tree, source) if factory is not None else None
    items = collect_semantic_tokens(tree, evaluator)
    return SemanticTokens(data=encode_semantic_tokens(items, source))


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="semtokens-lsp", description="semtokens language server")
    p.add_argument("--evaluator", metavar="MODULE:ATTR", help="Type evaluator factory")
    args = p.parse_args(argv)

    if args.evaluator:
        try:
            server.evaluator_factory = load_evaluator_factory(args.evaluator)
        except EvaluatorLoadError as exc:
            p.error(str(exc))

    server.start_io()
