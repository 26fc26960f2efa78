"""--debug parse tree dump and token listings."""

from __future__ import annotations

import sys
from typing import TextIO

from semtokens.nodes import (
    ClassNode,
    FunctionNode,
    GenericNode,
    ModuleNameNode,
    NameNode,
    ParseNode,
)
from semtokens.tokens import LineIndex, SemanticTokenItem


def dump_tree(node: ParseNode, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable parse tree to *file*."""
    _dump_node(node, 0, file)


def _indent(depth: int) -> str:
    return "  " * depth


def _describe(node: ParseNode) -> str:
    if isinstance(node, NameNode):
        return f"Name {node.value!r}"
    if isinstance(node, GenericNode):
        return node.label
    if isinstance(node, ModuleNameNode):
        dots = "." * node.leading_dots
        return f"ModuleName {dots}{'.'.join(p.value for p in node.name_parts)}"
    if isinstance(node, FunctionNode):
        prefix = "async " if node.is_async else ""
        method = " (method)" if node.declaration and node.declaration.is_method else ""
        return f"Function {prefix}{node.name.value}{method}"
    if isinstance(node, ClassNode):
        return f"Class {node.name.value}"
    return type(node).__name__.removesuffix("Node")


def _dump_node(node: ParseNode, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}{_describe(node)} @{node.start}+{node.length}\n")
    for child in node.child_nodes():
        _dump_node(child, depth + 1, f)


def format_token(item: SemanticTokenItem, source: str, lines: LineIndex) -> str:
    """``LINE:COL kind [modifiers] text`` for one token."""
    pos = lines.position_of(item.start)
    modifiers = ",".join(m.value for m in item.sorted_modifiers())
    text = source[item.start : item.end]
    return f"{pos.line}:{pos.column} {item.kind.value} [{modifiers}] {text}"


def dump_tokens(items: list[SemanticTokenItem], source: str, *, file: TextIO = sys.stdout) -> None:
    """Print one line per token to *file*."""
    lines = LineIndex(source)
    for item in items:
        file.write(format_token(item, source, lines) + "\n")


def tokens_as_json(items: list[SemanticTokenItem], source: str) -> list[dict[str, object]]:
    """JSON-ready records for *items*."""
    lines = LineIndex(source)
    records: list[dict[str, object]] = []
    for item in items:
        pos = lines.position_of(item.start)
        records.append(
            {
                "kind": item.kind.value,
                "modifiers": [m.value for m in item.sorted_modifiers()],
                "start": item.start,
                "length": item.length,
                "line": pos.line,
                "character": pos.column - 1,
                "text": source[item.start : item.end],
            }
        )
    return records
