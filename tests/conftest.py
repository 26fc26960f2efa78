"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from semtokens.nodes import ModuleNode
from semtokens.parser import parse
from semtokens.semantic_tokens import collect_semantic_tokens
from semtokens.tokens import SemanticTokenItem
from semtokens.types import TypeEvaluator


@pytest.fixture
def parse_source():
    """Return a helper that parses source and returns a ModuleNode."""

    def _parse(source: str, filename: str = "test.py") -> ModuleNode:
        return parse(source, filename)

    return _parse


@pytest.fixture
def classify():
    """Return a helper that classifies source and returns (text, kind, modifiers) triples."""

    def _classify(
        source: str, evaluator: TypeEvaluator | None = None
    ) -> list[tuple[str, str, list[str]]]:
        items = collect_semantic_tokens(parse(source, "test.py"), evaluator)
        return describe(items, source)

    return _classify


def describe(items: list[SemanticTokenItem], source: str) -> list[tuple[str, str, list[str]]]:
    """Render items as (source text, kind, modifiers in legend order)."""
    return [
        (source[i.start : i.end], i.kind.value, [m.value for m in i.sorted_modifiers()])
        for i in items
    ]


def tokens_for(
    triples: list[tuple[str, str, list[str]]], text: str
) -> list[tuple[str, str, list[str]]]:
    """All triples whose source text is *text*."""
    return [t for t in triples if t[0] == text]


def assert_starts_ordered(items: list[SemanticTokenItem]) -> None:
    """Assert that item start offsets never decrease."""
    starts = [i.start for i in items]
    assert starts == sorted(starts), f"Out of order: {starts}"
