"""Semantic token classification for Python source files."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from semtokens.cli import EvaluatorFactory
    from semtokens.tokens import SemanticTokenItem

__version__ = "0.1.0"


def classify(
    source: str,
    filename: str = "input.py",
    evaluator_factory: EvaluatorFactory | None = None,
) -> list[SemanticTokenItem]:
    """Parse Python source and return its semantic tokens in source order."""
    from semtokens.parser import parse
    from semtokens.semantic_tokens import collect_semantic_tokens

    tree = parse(source, filename)
    evaluator = evaluator_factory(tree, source) if evaluator_factory is not None else None
    return collect_semantic_tokens(tree, evaluator)
