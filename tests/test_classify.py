"""Tests for the package-level classify() entry point."""

from __future__ import annotations

import pytest

from semtokens import classify
from semtokens.errors import SourceSyntaxError
from semtokens.tokens import TokenKind
from tests.evaluators import make_evaluator


class TestClassify:
    def test_without_evaluator(self) -> None:
        items = classify("def run():\n    pass\n")
        assert [(i.kind, i.start, i.length) for i in items] == [(TokenKind.FUNCTION, 4, 3)]

    def test_with_evaluator_factory(self) -> None:
        items = classify("os.getcwd\n", evaluator_factory=make_evaluator)
        assert [(i.kind, i.start) for i in items] == [(TokenKind.NAMESPACE, 0)]

    def test_syntax_error(self) -> None:
        with pytest.raises(SourceSyntaxError):
            classify("class\n")
