"""Semantic token kinds, modifiers, output records, and source positions."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from enum import Enum

from lsprotocol.types import SemanticTokenModifiers, SemanticTokensLegend, SemanticTokenTypes


class TokenKind(Enum):
    """Closed set of token kinds the classifier can emit."""

    NAMESPACE = SemanticTokenTypes.Namespace.value
    CLASS = SemanticTokenTypes.Class.value
    FUNCTION = SemanticTokenTypes.Function.value
    METHOD = SemanticTokenTypes.Method.value
    VARIABLE = SemanticTokenTypes.Variable.value
    KEYWORD = SemanticTokenTypes.Keyword.value
    TYPE = SemanticTokenTypes.Type.value
    TYPE_PARAMETER = SemanticTokenTypes.TypeParameter.value


class TokenModifier(Enum):
    """Closed set of token modifiers the classifier can emit."""

    DEFINITION = SemanticTokenModifiers.Definition.value
    ASYNC = SemanticTokenModifiers.Async.value
    READONLY = SemanticTokenModifiers.Readonly.value


# Index order is the wire encoding: token type = list index, modifier = bit index.
LEGEND = SemanticTokensLegend(
    token_types=[kind.value for kind in TokenKind],
    token_modifiers=[modifier.value for modifier in TokenModifier],
)


@dataclass(frozen=True, slots=True)
class SemanticTokenItem:
    """One classified span: character offset and length into the source."""

    kind: TokenKind
    modifiers: frozenset[TokenModifier]
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def sorted_modifiers(self) -> list[TokenModifier]:
        """Modifiers in legend order."""
        return [m for m in TokenModifier if m in self.modifiers]


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


_NEWLINE_RE = re.compile(r"\r\n?|\n")


class LineIndex:
    """Maps between character offsets and line/column positions of a source."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._line_starts = [0] + [m.end() for m in _NEWLINE_RE.finditer(source)]

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_start(self, line: int) -> int:
        """Offset of the first character of 1-based *line*."""
        return self._line_starts[line - 1]

    def line_text(self, line: int) -> str:
        """Text of 1-based *line* without its line terminator."""
        start = self._line_starts[line - 1]
        if line < len(self._line_starts):
            end = self._line_starts[line]
        else:
            end = len(self._source)
        return self._source[start:end].rstrip("\r\n")

    def position_of(self, offset: int) -> Position:
        line_idx = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line_idx + 1, offset - self._line_starts[line_idx] + 1, offset)

    def offset_of(self, line: int, column: int) -> int:
        """Offset of 1-based *line* and 1-based character *column*."""
        return self._line_starts[line - 1] + column - 1
