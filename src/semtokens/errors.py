"""Error types with formatted source context."""

from __future__ import annotations

from semtokens.tokens import LineIndex, Position


class SourceSyntaxError(Exception):
    """Raised when the input is not valid Python, with position and source context."""

    def __init__(self, message: str, position: Position, source: str) -> None:
        self.message = message
        self.position = position
        self.source = source
        super().__init__(self.format())

    def format(self, filename: str = "input.py") -> str:
        index = LineIndex(self.source)
        col = self.position.column

        if 1 <= self.position.line <= index.line_count:
            source_line = index.line_text(self.position.line)
        else:
            source_line = ""

        pad = " " * (col - 1)

        line_num = str(self.position.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.position.line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}^"
        )


class EvaluatorLoadError(Exception):
    """Raised when a ``module:attribute`` evaluator factory cannot be loaded."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"cannot load evaluator {target!r}: {reason}")
