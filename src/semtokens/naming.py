"""Lexical naming conventions."""

from __future__ import annotations

import re

_CONSTANT_RE = re.compile(r"^[A-Z0-9_]+$")
_UNDERSCORE_ONLY_RE = re.compile(r"^_+$")


def is_constant_name(name: str) -> bool:
    """Return True if *name* is spelled like a constant (``MAX_SIZE``, ``_A1``)."""
    return bool(_CONSTANT_RE.match(name)) and not _UNDERSCORE_ONLY_RE.match(name)
