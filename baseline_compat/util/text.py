"""Text utility helpers."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(value: str) -> str:
    """Collapse repeated whitespace and trim ends."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def line_at(text: str, offset: int) -> int:
    """Return the 1-based line number containing ``offset``."""
    return text.count("\n", 0, max(offset, 0)) + 1


def to_posix(path: str) -> str:
    """Normalize path separators to forward slashes."""
    return path.replace("\\", "/")


def parse_limit(value: str | None) -> int | None:
    """Parse a non-negative integer ceiling; blank means unlimited."""
    if value is None or not value.strip():
        return None
    cleaned = value.strip()
    if not cleaned.isdigit():
        raise ValueError(cleaned)
    return int(cleaned)
