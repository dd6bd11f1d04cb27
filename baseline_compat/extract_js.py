"""Lexical JS API detection.

Scripts are not parsed. Each table entry is a literal substring searched in
the raw text, so matches inside strings or comments are reported too and
aliased or destructured references are missed.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .keys import api_key
from .model import RawUsage, UsageCollector
from .util.text import line_at


@dataclass(frozen=True)
class ApiPattern:
    needle: str
    bcd_key: str

    @property
    def label(self) -> str:
        return self.needle.strip(" .(").removeprefix("new ")


DEFAULT_API_PATTERNS: tuple[ApiPattern, ...] = (
    ApiPattern("structuredClone(", api_key("structuredClone")),
    ApiPattern("navigator.clipboard", api_key("Navigator.clipboard")),
    ApiPattern("navigator.share(", api_key("Navigator.share")),
    ApiPattern("navigator.gpu", api_key("Navigator.gpu")),
    ApiPattern("document.startViewTransition(", api_key("Document.startViewTransition")),
    ApiPattern("new ResizeObserver(", api_key("ResizeObserver")),
    ApiPattern("new IntersectionObserver(", api_key("IntersectionObserver")),
    ApiPattern("new BroadcastChannel(", api_key("BroadcastChannel")),
    ApiPattern("new CompressionStream(", api_key("CompressionStream")),
    ApiPattern("requestIdleCallback(", api_key("Window.requestIdleCallback")),
    ApiPattern(".showPopover(", api_key("HTMLElement.showPopover")),
    ApiPattern(".showModal(", api_key("HTMLDialogElement.showModal")),
    ApiPattern("CSS.registerProperty(", api_key("CSS.registerProperty_static")),
)


def extract_js(
    source: str,
    file: str,
    patterns: Sequence[ApiPattern] = DEFAULT_API_PATTERNS,
) -> list[RawUsage]:
    """Emit one usage per non-overlapping occurrence of each table entry."""
    collector = UsageCollector(file)
    for pattern in patterns:
        if not pattern.needle:
            continue
        offset = source.find(pattern.needle)
        while offset != -1:
            collector.add(line_at(source, offset), pattern.label, pattern.bcd_key)
            offset = source.find(pattern.needle, offset + len(pattern.needle))
    return collector.items
