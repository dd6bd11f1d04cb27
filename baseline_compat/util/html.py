"""HTML parsing helpers built around justhtml."""

from __future__ import annotations

from typing import Any

from justhtml import JustHTML

Node = Any


def parse_document(html: str) -> JustHTML:
    """Parse HTML without sanitization, keeping source locations on nodes."""
    return JustHTML(html, sanitize=False, track_node_locations=True)


def node_name(node: Node) -> str:
    """Return a node's lower-cased name, e.g. ``div`` or ``#text``."""
    name = getattr(node, "name", None)
    if not isinstance(name, str):
        return ""
    return name.lower()


def is_element(node: Node) -> bool:
    """Elements have a plain tag name; text, comments and doctypes do not."""
    name = node_name(node)
    return bool(name) and not name.startswith(("#", "!"))


def children(node: Node) -> list[Node]:
    """Return child nodes, including template contents when present."""
    output = list(getattr(node, "children", None) or [])
    template_content = getattr(node, "template_content", None)
    if template_content is not None:
        output.append(template_content)
    return output


def attributes(node: Node | None) -> dict[str, str]:
    """Return attributes keyed by case-folded name."""
    if node is None:
        return {}
    attrs = getattr(node, "attrs", None)
    if not isinstance(attrs, dict):
        return {}
    return {
        str(name).lower(): "" if value is None else str(value) for name, value in attrs.items()
    }


def source_line(node: Node) -> int:
    """Return the 1-based start line of a node, or 0 when not tracked."""
    line = getattr(node, "origin_line", None)
    if isinstance(line, int) and line > 0:
        return line
    return 0
