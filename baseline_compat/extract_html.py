"""HTML usage extraction over a justhtml document tree."""

from __future__ import annotations

from typing import Any

from .keys import (
    html_element_key,
    html_global_attribute_key,
    html_input_type_key,
    normalize_keyword,
)
from .model import RawUsage, UsageCollector
from .util.html import attributes, children, is_element, node_name, parse_document, source_line

Node = Any

_KEYED_GLOBAL_ATTRIBUTES = ("popover",)


def extract_html(document: Node, file: str) -> list[RawUsage]:
    """Walk a parsed document and emit element and attribute usages."""
    collector = UsageCollector(file)
    _visit(getattr(document, "root", document), collector)
    return collector.items


def extract_html_source(html: str, file: str) -> list[RawUsage]:
    return extract_html(parse_document(html), file)


def _visit(node: Node, collector: UsageCollector) -> None:
    if is_element(node):
        _visit_element(node, collector)
    for child in children(node):
        _visit(child, collector)


def _visit_element(node: Node, collector: UsageCollector) -> None:
    tag = node_name(node)
    attrs = attributes(node)
    line = source_line(node)

    collector.add(line, tag, html_element_key(tag))

    for name in _KEYED_GLOBAL_ATTRIBUTES:
        if name in attrs:
            collector.add(line, tag, html_global_attribute_key(name))

    if tag == "input" and "type" in attrs:
        input_type = normalize_keyword(attrs["type"])
        if input_type:
            collector.add(line, tag, html_input_type_key(input_type))
