"""CSS usage extraction built around tinycss2."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging
from typing import Any

import tinycss2

from .keys import (
    css_at_rule_key,
    css_property_key,
    css_selector_key,
    css_value_key,
    normalize_keyword,
)
from .model import RawUsage, UsageCollector

Node = Any
LOGGER = logging.getLogger(__name__)

_KEYED_AT_RULES = frozenset({"container", "layer", "starting-style"})
_KEYED_PSEUDO_CLASSES = frozenset({"has"})
# At-rules whose block holds rules rather than declarations.
_RULE_LIST_AT_RULES = frozenset(
    {
        "media",
        "supports",
        "container",
        "layer",
        "starting-style",
        "scope",
        "document",
        "keyframes",
        "-webkit-keyframes",
    }
)
_BLOCK_TYPES = frozenset({"() block", "[] block", "{} block"})


def parse_stylesheet(css: str) -> list[Node]:
    """Parse a stylesheet into top-level rules, dropping comments and whitespace."""
    return tinycss2.parse_stylesheet(css, skip_comments=True, skip_whitespace=True)


def extract_css(rules: Sequence[Node], file: str) -> list[RawUsage]:
    """Walk parsed stylesheet rules and emit usages in document order."""
    collector = UsageCollector(file)
    _walk_nodes(rules, collector)
    return collector.items


def extract_css_source(css: str, file: str) -> list[RawUsage]:
    return extract_css(parse_stylesheet(css), file)


def _line(node: Node) -> int:
    line = getattr(node, "source_line", None)
    return line if isinstance(line, int) and line > 0 else 0


def _walk_nodes(nodes: Iterable[Node], collector: UsageCollector) -> None:
    for node in nodes:
        node_type = getattr(node, "type", None)
        if node_type == "declaration":
            _visit_declaration(node, collector)
        elif node_type == "qualified-rule":
            _visit_selector(node.prelude, collector)
            _walk_block(node.content, collector, rule_list=False)
        elif node_type == "at-rule":
            _visit_at_rule(node, collector)
        elif node_type == "error":
            LOGGER.debug(
                "%s:%s: skipped invalid CSS (%s)",
                collector.file,
                _line(node),
                getattr(node, "message", "parse error"),
            )


def _walk_block(content: list[Node] | None, collector: UsageCollector, *, rule_list: bool) -> None:
    if not content:
        return
    if rule_list:
        nodes = tinycss2.parse_rule_list(content, skip_comments=True, skip_whitespace=True)
    else:
        nodes = tinycss2.parse_blocks_contents(content, skip_comments=True, skip_whitespace=True)
    _walk_nodes(nodes, collector)


def _visit_declaration(node: Node, collector: UsageCollector) -> None:
    prop = normalize_keyword(node.name)
    line = _line(node)
    collector.add(line, prop, css_property_key(prop))

    if prop.startswith("--"):
        return
    try:
        keywords = _value_keywords(node.value)
    except Exception as exc:
        LOGGER.debug("%s:%s: unreadable value for %s (%s)", collector.file, line, prop, exc)
        return
    for keyword in keywords:
        collector.add(line, prop, css_value_key(prop, keyword))


def _value_keywords(tokens: Iterable[Node]) -> list[str]:
    """Return distinct identifier keywords of a declaration value, in order."""
    found: dict[str, None] = {}
    for token in tokens:
        token_type = token.type
        if token_type == "ident":
            keyword = normalize_keyword(token.value)
            if keyword and not keyword.startswith("--"):
                found.setdefault(keyword, None)
        elif token_type == "function":
            for keyword in _value_keywords(token.arguments):
                found.setdefault(keyword, None)
        elif token_type in _BLOCK_TYPES:
            for keyword in _value_keywords(token.content):
                found.setdefault(keyword, None)
    return list(found)


def _visit_at_rule(node: Node, collector: UsageCollector) -> None:
    name = normalize_keyword(node.at_keyword)
    if name in _KEYED_AT_RULES:
        collector.add(_line(node), None, css_at_rule_key(name))
    _walk_block(node.content, collector, rule_list=name in _RULE_LIST_AT_RULES)


def _visit_selector(tokens: Iterable[Node], collector: UsageCollector) -> None:
    previous: Node | None = None
    for token in tokens:
        token_type = getattr(token, "type", None)
        if token_type == "function":
            is_pseudo = getattr(previous, "type", None) == "literal" and previous.value == ":"
            name = normalize_keyword(token.name)
            if is_pseudo and name in _KEYED_PSEUDO_CLASSES:
                collector.add(_line(token), f":{name}", css_selector_key(name))
            _visit_selector(token.arguments, collector)
        elif token_type in _BLOCK_TYPES:
            _visit_selector(token.content, collector)
        previous = token
