"""Canonical compatibility-key vocabulary.

Keys are dot-separated paths into the browser-compat-data tree, e.g.
``css.properties.display`` or ``html.elements.input.input-types.date``. They
are the join key against the compatibility datasets and the identity used by
allowlist rules, so every segment taken from source text goes through
:func:`normalize_keyword` first.
"""

from __future__ import annotations

import re
from typing import Final

KEY_NAMESPACES: Final[tuple[str, ...]] = (
    "css.properties.",
    "css.at-rules.",
    "css.selectors.",
    "html.elements.",
    "html.global_attributes.",
    "api.",
)

CUSTOM_PROPERTY_KEY: Final[str] = "css.properties.custom-property"

_SEGMENT_RE = re.compile(r"^[^\s.]+$")


def normalize_keyword(value: str) -> str:
    """Trim and lower-case a source-derived key segment."""
    return value.strip().lower()


def is_canonical_key(key: str) -> bool:
    """Check that a key is dot-segmented and lives in a known namespace."""
    if not key.startswith(KEY_NAMESPACES):
        return False
    return all(_SEGMENT_RE.match(segment) for segment in key.split("."))


def css_property_key(prop: str) -> str:
    name = normalize_keyword(prop)
    if name.startswith("--"):
        return CUSTOM_PROPERTY_KEY
    return f"css.properties.{name}"


def css_value_key(prop: str, keyword: str) -> str:
    return f"{css_property_key(prop)}.{normalize_keyword(keyword)}"


def css_at_rule_key(name: str) -> str:
    return f"css.at-rules.{normalize_keyword(name)}"


def css_selector_key(name: str) -> str:
    return f"css.selectors.{normalize_keyword(name)}"


def html_element_key(tag: str) -> str:
    return f"html.elements.{normalize_keyword(tag)}"


def html_input_type_key(input_type: str) -> str:
    return f"html.elements.input.input-types.{normalize_keyword(input_type)}"


def html_global_attribute_key(name: str) -> str:
    return f"html.global_attributes.{normalize_keyword(name)}"


def api_key(path: str) -> str:
    """Build an ``api.*`` key; interface names keep their BCD casing."""
    return f"api.{path.strip()}"
