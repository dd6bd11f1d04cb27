from __future__ import annotations

from collections import Counter
from types import SimpleNamespace

from baseline_compat.extract_css import extract_css, extract_css_source, parse_stylesheet
from baseline_compat.extract_html import extract_html, extract_html_source
from baseline_compat.extract_js import DEFAULT_API_PATTERNS, ApiPattern, extract_js
from baseline_compat.model import RawUsage


def _keys(items: list[RawUsage]) -> list[tuple[int, str]]:
    return [(item.line, item.bcd_key) for item in items]


def _element(name: str, *, line: int = 1, attrs: dict[str, str] | None = None, kids=()):
    return SimpleNamespace(name=name, attrs=attrs or {}, children=list(kids), origin_line=line)


def test_css_property_and_value_keyword() -> None:
    items = extract_css_source(".box{word-break:auto-phrase}", "styles/app.css")

    assert items == [
        RawUsage("styles/app.css", 1, "word-break", "css.properties.word-break"),
        RawUsage("styles/app.css", 1, "word-break", "css.properties.word-break.auto-phrase"),
    ]


def test_css_repeated_keywords_emit_one_value_key() -> None:
    items = extract_css_source(".a { margin: auto auto AUTO; }", "a.css")

    counts = Counter(item.bcd_key for item in items)
    assert counts == {"css.properties.margin": 1, "css.properties.margin.auto": 1}


def test_css_keywords_inside_functions() -> None:
    css = "a { padding-left: max(1rem, env(safe-area-inset-left)); }"
    items = extract_css_source(css, "a.css")

    assert [item.bcd_key for item in items] == [
        "css.properties.padding-left",
        "css.properties.padding-left.safe-area-inset-left",
    ]


def test_css_at_rules_and_lines() -> None:
    css = (
        "@container (width > 400px) {\n"
        "  .box { color: rebeccapurple; }\n"
        "}\n"
        "@layer base;\n"
        "@media print {\n"
        "  .x { display: none; }\n"
        "}\n"
    )
    items = extract_css_source(css, "a.css")

    assert _keys(items) == [
        (1, "css.at-rules.container"),
        (2, "css.properties.color"),
        (2, "css.properties.color.rebeccapurple"),
        (4, "css.at-rules.layer"),
        (6, "css.properties.display"),
        (6, "css.properties.display.none"),
    ]


def test_css_starting_style_and_has_selector() -> None:
    css = (
        ".card:has(> img) { display: grid; }\n"
        "@starting-style {\n"
        "  .card { opacity: 0; }\n"
        "}\n"
    )
    items = extract_css_source(css, "a.css")

    assert (1, "css.selectors.has") in _keys(items)
    assert (1, "css.properties.display.grid") in _keys(items)
    assert (2, "css.at-rules.starting-style") in _keys(items)
    assert (3, "css.properties.opacity") in _keys(items)


def test_css_custom_properties() -> None:
    items = extract_css_source(":root { --brand: red; color: var(--brand); }", "a.css")

    assert [item.bcd_key for item in items] == [
        "css.properties.custom-property",
        "css.properties.color",
    ]


def test_css_nested_rules() -> None:
    css = ".a {\n  color: red;\n  & .b {\n    color: blue;\n  }\n}\n"
    items = extract_css_source(css, "a.css")

    assert _keys(items) == [
        (2, "css.properties.color"),
        (2, "css.properties.color.red"),
        (4, "css.properties.color"),
        (4, "css.properties.color.blue"),
    ]


def test_css_same_key_on_different_lines_is_kept() -> None:
    items = extract_css_source("a { color: red; }\nb { color: red; }\n", "a.css")

    assert Counter(item.bcd_key for item in items) == {
        "css.properties.color": 2,
        "css.properties.color.red": 2,
    }


def test_css_value_walk_failure_keeps_property() -> None:
    class _BrokenValue:
        def __iter__(self):
            raise RuntimeError("bad value")

    declaration = SimpleNamespace(
        type="declaration", name="Display", value=_BrokenValue(), source_line=7
    )
    items = extract_css([declaration], "a.css")

    assert items == [RawUsage("a.css", 7, "display", "css.properties.display")]


def test_css_parse_errors_are_skipped() -> None:
    error = SimpleNamespace(type="error", message="invalid", source_line=1)
    rules = [error, *parse_stylesheet("a { color: red }")]
    items = extract_css(rules, "a.css")

    assert [item.bcd_key for item in items] == ["css.properties.color", "css.properties.color.red"]


def test_html_elements_attributes_and_input_types() -> None:
    document = SimpleNamespace(
        root=SimpleNamespace(
            name="#document",
            children=[
                _element(
                    "html",
                    line=1,
                    kids=[
                        SimpleNamespace(name="#comment", data="note", children=[]),
                        _element("dialog", line=2, attrs={"POPOVER": ""}),
                        _element("input", line=3, attrs={"Type": " Date "}),
                        SimpleNamespace(name="#text", data="hi"),
                    ],
                )
            ],
        )
    )

    items = extract_html(document, "index.html")

    assert _keys(items) == [
        (1, "html.elements.html"),
        (2, "html.elements.dialog"),
        (2, "html.global_attributes.popover"),
        (3, "html.elements.input"),
        (3, "html.elements.input.input-types.date"),
    ]
    assert items[1].property == "dialog"


def test_html_missing_location_reports_line_zero() -> None:
    node = SimpleNamespace(name="main", attrs={}, children=[])
    items = extract_html(node, "index.html")

    assert items == [RawUsage("index.html", 0, "main", "html.elements.main")]


def test_html_empty_input_type_is_ignored() -> None:
    items = extract_html(_element("input", attrs={"type": "  "}), "a.html")

    assert [item.bcd_key for item in items] == ["html.elements.input"]


def test_html_parsed_input_type_is_case_folded() -> None:
    items = extract_html_source('<input type="Date">', "index.html")
    keys = {item.bcd_key for item in items}

    assert "html.elements.input" in keys
    assert "html.elements.input.input-types.date" in keys
    input_lines = {item.line for item in items if item.bcd_key.startswith("html.elements.input")}
    assert len(input_lines) == 1


def test_js_occurrences_and_lines() -> None:
    source = (
        "const a = structuredClone(x);\n"
        "const b = structuredClone(y); const c = structuredClone(z);\n"
        "new ResizeObserver(cb);\n"
    )
    items = extract_js(source, "src/app.js")

    assert _keys(items) == [
        (1, "api.structuredClone"),
        (2, "api.structuredClone"),
        (3, "api.ResizeObserver"),
    ]
    assert items[0].property == "structuredClone"
    assert items[2].property == "ResizeObserver"


def test_js_matches_inside_comments() -> None:
    items = extract_js("// navigator.clipboard is used later\n", "a.js")

    assert _keys(items) == [(1, "api.Navigator.clipboard")]


def test_js_custom_table() -> None:
    table = (ApiPattern("fooBar(", "api.fooBar"), ApiPattern("", "api.empty"))
    items = extract_js("fooBar(1)\n\nfooBar(2)", "a.ts", table)

    assert _keys(items) == [(1, "api.fooBar"), (3, "api.fooBar")]


def test_js_default_table_keys_are_api_namespace() -> None:
    assert all(pattern.bcd_key.startswith("api.") for pattern in DEFAULT_API_PATTERNS)


def test_js_table_entry_outside_known_namespaces_is_dropped() -> None:
    table = (ApiPattern("$.ajax(", "jquery.ajax"), ApiPattern("fetch(", "api.fetch"))
    items = extract_js("$.ajax(url); fetch(url);\n", "a.js", table)

    assert _keys(items) == [(1, "api.fetch")]


def test_css_escaped_whitespace_keyword_is_dropped() -> None:
    items = extract_css_source("a { color: red\\ x }", "a.css")

    assert [item.bcd_key for item in items] == ["css.properties.color"]
