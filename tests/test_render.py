from __future__ import annotations

from pathlib import Path

from baseline_compat.model import EnrichedUsage, Report
from baseline_compat.render import render_csv, render_html, write_renderings
from baseline_compat.report import assemble_report


def _report() -> Report:
    items = [
        EnrichedUsage(
            file="src/App.css",
            line=3,
            property="word-break",
            bcd_key="css.properties.word-break.auto-phrase",
            tier="unsupported",
            feature_name="word-break: auto-phrase",
            advice="Feature is not in Baseline.",
        ),
        EnrichedUsage(
            file="index.html",
            line=9,
            property="dialog",
            bcd_key="html.elements.dialog",
            tier="widely",
            feature_name="<dialog>",
            mdn_url="https://developer.mozilla.org/docs/Web/HTML/Element/dialog",
            advice="Widely Baseline.\n  Generally safe.",
        ),
        EnrichedUsage(file="a.js", line=1, property="x", bcd_key="api.Foo", tier="unknown"),
    ]
    return assemble_report(items, files=3, root="/repo", scanned_at="2025-01-01T00:00:00.000Z")


def test_html_rows_carry_filter_and_sort_attributes() -> None:
    html = render_html(_report())

    assert '<td data-base="not in" data-rank="0">' in html
    assert '<td data-base="widely" data-rank="2">' in html
    assert '<td data-base="unknown" data-rank="0">' in html
    assert '<td data-file="src/app.css"><code>src/App.css</code></td>' in html
    assert '<td data-line="9">9</td>' in html
    assert 'data-key="css.properties.word-break.auto-phrase"' in html
    assert 'data-feature="&lt;dialog&gt;"' in html


def test_html_has_filter_controls_and_sortable_columns() -> None:
    html = render_html(_report())

    for control in ('id="fBase"', 'id="fFile"', 'id="fKey"', 'id="fRisky"', 'id="matchCount"'):
        assert control in html
    for column in ("baseline", "file", "line", "feature", "key"):
        assert f'class="sortable" data-col="{column}"' in html
    assert "function applyFilters()" in html
    assert html.count("<tr class=\"risky\">") == 2


def test_html_escapes_values_and_shows_summary() -> None:
    html = render_html(_report())

    assert "<dialog>" not in html.split("<tbody>", 1)[1]
    assert "Widely: 1" in html
    assert "Not in: 2" in html
    assert 'href="https://developer.mozilla.org/docs/Web/HTML/Element/dialog"' in html


def test_csv_quotes_values_and_collapses_advice() -> None:
    lines = render_csv(_report().items).splitlines()

    assert lines[0] == "file,line,bcdKey,featureName,tier,mdnUrl,advice"
    assert lines[-1] == (
        '"index.html","9","html.elements.dialog","<dialog>","widely",'
        '"https://developer.mozilla.org/docs/Web/HTML/Element/dialog",'
        '"Widely Baseline. Generally safe."'
    )


def test_write_renderings(tmp_path: Path) -> None:
    html_path, csv_path = write_renderings(_report(), tmp_path)

    assert html_path == tmp_path / "report.html"
    assert csv_path == tmp_path / "report.csv"
    assert "Baseline Compatibility Report" in html_path.read_text(encoding="utf-8")
    assert len(csv_path.read_text(encoding="utf-8").splitlines()) == 4
