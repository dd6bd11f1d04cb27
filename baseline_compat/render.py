"""HTML and CSV renderers for a persisted report."""

from __future__ import annotations

import csv
from html import escape
import io
from pathlib import Path

from .constants import CSV_REPORT_FILENAME, HTML_REPORT_FILENAME, TIER_LABEL_MAP
from .model import EnrichedUsage, Report
from .report import risk_rank
from .util.text import normalize_whitespace

CSV_HEADER: tuple[str, ...] = (
    "file",
    "line",
    "bcdKey",
    "featureName",
    "tier",
    "mdnUrl",
    "advice",
)

_BADGE_CLASS = {"widely": "hi", "newly": "lo", "unsupported": "no", "unknown": "un"}
# Filter values match the tier select options; unsupported rows read "not in".
_FILTER_VALUE = {"widely": "widely", "newly": "newly", "unsupported": "not in"}
_RISKY_TIERS = frozenset({"newly", "unsupported", "unknown"})

_STYLE = """\
:root{--bd:#ddd;--bg:#fff;--ink:#111;--muted:#666;--chip:#f7f7f7;--row-alt:#fafafa}
@media (prefers-color-scheme: dark){
  :root{--bd:#3a3f45;--bg:#0f1419;--ink:#e6edf3;--muted:#9aa7b1;--chip:#1b222a;--row-alt:#121820}
}
body{font-family:system-ui,sans-serif;margin:1.5rem;background:var(--bg);color:var(--ink)}
h1{font-size:1.35rem;margin:0 0 .5rem}
.summary{display:flex;gap:1rem;align-items:center;flex-wrap:wrap;margin:.25rem 0 1rem}
.b{display:inline-block;padding:.15rem .45rem;border-radius:.6rem;font-size:.8rem;
  border:1px solid var(--bd);background:var(--chip)}
.b.hi{box-shadow:0 0 0 999px #a1f0a31f inset}
.b.lo{box-shadow:0 0 0 999px #ffd6661f inset}
.b.no{box-shadow:0 0 0 999px #ff9aa21f inset}
.b.un{box-shadow:0 0 0 999px #9fb3c81f inset}
.controls{display:flex;gap:.75rem;align-items:center;flex-wrap:wrap;margin:.25rem 0 1rem}
.controls label{display:flex;gap:.35rem;align-items:center}
input,select{padding:.35rem .5rem;border-radius:.35rem;border:1px solid var(--bd);
  background:transparent;color:var(--ink)}
.small{color:var(--muted);font-size:.85rem}
table{border-collapse:collapse;width:100%}
caption{text-align:left;font-weight:600;margin:.25rem 0}
th,td{border:1px solid var(--bd);padding:.5rem;vertical-align:top}
th{background:var(--chip);position:sticky;top:0}
th.sortable{cursor:pointer}
tbody tr:nth-child(even){background:var(--row-alt)}
tbody tr.risky td{border-top:2px solid #ff9aa2aa;border-bottom:2px solid #ff9aa2aa}
code{background:var(--chip);padding:.1rem .25rem;border-radius:.25rem}
.btn{padding:.5rem .75rem;border-radius:.5rem;border:1px solid var(--bd);color:var(--ink);
  text-decoration:none}
"""

# Client-side filtering and column sort. Rows carry lower-cased data-* values;
# the baseline column sorts with the same rank as the report order.
_SCRIPT = """\
const $ = (s, r = document) => r.querySelector(s);
const rows = Array.from(document.querySelectorAll('#data tbody tr'));
const fBase = $('#fBase'), fFile = $('#fFile'), fKey = $('#fKey'), fRisky = $('#fRisky');

function applyFilters() {
  const base = fBase.value.toLowerCase();
  const file = fFile.value.toLowerCase();
  const key = fKey.value.toLowerCase();
  let shown = 0;
  rows.forEach((tr) => {
    const show = (!base || tr.cells[0].dataset.base === base)
      && (!file || tr.cells[1].dataset.file.includes(file))
      && (!key || tr.cells[4].dataset.key.includes(key))
      && (!fRisky.checked || tr.classList.contains('risky'));
    tr.style.display = show ? '' : 'none';
    if (show) shown++;
  });
  $('#matchCount').textContent = shown + ' / ' + rows.length + ' rows';
}

[fBase, fRisky].forEach((el) => el.addEventListener('change', applyFilters));
[fFile, fKey].forEach((el) => el.addEventListener('input', applyFilters));

const sortValue = {
  baseline: (tr) => Number(tr.cells[0].dataset.rank),
  file: (tr) => tr.cells[1].dataset.file,
  line: (tr) => Number(tr.cells[2].dataset.line),
  feature: (tr) => tr.cells[3].dataset.feature,
  key: (tr) => tr.cells[4].dataset.key,
};
let sortState = {col: 'baseline', dir: 1};
document.querySelectorAll('#data thead th.sortable').forEach((th) => {
  th.addEventListener('click', () => {
    const col = th.dataset.col;
    sortState = {col, dir: sortState.col === col ? -sortState.dir : 1};
    const value = sortValue[col];
    const tbody = $('#data tbody');
    rows.slice()
      .sort((a, b) => (value(a) < value(b) ? -1 : value(a) > value(b) ? 1 : 0) * sortState.dir)
      .forEach((tr) => tbody.appendChild(tr));
  });
});

const params = new URLSearchParams(location.search);
if (params.has('base')) fBase.value = params.get('base');
if (params.has('file')) fFile.value = params.get('file');
if (params.has('key')) fKey.value = params.get('key');
if (params.get('risky') === '1') fRisky.checked = true;
applyFilters();
"""

_CONTROLS = """\
<div class="controls" id="filters">
  <label>Baseline:
    <select id="fBase" aria-label="Filter by Baseline">
      <option value="">All</option>
      <option value="widely">Widely</option>
      <option value="newly">Newly</option>
      <option value="not in">Not in</option>
      <option value="unknown">Unknown</option>
    </select>
  </label>
  <label>File contains:
    <input id="fFile" placeholder="e.g. app.css" aria-label="Filter by file"></label>
  <label>Key contains:
    <input id="fKey" placeholder="e.g. word-break" aria-label="Filter by BCD key"></label>
  <label><input type="checkbox" id="fRisky"> Show risky only</label>
  <span class="small" id="matchCount"></span>
</div>
"""


def _badge(tier: str) -> str:
    label = TIER_LABEL_MAP.get(tier, TIER_LABEL_MAP["unknown"])
    css_class = _BADGE_CLASS.get(tier, "un")
    return f'<span class="b {css_class}" title="{escape(label)} Baseline">{escape(label)}</span>'


def _row(item: EnrichedUsage) -> str:
    risky = ' class="risky"' if item.tier in _RISKY_TIERS else ""
    docs = (
        f'<a href="{escape(item.mdn_url)}" target="_blank" rel="noopener">MDN</a>'
        if item.mdn_url
        else ""
    )
    feature = item.feature_name or ""
    base = _FILTER_VALUE.get(item.tier, "unknown")
    cells = (
        f'<td data-base="{base}" data-rank="{risk_rank(item.tier)}">{_badge(item.tier)}</td>',
        f'<td data-file="{escape(item.file.lower())}"><code>{escape(item.file)}</code></td>',
        f'<td data-line="{item.line}">{item.line}</td>',
        f'<td data-feature="{escape(feature.lower())}">{escape(feature)}</td>',
        f'<td data-key="{escape(item.bcd_key.lower())}"><code>{escape(item.bcd_key)}</code></td>',
        f"<td>{docs}</td>",
        f"<td>{escape(item.advice)}</td>",
    )
    return f"<tr{risky}>" + "".join(cells) + "</tr>"


def render_html(report: Report) -> str:
    """Render a self-contained HTML page with tier, file and key filters and sortable columns."""
    summary = report.summary
    rows = "\n".join(_row(item) for item in report.items)
    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Baseline Compatibility Report</title>
<style>
{_STYLE}</style>
</head>
<body>
<h1>Baseline Compatibility Report</h1>
<div class="summary" role="group" aria-label="Summary">
  <div><strong>Scanned:</strong> {escape(report.scanned_at)}</div>
  <div><strong>Root:</strong> <code>{escape(report.root)}</code></div>
  <div><strong>Files:</strong> {summary.files}</div>
  <span class="b hi">Widely: {summary.widely}</span>
  <span class="b lo">Newly: {summary.newly}</span>
  <span class="b no">Not in: {summary.none}</span>
  <a download="{CSV_REPORT_FILENAME}" class="btn" href="{CSV_REPORT_FILENAME}">Download CSV</a>
</div>
{_CONTROLS}<table id="data">
<caption>Findings (sorted by risk)</caption>
<thead>
<tr><th scope="col" class="sortable" data-col="baseline">Baseline</th>\
<th scope="col" class="sortable" data-col="file">File</th>\
<th scope="col" class="sortable" data-col="line">Line</th>\
<th scope="col" class="sortable" data-col="feature">Feature</th>\
<th scope="col" class="sortable" data-col="key">BCD Key</th>\
<th scope="col">Docs</th><th scope="col">Advice</th></tr>
</thead>
<tbody>
{rows}
</tbody>
</table>
<script>
{_SCRIPT}</script>
</body>
</html>
"""


def render_csv(items: list[EnrichedUsage] | tuple[EnrichedUsage, ...]) -> str:
    """Render items as CSV with every value quoted."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for item in items:
        writer.writerow(
            (
                item.file,
                item.line,
                item.bcd_key,
                item.feature_name or "",
                item.tier,
                item.mdn_url or "",
                normalize_whitespace(item.advice),
            )
        )
    return buffer.getvalue()


def write_renderings(report: Report, directory: Path) -> tuple[Path, Path]:
    """Write ``report.html`` and ``report.csv`` into ``directory``."""
    html_path = directory / HTML_REPORT_FILENAME
    csv_path = directory / CSV_REPORT_FILENAME
    html_path.write_text(render_html(report), encoding="utf-8")
    csv_path.write_text(render_csv(report.items), encoding="utf-8")
    return html_path, csv_path
