"""Constants used across pybaseline-compat."""

from __future__ import annotations

from typing import Final

REPORT_FILENAME: Final[str] = "report.json"
HTML_REPORT_FILENAME: Final[str] = "report.html"
CSV_REPORT_FILENAME: Final[str] = "report.csv"
ALLOWLIST_FILENAME: Final[str] = "baseline-allow.json"
OUTPUT_DIRNAME: Final[str] = "baseline-compat-report"

CSS_PATTERNS: Final[tuple[str, ...]] = ("*.css",)
HTML_PATTERNS: Final[tuple[str, ...]] = ("*.html", "*.htm")
JS_PATTERNS: Final[tuple[str, ...]] = ("*.js", "*.mjs", "*.cjs", "*.jsx", "*.ts", "*.tsx")
IGNORED_DIRS: Final[frozenset[str]] = frozenset({"node_modules", "dist"})

MAX_FILE_BYTES: Final[int] = 1024 * 1024

BCD_URL: Final[str] = "https://unpkg.com/@mdn/browser-compat-data/data.json"
WEB_FEATURES_URL: Final[str] = "https://unpkg.com/web-features/data.json"
DEFAULT_CACHE_DIR: Final[str] = "~/.cache/pybaseline-compat"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0

DEBUG_ENV: Final[str] = "BASELINE_COMPAT_DEBUG"
CACHE_DIR_ENV: Final[str] = "BASELINE_COMPAT_CACHE_DIR"
BCD_URL_ENV: Final[str] = "BASELINE_COMPAT_BCD_URL"
WEB_FEATURES_URL_ENV: Final[str] = "BASELINE_COMPAT_WEB_FEATURES_URL"

MAX_WIDELY_ENV: Final[str] = "MAX_HIGH"
MAX_NEWLY_ENV: Final[str] = "MAX_LOW"
MAX_NONE_ENV: Final[str] = "MAX_NONE"

TIER_LABEL_MAP: Final[dict[str, str]] = {
    "widely": "Widely",
    "newly": "Newly",
    "unsupported": "Not in",
    "unknown": "Unknown",
}

ADVICE_TEMPLATES: Final[dict[str, str]] = {
    "unsupported": (
        "Feature is not in Baseline. Consider a fallback or feature detect "
        "before using ({key})."
    ),
    "newly": (
        "Newly Baseline. Some older browsers may break; add a fallback or "
        "progressive enhancement where feasible."
    ),
    "widely": "Widely Baseline. Generally safe; still test on your supported browsers.",
    "unknown": "No Baseline info found; review MDN and test before relying on it.",
}
