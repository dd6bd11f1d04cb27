"""File discovery and per-file extraction."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from fnmatch import fnmatch
import logging
import os
from pathlib import Path

from .constants import CSS_PATTERNS, HTML_PATTERNS, IGNORED_DIRS, JS_PATTERNS, MAX_FILE_BYTES
from .enrich import Enricher
from .exceptions import ScanRootError
from .extract_css import extract_css_source
from .extract_html import extract_html_source
from .extract_js import extract_js
from .model import RawUsage, Report
from .report import assemble_report
from .util.text import to_posix

LOGGER = logging.getLogger(__name__)

Extractor = Callable[[str, str], list[RawUsage]]


@dataclass(frozen=True)
class ScanResult:
    root: Path
    files: int
    usages: list[RawUsage] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def discover_files(root: Path, patterns: Sequence[str]) -> list[Path]:
    """Return sorted files under root matching any pattern, skipping ignored and hidden paths."""
    matches: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            name for name in dirnames if name not in IGNORED_DIRS and not name.startswith(".")
        )
        for filename in filenames:
            if filename.startswith("."):
                continue
            if any(fnmatch(filename.lower(), pattern) for pattern in patterns):
                matches.append(Path(dirpath) / filename)
    return sorted(matches)


def relative_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward slashes."""
    return to_posix(os.path.relpath(path, root))


def _read_source(path: Path, max_bytes: int) -> str | None:
    size = path.stat().st_size
    if size > max_bytes:
        LOGGER.warning("Skipping %s (%d bytes exceeds %d byte limit)", path, size, max_bytes)
        return None
    return path.read_text(encoding="utf-8")


def _scan_files(
    files: Iterable[Path],
    root: Path,
    extractor: Extractor,
    kind: str,
    max_bytes: int,
    result: ScanResult,
) -> None:
    for path in files:
        rel = relative_path(path, root)
        try:
            source = _read_source(path, max_bytes)
            if source is None:
                result.skipped.append(rel)
                continue
            items = extractor(source, rel)
        except Exception as exc:
            LOGGER.warning("Failed to parse %s %s: %s", kind, rel, exc)
            result.skipped.append(rel)
            continue
        LOGGER.debug("%s: %d usages", rel, len(items))
        result.usages.extend(items)


def scan_tree(
    root: Path,
    *,
    include_html: bool = True,
    include_js: bool = True,
    max_bytes: int = MAX_FILE_BYTES,
) -> ScanResult:
    """Run the applicable extractors over every matching file under root."""
    if not root.is_dir():
        raise ScanRootError(to_posix(str(root)))

    groups: list[tuple[str, list[Path], Extractor]] = [
        ("CSS", discover_files(root, CSS_PATTERNS), extract_css_source)
    ]
    if include_html:
        groups.append(("HTML", discover_files(root, HTML_PATTERNS), extract_html_source))
    if include_js:
        groups.append(("JS", discover_files(root, JS_PATTERNS), extract_js))

    total = sum(len(files) for _kind, files, _extractor in groups)
    result = ScanResult(root=root, files=total)
    for kind, files, extractor in groups:
        _scan_files(files, root, extractor, kind, max_bytes, result)
    return result


def build_report(
    root: Path,
    enricher: Enricher,
    *,
    include_html: bool = True,
    include_js: bool = True,
) -> Report:
    """Scan, enrich and assemble a report for ``root``."""
    result = scan_tree(root, include_html=include_html, include_js=include_js)
    enriched = enricher.enrich(result.usages)
    return assemble_report(enriched, files=result.files, root=result.root)
