"""Console scripts for pybaseline-compat."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__ as _version
from .compat_data import load_compat_data
from .constants import (
    ALLOWLIST_FILENAME,
    DEBUG_ENV,
    MAX_NEWLY_ENV,
    MAX_NONE_ENV,
    MAX_WIDELY_ENV,
    OUTPUT_DIRNAME,
    REPORT_FILENAME,
)
from .enrich import Enricher
from .exceptions import BaselineCompatError, ScanRootError
from .model import Report
from .render import write_renderings
from .report import read_report, write_report
from .scanner import build_report
from .threshold import Thresholds, TierCounts, evaluate, load_allowlist

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

console = Console()
err_console = Console(stderr=True)


def debug_enabled() -> bool:
    """Check debug mode env flag."""
    return os.environ.get(DEBUG_ENV, "").strip() == "1"


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug_enabled() else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
    )


def _echo(message: str, *, style: str | None = None, err: bool = False) -> None:
    target = err_console if err else console
    target.print(message, style=style, soft_wrap=True, markup=False, highlight=False)


def _resolve_root(root: str | None) -> Path:
    path = Path(root).expanduser() if root else Path.cwd() / ".." / ".."
    path = path.resolve()
    if not path.is_dir():
        raise ScanRootError(str(path))
    return path


def _scan(root: Path, *, include_html: bool, include_js: bool) -> Report:
    data = load_compat_data()
    return build_report(
        root,
        Enricher.from_compat_data(data),
        include_html=include_html,
        include_js=include_js,
    )


def _summary_line(report: Report, output: Path) -> str:
    summary = report.summary
    return (
        f"Wrote {output.name} (root={report.root}, files={summary.files}, "
        f"usages={summary.usages}) Baseline: widely={summary.widely} "
        f"newly={summary.newly} none={summary.none}"
    )


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("root", required=False, type=click.Path(file_okay=False))
@click.option("--no-html", is_flag=True, help="Skip HTML files.")
@click.option("--no-js", is_flag=True, help="Skip script files.")
@click.version_option(_version, "-v", "--version")
def scan_main(root: str | None, no_html: bool, no_js: bool) -> None:
    """
    Scan a source tree and write report.json to the current directory.

    \b
    ROOT defaults to two directories above the current one.
    """
    _configure_logging()
    try:
        target = _resolve_root(root)
        report = _scan(target, include_html=not no_html, include_js=not no_js)
        output = write_report(report, Path.cwd() / REPORT_FILENAME)
    except BaselineCompatError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo(_summary_line(report, output))


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--input",
    "input_path",
    default=REPORT_FILENAME,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Report to render; outputs are written next to it.",
)
@click.version_option(_version, "-v", "--version")
def render_main(input_path: str) -> None:
    """Write report.html and report.csv from a persisted report."""
    _configure_logging()
    source = Path(input_path)
    try:
        report = read_report(source)
    except BaselineCompatError as exc:
        raise click.ClickException(str(exc)) from exc
    html_path, csv_path = write_renderings(report, source.resolve().parent)
    _echo(f"Wrote {html_path.name} and {csv_path.name}")


def _format_limit(limit: int | None) -> str:
    return "unlimited" if limit is None else str(limit)


def _format_counts(counts: TierCounts) -> str:
    return f"widely={counts.widely} newly={counts.newly} none={counts.none}"


@click.command(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--report",
    "report_path",
    default=REPORT_FILENAME,
    show_default=True,
    type=click.Path(dir_okay=False),
)
@click.option(
    "--allowlist",
    "allowlist_path",
    default=ALLOWLIST_FILENAME,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Optional allowlist of tolerated keys.",
)
@click.version_option(_version, "-v", "--version")
def threshold_main(report_path: str, allowlist_path: str) -> None:
    """
    Fail when tier counts of a report exceed their ceilings.

    \b
    Ceilings come from the environment:
      MAX_HIGH  widely available usages (default: unlimited)
      MAX_LOW   newly available usages (default: unlimited)
      MAX_NONE  unsupported or unknown usages (default: 0)
    """
    _configure_logging()
    try:
        thresholds = Thresholds.from_env(os.environ)
        report = read_report(Path(report_path))
        rules = load_allowlist(Path(allowlist_path))
    except BaselineCompatError as exc:
        raise click.ClickException(str(exc)) from exc

    verdict = evaluate(report.items, thresholds, rules)
    _echo(
        f"Thresholds  -> {MAX_WIDELY_ENV}={_format_limit(thresholds.max_widely)} "
        f"{MAX_NEWLY_ENV}={_format_limit(thresholds.max_newly)} "
        f"{MAX_NONE_ENV}={_format_limit(thresholds.max_none)}"
    )
    _echo(f"Found (raw) -> {_format_counts(verdict.raw)}")
    tail = "  (after allowlist)" if rules else ""
    _echo(f"Found (eff) -> {_format_counts(verdict.effective)}{tail}")

    if not verdict.passed:
        _echo(f"Baseline threshold failed: {'; '.join(verdict.violations)}", err=True)
        raise SystemExit(verdict.exit_code)
    _echo("Baseline threshold passed", style="green")


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("root", required=False, type=click.Path(file_okay=False))
@click.option("--no-html", is_flag=True, help="Skip HTML files.")
@click.option("--no-js", is_flag=True, help="Skip script files.")
@click.version_option(_version, "-v", "--version")
def compat_main(root: str | None, no_html: bool, no_js: bool) -> None:
    """
    Scan ROOT and write report.json, report.html and report.csv
    into ROOT/baseline-compat-report/.
    """
    _configure_logging()
    try:
        target = _resolve_root(root)
        report = _scan(target, include_html=not no_html, include_js=not no_js)
    except BaselineCompatError as exc:
        raise click.ClickException(str(exc)) from exc

    out_dir = target / OUTPUT_DIRNAME
    out_dir.mkdir(parents=True, exist_ok=True)
    output = write_report(report, out_dir / REPORT_FILENAME)
    html_path, _csv_path = write_renderings(report, out_dir)
    _echo(_summary_line(report, output))
    _echo("")
    _echo("Baseline report written to:")
    _echo(f"  {out_dir}")
    _echo("Open:")
    _echo(f"  {html_path}")
