"""Report assembly, ordering and the persisted ``report.json`` format."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any, cast

from .enrich import tier_from_baseline
from .exceptions import ReportError
from .model import EnrichedUsage, Report, SupportTier, Summary
from .util.text import to_posix

_RISK_RANK: dict[str, int] = {
    "unsupported": 0,
    "unknown": 0,
    "newly": 1,
    "widely": 2,
}
NONE_TIERS = frozenset({"unsupported", "unknown"})


def risk_rank(tier: str) -> int:
    """Sort weight for a tier; lower is riskier, unresolved values sort last."""
    return _RISK_RANK.get(tier, 3)


def sort_key(item: EnrichedUsage) -> tuple[int, str, int]:
    return (risk_rank(item.tier), item.file, item.line)


def dedupe(items: Iterable[EnrichedUsage]) -> list[EnrichedUsage]:
    """Collapse usages sharing (file, line, key); the first one wins."""
    seen: set[tuple[str, int, str]] = set()
    output: list[EnrichedUsage] = []
    for item in items:
        if item.identity in seen:
            continue
        seen.add(item.identity)
        output.append(item)
    return output


def summarize(items: Iterable[EnrichedUsage], files: int) -> Summary:
    """Count usages per tier, folding unsupported and unknown into ``none``."""
    widely = newly = none = total = 0
    for item in items:
        total += 1
        if item.tier == "widely":
            widely += 1
        elif item.tier == "newly":
            newly += 1
        else:
            none += 1
    return Summary(files=files, usages=total, widely=widely, newly=newly, none=none)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_report(
    items: Iterable[EnrichedUsage],
    *,
    files: int,
    root: str | Path,
    scanned_at: str | None = None,
) -> Report:
    """Dedupe, count and risk-order enriched usages into a report."""
    unique = dedupe(items)
    ordered = sorted(unique, key=sort_key)
    return Report(
        scanned_at=scanned_at or utc_timestamp(),
        root=to_posix(str(root)),
        summary=summarize(ordered, files),
        items=tuple(ordered),
    )


def item_to_dict(item: EnrichedUsage) -> dict[str, Any]:
    return {
        "file": item.file,
        "line": item.line,
        "property": item.property,
        "bcdKey": item.bcd_key,
        "featureId": item.feature_id,
        "featureName": item.feature_name,
        "tier": item.tier,
        "baselineLowDate": item.baseline_low_date,
        "baselineHighDate": item.baseline_high_date,
        "support": item.support,
        "mdnUrl": item.mdn_url,
        "advice": item.advice,
    }


def report_to_dict(report: Report) -> dict[str, Any]:
    summary = report.summary
    return {
        "scannedAt": report.scanned_at,
        "root": report.root,
        "summary": {
            "files": summary.files,
            "usages": summary.usages,
            "baseline": {"widely": summary.widely, "newly": summary.newly, "none": summary.none},
        },
        "items": [item_to_dict(item) for item in report.items],
    }


def write_report(report: Report, path: Path) -> Path:
    path.write_text(json.dumps(report_to_dict(report), indent=2) + "\n", encoding="utf-8")
    return path


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) and value else None


def _item_tier(data: Mapping[str, Any]) -> SupportTier:
    tier = data.get("tier")
    if isinstance(tier, str):
        return cast(SupportTier, tier)
    # Reports written by older scanners carry the raw web-features value.
    if "baseline" in data:
        return tier_from_baseline(data.get("baseline"))
    return "unknown"


def item_from_dict(data: object) -> EnrichedUsage:
    if not isinstance(data, Mapping):
        raise ValueError("item is not an object")
    file = data.get("file")
    bcd_key = data.get("bcdKey")
    if not isinstance(file, str) or not isinstance(bcd_key, str):
        raise ValueError("item needs string 'file' and 'bcdKey'")
    line = data.get("line", data.get("loc", 0))
    if not isinstance(line, int) or isinstance(line, bool):
        line = 0

    support = data.get("support")
    return EnrichedUsage(
        file=file,
        line=line,
        property=_optional_str(data, "property") or "",
        bcd_key=bcd_key,
        tier=_item_tier(data),
        feature_id=_optional_str(data, "featureId"),
        feature_name=_optional_str(data, "featureName"),
        baseline_low_date=_optional_str(data, "baselineLowDate"),
        baseline_high_date=_optional_str(data, "baselineHighDate"),
        support=dict(support) if isinstance(support, Mapping) else None,
        mdn_url=_optional_str(data, "mdnUrl") or _optional_str(data, "mdn_url"),
        advice=_optional_str(data, "advice") or "",
    )


def _int_field(data: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = data.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"summary field {key!r} is not an integer")
    return value


def _summary_from_dict(data: Mapping[str, Any], items: tuple[EnrichedUsage, ...]) -> Summary:
    files = _int_field(data, "files")
    counts = data.get("baseline")
    if not isinstance(counts, Mapping):
        return summarize(items, files)

    if "usages" in data:
        usages = _int_field(data, "usages")
    else:
        usages = _int_field(data, "declarations", len(items))

    # Older reports bucket counts by the raw web-features value.
    legacy = "widely" not in counts and "newly" not in counts and (
        "high" in counts or "low" in counts
    )
    return Summary(
        files=files,
        usages=usages,
        widely=_int_field(counts, "high" if legacy else "widely"),
        newly=_int_field(counts, "low" if legacy else "newly"),
        none=_int_field(counts, "none"),
    )


def report_from_dict(data: object) -> Report:
    if not isinstance(data, Mapping):
        raise ValueError("report is not an object")
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise ValueError("report has no 'items' list")
    items = tuple(item_from_dict(entry) for entry in raw_items)

    raw_summary = data.get("summary")
    summary_map: Mapping[str, Any] = raw_summary if isinstance(raw_summary, Mapping) else {}
    return Report(
        scanned_at=_optional_str(data, "scannedAt") or "",
        root=_optional_str(data, "root") or "",
        summary=_summary_from_dict(summary_map, items),
        items=items,
    )


def read_report(path: Path) -> Report:
    """Load a persisted report, raising ReportError when missing or malformed."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ReportError(str(path), cause="file not found") from exc
    except OSError as exc:
        raise ReportError(str(path), cause=exc.__class__.__name__) from exc
    try:
        return report_from_dict(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ReportError(str(path), cause="invalid JSON") from exc
    except ValueError as exc:
        raise ReportError(str(path), cause=str(exc)) from exc
