"""Resolve raw usages to Baseline tiers, docs links and advice."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

from .compat_data import CompatData, CompatTree, FeatureIndex, StatusResolver
from .constants import ADVICE_TEMPLATES
from .model import EnrichedUsage, RawUsage, SupportTier

LOGGER = logging.getLogger(__name__)

_TIER_BY_BASELINE: dict[object, SupportTier] = {
    "high": "widely",
    "low": "newly",
}


def advice_for(tier: SupportTier, bcd_key: str) -> str:
    """Return the fixed advisory text for a tier."""
    template = ADVICE_TEMPLATES.get(tier, ADVICE_TEMPLATES["unknown"])
    return template.format(key=bcd_key)


def tier_from_baseline(value: object) -> SupportTier:
    """Map a web-features ``baseline`` value ("high", "low", false) to a tier."""
    if value is False:
        return "unsupported"
    if isinstance(value, str):
        return _TIER_BY_BASELINE.get(value.strip().lower(), "unknown")
    return "unknown"


def _clean_date(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lstrip("≤").strip()
    return cleaned or None


def _clean_support(value: object) -> dict[str, str] | None:
    if not isinstance(value, Mapping):
        return None
    support = {
        str(browser): version
        for browser, version in value.items()
        if isinstance(version, str) and version
    }
    return support or None


class Enricher:
    """Attach tier, feature, dates, support and docs to each raw usage.

    Built once per process from explicitly passed lookup tables.
    """

    def __init__(
        self,
        index: FeatureIndex,
        resolve_status: StatusResolver,
        tree: CompatTree | None = None,
    ) -> None:
        self.index = index
        self.resolve_status = resolve_status
        self.tree = tree or CompatTree()

    @classmethod
    def from_compat_data(cls, data: CompatData) -> Enricher:
        return cls(data.index, data.resolve_status, data.tree)

    def _status(self, feature_id: str | None, bcd_key: str) -> Mapping[str, Any] | None:
        try:
            status = self.resolve_status(feature_id, bcd_key)
        except Exception as exc:
            LOGGER.debug("No Baseline status for %s: %s", bcd_key, exc)
            return None
        if not isinstance(status, Mapping):
            LOGGER.debug("Unexpected status payload for %s: %r", bcd_key, status)
            return None
        return status

    def enrich_one(self, usage: RawUsage) -> EnrichedUsage:
        ref = self.index.get(usage.bcd_key)
        feature_id = ref.feature_id if ref else None
        status = self._status(feature_id, usage.bcd_key)

        tier: SupportTier = "unknown"
        low_date = high_date = None
        support = None
        if status is not None:
            tier = tier_from_baseline(status.get("baseline"))
            low_date = _clean_date(status.get("baseline_low_date"))
            high_date = _clean_date(status.get("baseline_high_date"))
            support = _clean_support(status.get("support"))

        return EnrichedUsage(
            file=usage.file,
            line=usage.line,
            property=usage.property,
            bcd_key=usage.bcd_key,
            tier=tier,
            feature_id=feature_id,
            feature_name=ref.name if ref else None,
            baseline_low_date=low_date,
            baseline_high_date=high_date,
            support=support,
            mdn_url=self.tree.mdn_url(usage.bcd_key),
            advice=advice_for(tier, usage.bcd_key),
        )

    def enrich(self, usages: Iterable[RawUsage]) -> list[EnrichedUsage]:
        """Enrich every usage independently, keeping input order."""
        return [self.enrich_one(usage) for usage in usages]
