"""Data models for scanning, enrichment and reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Literal

from .keys import is_canonical_key

LOGGER = logging.getLogger(__name__)

SupportTier = Literal["widely", "newly", "unsupported", "unknown"]

SUPPORT_TIERS: tuple[SupportTier, ...] = ("widely", "newly", "unsupported", "unknown")


@dataclass(frozen=True)
class RawUsage:
    file: str
    line: int
    property: str
    bcd_key: str

    @property
    def identity(self) -> tuple[str, int, str]:
        """Dedup identity; the human label is cosmetic and excluded."""
        return (self.file, self.line, self.bcd_key)


class UsageCollector:
    """Accumulate one file's usages, dropping repeated (file, line, key) triples.

    Keys that cannot address the compatibility data (for example an escaped
    identifier containing whitespace) are dropped with a debug message.
    """

    def __init__(self, file: str) -> None:
        self.file = file
        self.items: list[RawUsage] = []
        self._seen: set[tuple[str, int, str]] = set()

    def add(self, line: int, property: str | None, bcd_key: str) -> None:
        if not is_canonical_key(bcd_key):
            LOGGER.debug("%s:%s: ignoring malformed key %r", self.file, line, bcd_key)
            return
        usage = RawUsage(file=self.file, line=line, property=property or "", bcd_key=bcd_key)
        if usage.identity in self._seen:
            return
        self._seen.add(usage.identity)
        self.items.append(usage)


@dataclass(frozen=True)
class EnrichedUsage(RawUsage):
    tier: SupportTier = "unknown"
    feature_id: str | None = None
    feature_name: str | None = None
    baseline_low_date: str | None = None
    baseline_high_date: str | None = None
    support: dict[str, str] | None = None
    mdn_url: str | None = None
    advice: str = ""


@dataclass(frozen=True)
class Summary:
    files: int
    usages: int
    widely: int
    newly: int
    none: int


@dataclass(frozen=True)
class Report:
    scanned_at: str
    root: str
    summary: Summary
    items: tuple[EnrichedUsage, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AllowRule:
    bcd_key: str
    max_count: int
    reason: str | None = None
