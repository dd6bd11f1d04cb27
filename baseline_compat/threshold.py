"""CI gating: compare tier counts of a report against configured ceilings."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
import json
from pathlib import Path

from .constants import MAX_NEWLY_ENV, MAX_NONE_ENV, MAX_WIDELY_ENV
from .exceptions import AllowlistError, ConfigError
from .model import AllowRule, EnrichedUsage
from .report import NONE_TIERS
from .util.text import parse_limit


@dataclass(frozen=True)
class Thresholds:
    """Ceilings per tier bucket; ``None`` means unlimited."""

    max_widely: int | None = None
    max_newly: int | None = None
    max_none: int | None = 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> Thresholds:
        """Read ``MAX_HIGH``, ``MAX_LOW`` and ``MAX_NONE``; unset keeps the default."""
        defaults = cls()

        def _limit(name: str, default: int | None) -> int | None:
            raw = environ.get(name)
            if raw is None or not raw.strip():
                return default
            try:
                return parse_limit(raw)
            except ValueError as exc:
                raise ConfigError(name, raw) from exc

        return cls(
            max_widely=_limit(MAX_WIDELY_ENV, defaults.max_widely),
            max_newly=_limit(MAX_NEWLY_ENV, defaults.max_newly),
            max_none=_limit(MAX_NONE_ENV, defaults.max_none),
        )


@dataclass(frozen=True)
class TierCounts:
    widely: int = 0
    newly: int = 0
    none: int = 0


@dataclass(frozen=True)
class Verdict:
    raw: TierCounts
    effective: TierCounts
    forgiven: dict[str, int] = field(default_factory=dict)
    violations: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


def count_tiers(items: Iterable[EnrichedUsage]) -> TierCounts:
    """Recount tiers directly from report items."""
    widely = newly = none = 0
    for item in items:
        if item.tier == "widely":
            widely += 1
        elif item.tier == "newly":
            newly += 1
        else:
            none += 1
    return TierCounts(widely=widely, newly=newly, none=none)


def forgiveness(items: Iterable[EnrichedUsage], rules: Sequence[AllowRule]) -> dict[str, int]:
    """Return forgiven "none" occurrences per key, each capped at the rule's max."""
    observed = Counter(item.bcd_key for item in items if item.tier in NONE_TIERS)
    forgiven: dict[str, int] = {}
    for rule in rules:
        used = observed.get(rule.bcd_key, 0)
        amount = min(used, max(rule.max_count, 0))
        if amount:
            forgiven[rule.bcd_key] = forgiven.get(rule.bcd_key, 0) + amount
    return forgiven


def _check(label: str, count: int, limit: int | None, env_name: str) -> str | None:
    if limit is None or count <= limit:
        return None
    return f"{label} ({count}) exceeds {env_name} ({limit})"


def evaluate(
    items: Sequence[EnrichedUsage],
    thresholds: Thresholds,
    rules: Sequence[AllowRule] = (),
) -> Verdict:
    """Apply allowlist forgiveness to the "none" bucket and check every ceiling."""
    raw = count_tiers(items)
    forgiven = forgiveness(items, rules) if rules else {}
    effective = TierCounts(
        widely=raw.widely,
        newly=raw.newly,
        none=max(raw.none - sum(forgiven.values()), 0),
    )

    violations = [
        message
        for message in (
            _check("widely", effective.widely, thresholds.max_widely, MAX_WIDELY_ENV),
            _check("newly", effective.newly, thresholds.max_newly, MAX_NEWLY_ENV),
            _check("none", effective.none, thresholds.max_none, MAX_NONE_ENV),
        )
        if message
    ]
    return Verdict(raw=raw, effective=effective, forgiven=forgiven, violations=violations)


def _rule_from_dict(entry: object) -> AllowRule:
    if not isinstance(entry, Mapping):
        raise ValueError("rule is not an object")
    bcd_key = entry.get("bcdKey")
    max_count = entry.get("max")
    reason = entry.get("reason")
    if not isinstance(bcd_key, str) or not bcd_key.strip():
        raise ValueError("rule needs a 'bcdKey' string")
    if not isinstance(max_count, int) or isinstance(max_count, bool) or max_count < 0:
        raise ValueError(f"rule for {bcd_key} needs a non-negative integer 'max'")
    return AllowRule(
        bcd_key=bcd_key.strip(),
        max_count=max_count,
        reason=reason if isinstance(reason, str) else None,
    )


def load_allowlist(path: Path) -> list[AllowRule]:
    """Read allowlist rules; a missing file is an empty allowlist."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise AllowlistError(str(path), cause=exc.__class__.__name__) from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AllowlistError(str(path), cause="invalid JSON") from exc
    if not isinstance(payload, Mapping):
        raise AllowlistError(str(path), cause="expected an object with 'rules'")

    entries = payload.get("rules")
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise AllowlistError(str(path), cause="'rules' is not a list")
    try:
        return [_rule_from_dict(entry) for entry in entries]
    except ValueError as exc:
        raise AllowlistError(str(path), cause=str(exc)) from exc
