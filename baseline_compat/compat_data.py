"""Typed access to browser-compat-data and web-features datasets."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .constants import (
    BCD_URL,
    BCD_URL_ENV,
    CACHE_DIR_ENV,
    DEFAULT_CACHE_DIR,
    WEB_FEATURES_URL,
    WEB_FEATURES_URL_ENV,
)
from .http import load_dataset, use_shared_client

StatusResolver = Callable[[str | None, str], Mapping[str, Any]]


@dataclass(frozen=True)
class FeatureRef:
    feature_id: str
    name: str


@dataclass(frozen=True)
class CompatEntry:
    key: str
    mdn_url: str | None


class FeatureIndex:
    """Read-only map from a compat key to the web-features entry that lists it."""

    def __init__(self, mapping: Mapping[str, FeatureRef] | None = None) -> None:
        self._by_key: Mapping[str, FeatureRef] = MappingProxyType(dict(mapping or {}))

    @classmethod
    def from_web_features(cls, data: Mapping[str, Any]) -> FeatureIndex:
        """Invert each feature's ``compat_features`` list."""
        features = data.get("features")
        mapping: dict[str, FeatureRef] = {}
        if not isinstance(features, Mapping):
            return cls(mapping)

        for feature_id, feature in features.items():
            if not isinstance(feature_id, str) or not isinstance(feature, Mapping):
                continue
            keys = feature.get("compat_features")
            if not isinstance(keys, list):
                continue
            name = feature.get("name")
            ref = FeatureRef(
                feature_id=feature_id,
                name=name if isinstance(name, str) else feature_id,
            )
            for key in keys:
                if isinstance(key, str):
                    mapping[key] = ref
        return cls(mapping)

    def get(self, bcd_key: str) -> FeatureRef | None:
        return self._by_key.get(bcd_key)

    def __contains__(self, bcd_key: object) -> bool:
        return bcd_key in self._by_key

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_key)

    def __len__(self) -> int:
        return len(self._by_key)


class CompatTree:
    """Walk the browser-compat-data tree by dot segment."""

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data or {}

    def lookup(self, bcd_key: str) -> CompatEntry | None:
        """Return the entry at ``bcd_key``, or None when any segment is absent."""
        node: Any = self._data
        for segment in bcd_key.split("."):
            if not isinstance(node, Mapping) or segment not in node:
                return None
            node = node[segment]
        if not isinstance(node, Mapping):
            return None
        compat = node.get("__compat")
        if not isinstance(compat, Mapping):
            return None

        mdn_url = compat.get("mdn_url")
        return CompatEntry(key=bcd_key, mdn_url=mdn_url if isinstance(mdn_url, str) else None)

    def mdn_url(self, bcd_key: str) -> str | None:
        entry = self.lookup(bcd_key)
        return entry.mdn_url if entry else None


def web_features_resolver(data: Mapping[str, Any]) -> StatusResolver:
    """Build a status resolver over a web-features ``data.json`` payload.

    Per-key status (``status.by_compat_key``) wins over the feature-level
    status. Keys with no owning feature raise ``LookupError``.
    """
    raw_features = data.get("features")
    features: Mapping[str, Any] = raw_features if isinstance(raw_features, Mapping) else {}

    def resolve(feature_id: str | None, bcd_key: str) -> Mapping[str, Any]:
        feature = features.get(feature_id) if feature_id else None
        if not isinstance(feature, Mapping):
            raise LookupError(f"No web-features entry for {bcd_key}")
        status = feature.get("status")
        if not isinstance(status, Mapping):
            raise LookupError(f"Feature {feature_id} has no status")
        by_key = status.get("by_compat_key")
        if isinstance(by_key, Mapping):
            key_status = by_key.get(bcd_key)
            if isinstance(key_status, Mapping):
                return key_status
        return status

    return resolve


@dataclass(frozen=True)
class CompatData:
    tree: CompatTree
    index: FeatureIndex
    resolve_status: StatusResolver


def build_compat_data(bcd: Mapping[str, Any], web_features: Mapping[str, Any]) -> CompatData:
    return CompatData(
        tree=CompatTree(bcd),
        index=FeatureIndex.from_web_features(web_features),
        resolve_status=web_features_resolver(web_features),
    )


def cache_dir() -> Path:
    """Return the dataset cache directory, honoring the env override."""
    configured = os.environ.get(CACHE_DIR_ENV, "").strip()
    return Path(configured or DEFAULT_CACHE_DIR).expanduser()


def load_compat_data(directory: Path | None = None) -> CompatData:
    """Load both datasets, downloading any that are not cached yet."""
    target = directory or cache_dir()
    bcd_url = os.environ.get(BCD_URL_ENV, "").strip() or BCD_URL
    web_features_url = os.environ.get(WEB_FEATURES_URL_ENV, "").strip() or WEB_FEATURES_URL
    with use_shared_client():
        bcd = load_dataset("browser-compat-data", bcd_url, target)
        web_features = load_dataset("web-features", web_features_url, target)
    return build_compat_data(bcd, web_features)
