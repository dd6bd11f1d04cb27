"""HTTP client layer for downloading compatibility datasets."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from ._version import __version__
from .constants import DEFAULT_TIMEOUT_SECONDS
from .exceptions import ContentError, HttpStatusError, NetworkError, RequestTimeoutError

LOGGER = logging.getLogger(__name__)

_SHARED_CLIENT: ContextVar[httpx.Client | None] = ContextVar(
    "pybaseline_compat_shared_client", default=None
)


def _build_headers() -> dict[str, str]:
    return {
        "User-Agent": f"pybaseline-compat/{__version__}",
        "Accept": "application/json",
    }


@contextmanager
def use_shared_client(
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Iterator[httpx.Client]:
    """Provide a reusable HTTP client for all downloads within a CLI run."""
    with httpx.Client(timeout=timeout, follow_redirects=True, headers=_build_headers()) as client:
        token = _SHARED_CLIENT.set(client)
        try:
            yield client
        finally:
            _SHARED_CLIENT.reset(token)


def fetch_text(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> str:
    """Fetch a document body with one retry on connection errors."""
    shared_client = _SHARED_CLIENT.get()
    retry_once = True
    while True:
        try:
            if shared_client is None or timeout != DEFAULT_TIMEOUT_SECONDS:
                with httpx.Client(
                    timeout=timeout, follow_redirects=True, headers=_build_headers()
                ) as client:
                    response = client.get(url)
            else:
                response = shared_client.get(url)
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(url) from exc
        except httpx.ConnectError as exc:
            if retry_once:
                retry_once = False
                continue
            raise NetworkError(url, cause=exc.__class__.__name__) from exc
        except httpx.RequestError as exc:
            raise NetworkError(url, cause=exc.__class__.__name__) from exc

        if response.status_code != 200:
            raise HttpStatusError(response.status_code, str(response.url))

        body = response.text
        if not body.strip():
            raise ContentError(str(response.url))
        return body


def _parse_json_object(raw: str, source: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ContentError(source) from exc
    if not isinstance(payload, dict):
        raise ContentError(source)
    return payload


def load_dataset(name: str, url: str, cache_dir: Path) -> dict[str, Any]:
    """Return a cached dataset, downloading it into ``cache_dir`` on first use."""
    cached = cache_dir / f"{name}.json"
    if cached.is_file():
        LOGGER.debug("Using cached %s from %s", name, cached)
        return _parse_json_object(cached.read_text(encoding="utf-8"), str(cached))

    LOGGER.debug("Downloading %s from %s", name, url)
    raw = fetch_text(url)
    payload = _parse_json_object(raw, url)
    cache_dir.mkdir(parents=True, exist_ok=True)
    cached.write_text(raw, encoding="utf-8")
    return payload
