from __future__ import annotations

import json
from pathlib import Path
from typing import ClassVar

import httpx
import pytest

from baseline_compat import http
from baseline_compat.exceptions import (
    AllowlistError,
    ConfigError,
    ContentError,
    HttpStatusError,
    NetworkError,
    ReportError,
    RequestTimeoutError,
    ScanRootError,
)


class _FakeClient:
    plans: ClassVar[list[object]] = []
    seen_urls: ClassVar[list[str]] = []

    def __init__(self, **_: object) -> None:
        pass

    def __enter__(self) -> _FakeClient:
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: object | None,
    ) -> None:
        return None

    def get(self, url: str) -> httpx.Response:
        _FakeClient.seen_urls.append(url)
        plan = _FakeClient.plans.pop(0)
        if isinstance(plan, Exception):
            raise plan
        if isinstance(plan, tuple):
            status_code, text = plan
            return httpx.Response(status_code, text=text, request=httpx.Request("GET", url))
        raise AssertionError


def _reset_plans(*plans: object) -> None:
    _FakeClient.plans = list(plans)
    _FakeClient.seen_urls = []


def test_exception_messages() -> None:
    assert "Unable to download" in str(NetworkError("https://unpkg.com/x"))
    assert "Boom" in str(NetworkError("https://unpkg.com/x", cause="Boom"))
    assert "timed out" in str(RequestTimeoutError("https://unpkg.com/x"))
    assert "HTTP 503" in str(HttpStatusError(503, "https://unpkg.com/x"))
    assert "invalid compatibility data" in str(ContentError("https://unpkg.com/x"))
    assert "Target path not found" in str(ScanRootError("/nope"))
    assert "invalid JSON" in str(ReportError("report.json", cause="invalid JSON"))
    assert "Invalid allowlist" in str(AllowlistError("baseline-allow.json"))
    assert "MAX_NONE" in str(ConfigError("MAX_NONE", "x"))


def test_fetch_text_success(monkeypatch: pytest.MonkeyPatch) -> None:
    _reset_plans((200, '{"features": {}}'))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    assert http.fetch_text("https://unpkg.com/web-features/data.json") == '{"features": {}}'


def test_fetch_text_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    _reset_plans(httpx.TimeoutException("slow"))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with pytest.raises(RequestTimeoutError):
        http.fetch_text("https://unpkg.com/x")


def test_fetch_text_connect_retry_then_success(monkeypatch: pytest.MonkeyPatch) -> None:
    connect_exc = httpx.ConnectError("conn", request=httpx.Request("GET", "https://unpkg.com"))
    _reset_plans(connect_exc, (200, "{}"))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    assert http.fetch_text("https://unpkg.com/x") == "{}"
    assert len(_FakeClient.seen_urls) == 2


def test_fetch_text_connect_retry_then_fail(monkeypatch: pytest.MonkeyPatch) -> None:
    connect_exc = httpx.ConnectError("conn", request=httpx.Request("GET", "https://unpkg.com"))
    _reset_plans(connect_exc, connect_exc)
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with pytest.raises(NetworkError):
        http.fetch_text("https://unpkg.com/x")


def test_fetch_text_request_error(monkeypatch: pytest.MonkeyPatch) -> None:
    req_exc = httpx.RequestError("bad", request=httpx.Request("GET", "https://unpkg.com"))
    _reset_plans(req_exc)
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with pytest.raises(NetworkError):
        http.fetch_text("https://unpkg.com/x")


def test_fetch_text_non_200(monkeypatch: pytest.MonkeyPatch) -> None:
    _reset_plans((404, "missing"))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with pytest.raises(HttpStatusError):
        http.fetch_text("https://unpkg.com/x")


@pytest.mark.parametrize("body", ["   ", "not json", "[1, 2]"])
def test_load_dataset_rejects_bad_bodies(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, body: str
) -> None:
    _reset_plans((200, body))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with pytest.raises(ContentError):
        http.load_dataset("web-features", "https://unpkg.com/x", tmp_path)

    assert not (tmp_path / "web-features.json").exists()


def test_shared_client_is_reused(monkeypatch: pytest.MonkeyPatch) -> None:
    _reset_plans((200, "{}"), (200, "{}"))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)

    with http.use_shared_client() as client:
        assert isinstance(client, _FakeClient)
        http.fetch_text("https://unpkg.com/a")
        http.fetch_text("https://unpkg.com/b")

    assert _FakeClient.seen_urls == ["https://unpkg.com/a", "https://unpkg.com/b"]


def test_load_dataset_downloads_once_then_uses_cache(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _reset_plans((200, json.dumps({"css": {}})))
    monkeypatch.setattr(http.httpx, "Client", _FakeClient)
    cache = tmp_path / "cache"

    first = http.load_dataset("browser-compat-data", "https://unpkg.com/bcd.json", cache)
    second = http.load_dataset("browser-compat-data", "https://unpkg.com/bcd.json", cache)

    assert first == second == {"css": {}}
    assert (cache / "browser-compat-data.json").is_file()
    assert _FakeClient.seen_urls == ["https://unpkg.com/bcd.json"]


def test_load_dataset_rejects_corrupt_cache(tmp_path: Path) -> None:
    (tmp_path / "web-features.json").write_text("oops", encoding="utf-8")

    with pytest.raises(ContentError):
        http.load_dataset("web-features", "https://unpkg.com/wf.json", tmp_path)
