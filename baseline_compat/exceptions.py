"""Exception types for pybaseline-compat."""

from __future__ import annotations


class BaselineCompatError(Exception):
    """Base exception for expected application errors."""


class NetworkError(BaselineCompatError):
    """Raised when a network operation fails."""

    def __init__(self, url: str, *, cause: str | None = None) -> None:
        detail = f"Unable to download compatibility data from {url}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class RequestTimeoutError(BaselineCompatError):
    """Raised when a request times out."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Request timed out for {url}")


class HttpStatusError(BaselineCompatError):
    """Raised when a non-200 HTTP response is returned."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Request failed with HTTP {status_code} for {url}")


class ContentError(BaselineCompatError):
    """Raised when a dataset is empty or not valid JSON."""

    def __init__(self, source: str) -> None:
        super().__init__(f"Received invalid compatibility data from {source}")


class ScanRootError(BaselineCompatError):
    """Raised when the scan root does not exist or is not a directory."""

    def __init__(self, root: str) -> None:
        super().__init__(f"Target path not found: {root}")


class ReportError(BaselineCompatError):
    """Raised when a persisted report is missing or malformed."""

    def __init__(self, path: str, *, cause: str | None = None) -> None:
        detail = f"Unable to read report {path}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class AllowlistError(BaselineCompatError):
    """Raised when an allowlist file exists but cannot be used."""

    def __init__(self, path: str, *, cause: str | None = None) -> None:
        detail = f"Invalid allowlist {path}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class ConfigError(BaselineCompatError):
    """Raised when an environment setting has an unusable value."""

    def __init__(self, name: str, value: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name} must be a non-negative integer, got {value!r}")
