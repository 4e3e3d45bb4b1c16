"""Fetchers that retrieve the raw call target resource."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import requests

LOGGER = logging.getLogger(__name__)

DEFAULT_SOURCE = str(Path(__file__).resolve().parent / "data" / "dial_targets.csv")

# Every fetch must hit the origin; the list is edited out of band.
_NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache",
    "Pragma": "no-cache",
}


class ResourceUnavailableError(RuntimeError):
    """Raised when the target resource cannot supply any usable targets."""


@dataclass(slots=True)
class FetchResult:
    """Raw resource text together with a success indicator."""

    ok: bool
    text: str = ""
    detail: str = ""


class ResourceFetcher(Protocol):
    """Interface for anything able to retrieve the tabular resource."""

    def fetch(self, source: str) -> FetchResult:  # pragma: no cover - runtime protocol
        """Return the resource text for ``source``."""


class FileResourceFetcher:
    """Read the resource from the local filesystem."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self._base_dir = Path(base_dir) if base_dir else None

    def fetch(self, source: str) -> FetchResult:
        path = Path(source)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        if not path.is_file():
            return FetchResult(ok=False, detail=f"File '{path}' was not found")
        return FetchResult(ok=True, text=path.read_text(encoding="utf-8"))


class HttpResourceFetcher:
    """Download the resource over HTTP(S), bypassing intermediate caches."""

    def __init__(self, *, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, source: str) -> FetchResult:
        LOGGER.debug("Fetching call targets from %s", source)
        response = self._session.get(source, headers=_NO_STORE_HEADERS, timeout=self._timeout)
        if not response.ok:
            return FetchResult(ok=False, detail=f"HTTP {response.status_code}")
        return FetchResult(ok=True, text=response.content.decode("utf-8", errors="replace"))


def is_url(source: str) -> bool:
    return source.strip().lower().startswith(("http://", "https://"))


def build_fetcher(source: str, *, timeout: float = 10.0) -> ResourceFetcher:
    """Pick a fetcher appropriate for ``source``."""

    if is_url(source):
        return HttpResourceFetcher(timeout=timeout)
    return FileResourceFetcher()


__all__ = [
    "DEFAULT_SOURCE",
    "FetchResult",
    "FileResourceFetcher",
    "HttpResourceFetcher",
    "ResourceFetcher",
    "ResourceUnavailableError",
    "build_fetcher",
    "is_url",
]
