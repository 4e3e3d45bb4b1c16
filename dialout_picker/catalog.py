"""Session catalog of call targets with fallback-on-failure loading."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .ingestion import targets_from_text
from .models import CallTarget, Protocol, Role
from .sources import ResourceFetcher, ResourceUnavailableError

LOGGER = logging.getLogger(__name__)

FALLBACK_TARGETS: Tuple[CallTarget, ...] = (
    CallTarget("Boardroom (SIP)", "sip:boardroom@company.com", Protocol.AUTO, Role.GUEST),
    CallTarget("Security desk (SIP)", "sip:security@company.com", Protocol.AUTO, Role.GUEST),
    CallTarget("Legacy codec", "h323:10.0.0.50", Protocol.AUTO, Role.GUEST),
    CallTarget("Recorder", "rtmp://recorder.example.com/live/room1", Protocol.AUTO, Role.GUEST),
)


class TargetCatalog:
    """Ordered, read-only collection of call targets keyed by destination."""

    def __init__(self, targets: Iterable[CallTarget], *, origin: str = "resource") -> None:
        self._targets: Tuple[CallTarget, ...] = tuple(targets)
        self._by_destination: Dict[str, CallTarget] = {}
        for target in self._targets:
            self._by_destination.setdefault(target.destination, target)
        self.origin = origin

    def all(self) -> List[CallTarget]:
        return list(self._targets)

    def by_destination(self, destination: str) -> Optional[CallTarget]:
        return self._by_destination.get(destination)

    def search(self, query: Optional[str]) -> List[CallTarget]:
        """Return targets whose label or destination contains ``query``."""

        needle = (query or "").strip().lower()
        if not needle:
            return self.all()
        return [
            target
            for target in self._targets
            if needle in f"{target.label} {target.destination}".lower()
        ]

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[CallTarget]:
        return iter(self._targets)

    def __contains__(self, destination: object) -> bool:
        return destination in self._by_destination

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"TargetCatalog(origin={self.origin!r}, targets={len(self._targets)})"


def load_catalog(
    fetcher: ResourceFetcher,
    source: str,
    *,
    fallback: Sequence[CallTarget] = FALLBACK_TARGETS,
) -> TargetCatalog:
    """Build the session catalog, substituting ``fallback`` on any failure."""

    try:
        targets = _fetch_targets(fetcher, source)
    except Exception as exc:
        LOGGER.warning("Call target load failed (%s): %s. Using fallback list.", source, exc)
        return TargetCatalog(fallback, origin="fallback")

    LOGGER.info("Loaded %s call targets from %s", len(targets), source)
    return TargetCatalog(targets, origin="resource")


def _fetch_targets(fetcher: ResourceFetcher, source: str) -> List[CallTarget]:
    result = fetcher.fetch(source)
    if not result.ok:
        raise ResourceUnavailableError(result.detail or "resource unavailable")
    targets = targets_from_text(result.text)
    if not targets:
        raise ResourceUnavailableError("resource parsed but no entries found")
    return targets


__all__ = ["FALLBACK_TARGETS", "TargetCatalog", "load_catalog"]
