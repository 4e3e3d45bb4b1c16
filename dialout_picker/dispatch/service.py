"""Batch dispatcher that dials selected targets one after another."""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from ..catalog import TargetCatalog
from ..hosts.base import DialOutHost
from ..models import DialOverrides, DispatchOutcome, DispatchTally, OutcomeStatus
from ..pacing import DEFAULT_DIAL_TIMEOUT_SECONDS, DelayPolicy, call_with_timeout
from ..resolution import resolve_dial_request

LOGGER = logging.getLogger(__name__)

MISSING_TARGET_MESSAGE = "Missing target definition"
DIAL_REQUESTED_MESSAGE = "Dial requested"

OutcomeCallback = Callable[[DispatchOutcome, DispatchTally], None]
AttemptCallback = Callable[[str, str, int, int], None]


class BatchInProgressError(RuntimeError):
    """Raised when a batch is started while another one is still running."""


class DispatchBatch:
    """A single pass over a list of destinations, one dial per ``next()``.

    The batch pauses between consecutive destinations according to the
    dispatcher's delay policy and marks itself done once the list is
    exhausted. There is no way to abort a batch part way through.
    ``on_attempt`` hears about each resolved destination just before it is
    dialled, so callers can show which call is pending.
    """

    def __init__(
        self,
        dispatcher: "BatchDispatcher",
        destinations: Iterable[str],
        catalog: TargetCatalog,
        overrides: DialOverrides,
        on_attempt: Optional[AttemptCallback] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self.on_attempt = on_attempt
        self.destinations: List[str] = list(destinations)
        self.catalog = catalog
        self.overrides = overrides
        self.outcomes: List[DispatchOutcome] = []
        self.tally = DispatchTally()
        self.position = 0
        self.done = False

    def __iter__(self) -> "DispatchBatch":
        return self

    def __next__(self) -> DispatchOutcome:
        if self.position >= len(self.destinations):
            self._finish()
            raise StopIteration
        if self.position > 0:
            self._dispatcher.delay_policy.pause()

        destination = self.destinations[self.position]
        self.position += 1
        outcome = self._dispatcher.dispatch_one(
            destination, self.catalog, self.overrides, on_attempt=self._announce_attempt
        )
        self.outcomes.append(outcome)
        self.tally.record(outcome.status)
        LOGGER.debug("Batch progress %s/%s: %s", self.position, self.total, self.tally.summary())
        return outcome

    def _announce_attempt(self, destination: str, label: str) -> None:
        if self.on_attempt:
            self.on_attempt(destination, label, self.position, self.total)

    @property
    def total(self) -> int:
        return len(self.destinations)

    @property
    def remaining(self) -> int:
        return self.total - self.position

    def summary(self) -> str:
        prefix = "Done. " if self.done else ""
        return f"{prefix}{self.tally.summary()}"

    def _finish(self) -> None:
        if self.done:
            return
        self.done = True
        self._dispatcher._release(self)
        LOGGER.info("Dispatch batch finished. %s", self.tally.summary())


class BatchDispatcher:
    """Dials targets through a host, recording one outcome per destination."""

    def __init__(
        self,
        host: DialOutHost,
        *,
        dial_timeout: float = DEFAULT_DIAL_TIMEOUT_SECONDS,
        delay_policy: Optional[DelayPolicy] = None,
    ) -> None:
        self._host = host
        self.dial_timeout = dial_timeout
        self.delay_policy = delay_policy or DelayPolicy()
        self._active: Optional[DispatchBatch] = None

    @property
    def host(self) -> DialOutHost:
        return self._host

    @property
    def busy(self) -> bool:
        return self._active is not None

    def start_batch(
        self,
        destinations: Iterable[str],
        catalog: TargetCatalog,
        overrides: Optional[DialOverrides] = None,
        *,
        on_attempt: Optional[AttemptCallback] = None,
    ) -> DispatchBatch:
        if self._active is not None:
            raise BatchInProgressError("A dispatch batch is already in progress")
        batch = DispatchBatch(self, destinations, catalog, overrides or DialOverrides(), on_attempt)
        self._active = batch
        LOGGER.info("Starting dispatch batch of %s destinations", batch.total)
        return batch

    def dispatch_all(
        self,
        destinations: Iterable[str],
        catalog: TargetCatalog,
        overrides: Optional[DialOverrides] = None,
        *,
        on_attempt: Optional[AttemptCallback] = None,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> List[DispatchOutcome]:
        """Dial every destination in order and return the collected outcomes."""

        batch = self.start_batch(destinations, catalog, overrides, on_attempt=on_attempt)
        try:
            for outcome in batch:
                if on_outcome:
                    on_outcome(outcome, batch.tally)
        finally:
            self._release(batch)
        return batch.outcomes

    def dispatch_one(
        self,
        destination: str,
        catalog: TargetCatalog,
        overrides: DialOverrides,
        *,
        on_attempt: Optional[Callable[[str, str], None]] = None,
    ) -> DispatchOutcome:
        target = catalog.by_destination(destination)
        if target is None:
            LOGGER.info("Skipping %s: no target definition", destination)
            return DispatchOutcome(destination, destination, OutcomeStatus.SKIP, MISSING_TARGET_MESSAGE)

        label = target.label or destination
        request = resolve_dial_request(target, overrides)
        if on_attempt:
            on_attempt(destination, label)
        try:
            LOGGER.debug("Dialing %s with %s", label, request.as_payload())
            call_with_timeout(
                self._host.dial_out,
                request,
                timeout=self.dial_timeout,
                label=f"Dial-out to {label}",
            )
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            LOGGER.warning("Dial-out to %s failed: %s", label, message)
            return DispatchOutcome(destination, label, OutcomeStatus.FAIL, message)

        LOGGER.info("Dial-out requested for %s (%s)", label, destination)
        return DispatchOutcome(destination, label, OutcomeStatus.OK, DIAL_REQUESTED_MESSAGE)

    def _release(self, batch: DispatchBatch) -> None:
        if self._active is batch:
            self._active = None
