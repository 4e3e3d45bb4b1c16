"""Presentation state for the picker and its projection onto view data."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from ..catalog import TargetCatalog
from ..dispatch import BatchDispatcher
from ..dispatch.service import AttemptCallback, OutcomeCallback
from ..models import (
    CallTarget,
    DialOverrides,
    DispatchOutcome,
    DispatchTally,
    OutcomeStatus,
    Protocol,
    Role,
)

ControlsCallback = Callable[[bool], None]
NotifyCallback = Callable[[str, bool], None]

_PROGRESS_VERBS = {
    OutcomeStatus.OK: "Dialed",
    OutcomeStatus.FAIL: "Failed",
    OutcomeStatus.SKIP: "Skipped",
}


@dataclass
class PickerState:
    """Mutable UI state: search text, ordered selection and busy flag."""

    query: str = ""
    selected: List[str] = field(default_factory=list)
    busy: bool = False

    def is_selected(self, destination: str) -> bool:
        return destination in self.selected

    def toggle(self, destination: str, checked: Optional[bool] = None) -> None:
        if checked is None:
            checked = not self.is_selected(destination)
        if checked and not self.is_selected(destination):
            self.selected.append(destination)
        elif not checked and self.is_selected(destination):
            self.selected.remove(destination)

    def select_all(self, targets: Iterable[CallTarget]) -> None:
        for target in targets:
            self.toggle(target.destination, True)

    def clear(self) -> None:
        self.selected.clear()


@dataclass(frozen=True)
class TargetRow:
    target: CallTarget
    checked: bool


@dataclass(frozen=True)
class PickerView:
    """Everything the window needs to render the current state."""

    rows: Tuple[TargetRow, ...]
    count_hint: str
    selected_hint: str
    dial_label: str
    dial_enabled: bool
    controls_enabled: bool


def count_hint(matches: int) -> str:
    return f"{matches} match{'' if matches == 1 else 'es'}"


def project_view(state: PickerState, catalog: TargetCatalog) -> PickerView:
    """Project ``state`` over ``catalog`` without touching any widget."""

    visible = catalog.search(state.query)
    selected = len(state.selected)
    return PickerView(
        rows=tuple(TargetRow(target, state.is_selected(target.destination)) for target in visible),
        count_hint=count_hint(len(visible)),
        selected_hint=f"{selected} selected",
        dial_label=f"Dial ({selected})" if selected else "Dial",
        dial_enabled=selected > 0 and not state.busy,
        controls_enabled=not state.busy,
    )


def overrides_from_form(join_as: Optional[str], protocol: Optional[str], display_name: Optional[str]) -> DialOverrides:
    """Translate raw form values into :class:`DialOverrides`."""

    return DialOverrides(
        role=Role.normalize(join_as) if (join_as or "").strip() else None,
        protocol=Protocol.normalize(protocol),
        display_name=(display_name or "").strip() or None,
    )


def format_outcome(outcome: DispatchOutcome) -> str:
    return f"[{outcome.status.value}] {outcome.label} - {outcome.message}"


def attempt_text(label: str, index: int, total: int) -> str:
    return f"Dialing {index}/{total}: {label}"


def progress_text(outcome: DispatchOutcome, index: int, total: int) -> str:
    return f"{_PROGRESS_VERBS[outcome.status]} {index}/{total}: {outcome.label}"


def format_summary(tally: DispatchTally, done: bool = False) -> str:
    return f"Done. {tally.summary()}" if done else tally.summary()


def toast_text(outcome: DispatchOutcome) -> str:
    if outcome.status is OutcomeStatus.OK:
        return f"Dial requested: {outcome.label}"
    if outcome.status is OutcomeStatus.SKIP:
        return f"{outcome.label}: {outcome.message}"
    return f"Dial-out to {outcome.label} failed: {outcome.message}"


def run_dial_job(
    dispatcher: BatchDispatcher,
    destinations: Iterable[str],
    catalog: TargetCatalog,
    overrides: DialOverrides,
    *,
    set_controls_enabled: ControlsCallback,
    on_attempt: Optional[AttemptCallback] = None,
    on_outcome: Optional[OutcomeCallback] = None,
) -> List[DispatchOutcome]:
    """Run a batch with the input controls locked for its whole duration.

    Controls are re-enabled on every exit path, including a failing dispatch.
    """

    pending = list(destinations)
    if not pending:
        return []

    set_controls_enabled(False)
    try:
        return dispatcher.dispatch_all(pending, catalog, overrides, on_attempt=on_attempt, on_outcome=on_outcome)
    finally:
        set_controls_enabled(True)


def dial_single(
    dispatcher: BatchDispatcher,
    destination: str,
    catalog: TargetCatalog,
    overrides: DialOverrides,
    *,
    set_controls_enabled: ControlsCallback,
    notify: NotifyCallback,
) -> DispatchOutcome:
    """Dial one target and report the result as a single notification."""

    outcomes = run_dial_job(
        dispatcher,
        [destination],
        catalog,
        overrides,
        set_controls_enabled=set_controls_enabled,
    )
    outcome = outcomes[0]
    notify(toast_text(outcome), outcome.ok)
    return outcome


__all__ = [
    "PickerState",
    "PickerView",
    "TargetRow",
    "attempt_text",
    "count_hint",
    "dial_single",
    "format_outcome",
    "format_summary",
    "overrides_from_form",
    "progress_text",
    "project_view",
    "run_dial_job",
    "toast_text",
]
