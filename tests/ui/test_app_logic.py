from __future__ import annotations

import pytest

from dialout_picker.catalog import TargetCatalog
from dialout_picker.dispatch import BatchDispatcher
from dialout_picker.hosts import EchoDialer
from dialout_picker.models import (
    CallTarget,
    DialOverrides,
    DispatchOutcome,
    DispatchTally,
    OutcomeStatus,
    Protocol,
    Role,
)
from dialout_picker.pacing import DelayPolicy
from dialout_picker.ui.state import (
    PickerState,
    attempt_text,
    count_hint,
    dial_single,
    format_outcome,
    format_summary,
    overrides_from_form,
    progress_text,
    project_view,
    run_dial_job,
    toast_text,
)

CATALOG = TargetCatalog(
    [
        CallTarget("Boardroom", "sip:boardroom@example.com"),
        CallTarget("Security desk", "sip:security@example.com"),
        CallTarget("Legacy codec", "h323:10.0.0.50"),
    ]
)


def make_dispatcher(host=None) -> BatchDispatcher:
    return BatchDispatcher(host or EchoDialer(), delay_policy=DelayPolicy(delay_seconds=0))


@pytest.mark.parametrize("matches, expected", [(0, "0 matches"), (1, "1 match"), (3, "3 matches")])
def test_count_hint(matches: int, expected: str) -> None:
    assert count_hint(matches) == expected


def test_selection_survives_filtering() -> None:
    state = PickerState()
    state.toggle("sip:security@example.com")
    state.query = "board"

    view = project_view(state, CATALOG)

    assert [row.target.label for row in view.rows] == ["Boardroom"]
    assert not view.rows[0].checked
    assert view.count_hint == "1 match"
    assert view.selected_hint == "1 selected"
    assert view.dial_label == "Dial (1)"
    assert view.dial_enabled


def test_toggle_and_select_all_keep_order_without_duplicates() -> None:
    state = PickerState()
    state.toggle("h323:10.0.0.50", True)
    state.select_all(CATALOG.search("sip:"))
    state.toggle("h323:10.0.0.50", True)

    assert state.selected == ["h323:10.0.0.50", "sip:boardroom@example.com", "sip:security@example.com"]

    state.toggle("sip:boardroom@example.com")
    assert not state.is_selected("sip:boardroom@example.com")

    state.clear()
    view = project_view(state, CATALOG)
    assert view.dial_label == "Dial"
    assert not view.dial_enabled


def test_busy_state_disables_controls() -> None:
    state = PickerState(selected=["sip:boardroom@example.com"], busy=True)

    view = project_view(state, CATALOG)

    assert not view.dial_enabled
    assert not view.controls_enabled


def test_overrides_from_form() -> None:
    overrides = overrides_from_form("host", "H323", "  Visitor ")

    assert overrides == DialOverrides(role=Role.HOST, protocol=Protocol.H323, display_name="Visitor")
    assert overrides_from_form("", "", "   ") == DialOverrides(protocol=Protocol.AUTO)


def test_outcome_texts() -> None:
    ok = DispatchOutcome("sip:boardroom@example.com", "Boardroom", OutcomeStatus.OK, "Dial requested")
    failed = DispatchOutcome("h323:10.0.0.50", "Legacy codec", OutcomeStatus.FAIL, "Busy here")
    tally = DispatchTally(ok=1, fail=1)

    assert format_outcome(ok) == "[OK] Boardroom - Dial requested"
    assert progress_text(failed, 2, 3) == "Failed 2/3: Legacy codec"
    assert attempt_text("Legacy codec", 2, 3) == "Dialing 2/3: Legacy codec"
    assert toast_text(ok) == "Dial requested: Boardroom"
    assert toast_text(failed) == "Dial-out to Legacy codec failed: Busy here"
    assert format_summary(tally) == "Success: 1  Failed: 1  Skipped: 0"
    assert format_summary(tally, done=True) == "Done. Success: 1  Failed: 1  Skipped: 0"


def test_run_dial_job_locks_controls_for_the_batch() -> None:
    events: list = []

    outcomes = run_dial_job(
        make_dispatcher(),
        ["sip:boardroom@example.com", "sip:removed@example.com"],
        CATALOG,
        DialOverrides(),
        set_controls_enabled=lambda enabled: events.append(("controls", enabled)),
        on_attempt=lambda destination, label, index, total: events.append(("attempt", index, total)),
        on_outcome=lambda outcome, tally: events.append((outcome.status, tally.total)),
    )

    assert [outcome.status for outcome in outcomes] == [OutcomeStatus.OK, OutcomeStatus.SKIP]
    assert events == [
        ("controls", False),
        ("attempt", 1, 2),
        (OutcomeStatus.OK, 1),
        (OutcomeStatus.SKIP, 2),
        ("controls", True),
    ]


def test_run_dial_job_reenables_controls_on_error() -> None:
    controls: list = []

    def explode(outcome, tally) -> None:
        raise RuntimeError("window closed")

    with pytest.raises(RuntimeError):
        run_dial_job(
            make_dispatcher(),
            ["sip:boardroom@example.com"],
            CATALOG,
            DialOverrides(),
            set_controls_enabled=controls.append,
            on_outcome=explode,
        )

    assert controls == [False, True]


def test_run_dial_job_without_selection_does_nothing() -> None:
    controls: list = []

    assert run_dial_job(make_dispatcher(), [], CATALOG, DialOverrides(), set_controls_enabled=controls.append) == []
    assert controls == []


def test_dial_single_notifies_once() -> None:
    notifications: list = []
    host = EchoDialer(fail_destinations=["h323:10.0.0.50"])

    outcome = dial_single(
        make_dispatcher(host),
        "h323:10.0.0.50",
        CATALOG,
        DialOverrides(),
        set_controls_enabled=lambda enabled: None,
        notify=lambda text, ok: notifications.append((text, ok)),
    )

    assert outcome.status is OutcomeStatus.FAIL
    assert notifications == [
        ("Dial-out to Legacy codec failed: Destination h323:10.0.0.50 rejected by echo dialer", False)
    ]
