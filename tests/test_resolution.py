import pytest

from dialout_picker.models import CallTarget, DialOverrides, Protocol, Role
from dialout_picker.resolution import (
    DEFAULT_DISPLAY_NAME,
    destination_has_scheme,
    resolve_dial_request,
)


@pytest.mark.parametrize(
    "destination",
    [
        "sip:foo@bar",
        "SIP:Foo@Bar",
        "  h323:10.0.0.50",
        "rtmp://host/live/a",
        "rtmps://host/live/a",
        "tel:+15551234",
        "x-custom.scheme+v2:anything",
    ],
)
def test_destinations_with_scheme(destination: str) -> None:
    assert destination_has_scheme(destination)


@pytest.mark.parametrize(
    "destination",
    ["alice@example.com", "10.0.0.50", "1234", "9sip:foo", ":foo", "", None],
)
def test_destinations_without_scheme(destination) -> None:
    assert not destination_has_scheme(destination)


@pytest.mark.parametrize("target_protocol", list(Protocol))
@pytest.mark.parametrize("override_protocol", [None, *Protocol])
def test_scheme_always_forces_auto(target_protocol: Protocol, override_protocol) -> None:
    target = CallTarget("Desk", "sip:foo@bar", target_protocol)

    request = resolve_dial_request(target, DialOverrides(protocol=override_protocol))

    assert request.protocol is Protocol.AUTO


def test_rtmp_destination_ignores_sip_override() -> None:
    target = CallTarget("Stream", "rtmp://host/live/a")

    request = resolve_dial_request(target, DialOverrides(protocol="sip"))

    assert request.protocol is Protocol.AUTO


def test_target_protocol_beats_override_for_bare_destination() -> None:
    target = CallTarget("Codec", "10.0.0.50", Protocol.H323)

    request = resolve_dial_request(target, DialOverrides(protocol=Protocol.SIP))

    assert request.protocol is Protocol.H323


def test_override_protocol_applies_when_target_is_auto() -> None:
    target = CallTarget("Alice", "alice@example.com")

    assert resolve_dial_request(target, DialOverrides(protocol="mssip")).protocol is Protocol.MSSIP
    assert resolve_dial_request(target, DialOverrides(protocol="auto")).protocol is Protocol.AUTO
    assert resolve_dial_request(target).protocol is Protocol.AUTO


def test_target_role_beats_override_role() -> None:
    target = CallTarget("Chair", "sip:chair@example.com", role=Role.HOST)

    request = resolve_dial_request(target, DialOverrides(role="guest"))

    assert request.role is Role.HOST


def test_override_role_applies_to_target_without_role() -> None:
    target = CallTarget("Adhoc", "sip:adhoc@example.com", role=None)

    assert resolve_dial_request(target, DialOverrides(role="host")).role is Role.HOST
    assert resolve_dial_request(target).role is Role.GUEST


def test_display_name_precedence() -> None:
    target = CallTarget("Boardroom", "sip:boardroom@example.com")

    assert resolve_dial_request(target, DialOverrides(display_name="  Visitor ")).remote_display_name == "Visitor"
    assert resolve_dial_request(target, DialOverrides(display_name="   ")).remote_display_name == "Boardroom"
    assert resolve_dial_request(CallTarget("", "sip:x@y")).remote_display_name == DEFAULT_DISPLAY_NAME


def test_request_payload_has_exactly_the_host_fields() -> None:
    target = CallTarget("Desk", "sip:desk@x.com", role="host")

    payload = resolve_dial_request(target).as_payload()

    assert payload == {
        "destination": "sip:desk@x.com",
        "role": "HOST",
        "protocol": "auto",
        "remote_display_name": "Desk",
        "text": "Desk",
    }
