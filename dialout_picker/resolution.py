"""Resolve the final dial-out parameters for a call target."""
from __future__ import annotations

import re
from typing import Optional

from .models import CallTarget, DialOverrides, DialRequest, Protocol, Role

DEFAULT_DISPLAY_NAME = "Dial-out participant"

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.\-]*:")


def destination_has_scheme(destination: Optional[str]) -> bool:
    """Return ``True`` when ``destination`` already names a URI scheme."""

    return bool(_SCHEME_PATTERN.match((destination or "").strip().lower()))


def resolve_role(target: CallTarget, overrides: DialOverrides) -> Role:
    if target.role is not None:
        return target.role
    if overrides.role is not None:
        return overrides.role
    return Role.GUEST


def resolve_protocol(target: CallTarget, overrides: DialOverrides) -> Protocol:
    # An explicit scheme always wins over any requested protocol.
    if destination_has_scheme(target.destination):
        return Protocol.AUTO
    if target.protocol is not Protocol.AUTO:
        return target.protocol
    if overrides.protocol is not None and overrides.protocol is not Protocol.AUTO:
        return overrides.protocol
    return Protocol.AUTO


def resolve_display_name(target: CallTarget, overrides: DialOverrides) -> str:
    override = (overrides.display_name or "").strip()
    return override or target.label or DEFAULT_DISPLAY_NAME


def resolve_dial_request(target: CallTarget, overrides: Optional[DialOverrides] = None) -> DialRequest:
    """Combine ``target`` defaults with user ``overrides`` into a request.

    Precedence is fixed: the target's own role beats the override role, a
    scheme in the destination forces ``auto``, then the target protocol beats
    the override protocol, and a non-blank override display name beats the
    target label.
    """

    overrides = overrides or DialOverrides()
    display_name = resolve_display_name(target, overrides)
    return DialRequest(
        destination=target.destination,
        role=resolve_role(target, overrides),
        protocol=resolve_protocol(target, overrides),
        remote_display_name=display_name,
        text=display_name,
    )


__all__ = [
    "DEFAULT_DISPLAY_NAME",
    "destination_has_scheme",
    "resolve_dial_request",
    "resolve_display_name",
    "resolve_protocol",
    "resolve_role",
]
