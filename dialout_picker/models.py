"""Unified data models for the dial-out catalog, dispatcher, CLI and GUI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


# --- Enumerations ---

class Protocol(str, Enum):
    """Signalling protocol requested for a dial-out."""

    AUTO = "auto"
    SIP = "sip"
    H323 = "h323"
    MSSIP = "mssip"
    RTMP = "rtmp"

    @classmethod
    def normalize(cls, value: Union["Protocol", str, None]) -> "Protocol":
        """Map free text onto a protocol, defaulting to :attr:`AUTO`."""

        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.AUTO


class Role(str, Enum):
    """Conference role a dialled participant joins with."""

    HOST = "HOST"
    GUEST = "GUEST"

    @classmethod
    def normalize(cls, value: Union["Role", str, None]) -> "Role":
        """Only an exact (case-insensitive) ``host`` yields :attr:`HOST`."""

        if isinstance(value, cls):
            return value
        return cls.HOST if (value or "").strip().lower() == "host" else cls.GUEST


class OutcomeStatus(str, Enum):
    """Per-destination classification of a dispatch attempt."""

    OK = "OK"
    FAIL = "FAIL"
    SKIP = "SKIP"


# --- Catalog Models ---

@dataclass(frozen=True, slots=True)
class CallTarget:
    """Named, reusable dial destination with its default role and protocol.

    ``role`` may be ``None`` for targets built in code that carry no role of
    their own; targets produced by the normaliser always have one.
    """

    label: str
    destination: str
    protocol: Protocol = Protocol.AUTO
    role: Optional[Role] = Role.GUEST

    def __post_init__(self) -> None:
        object.__setattr__(self, "protocol", Protocol.normalize(self.protocol))
        if self.role is not None:
            object.__setattr__(self, "role", Role.normalize(self.role))

    def as_record(self) -> Dict[str, str]:
        """Return the target as a flat row using the source column names."""

        return {
            "label": self.label,
            "destination": self.destination,
            "protocol": self.protocol.value,
            "role": self.role.value if self.role else "",
        }


# --- Dispatch Models ---

@dataclass(slots=True)
class DialOverrides:
    """Values chosen by the user that may override per-target defaults."""

    role: Optional[Role] = None
    protocol: Optional[Protocol] = None
    display_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.role is not None:
            self.role = Role.normalize(self.role)
        if self.protocol is not None:
            self.protocol = Protocol.normalize(self.protocol)


@dataclass(frozen=True, slots=True)
class DialRequest:
    """Fully resolved arguments for a single host dial-out call."""

    destination: str
    role: Role
    protocol: Protocol
    remote_display_name: str
    text: str

    def as_payload(self) -> Dict[str, Any]:
        """Return the body handed to the host dial-out capability."""

        return {
            "destination": self.destination,
            "role": self.role.value,
            "protocol": self.protocol.value,
            "remote_display_name": self.remote_display_name,
            "text": self.text,
        }


@dataclass(slots=True)
class DispatchOutcome:
    """Result of one attempted destination within a dispatch batch."""

    destination: str
    label: str
    status: OutcomeStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK

    def as_row(self) -> Dict[str, str]:
        """Return a serialisable representation of the outcome."""
        return {
            "destination": self.destination,
            "label": self.label,
            "status": self.status.value,
            "message": self.message,
        }


@dataclass
class DispatchTally:
    """Running success/failure/skip counts for a dispatch batch."""

    ok: int = 0
    fail: int = 0
    skip: int = 0

    def record(self, status: OutcomeStatus) -> None:
        if status is OutcomeStatus.OK:
            self.ok += 1
        elif status is OutcomeStatus.FAIL:
            self.fail += 1
        else:
            self.skip += 1

    @property
    def total(self) -> int:
        return self.ok + self.fail + self.skip

    def summary(self) -> str:
        return f"Success: {self.ok}  Failed: {self.fail}  Skipped: {self.skip}"
