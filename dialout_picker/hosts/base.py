"""Interfaces shared by host dial-out implementations."""
from __future__ import annotations

from typing import Any, Protocol

from ..models import DialRequest


class DialRejectedError(RuntimeError):
    """Raised when the host refuses a dial-out request."""


class DialOutHost(Protocol):
    """Protocol describing the host capability that places dial-outs."""

    name: str

    def dial_out(self, request: DialRequest) -> Any:  # pragma: no cover - runtime protocol
        """Ask the host to dial ``request.destination`` into the conference."""
