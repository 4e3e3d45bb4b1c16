"""Top-level package for the conference dial-out picker."""

from . import models  # noqa: F401
from .catalog import FALLBACK_TARGETS, TargetCatalog, load_catalog  # noqa: F401
from .dispatch import BatchDispatcher  # noqa: F401
from .ingestion import normalize_rows, parse_table  # noqa: F401
from .models import (
    CallTarget,
    DialOverrides,
    DialRequest,
    DispatchOutcome,
    DispatchTally,
    OutcomeStatus,
    Protocol,
    Role,
)
from .resolution import resolve_dial_request  # noqa: F401

__all__ = [
    "BatchDispatcher",
    "CallTarget",
    "DialOverrides",
    "DialRequest",
    "DispatchOutcome",
    "DispatchTally",
    "FALLBACK_TARGETS",
    "OutcomeStatus",
    "Protocol",
    "Role",
    "TargetCatalog",
    "load_catalog",
    "normalize_rows",
    "parse_table",
    "resolve_dial_request",
    "dispatch",
    "hosts",
    "ingestion",
    "ui",
]
