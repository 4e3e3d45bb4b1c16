"""Utilities for parsing and normalising tabular call target lists."""
from __future__ import annotations

from .normalizer import (
    HEADER_COLUMNS,
    normalize_protocol,
    normalize_role,
    normalize_rows,
    targets_from_records,
    targets_from_text,
)
from .parser import parse_table, strip_bom

__all__ = [
    "HEADER_COLUMNS",
    "normalize_protocol",
    "normalize_role",
    "normalize_rows",
    "parse_table",
    "strip_bom",
    "targets_from_records",
    "targets_from_text",
]
