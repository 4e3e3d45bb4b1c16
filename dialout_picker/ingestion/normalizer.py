"""Turn parsed rows into a de-duplicated list of :class:`CallTarget` objects."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import CallTarget, Protocol, Role
from .parser import parse_table

HEADER_COLUMNS = ("label", "destination", "protocol", "role")


def normalize_protocol(value: Optional[str]) -> Protocol:
    return Protocol.normalize(value)


def normalize_role(value: Optional[str]) -> Role:
    return Role.normalize(value)


def normalize_rows(rows: Iterable[Sequence[str]]) -> List[CallTarget]:
    """Build call targets from parsed rows, with or without a header row.

    The first row counts as a header when it names at least one known column;
    named columns may then appear in any order. Without a header the columns
    are positional: label, destination, protocol, role.
    """

    populated = [list(row) for row in rows if not _row_is_empty(row)]
    if not populated:
        return []

    header = [(cell or "").strip().lower() for cell in populated[0]]
    has_header = any(name in header for name in HEADER_COLUMNS)
    positions = _resolve_columns(header if has_header else [])
    data_rows = populated[1:] if has_header else populated

    targets: List[CallTarget] = []
    seen: set[str] = set()
    for cells in data_rows:
        cleaned = [(cell or "").strip() for cell in cells]
        label = _cell(cleaned, positions["label"])
        destination = _cell(cleaned, positions["destination"])
        if not label or not destination:
            continue
        if destination in seen:
            continue
        seen.add(destination)
        targets.append(
            CallTarget(
                label=label,
                destination=destination,
                protocol=normalize_protocol(_cell(cleaned, positions["protocol"])),
                role=normalize_role(_cell(cleaned, positions["role"])),
            )
        )
    return targets


def targets_from_text(text: str) -> List[CallTarget]:
    """Parse and normalise a raw tabular resource in one step."""

    return normalize_rows(parse_table(text))


def targets_from_records(records: Iterable[Mapping[str, Any]]) -> List[CallTarget]:
    """Normalise mapping records (e.g. from configuration) with the row rules."""

    rows: List[List[str]] = [list(HEADER_COLUMNS)]
    for record in records:
        rows.append([_text(record.get(column)) for column in HEADER_COLUMNS])
    return normalize_rows(rows)


def _resolve_columns(header: Sequence[str]) -> Dict[str, int]:
    # Columns missing from a header keep their positional index.
    return {
        name: header.index(name) if name in header else position
        for position, name in enumerate(HEADER_COLUMNS)
    }


def _row_is_empty(row: Sequence[str]) -> bool:
    return all(not (cell or "").strip() for cell in row)


def _cell(cells: Sequence[str], index: int) -> str:
    return cells[index] if 0 <= index < len(cells) else ""


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (Protocol, Role)):
        return value.value
    return str(value)


__all__ = [
    "HEADER_COLUMNS",
    "normalize_protocol",
    "normalize_role",
    "normalize_rows",
    "targets_from_records",
    "targets_from_text",
]
