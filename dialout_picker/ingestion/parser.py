"""Tolerant parser for comma separated target lists."""
from __future__ import annotations

from typing import List

_BOM = "\ufeff"
_QUOTE = '"'
_DELIMITER = ","


def strip_bom(text: str) -> str:
    """Remove a leading UTF-8 byte-order mark, if present."""

    return text[1:] if text.startswith(_BOM) else text


def parse_table(text: str) -> List[List[str]]:
    """Split delimited ``text`` into rows of raw string fields.

    Fields may be double-quoted to carry commas or newlines, and a doubled
    quote inside a quoted section is a literal quote. Carriage returns are
    dropped wherever they appear, so both ``\\n`` and ``\\r\\n`` endings work.
    Malformed quoting never raises: an unterminated quote swallows the rest of
    the input into the current field.
    """

    source = strip_bom(text or "")
    rows: List[List[str]] = []
    row: List[str] = []
    field: List[str] = []
    in_quotes = False
    index = 0
    length = len(source)

    while index < length:
        char = source[index]
        index += 1

        if char == "\r":
            continue

        if in_quotes:
            if char == _QUOTE:
                if index < length and source[index] == _QUOTE:
                    field.append(_QUOTE)
                    index += 1
                else:
                    in_quotes = False
            else:
                field.append(char)
            continue

        if char == _QUOTE:
            in_quotes = True
        elif char == _DELIMITER:
            row.append("".join(field))
            field = []
        elif char == "\n":
            row.append("".join(field))
            rows.append(row)
            row = []
            field = []
        else:
            field.append(char)

    if field or row:
        row.append("".join(field))
        rows.append(row)

    return rows


__all__ = ["parse_table", "strip_bom"]
