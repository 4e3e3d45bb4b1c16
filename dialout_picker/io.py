"""Output helpers for dispatch outcome reports."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from openpyxl import Workbook

from .models import DispatchOutcome

_CSV_SUFFIXES = {".csv"}
_EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xltx", ".xltm"}

REPORT_FIELDS = ["destination", "label", "status", "message"]


def write_outcomes(path: str | Path, outcomes: Iterable[DispatchOutcome]) -> Path:
    file_path = Path(path)
    suffix = file_path.suffix.lower()
    if suffix in _CSV_SUFFIXES:
        _write_outcomes_to_csv(file_path, outcomes)
    elif suffix in _EXCEL_SUFFIXES:
        _write_outcomes_to_excel(file_path, outcomes)
    else:
        raise ValueError(f"Unsupported report format '{file_path.suffix}'. Use CSV or Excel spreadsheet")
    return file_path


def _write_outcomes_to_csv(path: Path, outcomes: Iterable[DispatchOutcome]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for outcome in outcomes:
            writer.writerow(outcome.as_row())


def _write_outcomes_to_excel(path: Path, outcomes: Iterable[DispatchOutcome]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Dispatch outcomes"
    sheet.append(REPORT_FIELDS)
    for outcome in outcomes:
        row = outcome.as_row()
        sheet.append([row[field] for field in REPORT_FIELDS])
    workbook.save(path)
