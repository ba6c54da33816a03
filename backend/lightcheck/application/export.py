from __future__ import annotations

import io
from collections.abc import Iterable
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from lightcheck.domain.models import ReviewRecord

SHEET_NAME = "Validation Report"
NOT_AVAILABLE = "N/A"

# (header, column width in characters)
REPORT_COLUMNS: tuple[tuple[str, int], ...] = (
    ("Folder Name", 20),
    ("Image Name", 30),
    ("AI Result (On/Off)", 15),
    ("AI Confidence (%)", 15),
    ("AI Explanation", 50),
    ("Human Override", 15),
    ("Final Status", 15),
    ("Validation Status", 15),
    ("Image ID", 35),
)
REPORT_HEADERS = tuple(header for header, _ in REPORT_COLUMNS)


def _on_off(value: bool | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return "ON" if value else "OFF"


def build_row(record: ReviewRecord) -> dict[str, str]:
    judgment = record.judgment
    return {
        "Folder Name": record.folder_name,
        "Image Name": record.name,
        "AI Result (On/Off)": _on_off(judgment.lights_on if judgment else None),
        "AI Confidence (%)": f"{judgment.confidence * 100:.2f}" if judgment else NOT_AVAILABLE,
        "AI Explanation": judgment.explanation if judgment else NOT_AVAILABLE,
        "Human Override": _on_off(record.human_override),
        "Final Status": _on_off(record.provisional_status),
        "Validation Status": record.validation_status,
        "Image ID": record.id,
    }


def build_rows(records: Iterable[ReviewRecord]) -> list[dict[str, str]]:
    return [build_row(record) for record in records]


def build_workbook(records: Iterable[ReviewRecord]) -> Workbook:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME
    sheet.append(list(REPORT_HEADERS))
    for row in build_rows(records):
        sheet.append([row[header] for header in REPORT_HEADERS])
    for idx, (_, width) in enumerate(REPORT_COLUMNS, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = width
    return workbook


def render_report(records: Iterable[ReviewRecord]) -> bytes:
    buffer = io.BytesIO()
    build_workbook(records).save(buffer)
    return buffer.getvalue()


def write_report(records: Iterable[ReviewRecord], path: Path) -> Path:
    """Write the report to ``path``. Filesystem errors propagate to the caller."""
    build_workbook(records).save(path)
    return path
