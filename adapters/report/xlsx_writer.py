"""Excel export of the rotation roster."""
from __future__ import annotations

from io import BytesIO
from typing import Any, Dict, Iterable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

HEADER_FONT = Font(bold=True)
CENTER = Alignment(horizontal="center", vertical="center")

COLUMNS = [
    ("Intern", "intern_name", 28),
    ("Batch", "intern_batch", 8),
    ("Unit", "unit_name", 28),
    ("Start", "start_date", 12),
    ("End", "end_date", 12),
    ("Manual", "is_manual_assignment", 9),
]


def write_rotations(rows: Iterable[Dict[str, Any]], *, title: str = "Rotations") -> BytesIO:
    wb = Workbook()
    ws = wb.active
    ws.title = title

    for col_idx, (label, _, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=label)
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        ws.column_dimensions[cell.column_letter].width = width

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, (_, key, _) in enumerate(COLUMNS, start=1):
            value = row.get(key)
            if key == "is_manual_assignment":
                value = "yes" if value else ""
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            if key != "intern_name" and key != "unit_name":
                cell.alignment = CENTER

    ws.freeze_panes = "A2"
    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream
