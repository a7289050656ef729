"""
Spreadsheet (.xlsx) export of the displayed table.

Rows are written in display order and restricted to the view's headers,
so the file matches what the user sees.
"""

from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font

from estagios.model import TableView
from estagios.render import cell_text

SHEET_TITLE = "Resultados"


def export_rows_to_xlsx(view: TableView, out_path: str | Path) -> int:
    """
    Export the view's rows to an .xlsx file. Returns number of exported rows.
    """
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(list(view.headers))
    for cell in ws[1]:
        cell.font = Font(bold=True)

    count = 0
    for record in view.rows:
        row = []
        for h in view.headers:
            value = record.get(h)
            # keep numbers numeric so the sheet can do math on grades
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                row.append(value)
            else:
                row.append(cell_text(value))
        ws.append(row)
        count += 1

    ws.freeze_panes = "A2"
    wb.save(out)
    return count
