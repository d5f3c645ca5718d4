"""Checklist export as an Excel workbook.

One "Checklist" sheet with the same fourteen columns as the CSV export and
a "Summary" sheet of headline counts. Numbers stay numeric in the sheet.
"""

import io
from collections.abc import Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from dikelab.export.csv_export import CHECKLIST_CSV_HEADERS
from dikelab.models.checklist import ChecklistItem


class ChecklistExcelExporter:
    """Generate a checklist workbook."""

    def export(self, items: Sequence[ChecklistItem]) -> bytes:
        """Generate workbook bytes for ``items``."""
        wb = Workbook()

        # Remove default sheet
        wb.remove(wb.active)

        self._write_checklist(wb, items)
        self._write_summary(wb, items)

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    def _write_checklist(self, wb: Workbook, items: Sequence[ChecklistItem]) -> None:
        ws = wb.create_sheet("Checklist")
        for col, h in enumerate(CHECKLIST_CSV_HEADERS, 1):
            ws.cell(row=1, column=col, value=h).font = Font(bold=True)
        ws.freeze_panes = "A2"

        for row_idx, item in enumerate(items, 2):
            values = [
                *item.factor_tuple(),
                "Yes" if item.selected else "No",
                "Yes" if item.imported else "No",
                item.value,
                item.import_source or "",
                item.import_date.isoformat() if item.import_date else "",
                item.notes,
            ]
            for col, value in enumerate(values, 1):
                ws.cell(row=row_idx, column=col, value=value)

    def _write_summary(self, wb: Workbook, items: Sequence[ChecklistItem]) -> None:
        ws = wb.create_sheet("Summary")
        summary = [
            ("Total Combinations", len(items)),
            ("Selected", sum(1 for i in items if i.selected)),
            ("Imported", sum(1 for i in items if i.imported)),
            ("With Value", sum(1 for i in items if i.value is not None)),
        ]
        for row_idx, (label, value) in enumerate(summary, 1):
            ws.cell(row=row_idx, column=1, value=label)
            ws.cell(row=row_idx, column=2, value=value)
