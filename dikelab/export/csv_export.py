"""Checklist and dataset text exports.

- Checklist CSV: fourteen fixed columns in fixed order, text quoted,
  booleans written as Yes/No. ``parse_checklist_csv`` reads it back.
- Dataset CSV: union of row keys minus bookkeeping, minimal quoting.
- Selected JSON: the selected checklist records, pretty-printed.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from dikelab.models.checklist import ChecklistItem, coerce_optional_number
from dikelab.models.common import FACTOR_FIELDS

logger = logging.getLogger(__name__)

CHECKLIST_CSV_HEADERS: tuple[str, ...] = (
    "Height",
    "Width",
    "Slope Ratio",
    "PGA",
    "H1/(H1+H2)",
    "Groundwater",
    "Relative Density",
    "Inclination",
    "Selected",
    "Imported",
    "Value",
    "Import Source",
    "Import Date",
    "Notes",
)

# Header -> factor record key for the first eight columns.
_FACTOR_HEADERS = dict(zip(CHECKLIST_CSV_HEADERS[:8], FACTOR_FIELDS))

# Keys left out of dataset exports besides underscore-prefixed ones.
_DATASET_EXCLUDED = frozenset({"id", "selected", "analysisColumns"})


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _compact_number(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def format_number(value: float) -> str:
    """Shortest text for a number; integral floats drop the ``.0``."""
    return str(_compact_number(value))


# ---------------------------------------------------------------------------
# Checklist CSV
# ---------------------------------------------------------------------------


def checklist_to_csv(items: Iterable[ChecklistItem]) -> str:
    """Render the checklist as CSV text with the fixed fourteen columns.

    The header row is minimally quoted; data rows quote every text cell and
    leave the value bare. There is no trailing line break.
    """
    output = io.StringIO()
    csv.writer(output, lineterminator="\n").writerow(CHECKLIST_CSV_HEADERS)
    writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for item in items:
        writer.writerow([
            *item.factor_tuple(),
            _yes_no(item.selected),
            _yes_no(item.imported),
            _compact_number(item.value) if item.value is not None else "",
            item.import_source or "",
            item.import_date.isoformat() if item.import_date else "",
            item.notes,
        ])
    return output.getvalue().removesuffix("\n")


def parse_checklist_csv(text: str) -> list[ChecklistItem]:
    """Read a checklist CSV export back into items.

    Ids are reassigned sequentially (``item-0`` ..) because the export does
    not carry them.

    Raises:
        ValueError: If the header does not match the export layout or a
            row cannot be read.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""))
    try:
        header = next(reader)
    except StopIteration as exc:
        msg = "Checklist CSV is empty"
        raise ValueError(msg) from exc
    if tuple(header) != CHECKLIST_CSV_HEADERS:
        msg = "Checklist CSV header does not match the export columns"
        raise ValueError(msg)

    items: list[ChecklistItem] = []
    try:
        for row in reader:
            if not row:
                continue
            cells = dict(zip(CHECKLIST_CSV_HEADERS, row))
            record: dict[str, Any] = {
                key: cells.get(label, "") for label, key in _FACTOR_HEADERS.items()
            }
            record.update(
                id=f"item-{len(items)}",
                selected=cells.get("Selected") == "Yes",
                imported=cells.get("Imported") == "Yes",
                value=coerce_optional_number(cells.get("Value", "")),
                importSource=cells.get("Import Source") or None,
                importDate=(
                    datetime.fromisoformat(cells["Import Date"])
                    if cells.get("Import Date") else None
                ),
                notes=cells.get("Notes", ""),
            )
            items.append(ChecklistItem.model_validate(record))
    except (csv.Error, ValidationError, ValueError) as exc:
        msg = f"Error parsing checklist CSV: {exc}"
        raise ValueError(msg) from exc

    logger.info("Read %d checklist items from CSV", len(items))
    return items


# ---------------------------------------------------------------------------
# Dataset CSV
# ---------------------------------------------------------------------------


def _dataset_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return value if isinstance(value, str) else json.dumps(value)


def dataset_columns(rows: Iterable[dict[str, Any]]) -> list[str]:
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            if not key.startswith("_") and key not in _DATASET_EXCLUDED:
                columns.setdefault(key, None)
    return list(columns)


def dataset_to_csv(rows: Sequence[dict[str, Any]]) -> str:
    """Render analysis rows as CSV; empty when there are no rows."""
    if not rows:
        return ""
    columns = dataset_columns(rows)
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_dataset_cell(row.get(col)) for col in columns])
    return output.getvalue()


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def selected_to_json(items: Iterable[ChecklistItem]) -> str:
    """Pretty-printed JSON array of the selected checklist records."""
    return json.dumps([i.to_record() for i in items if i.selected], indent=2)
