"""Column mapping: source headers -> the nine fixed checklist fields.

``auto_map`` suggests a mapping from header names, ``validate_mapping``
reports what is still missing, and ``finalize_import`` turns source
records into mapped rows ready for the merge engine.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from dikelab.models.common import TARGET_FIELD_LABELS, parse_leading_float
from dikelab.models.mapping import (
    ColumnMapping,
    FinalizedImport,
    ImportedRow,
    MappedRow,
    MappingSuggestion,
    MappingValidation,
)

logger = logging.getLogger(__name__)

MAX_ANALYSIS_COLUMNS = 3


def _match_header(headers: Sequence[str], key: str, label: str) -> str | None:
    key_l, label_l = key.lower(), label.lower()
    for header in headers:
        lowered = header.lower()
        if lowered in (key_l, label_l):
            return header
    for header in headers:
        lowered = header.lower()
        if key_l in lowered or label_l in lowered:
            return header
    return None


def detect_numeric_columns(
    headers: Sequence[str],
    preview_rows: Sequence[ImportedRow],
) -> list[str]:
    """Headers whose first preview value starts with a number."""
    if not preview_rows:
        return []
    first = preview_rows[0]
    numeric: list[str] = []
    for header in headers:
        if not header or header not in first:
            continue
        if not math.isnan(parse_leading_float(str(first[header]))):
            numeric.append(header)
    return numeric


def auto_map(
    headers: Sequence[str],
    preview_rows: Sequence[ImportedRow] = (),
) -> MappingSuggestion:
    """Suggest a mapping plus default analysis column and X/Y axes.

    Per target field an exact case-insensitive match on the field key or
    label wins; otherwise the first header containing either is taken.
    Fields with no match stay unset. The first numeric column becomes the
    default analysis column and, when there are at least two numeric
    columns, the first two become the X and Y axes.
    """
    usable = [h for h in headers if h]
    mapping = ColumnMapping()
    for key, label in TARGET_FIELD_LABELS.items():
        match = _match_header(usable, key, label)
        if match is not None:
            mapping.assign(key, match)

    numeric = detect_numeric_columns(usable, preview_rows)
    suggestion = MappingSuggestion(mapping=mapping, numeric_columns=numeric)
    if numeric:
        suggestion.analysis_columns = [numeric[0]]
        if len(numeric) > 1:
            suggestion.x_axis = numeric[0]
            suggestion.y_axis = numeric[1]
    return suggestion


def toggle_analysis_column(
    columns: Sequence[str],
    header: str,
    *,
    max_columns: int = MAX_ANALYSIS_COLUMNS,
) -> list[str]:
    """Add ``header`` to the analysis columns, or remove it if present.

    Raises:
        ValueError: If adding would exceed ``max_columns``.
    """
    current = list(columns)
    if header in current:
        return [col for col in current if col != header]
    if len(current) >= max_columns:
        msg = f"You can select up to {max_columns} columns for analysis"
        raise ValueError(msg)
    return [*current, header]


def validate_mapping(
    mapping: ColumnMapping,
    analysis_columns: Sequence[str],
) -> MappingValidation:
    """Report unmapped target fields and a missing analysis selection."""
    return MappingValidation(
        missing_fields=mapping.missing_fields(),
        missing_analysis_columns=not analysis_columns,
    )


def _dedupe(columns: Iterable[str | None]) -> list[str]:
    seen: list[str] = []
    for col in columns:
        if col and col not in seen:
            seen.append(col)
    return seen


def finalize_import(
    records: Sequence[ImportedRow],
    mapping: ColumnMapping,
    analysis_columns: Sequence[str],
    *,
    x_axis: str | None = None,
    y_axis: str | None = None,
) -> FinalizedImport:
    """Map every source record onto the target fields.

    Each output row holds the nine target fields read through the mapping
    plus the analysis and axis columns copied verbatim by header name.
    Cells absent from a record are left out of its row. Nothing is
    produced unless the mapping is complete and at least one analysis
    column is chosen.

    Raises:
        ValueError: Listing every unmapped field label and/or the missing
            analysis column selection.
    """
    validation = validate_mapping(mapping, analysis_columns)
    if not validation.is_valid:
        raise ValueError(validation.error_message())

    carried = _dedupe([*analysis_columns, x_axis, y_axis])
    rows: list[MappedRow] = []
    for record in records:
        row: MappedRow = {}
        for field in TARGET_FIELD_LABELS:
            header = mapping.get(field)
            if header is not None and header in record:
                row[field] = record[header]
        for col in carried:
            if col in record:
                row[col] = record[col]
        rows.append(row)

    logger.info(
        "Finalized import of %d rows with analysis columns %s", len(rows), carried,
    )
    return FinalizedImport(rows=rows, mapping=mapping, analysis_columns=carried)
