"""Analysis dataset selection and column discovery.

The dataset is chosen in fallback order: the prepared analysis snapshot
when it has rows, then the imported checklist rows, then every checklist
row holding a value (flagged as having no imported data).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from dikelab.models.analytics import (
    AnalysisDataset,
    AxisDefaults,
    DatasetRow,
    DatasetSource,
)
from dikelab.models.checklist import ChecklistItem
from dikelab.models.common import BOOKKEEPING_FIELDS, FACTOR_FIELDS, VALUE_FIELD

logger = logging.getLogger(__name__)

STANDARD_COLUMNS: tuple[str, ...] = (*FACTOR_FIELDS, VALUE_FIELD)


def discover_columns(rows: Iterable[DatasetRow]) -> tuple[list[str], list[str]]:
    """Return ``(available, custom)`` columns for ``rows``.

    Custom columns are every non-bookkeeping, non-underscore key and every
    declared analysis column outside the standard nine, in first-seen
    order. Available columns are the standard nine followed by the custom
    ones.
    """
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            if key.startswith("_") or key in BOOKKEEPING_FIELDS:
                continue
            seen.setdefault(key, None)
        declared: Any = row.get("analysisColumns")
        if isinstance(declared, list):
            for col in declared:
                seen.setdefault(str(col), None)

    custom = [col for col in seen if col not in STANDARD_COLUMNS]
    return [*STANDARD_COLUMNS, *custom], custom


def default_axes(custom_columns: Sequence[str]) -> AxisDefaults:
    """The first three custom columns replace the default X, Y, Z axes."""
    axes = AxisDefaults()
    for attr, col in zip(("x_axis", "y_axis", "z_axis"), custom_columns):
        setattr(axes, attr, col)
    return axes


def build_dataset(
    rows: Sequence[DatasetRow],
    source: DatasetSource,
    *,
    no_imported_data: bool = False,
) -> AnalysisDataset:
    available, custom = discover_columns(rows)
    return AnalysisDataset(
        rows=list(rows),
        source=source,
        no_imported_data=no_imported_data,
        available_columns=available,
        custom_columns=custom,
        axes=default_axes(custom),
    )


def select_analysis_dataset(
    analysis_snapshot: Sequence[DatasetRow] | None,
    checklist: Sequence[ChecklistItem],
    *,
    only_imported: bool = True,
) -> AnalysisDataset:
    """Pick the rows to analyse.

    With ``only_imported`` False the snapshot and imported rows are skipped
    and every valued checklist row is used directly.
    """
    if only_imported:
        if analysis_snapshot:
            return build_dataset(analysis_snapshot, DatasetSource.ANALYSIS_SNAPSHOT)
        imported = [item.to_record() for item in checklist if item.imported]
        if imported:
            return build_dataset(imported, DatasetSource.IMPORTED_ITEMS)

    valued = [item.to_record() for item in checklist if item.value is not None]
    if valued:
        if only_imported:
            logger.info("No imported data; analysing %d valued items", len(valued))
        return build_dataset(
            valued, DatasetSource.VALUED_ITEMS, no_imported_data=only_imported,
        )
    return AnalysisDataset(
        source=DatasetSource.EMPTY,
        no_imported_data=True,
        available_columns=list(STANDARD_COLUMNS),
    )
