"""Merge finalized import rows into the checklist.

Single mode writes the first row onto one target item. Batch mode zips the
currently selected items (store order) with the rows (file order); the
i-th selected item receives the i-th row and any selected items past the
last row are left alone. The positional zip does no content matching.

Both modes stamp provenance (``imported``, ``import_source``,
``import_date``, ``analysis_columns``) and never touch id, selection, or
notes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime

from dikelab.engine.checklist_store import ChecklistStore
from dikelab.models.checklist import (
    ChecklistItem,
    attr_for_key,
    coerce_optional_number,
)
from dikelab.models.common import (
    BOOKKEEPING_FIELDS,
    FACTOR_FIELDS,
    CellValue,
    utc_now,
)
from dikelab.models.mapping import FinalizedImport, MergeMode, MergeReport

logger = logging.getLogger(__name__)

_SOURCE_LABELS = {
    MergeMode.SINGLE: "Single import",
    MergeMode.BATCH: "Batch import",
}


def _import_source(mode: MergeMode, stamp: datetime) -> str:
    return f"{_SOURCE_LABELS[mode]} ({stamp.strftime('%Y-%m-%d %H:%M:%S')})"


def apply_import_row(
    item: ChecklistItem,
    row: Mapping[str, CellValue],
    *,
    analysis_columns: list[str],
    import_source: str,
    import_date: datetime,
) -> None:
    """Shallow-merge one mapped row onto ``item`` and stamp provenance.

    Factor fields are overwritten with the row's text, ``value`` is
    coerced leniently (unparseable becomes unset), and any other key lands
    in the item's extension fields.
    """
    for key, raw in row.items():
        if key in BOOKKEEPING_FIELDS:
            continue
        if key in FACTOR_FIELDS:
            setattr(item, attr_for_key(key), str(raw))
        elif key == "value":
            item.value = coerce_optional_number(raw)
        else:
            item.extra_fields[key] = raw

    item.imported = True
    item.import_source = import_source
    item.import_date = import_date
    item.analysis_columns = list(analysis_columns)


def merge_single(
    store: ChecklistStore,
    item_id: str,
    finalized: FinalizedImport,
    *,
    now: datetime | None = None,
) -> MergeReport:
    """Merge the first finalized row onto the item ``item_id``.

    Raises:
        KeyError: If ``item_id`` is not in the store.
        ValueError: If the import produced no rows.
    """
    item = store.get(item_id)
    if not finalized.rows:
        msg = "No data found in the imported file"
        raise ValueError(msg)

    stamp = now or utc_now()
    source = _import_source(MergeMode.SINGLE, stamp)
    apply_import_row(
        item,
        finalized.rows[0],
        analysis_columns=finalized.analysis_columns,
        import_source=source,
        import_date=stamp,
    )
    logger.info("Merged single import row into %s", item_id)
    return MergeReport(
        mode=MergeMode.SINGLE,
        updated_ids=[item_id],
        import_source=source,
        import_date=stamp,
    )


def merge_batch(
    store: ChecklistStore,
    finalized: FinalizedImport,
    *,
    now: datetime | None = None,
) -> MergeReport:
    """Zip the selected items with the finalized rows positionally.

    Raises:
        ValueError: If no checklist items are selected.
    """
    selected = store.selected_items()
    if not selected:
        msg = "No Items Selected: please select at least one item to import data for."
        raise ValueError(msg)

    stamp = now or utc_now()
    source = _import_source(MergeMode.BATCH, stamp)
    updated: list[str] = []
    for item, row in zip(selected, finalized.rows):
        apply_import_row(
            item,
            row,
            analysis_columns=finalized.analysis_columns,
            import_source=source,
            import_date=stamp,
        )
        updated.append(item.id)
    skipped = [item.id for item in selected[len(updated):]]

    if skipped:
        logger.info(
            "Batch import updated %d items; %d selected items had no matching row",
            len(updated),
            len(skipped),
        )
    else:
        logger.info("Batch import updated %d items", len(updated))
    return MergeReport(
        mode=MergeMode.BATCH,
        updated_ids=updated,
        skipped_ids=skipped,
        import_source=source,
        import_date=stamp,
    )
