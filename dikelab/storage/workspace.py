"""Persisted workspace over a blob store.

Four blobs make up a workspace: the taxonomy, the checklist, the
"prepared for analysis" snapshot, and the manual data points. Every reader
is tolerant: an absent blob yields the default and a malformed one is
logged and treated as absent. Writes happen only on explicit save.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from dikelab.engine.checklist_store import (
    DEFAULT_PAGE_SIZE,
    LARGE_CHECKLIST_THRESHOLD,
    ChecklistStore,
)
from dikelab.engine.dataset import select_analysis_dataset
from dikelab.engine.generator import generate_checklist
from dikelab.models.analytics import AnalysisDataset, DatasetRow
from dikelab.models.checklist import ChecklistItem, DataPoint
from dikelab.models.taxonomy import TaxonomyNode
from dikelab.storage.blob_store import BlobStore
from dikelab.taxonomy.accessors import parse_taxonomy
from dikelab.taxonomy.defaults import default_taxonomy

logger = logging.getLogger(__name__)


class StorageKey(StrEnum):
    """Blob keys of a workspace."""

    TAXONOMY = "mindMapData"
    CHECKLIST = "checklist"
    ANALYSIS = "analysisData"
    DATA_POINTS = "dikeDataPoints"


class Workspace:
    """Typed load/save over the four workspace blobs."""

    def __init__(
        self,
        store: BlobStore,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        large_threshold: int = LARGE_CHECKLIST_THRESHOLD,
    ) -> None:
        self._store = store
        self._page_size = page_size
        self._large_threshold = large_threshold

    @property
    def store(self) -> BlobStore:
        return self._store

    # ------------------------------------------------------------------
    # Raw JSON helpers
    # ------------------------------------------------------------------

    def _read_list(self, key: StorageKey) -> list[Any] | None:
        text = self._store.get(key)
        if text is None:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed %s blob", key)
            return None
        if not isinstance(data, list):
            logger.warning("Ignoring %s blob: expected a JSON array", key)
            return None
        return data

    def _write(self, key: StorageKey, payload: Any) -> None:
        self._store.put(key, json.dumps(payload))

    # ------------------------------------------------------------------
    # Taxonomy
    # ------------------------------------------------------------------

    def load_saved_taxonomy(self) -> TaxonomyNode | None:
        """The persisted taxonomy, or None when absent or malformed."""
        text = self._store.get(StorageKey.TAXONOMY)
        if text is None:
            return None
        try:
            return parse_taxonomy(text)
        except ValueError as exc:
            logger.warning("Ignoring malformed taxonomy blob: %s", exc)
            return None

    def load_taxonomy(self) -> TaxonomyNode:
        """The persisted taxonomy, falling back to the built-in default."""
        return self.load_saved_taxonomy() or default_taxonomy()

    def save_taxonomy(self, taxonomy: TaxonomyNode) -> None:
        self._store.put(StorageKey.TAXONOMY, taxonomy.model_dump_json())

    def reset_taxonomy(self) -> TaxonomyNode:
        """Persist and return the built-in default taxonomy."""
        tree = default_taxonomy()
        self.save_taxonomy(tree)
        return tree

    # ------------------------------------------------------------------
    # Checklist
    # ------------------------------------------------------------------

    def load_checklist(self) -> list[ChecklistItem] | None:
        """The persisted checklist, or None when absent or malformed."""
        records = self._read_list(StorageKey.CHECKLIST)
        if records is None:
            return None
        try:
            return [ChecklistItem.from_record(r) for r in records]
        except (ValidationError, AttributeError, TypeError) as exc:
            logger.warning("Ignoring malformed checklist blob: %s", exc)
            return None

    def save_checklist(self, items: Iterable[ChecklistItem]) -> None:
        self._write(StorageKey.CHECKLIST, [item.to_record() for item in items])

    def bootstrap_checklist(self) -> list[ChecklistItem]:
        """Saved checklist if readable, else generated from the taxonomy.

        The taxonomy is the saved one if readable, else the default.
        """
        saved = self.load_checklist()
        if saved is not None:
            return saved
        logger.info("No saved checklist; generating from taxonomy")
        return generate_checklist(self.load_taxonomy())

    def open_checklist_store(self) -> ChecklistStore:
        return ChecklistStore(
            self.bootstrap_checklist(),
            page_size=self._page_size,
            large_threshold=self._large_threshold,
        )

    # ------------------------------------------------------------------
    # Analysis snapshot
    # ------------------------------------------------------------------

    def load_analysis_snapshot(self) -> list[DatasetRow]:
        records = self._read_list(StorageKey.ANALYSIS) or []
        return [r for r in records if isinstance(r, dict)]

    def prepare_for_analysis(self, items: Iterable[ChecklistItem]) -> int:
        """Save the imported rows as the analysis snapshot; return the count."""
        imported = [item.to_record() for item in items if item.imported]
        self._write(StorageKey.ANALYSIS, imported)
        logger.info("Prepared %d imported items for analysis", len(imported))
        return len(imported)

    def analysis_dataset(self, *, only_imported: bool = True) -> AnalysisDataset:
        return select_analysis_dataset(
            self.load_analysis_snapshot(),
            self.load_checklist() or [],
            only_imported=only_imported,
        )

    # ------------------------------------------------------------------
    # Data points
    # ------------------------------------------------------------------

    def load_data_points(self) -> list[DataPoint]:
        records = self._read_list(StorageKey.DATA_POINTS)
        if records is None:
            return []
        try:
            return [DataPoint.model_validate(r) for r in records]
        except ValidationError as exc:
            logger.warning("Ignoring malformed data point blob: %s", exc)
            return []

    def save_data_points(self, points: Iterable[DataPoint]) -> None:
        self._write(
            StorageKey.DATA_POINTS,
            [p.model_dump(mode="json", by_alias=True) for p in points],
        )
