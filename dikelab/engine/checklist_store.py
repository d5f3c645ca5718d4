"""In-memory checklist store with filter, search, and pagination views.

The store owns the ordered list of ChecklistItems. Mutations happen in
place (selection, notes, value) or by wholesale replacement on
regeneration; there is no deletion. Filtered views and counts are derived
on every read, so they always reflect the current items and filters.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping

from pydantic import Field

from dikelab.engine.generator import generate_checklist
from dikelab.models.checklist import ChecklistItem, coerce_optional_number
from dikelab.models.common import DikeLabBase, ImportStatusFilter
from dikelab.models.taxonomy import TaxonomyNode

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
LARGE_CHECKLIST_THRESHOLD = 5000

# Filter values meaning "no constraint on this field".
_WILDCARD_VALUES = frozenset({"", "all"})


class ChecklistCounts(DikeLabBase):
    """Headline counts over the whole checklist and the current filter."""

    total: int
    filtered: int
    selected: int
    imported: int


class ChecklistPage(DikeLabBase):
    """One page of the filtered checklist."""

    items: list[ChecklistItem] = Field(default_factory=list)
    page: int
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")
    filtered_count: int = Field(..., alias="filteredCount")


def _string_values(item: ChecklistItem) -> Iterable[str]:
    yield item.id
    yield from item.factor_tuple()
    yield item.notes
    if item.import_source is not None:
        yield item.import_source
    if item.import_date is not None:
        yield item.import_date.isoformat()
    for val in item.extra_fields.values():
        if isinstance(val, str):
            yield val


class ChecklistStore:
    """Ordered checklist rows plus the active filter state."""

    def __init__(
        self,
        items: Iterable[ChecklistItem] | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        large_threshold: int = LARGE_CHECKLIST_THRESHOLD,
    ) -> None:
        self._items: list[ChecklistItem] = list(items or [])
        self._index: dict[str, int] = {}
        self._field_filters: dict[str, str] = {}
        self._search_text = ""
        self._import_status = ImportStatusFilter.ALL
        self._page_size = page_size
        self._current_page = 1
        self._large_threshold = large_threshold
        self._reindex()

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    def _reindex(self) -> None:
        self._index = {item.id: pos for pos, item in enumerate(self._items)}

    @property
    def items(self) -> list[ChecklistItem]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: Iterable[ChecklistItem]) -> None:
        """Replace the whole collection; filters are kept, paging resets."""
        self._items = list(items)
        self._reindex()
        self._current_page = 1

    def regenerate(self, taxonomy: TaxonomyNode) -> None:
        """Replace the collection with a fresh product of ``taxonomy``."""
        self.replace(generate_checklist(taxonomy))

    def get(self, item_id: str) -> ChecklistItem:
        """Return the item with ``item_id``.

        Raises:
            KeyError: If no such item exists.
        """
        pos = self._index.get(item_id)
        if pos is None:
            msg = f"Checklist item {item_id} not found."
            raise KeyError(msg)
        return self._items[pos]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    @property
    def is_large(self) -> bool:
        """True when the checklist is big enough to warrant filtering first."""
        return len(self._items) > self._large_threshold

    # ------------------------------------------------------------------
    # Row mutations
    # ------------------------------------------------------------------

    def toggle_select(self, item_id: str) -> bool:
        """Flip the selection flag and return the new state."""
        item = self.get(item_id)
        item.selected = not item.selected
        return item.selected

    def set_selected(self, item_ids: Iterable[str], selected: bool) -> int:
        """Set the selection flag on every listed id; unknown ids are skipped.

        Returns the number of rows touched.
        """
        touched = 0
        for item_id in item_ids:
            pos = self._index.get(item_id)
            if pos is None:
                continue
            self._items[pos].selected = selected
            touched += 1
        return touched

    def set_selected_on_page(self, selected: bool) -> int:
        """Select or clear every row of the current page."""
        page = self.paginate(self._page_size, self._current_page)
        return self.set_selected((i.id for i in page.items), selected)

    def set_notes(self, item_id: str, notes: str) -> None:
        self.get(item_id).notes = notes

    def set_value(self, item_id: str, raw: str | float | int) -> bool:
        """Set the settlement value from user input.

        Input that does not parse as a number is ignored and the previous
        value is kept. Returns True when the value changed.
        """
        item = self.get(item_id)
        parsed = coerce_optional_number(raw)
        if parsed is None:
            logger.debug("Ignoring non-numeric value %r for %s", raw, item_id)
            return False
        item.value = parsed
        return True

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def apply_filter(
        self,
        filters: Mapping[str, str] | None = None,
        search_text: str | None = None,
        import_status: ImportStatusFilter | str | None = None,
    ) -> None:
        """Set field-equality filters, search text, and import status.

        Arguments left as None keep their current setting. An
        ``importStatus`` key inside ``filters`` is treated as the import
        status filter. Any change returns paging to page 1.
        """
        if filters is not None:
            field_filters = dict(filters)
            status = field_filters.pop("importStatus", None)
            if status is not None and import_status is None:
                import_status = status
            self._field_filters = {
                k: v for k, v in field_filters.items() if v not in _WILDCARD_VALUES
            }
        if search_text is not None:
            self._search_text = search_text.strip()
        if import_status is not None:
            self._import_status = ImportStatusFilter(import_status or "all")
        self._current_page = 1

    def reset_filters(self) -> None:
        self._field_filters = {}
        self._search_text = ""
        self._import_status = ImportStatusFilter.ALL
        self._current_page = 1

    @property
    def active_filters(self) -> dict[str, str]:
        return dict(self._field_filters)

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def import_status(self) -> ImportStatusFilter:
        return self._import_status

    def _matches(self, item: ChecklistItem, needle: str) -> bool:
        if needle and not any(needle in s.lower() for s in _string_values(item)):
            return False
        for field, expected in self._field_filters.items():
            if item.get_field(field) != expected:
                return False
        if self._import_status is ImportStatusFilter.IMPORTED:
            return item.imported
        if self._import_status is ImportStatusFilter.NOT_IMPORTED:
            return not item.imported
        return True

    def filtered_items(self) -> list[ChecklistItem]:
        """Rows passing search AND field filters AND import status, in order."""
        needle = self._search_text.lower()
        return [item for item in self._items if self._matches(item, needle)]

    def unique_values(self, field: str) -> list[str]:
        """Sorted distinct string values of ``field`` across all rows."""
        values = {
            val for item in self._items
            if isinstance(val := item.get_field(field), str)
        }
        return sorted(values)

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def page_size(self) -> int:
        return self._page_size

    def set_page(self, page_number: int, page_size: int | None = None) -> None:
        if page_size is not None:
            if page_size < 1:
                msg = "page_size must be >= 1."
                raise ValueError(msg)
            self._page_size = page_size
        self._current_page = max(1, page_number)

    def paginate(self, page_size: int, page_number: int) -> ChecklistPage:
        """Slice the filtered rows into page ``page_number`` (1-based).

        Pages past the end are empty.

        Raises:
            ValueError: If ``page_size`` is less than 1.
        """
        if page_size < 1:
            msg = "page_size must be >= 1."
            raise ValueError(msg)
        filtered = self.filtered_items()
        page_number = max(1, page_number)
        start = (page_number - 1) * page_size
        return ChecklistPage(
            items=filtered[start:start + page_size],
            page=page_number,
            page_size=page_size,
            total_pages=math.ceil(len(filtered) / page_size),
            filtered_count=len(filtered),
        )

    def current_page_items(self) -> list[ChecklistItem]:
        return self.paginate(self._page_size, self._current_page).items

    # ------------------------------------------------------------------
    # Counts and subsets
    # ------------------------------------------------------------------

    def selected_items(self) -> list[ChecklistItem]:
        return [item for item in self._items if item.selected]

    def imported_items(self) -> list[ChecklistItem]:
        return [item for item in self._items if item.imported]

    def counts(self) -> ChecklistCounts:
        return ChecklistCounts(
            total=len(self._items),
            filtered=len(self.filtered_items()),
            selected=sum(1 for i in self._items if i.selected),
            imported=sum(1 for i in self._items if i.imported),
        )
