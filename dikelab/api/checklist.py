"""FastAPI checklist endpoints.

GET   /v1/checklist                         — filtered page + counts
POST  /v1/checklist/generate                — regenerate from the taxonomy
POST  /v1/checklist/items/{item_id}/toggle  — flip selection
PATCH /v1/checklist/items/{item_id}         — edit notes / value
POST  /v1/checklist/selection               — select or clear many ids
GET   /v1/checklist/values/{field}          — distinct values for a filter
POST  /v1/checklist/prepare-analysis        — snapshot imported rows

Every mutation saves the checklist before responding.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from dikelab.api.dependencies import get_workspace
from dikelab.config.settings import Settings, get_settings
from dikelab.engine.checklist_store import ChecklistCounts, ChecklistPage, ChecklistStore
from dikelab.models.checklist import ChecklistItem
from dikelab.models.common import ImportStatusFilter
from dikelab.storage.workspace import Workspace

router = APIRouter(prefix="/v1/checklist", tags=["checklist"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class ChecklistResponse(BaseModel):
    page: ChecklistPage
    counts: ChecklistCounts
    is_large: bool


class ItemUpdateRequest(BaseModel):
    notes: str | None = None
    value: str | float | None = None


class SelectionRequest(BaseModel):
    ids: list[str] = Field(default_factory=list)
    selected: bool = True


class SelectionResponse(BaseModel):
    updated: int
    counts: ChecklistCounts


class PrepareAnalysisResponse(BaseModel):
    prepared: int


def _parse_filters(raw: list[str]) -> dict[str, str]:
    filters: dict[str, str] = {}
    for entry in raw:
        field, sep, value = entry.partition(":")
        if not sep or not field:
            raise HTTPException(
                status_code=422,
                detail=f"Filter '{entry}' must look like field:value.",
            )
        filters[field] = value
    return filters


def _get_item(store: ChecklistStore, item_id: str) -> ChecklistItem:
    try:
        return store.get(item_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0]) from exc


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=ChecklistResponse)
async def list_checklist(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=500),
    search: str = "",
    import_status: ImportStatusFilter = ImportStatusFilter.ALL,
    filters: list[str] = Query([], alias="filter"),
    workspace: Workspace = Depends(get_workspace),
    settings: Settings = Depends(get_settings),
) -> ChecklistResponse:
    """One page of the checklist under the given search and filters."""
    store = workspace.open_checklist_store()
    store.apply_filter(_parse_filters(filters), search, import_status)
    return ChecklistResponse(
        page=store.paginate(page_size or settings.DEFAULT_PAGE_SIZE, page),
        counts=store.counts(),
        is_large=store.is_large,
    )


@router.post("/generate", response_model=ChecklistCounts)
async def generate(workspace: Workspace = Depends(get_workspace)) -> ChecklistCounts:
    """Rebuild every row from the current taxonomy, dropping tracking state."""
    store = ChecklistStore()
    store.regenerate(workspace.load_taxonomy())
    workspace.save_checklist(store.items)
    return store.counts()


@router.post("/items/{item_id}/toggle", response_model=ChecklistItem)
async def toggle_item(
    item_id: str,
    workspace: Workspace = Depends(get_workspace),
) -> ChecklistItem:
    store = workspace.open_checklist_store()
    item = _get_item(store, item_id)
    store.toggle_select(item.id)
    workspace.save_checklist(store.items)
    return item


@router.patch("/items/{item_id}", response_model=ChecklistItem)
async def update_item(
    item_id: str,
    body: ItemUpdateRequest,
    workspace: Workspace = Depends(get_workspace),
) -> ChecklistItem:
    """Edit notes and/or value; a non-numeric value is ignored."""
    store = workspace.open_checklist_store()
    item = _get_item(store, item_id)
    if body.notes is not None:
        store.set_notes(item.id, body.notes)
    if body.value is not None:
        store.set_value(item.id, body.value)
    workspace.save_checklist(store.items)
    return item


@router.post("/selection", response_model=SelectionResponse)
async def set_selection(
    body: SelectionRequest,
    workspace: Workspace = Depends(get_workspace),
) -> SelectionResponse:
    store = workspace.open_checklist_store()
    updated = store.set_selected(body.ids, body.selected)
    workspace.save_checklist(store.items)
    return SelectionResponse(updated=updated, counts=store.counts())


@router.get("/values/{field}")
async def unique_values(
    field: str,
    workspace: Workspace = Depends(get_workspace),
) -> list[str]:
    return workspace.open_checklist_store().unique_values(field)


@router.post("/prepare-analysis", response_model=PrepareAnalysisResponse)
async def prepare_analysis(
    workspace: Workspace = Depends(get_workspace),
) -> PrepareAnalysisResponse:
    store = workspace.open_checklist_store()
    return PrepareAnalysisResponse(prepared=workspace.prepare_for_analysis(store.items))
