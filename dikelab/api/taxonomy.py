"""FastAPI taxonomy endpoints.

GET  /v1/taxonomy          — current taxonomy and summary
PUT  /v1/taxonomy          — replace the whole tree
POST /v1/taxonomy/reset    — restore the built-in taxonomy
POST /v1/taxonomy/detect   — detect a taxonomy from an uploaded image
GET  /v1/taxonomy/factors  — leaf values per factor (data-entry options)
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from dikelab.api.dependencies import get_workspace
from dikelab.models.taxonomy import DetectionResult, TaxonomyNode, TaxonomySummary
from dikelab.storage.workspace import Workspace
from dikelab.taxonomy.accessors import factor_values, parse_taxonomy, summarize
from dikelab.taxonomy.detection import detect_structure

router = APIRouter(prefix="/v1/taxonomy", tags=["taxonomy"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TaxonomyResponse(BaseModel):
    taxonomy: TaxonomyNode
    summary: TaxonomySummary


def _respond(tree: TaxonomyNode) -> TaxonomyResponse:
    return TaxonomyResponse(taxonomy=tree, summary=summarize(tree))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=TaxonomyResponse)
async def get_taxonomy(workspace: Workspace = Depends(get_workspace)) -> TaxonomyResponse:
    return _respond(workspace.load_taxonomy())


@router.put("", response_model=TaxonomyResponse)
async def replace_taxonomy(
    payload: dict[str, Any] = Body(...),
    workspace: Workspace = Depends(get_workspace),
) -> TaxonomyResponse:
    """Replace the taxonomy; the checklist is not regenerated."""
    try:
        tree = parse_taxonomy(payload)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    workspace.save_taxonomy(tree)
    return _respond(tree)


@router.post("/reset", response_model=TaxonomyResponse)
async def reset_taxonomy(workspace: Workspace = Depends(get_workspace)) -> TaxonomyResponse:
    return _respond(workspace.reset_taxonomy())


@router.post("/detect", response_model=DetectionResult)
async def detect_taxonomy(
    file: UploadFile = File(...),
    workspace: Workspace = Depends(get_workspace),
) -> DetectionResult:
    """Detect the taxonomy from an image and make it current."""
    content = await file.read()
    try:
        result = detect_structure(content, file.content_type or "")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    workspace.save_taxonomy(result.structure)
    return result


@router.get("/factors")
async def get_factor_values(
    workspace: Workspace = Depends(get_workspace),
) -> dict[str, list[str]]:
    return {
        str(factor): values
        for factor, values in factor_values(workspace.load_taxonomy()).items()
    }
