"""FastAPI export endpoints.

GET  /v1/exports/checklist.csv   — full checklist, fourteen columns
GET  /v1/exports/checklist.xlsx  — full checklist workbook
GET  /v1/exports/selected.json   — selected rows, pretty-printed
GET  /v1/exports/dataset.csv     — current analysis dataset
POST /v1/exports/checklist.csv   — restore the checklist from a CSV export
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from dikelab.api.dependencies import get_workspace
from dikelab.engine.checklist_store import ChecklistCounts, ChecklistStore
from dikelab.export.csv_export import (
    checklist_to_csv,
    dataset_to_csv,
    parse_checklist_csv,
    selected_to_json,
)
from dikelab.export.excel_export import ChecklistExcelExporter
from dikelab.storage.workspace import Workspace

router = APIRouter(prefix="/v1/exports", tags=["exports"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/checklist.csv")
async def export_checklist_csv(workspace: Workspace = Depends(get_workspace)) -> Response:
    items = workspace.bootstrap_checklist()
    return Response(
        content=checklist_to_csv(items),
        media_type="text/csv; charset=utf-8",
        headers=_attachment("dike_settlement_checklist.csv"),
    )


@router.get("/checklist.xlsx")
async def export_checklist_xlsx(workspace: Workspace = Depends(get_workspace)) -> Response:
    items = workspace.bootstrap_checklist()
    return Response(
        content=ChecklistExcelExporter().export(items),
        media_type=_XLSX_MEDIA_TYPE,
        headers=_attachment("dike_settlement_checklist.xlsx"),
    )


@router.get("/selected.json")
async def export_selected_json(workspace: Workspace = Depends(get_workspace)) -> Response:
    items = workspace.bootstrap_checklist()
    return Response(
        content=selected_to_json(items),
        media_type="application/json",
        headers=_attachment("selected_dike_data.json"),
    )


@router.get("/dataset.csv")
async def export_dataset_csv(
    only_imported: bool = True,
    workspace: Workspace = Depends(get_workspace),
) -> Response:
    dataset = workspace.analysis_dataset(only_imported=only_imported)
    if not dataset.rows:
        raise HTTPException(status_code=404, detail="No data points available to export.")
    return Response(
        content=dataset_to_csv(dataset.rows),
        media_type="text/csv; charset=utf-8",
        headers=_attachment("analysis_data.csv"),
    )


@router.post("/checklist.csv", response_model=ChecklistCounts)
async def restore_checklist_csv(
    file: UploadFile = File(...),
    workspace: Workspace = Depends(get_workspace),
) -> ChecklistCounts:
    """Replace the saved checklist with the rows of a checklist CSV export."""
    content = await file.read()
    try:
        items = parse_checklist_csv(content.decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise HTTPException(status_code=422, detail="File must be UTF-8 text.") from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    workspace.save_checklist(items)
    return ChecklistStore(items).counts()
