"""FastAPI import endpoints (column-mapping importer + merge).

POST /v1/imports/preview  — parse an upload, suggest a mapping
POST /v1/imports/commit   — parse, finalize, and merge into the checklist

Both endpoints take the file plus parse options as multipart form data.
The commit is all-or-nothing: nothing is saved unless the mapping is
complete and the merge succeeds.
"""

import json

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from dikelab.api.dependencies import get_workspace
from dikelab.config.settings import Settings, get_settings
from dikelab.engine.merge import merge_batch, merge_single
from dikelab.ingestion.column_mapping import auto_map, finalize_import
from dikelab.ingestion.parser import detect_format, parse_source
from dikelab.models.mapping import (
    ColumnMapping,
    Delimiter,
    ImportedRow,
    ImportedTable,
    ImportFormat,
    MappingSuggestion,
    MergeMode,
    MergeReport,
    ParseOptions,
)
from dikelab.storage.workspace import Workspace

router = APIRouter(prefix="/v1/imports", tags=["imports"])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ImportPreviewResponse(BaseModel):
    format: ImportFormat
    headers: list[str]
    preview_rows: list[ImportedRow]
    raw_preview: list[list[str]]
    row_count: int
    suggestion: MappingSuggestion


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _parse_upload(
    file: UploadFile,
    delimiter: str,
    skip_empty_lines: bool,
    header_row_index: int,
) -> ImportedTable:
    content = await file.read()
    if len(content) == 0:
        raise HTTPException(status_code=422, detail="File content must not be empty.")
    try:
        options = ParseOptions(
            delimiter=Delimiter(delimiter),
            skip_empty_lines=skip_empty_lines,
            header_row_index=header_row_index,
        )
        fmt = detect_format(file.filename, file.content_type)
        return parse_source(content, fmt, options)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _json_form(raw: str, field: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=422, detail=f"Form field '{field}' must be valid JSON.",
        ) from exc


def _build_mapping(assignments: object) -> ColumnMapping:
    if not isinstance(assignments, dict):
        msg = "mapping must be a JSON object of target field to source header."
        raise ValueError(msg)
    column_mapping = ColumnMapping()
    for field, header in assignments.items():
        column_mapping.assign(str(field), str(header) if header else None)
    return column_mapping


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/preview", response_model=ImportPreviewResponse)
async def preview_import(
    file: UploadFile = File(...),
    delimiter: str = Form(","),
    skip_empty_lines: bool = Form(True),
    header_row_index: int = Form(0),
    settings: Settings = Depends(get_settings),
) -> ImportPreviewResponse:
    """Parse the upload and return headers, previews, and a suggested mapping."""
    table = await _parse_upload(file, delimiter, skip_empty_lines, header_row_index)
    preview = table.preview_rows(settings.PREVIEW_ROW_LIMIT)
    return ImportPreviewResponse(
        format=table.format,
        headers=table.headers,
        preview_rows=preview,
        raw_preview=table.raw_preview(settings.RAW_PREVIEW_ROW_LIMIT),
        row_count=len(table.records),
        suggestion=auto_map(table.headers, preview),
    )


@router.post("/commit", response_model=MergeReport)
async def commit_import(
    file: UploadFile = File(...),
    mapping: str = Form(...),
    analysis_columns: str = Form(...),
    mode: MergeMode = Form(MergeMode.BATCH),
    item_id: str | None = Form(None),
    x_axis: str | None = Form(None),
    y_axis: str | None = Form(None),
    delimiter: str = Form(","),
    skip_empty_lines: bool = Form(True),
    header_row_index: int = Form(0),
    workspace: Workspace = Depends(get_workspace),
    settings: Settings = Depends(get_settings),
) -> MergeReport:
    """Finalize the mapped rows and merge them into the checklist.

    ``mapping`` is a JSON object of target field -> source header and
    ``analysis_columns`` a JSON array of source headers.
    """
    table = await _parse_upload(file, delimiter, skip_empty_lines, header_row_index)

    assignments = _json_form(mapping, "mapping")
    columns = _json_form(analysis_columns, "analysis_columns")
    if not isinstance(columns, list) or len(columns) > settings.MAX_ANALYSIS_COLUMNS:
        raise HTTPException(
            status_code=422,
            detail=(
                f"analysis_columns must be a list of at most "
                f"{settings.MAX_ANALYSIS_COLUMNS} headers."
            ),
        )

    try:
        column_mapping = _build_mapping(assignments)
        finalized = finalize_import(
            table.records,
            column_mapping,
            [str(c) for c in columns],
            x_axis=x_axis or None,
            y_axis=y_axis or None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    store = workspace.open_checklist_store()
    try:
        if mode is MergeMode.SINGLE:
            if not item_id:
                raise HTTPException(
                    status_code=422, detail="item_id is required for a single import.",
                )
            report = merge_single(store, item_id, finalized)
        else:
            report = merge_batch(store, finalized)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=exc.args[0]) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    workspace.save_checklist(store.items)
    logger.info(
        "import_committed",
        mode=report.mode.value,
        rows=len(finalized.rows),
        updated=len(report.updated_ids),
    )
    return report
