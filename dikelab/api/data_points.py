"""FastAPI manual data-point endpoints.

GET  /v1/data-points                 — all saved points
POST /v1/data-points                 — add one point
POST /v1/data-points/from-checklist  — copy selected valued checklist rows
GET  /v1/data-points/chart           — mean value per category
GET  /v1/data-points/pie             — total value per category
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from dikelab.api.dependencies import get_workspace
from dikelab.engine.data_points import (
    build_data_point,
    data_point_chart,
    data_point_pie,
    data_points_from_checklist,
)
from dikelab.models.analytics import CategoryChart, PieSlice
from dikelab.models.checklist import DataPoint
from dikelab.storage.workspace import Workspace

router = APIRouter(prefix="/v1/data-points", tags=["data-points"])


class DataPointRequest(BaseModel):
    height: str = ""
    width: str = ""
    slopeRatio: str = ""
    pga: str = ""
    h1h2Ratio: str = ""
    groundwater: str = ""
    relativeDensity: str = ""
    inclination: str = ""
    value: str | float = ""


class ImportedPointsResponse(BaseModel):
    imported: int
    total: int


@router.get("", response_model=list[DataPoint])
async def list_data_points(workspace: Workspace = Depends(get_workspace)) -> list[DataPoint]:
    return workspace.load_data_points()


@router.post("", status_code=201, response_model=DataPoint)
async def add_data_point(
    body: DataPointRequest,
    workspace: Workspace = Depends(get_workspace),
) -> DataPoint:
    fields = body.model_dump(exclude={"value"})
    try:
        point = build_data_point(fields, body.value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    points = workspace.load_data_points()
    points.append(point)
    workspace.save_data_points(points)
    return point


@router.post("/from-checklist", response_model=ImportedPointsResponse)
async def import_from_checklist(
    workspace: Workspace = Depends(get_workspace),
) -> ImportedPointsResponse:
    checklist = workspace.load_checklist()
    if checklist is None:
        raise HTTPException(
            status_code=404, detail="There is no saved checklist data to import.",
        )
    try:
        new_points = data_points_from_checklist(checklist)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    points = workspace.load_data_points() + new_points
    workspace.save_data_points(points)
    return ImportedPointsResponse(imported=len(new_points), total=len(points))


@router.get("/chart", response_model=CategoryChart)
async def get_chart(
    x_axis: str = "height",
    group_by: str = "pga",
    workspace: Workspace = Depends(get_workspace),
) -> CategoryChart:
    return data_point_chart(workspace.load_data_points(), x_axis, group_by)


@router.get("/pie", response_model=list[PieSlice])
async def get_pie(
    x_axis: str = "height",
    workspace: Workspace = Depends(get_workspace),
) -> list[PieSlice]:
    return data_point_pie(workspace.load_data_points(), x_axis)
