"""FastAPI analytics endpoints.

GET /v1/analytics/dataset              — rows chosen for analysis + columns
GET /v1/analytics/correlations         — parameters ranked against a target
GET /v1/analytics/point-cloud          — 3-D projection
GET /v1/analytics/charts/scatter       — grouped (x, y) pairs
GET /v1/analytics/charts/{bar|line}    — mean y per x category
GET /v1/analytics/charts/pie           — summed y per x category
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from dikelab.api.dependencies import get_workspace
from dikelab.config.settings import Settings, get_settings
from dikelab.engine.analytics import (
    DEFAULT_POINT_SIZE,
    category_chart,
    correlate,
    pie_slices,
    project_point_cloud,
    scatter_series,
)
from dikelab.models.analytics import (
    AnalysisDataset,
    CategoryChart,
    ChartKind,
    CorrelationResult,
    PieSlice,
    PointCloud,
    ScatterSeries,
)
from dikelab.storage.workspace import Workspace

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


@router.get("/dataset", response_model=AnalysisDataset)
async def get_dataset(
    only_imported: bool = True,
    workspace: Workspace = Depends(get_workspace),
) -> AnalysisDataset:
    return workspace.analysis_dataset(only_imported=only_imported)


@router.get("/correlations", response_model=list[CorrelationResult])
async def get_correlations(
    target: str = "value",
    only_imported: bool = True,
    workspace: Workspace = Depends(get_workspace),
    settings: Settings = Depends(get_settings),
) -> list[CorrelationResult]:
    dataset = workspace.analysis_dataset(only_imported=only_imported)
    return correlate(
        dataset.rows,
        target,
        sample_size=settings.CORRELATION_SAMPLE_SIZE,
        seed=settings.CORRELATION_SEED,
    )


@router.get("/point-cloud", response_model=PointCloud)
async def get_point_cloud(
    x_axis: str | None = None,
    y_axis: str | None = None,
    z_axis: str | None = None,
    color_by: str | None = None,
    size_by: str | None = None,
    point_size: float = Query(DEFAULT_POINT_SIZE, gt=0),
    only_imported: bool = True,
    workspace: Workspace = Depends(get_workspace),
) -> PointCloud:
    """Project the dataset; unset axes follow the dataset's defaults."""
    dataset = workspace.analysis_dataset(only_imported=only_imported)
    axes = dataset.axes
    return project_point_cloud(
        dataset.rows,
        x_axis=x_axis or axes.x_axis,
        y_axis=y_axis or axes.y_axis,
        z_axis=z_axis or axes.z_axis,
        color_by=color_by or axes.color_by,
        size_by=size_by or axes.size_by,
        point_size=point_size,
    )


@router.get("/charts/{kind}", response_model=None)
async def get_chart(
    kind: ChartKind,
    x_axis: str | None = None,
    y_axis: str | None = None,
    group_by: str | None = None,
    only_imported: bool = True,
    workspace: Workspace = Depends(get_workspace),
) -> list[ScatterSeries] | CategoryChart | list[PieSlice]:
    dataset = workspace.analysis_dataset(only_imported=only_imported)
    if not dataset.rows:
        raise HTTPException(status_code=404, detail="No data points available for analysis.")
    axes = dataset.axes
    x = x_axis or axes.x_axis
    y = y_axis or axes.y_axis
    group = group_by or axes.color_by

    if kind is ChartKind.SCATTER:
        return scatter_series(dataset.rows, x, y, group)
    if kind is ChartKind.PIE:
        return pie_slices(dataset.rows, x, y)
    return category_chart(dataset.rows, x, y, group)
