"""Analytics result schemas.

Correlation rankings, chart series (scatter, bar/line, pie), the 3-D point
cloud projection, and the analysis dataset with its column catalogue.
"""

from enum import StrEnum
from typing import Any

from pydantic import Field

from dikelab.models.common import DikeLabBase

# A checklist record, analysis snapshot row, or data point record.
DatasetRow = dict[str, Any]

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DatasetSource(StrEnum):
    """Where an analysis dataset was taken from, in fallback order."""

    ANALYSIS_SNAPSHOT = "analysis_snapshot"
    IMPORTED_ITEMS = "imported_items"
    VALUED_ITEMS = "valued_items"
    EMPTY = "empty"


class ChartKind(StrEnum):
    """Chart preparations offered over an analysis dataset."""

    SCATTER = "scatter"
    BAR = "bar"
    LINE = "line"
    PIE = "pie"


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------


class CorrelationResult(DikeLabBase):
    """Pearson coefficient of one parameter against the target column."""

    parameter: str
    correlation: float = Field(..., ge=-1.0, le=1.0)


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------


class ScatterPoint(DikeLabBase):
    x: float
    y: float


class ScatterSeries(DikeLabBase):
    name: str
    data: list[ScatterPoint] = Field(default_factory=list)


class CategoryPoint(DikeLabBase):
    """Mean of the y column for one x category."""

    x: str
    y: float


class CategorySeries(DikeLabBase):
    name: str
    data: list[CategoryPoint] = Field(default_factory=list)


class CategoryChart(DikeLabBase):
    """Bar/line chart data: one series per group plus sorted categories."""

    series: list[CategorySeries] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)


class PieSlice(DikeLabBase):
    name: str
    value: float


# ---------------------------------------------------------------------------
# Point cloud
# ---------------------------------------------------------------------------


class PointCloud(DikeLabBase):
    """Render-ready 3-D points.

    Positions are normalized per axis and mapped to ``[-2, 2]``; colours are
    RGB triples on a blue-to-red gradient; sizes scale the base point size
    by ``0.5 + n``.
    """

    positions: list[tuple[float, float, float]] = Field(default_factory=list)
    colors: list[tuple[float, float, float]] = Field(default_factory=list)
    sizes: list[float] = Field(default_factory=list)
    x_axis: str = Field(..., alias="xAxis")
    y_axis: str = Field(..., alias="yAxis")
    z_axis: str = Field(..., alias="zAxis")


# ---------------------------------------------------------------------------
# Dataset
# ---------------------------------------------------------------------------


class AxisDefaults(DikeLabBase):
    x_axis: str = Field(default="height", alias="xAxis")
    y_axis: str = Field(default="pga", alias="yAxis")
    z_axis: str = Field(default="value", alias="zAxis")
    color_by: str = Field(default="relativeDensity", alias="colorBy")
    size_by: str = Field(default="width", alias="sizeBy")


class AnalysisDataset(DikeLabBase):
    """Rows chosen for analysis plus their column catalogue."""

    rows: list[DatasetRow] = Field(default_factory=list)
    source: DatasetSource = DatasetSource.EMPTY
    no_imported_data: bool = Field(default=False, alias="noImportedData")
    available_columns: list[str] = Field(default_factory=list, alias="availableColumns")
    custom_columns: list[str] = Field(default_factory=list, alias="customColumns")
    axes: AxisDefaults = Field(default_factory=AxisDefaults)
