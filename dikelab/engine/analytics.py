"""Deterministic analytics over a dataset of loosely typed rows.

Rows are checklist records, analysis snapshot rows, or data point records.
Factor values are display strings with units ("7.5m", "0.2g", "1:1.5",
"Dr=50%", "3 degrees"); ``coerce_numeric`` strips the unit for the known
factor fields and parses the rest leniently.

Two NaN policies, one per call site:
- correlation drops any pair where either side is NaN;
- charts and the point cloud treat NaN as ``0``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from dikelab.models.analytics import (
    CategoryChart,
    CategoryPoint,
    CategorySeries,
    CorrelationResult,
    PieSlice,
    PointCloud,
    ScatterPoint,
    ScatterSeries,
)
from dikelab.models.common import (
    BOOKKEEPING_FIELDS,
    FactorField,
    parse_leading_float,
)

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 1000
DEFAULT_POINT_SIZE = 5.0
UNKNOWN_GROUP = "Unknown"

# Position scale: normalized [0, 1] -> [-2, 2].
_POSITION_SCALE = 4.0

Row = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------


def _strip_unit(field: str, text: str) -> float:
    if field in (FactorField.HEIGHT, FactorField.WIDTH):
        return parse_leading_float(text.replace("m", "", 1))
    if field == FactorField.PGA:
        return parse_leading_float(text.replace("g", "", 1))
    if field == FactorField.SLOPE_RATIO:
        parts = text.split(":")
        return parse_leading_float(parts[1]) if len(parts) > 1 else math.nan
    if field == FactorField.RELATIVE_DENSITY:
        return parse_leading_float(text.replace("Dr=", "", 1).replace("%", "", 1))
    if field == FactorField.INCLINATION:
        return parse_leading_float(
            text.replace(" degrees", "", 1).replace(" degree", "", 1),
        )
    return parse_leading_float(text)


_UNIT_FIELDS = frozenset(FactorField)


def coerce_numeric(row: Row, field: str) -> float:
    """Numeric reading of ``row[field]``.

    Numbers pass through. Strings in a factor field have their unit
    stripped and may come back NaN. Other strings that do not parse give
    ``0``, as do missing values, booleans, and any other type.
    """
    value = row.get(field)
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        if field in _UNIT_FIELDS:
            return _strip_unit(field, value)
        parsed = parse_leading_float(value)
        return 0.0 if math.isnan(parsed) else parsed
    return 0.0


def coerce_numeric_or_zero(row: Row, field: str) -> float:
    """``coerce_numeric`` with NaN mapped to ``0``."""
    value = coerce_numeric(row, field)
    return 0.0 if math.isnan(value) else value


# ---------------------------------------------------------------------------
# Correlation
# ---------------------------------------------------------------------------


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient.

    Returns ``0`` for empty or mismatched inputs and when either side is
    constant.
    """
    if len(x) != len(y) or len(x) == 0:
        return 0.0
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if np.ptp(xs) == 0 or np.ptp(ys) == 0:
        return 0.0
    xd = xs - xs.mean()
    yd = ys - ys.mean()
    sx = math.sqrt(float(np.dot(xd, xd)))
    sy = math.sqrt(float(np.dot(yd, yd)))
    if sx == 0 or sy == 0:
        return 0.0
    r = float(np.dot(xd, yd)) / (sx * sy)
    return max(-1.0, min(1.0, r))


def sample_rows(
    rows: Sequence[Row],
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    *,
    seed: int | None = None,
) -> list[Row]:
    """Uniform random sample without replacement when above ``sample_size``.

    Sampled rows keep their original relative order.
    """
    if len(rows) <= sample_size:
        return list(rows)
    rng = np.random.default_rng(seed)
    picks = np.sort(rng.choice(len(rows), size=sample_size, replace=False))
    return [rows[int(i)] for i in picks]


def correlation_candidates(first_row: Row) -> list[str]:
    """Fields of ``first_row`` with a numeric reading, minus bookkeeping."""
    return [
        key for key in first_row
        if key not in BOOKKEEPING_FIELDS
        and not math.isnan(coerce_numeric(first_row, key))
    ]


def correlate(
    rows: Sequence[Row],
    target: str = "value",
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    seed: int | None = None,
) -> list[CorrelationResult]:
    """Rank every numeric field by its correlation with ``target``.

    Candidate fields come from the first (sampled) row. For each candidate
    pairs with a NaN on either side are dropped; at least two pairs are
    needed. Results are sorted by descending absolute coefficient.
    """
    if len(rows) < 2:
        return []
    sample = sample_rows(rows, sample_size, seed=seed)
    if len(sample) < len(rows):
        logger.info("Correlating a sample of %d of %d rows", len(sample), len(rows))

    target_values = np.array([coerce_numeric(r, target) for r in sample], dtype=float)
    results: list[CorrelationResult] = []
    for column in correlation_candidates(sample[0]):
        if column == target:
            continue
        col_values = np.array([coerce_numeric(r, column) for r in sample], dtype=float)
        valid = ~(np.isnan(col_values) | np.isnan(target_values))
        if int(valid.sum()) < 2:
            continue
        results.append(
            CorrelationResult(
                parameter=column,
                correlation=pearson(col_values[valid], target_values[valid]),
            ),
        )

    results.sort(key=lambda r: abs(r.correlation), reverse=True)
    return results


# ---------------------------------------------------------------------------
# Point cloud
# ---------------------------------------------------------------------------


def normalize(values: Sequence[float]) -> list[float]:
    """Min-max scale into ``[0, 1]``; a zero range maps every value to 0.5."""
    if len(values) == 0:
        return []
    arr = np.asarray(values, dtype=float)
    low, high = float(arr.min()), float(arr.max())
    span = high - low
    if span == 0:
        return [0.5] * len(arr)
    return ((arr - low) / span).tolist()


def project_point_cloud(
    rows: Sequence[Row],
    *,
    x_axis: str = "height",
    y_axis: str = "pga",
    z_axis: str = "value",
    color_by: str = "relativeDensity",
    size_by: str = "width",
    point_size: float = DEFAULT_POINT_SIZE,
) -> PointCloud:
    """Project rows to positions, colours, and sizes for a 3-D scatter."""

    def axis(field: str) -> list[float]:
        return normalize([coerce_numeric_or_zero(r, field) for r in rows])

    xs, ys, zs = axis(x_axis), axis(y_axis), axis(z_axis)
    shades, scales = axis(color_by), axis(size_by)

    def place(n: float) -> float:
        return (n - 0.5) * _POSITION_SCALE

    return PointCloud(
        positions=[(place(x), place(y), place(z)) for x, y, z in zip(xs, ys, zs)],
        colors=[(n, 0.2, 1.0 - n) for n in shades],
        sizes=[point_size * (0.5 + n) for n in scales],
        x_axis=x_axis,
        y_axis=y_axis,
        z_axis=z_axis,
    )


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------


def group_label(value: Any) -> str:
    """Display label used to group rows; empty and zero-like values are Unknown."""
    if not value:
        return UNKNOWN_GROUP
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def scatter_series(
    rows: Sequence[Row],
    x_axis: str,
    y_axis: str,
    group_by: str,
) -> list[ScatterSeries]:
    """Raw (x, y) pairs grouped by the ``group_by`` label, in first-seen order."""
    groups: dict[str, list[ScatterPoint]] = {}
    for row in rows:
        groups.setdefault(group_label(row.get(group_by)), []).append(
            ScatterPoint(
                x=coerce_numeric_or_zero(row, x_axis),
                y=coerce_numeric_or_zero(row, y_axis),
            ),
        )
    return [ScatterSeries(name=name, data=points) for name, points in groups.items()]


def category_chart(
    rows: Sequence[Row],
    x_axis: str,
    y_axis: str,
    group_by: str,
) -> CategoryChart:
    """Mean of ``y_axis`` per ``x_axis`` category within each group.

    Serves both bar and line charts. ``categories`` lists every x label
    across all groups, sorted.
    """
    groups: dict[str, dict[str, list[float]]] = {}
    for row in rows:
        bucket = groups.setdefault(group_label(row.get(group_by)), {})
        bucket.setdefault(group_label(row.get(x_axis)), []).append(
            coerce_numeric_or_zero(row, y_axis),
        )

    series = [
        CategorySeries(
            name=name,
            data=[
                CategoryPoint(x=x, y=float(np.mean(vals)))
                for x, vals in buckets.items()
            ],
        )
        for name, buckets in groups.items()
    ]
    categories = sorted({group_label(row.get(x_axis)) for row in rows})
    return CategoryChart(series=series, categories=categories)


def pie_slices(rows: Sequence[Row], x_axis: str, y_axis: str) -> list[PieSlice]:
    """Sum of ``y_axis`` per ``x_axis`` category, in first-seen order."""
    totals: dict[str, float] = {}
    for row in rows:
        label = group_label(row.get(x_axis))
        totals[label] = totals.get(label, 0.0) + coerce_numeric_or_zero(row, y_axis)
    return [PieSlice(name=name, value=value) for name, value in totals.items()]
