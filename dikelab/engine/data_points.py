"""Manually entered settlement measurements.

Data points carry the eight factor values plus a numeric settlement value.
They are entered one at a time or copied from selected checklist rows that
already hold a value, and charted as the mean value per factor category.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from dikelab.engine.analytics import category_chart, pie_slices
from dikelab.models.analytics import CategoryChart, PieSlice
from dikelab.models.checklist import ChecklistItem, DataPoint, coerce_optional_number
from dikelab.models.common import FACTOR_FIELDS, VALUE_FIELD

logger = logging.getLogger(__name__)

LARGE_IMPORT_THRESHOLD = 500


def build_data_point(fields: Mapping[str, str], value: str | float) -> DataPoint:
    """Create a data point from form input.

    Every factor field must be non-empty and ``value`` must parse as a
    number.

    Raises:
        ValueError: If a field is blank or the value is not numeric.
    """
    parsed = coerce_optional_number(value) if value != "" else None
    if parsed is None or any(not fields.get(key) for key in FACTOR_FIELDS):
        msg = "Please fill in all fields with valid values."
        raise ValueError(msg)
    return DataPoint.model_validate(
        {**{key: fields[key] for key in FACTOR_FIELDS}, VALUE_FIELD: parsed},
    )


def data_points_from_checklist(items: Iterable[ChecklistItem]) -> list[DataPoint]:
    """Copy every selected checklist row that has a value into a data point.

    Raises:
        ValueError: If no selected row has a value.
    """
    chosen = [item for item in items if item.selected and item.value is not None]
    if not chosen:
        msg = "No selected items with values found in the checklist."
        raise ValueError(msg)
    if len(chosen) > LARGE_IMPORT_THRESHOLD:
        logger.info("Importing %d checklist items as data points", len(chosen))

    return [
        DataPoint.model_validate(
            {**dict(zip(FACTOR_FIELDS, item.factor_tuple())), VALUE_FIELD: item.value},
        )
        for item in chosen
    ]


def _records(points: Sequence[DataPoint]) -> list[dict]:
    return [p.model_dump(mode="json", by_alias=True) for p in points]


def data_point_chart(
    points: Sequence[DataPoint],
    x_axis: str = "height",
    group_by: str = "pga",
) -> CategoryChart:
    """Mean settlement value per ``x_axis`` category, one series per group."""
    return category_chart(_records(points), x_axis, VALUE_FIELD, group_by)


def data_point_pie(points: Sequence[DataPoint], x_axis: str = "height") -> list[PieSlice]:
    """Total settlement value per ``x_axis`` category."""
    return pie_slices(_records(points), x_axis, VALUE_FIELD)
