"""Checklist row and manual data-point models.

A ChecklistItem is one point of the factor Cartesian product plus its
tracking state. Known fields are typed; anything else merged in from an
import lands in ``extra_fields``. Records (flat dicts keyed by the
camelCase field names) are the persisted and exported shape.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import Field

from dikelab.models.common import (
    FACTOR_FIELDS,
    CellValue,
    DikeLabBase,
    new_uuid7,
    parse_leading_float,
    utc_now,
)

AnalysisDataPoint = dict[str, CellValue]


def coerce_optional_number(raw: object) -> float | None:
    """Coerce a loosely typed cell to a float, or None when it does not parse."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return None if math.isnan(raw) else float(raw)
    parsed = parse_leading_float(str(raw))
    return None if math.isnan(parsed) else parsed


class FactorValues(DikeLabBase):
    """The eight factor leaf names shared by checklist rows and data points."""

    height: str
    width: str
    slope_ratio: str = Field(..., alias="slopeRatio")
    pga: str
    h1h2_ratio: str = Field(..., alias="h1h2Ratio")
    groundwater: str
    relative_density: str = Field(..., alias="relativeDensity")
    inclination: str

    def factor_tuple(self) -> tuple[str, ...]:
        """Return the factor values in canonical order (height … inclination)."""
        return tuple(getattr(self, attr_for_key(key)) for key in FACTOR_FIELDS)


class ChecklistItem(FactorValues):
    """One combination of factor values plus mutable tracking state."""

    id: str
    selected: bool = False
    notes: str = ""
    value: float | None = None
    imported: bool = False
    import_source: str | None = Field(default=None, alias="importSource")
    import_date: datetime | None = Field(default=None, alias="importDate")
    analysis_columns: list[str] | None = Field(default=None, alias="analysisColumns")
    extra_fields: dict[str, CellValue] = Field(
        default_factory=dict, alias="extraFields",
    )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ChecklistItem:
        """Build an item from a flat record, folding unknown keys into extras.

        Raises:
            pydantic.ValidationError: If a known field has an invalid type.
        """
        known: dict[str, Any] = {}
        extras: dict[str, CellValue] = {}
        for key, raw in record.items():
            attr = _RECORD_KEYS.get(key)
            if attr is None:
                if key == "extraFields" and isinstance(raw, Mapping):
                    extras.update(raw)
                elif isinstance(raw, (str, int, float)) and not isinstance(raw, bool):
                    extras[key] = raw
                continue
            known[attr] = raw
        if "value" in known:
            known["value"] = coerce_optional_number(known["value"])
        return cls.model_validate({**known, "extra_fields": extras})

    def to_record(self) -> dict[str, Any]:
        """Flatten to a JSON-ready record; unset optionals are omitted."""
        record = self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"extra_fields"},
        )
        for key, val in self.extra_fields.items():
            record.setdefault(key, val)
        return record

    def get_field(self, key: str) -> Any:
        """Read a field by its record key, falling back to extension fields."""
        attr = _RECORD_KEYS.get(key)
        if attr is not None:
            return getattr(self, attr)
        return self.extra_fields.get(key)

    def to_analysis_point(self) -> AnalysisDataPoint:
        """Project to factor fields + value + analysis columns."""
        point: AnalysisDataPoint = {
            key: getattr(self, attr_for_key(key)) for key in FACTOR_FIELDS
        }
        if self.value is not None:
            point["value"] = self.value
        for col in self.analysis_columns or []:
            val = self.get_field(col)
            if isinstance(val, (str, int, float)) and not isinstance(val, bool):
                point[col] = val
        return point


class DataPoint(FactorValues):
    """A manually entered settlement measurement."""

    id: str = Field(default_factory=lambda: f"dp-{new_uuid7()}")
    value: float
    timestamp: datetime = Field(default_factory=utc_now)


def attr_for_key(key: str) -> str:
    return _RECORD_KEYS[key]


_RECORD_KEYS: dict[str, str] = {
    (info.alias or name): name
    for name, info in ChecklistItem.model_fields.items()
    if name != "extra_fields"
}
