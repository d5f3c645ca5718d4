"""Shared types, enums, and base models used across dikelab domain models."""

import math
import re
from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# Leading decimal literal, optionally signed, with optional exponent.
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_float(text: str) -> float:
    """Parse the longest leading decimal literal of ``text``.

    "7.5m" -> 7.5, "-3m" -> -3.0, " 12 " -> 12.0, "abc" -> nan.
    Trailing characters after the number are ignored.
    """
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return math.nan
    return float(match.group(1))


# --- Reusable types ---

CellValue = str | int | float


# --- Shared enums ---


class FactorField(StrEnum):
    """The eight settlement-risk factor fields of a checklist row."""

    HEIGHT = "height"
    WIDTH = "width"
    SLOPE_RATIO = "slopeRatio"
    PGA = "pga"
    H1H2_RATIO = "h1h2Ratio"
    GROUNDWATER = "groundwater"
    RELATIVE_DENSITY = "relativeDensity"
    INCLINATION = "inclination"


FACTOR_FIELDS: tuple[str, ...] = tuple(f.value for f in FactorField)
VALUE_FIELD = "value"

# Nine fixed import targets with their display labels, in mapping order.
TARGET_FIELD_LABELS: dict[str, str] = {
    "height": "Height",
    "width": "Width",
    "slopeRatio": "Slope Ratio",
    "pga": "PGA",
    "h1h2Ratio": "H1/(H1+H2) Ratio",
    "groundwater": "Groundwater",
    "relativeDensity": "Relative Density",
    "inclination": "Inclination",
    "value": "Settlement Value",
}

# Row keys that describe bookkeeping rather than measured data.
BOOKKEEPING_FIELDS: frozenset[str] = frozenset({
    "id",
    "selected",
    "notes",
    "imported",
    "importSource",
    "importDate",
    "timestamp",
    "analysisColumns",
})


class ImportStatusFilter(StrEnum):
    """Checklist filter on whether a row has received imported data."""

    ALL = "all"
    IMPORTED = "imported"
    NOT_IMPORTED = "not-imported"


# --- Base model ---


class DikeLabBase(BaseModel):
    """Base model with common configuration for all dikelab Pydantic models.

    Python attributes are snake_case; multi-word fields declare camelCase
    aliases so persisted blobs keep the original record keys.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
    )
