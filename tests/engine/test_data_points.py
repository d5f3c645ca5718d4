"""Tests for manual data point entry, checklist copy, and charts."""

import pytest

from dikelab.engine.data_points import (
    build_data_point,
    data_point_chart,
    data_point_pie,
    data_points_from_checklist,
)
from dikelab.engine.generator import generate_checklist
from dikelab.models.common import FACTOR_FIELDS
from dikelab.taxonomy.defaults import default_taxonomy

FIELDS = {
    "height": "5m",
    "width": "20m",
    "slopeRatio": "1:1.2",
    "pga": "0.1g",
    "h1h2Ratio": "0.6",
    "groundwater": "-1m",
    "relativeDensity": "Dr=30%",
    "inclination": "1 degree",
}


class TestBuildDataPoint:
    def test_valid_entry(self) -> None:
        point = build_data_point(FIELDS, "12.5")
        assert point.value == 12.5
        assert point.factor_tuple() == tuple(FIELDS[k] for k in FACTOR_FIELDS)
        assert point.id.startswith("dp-")

    @pytest.mark.parametrize("value", ["", "abc"])
    def test_invalid_value(self, value: str) -> None:
        with pytest.raises(ValueError, match="Please fill in all fields"):
            build_data_point(FIELDS, value)

    def test_blank_field(self) -> None:
        with pytest.raises(ValueError, match="Please fill in all fields"):
            build_data_point({**FIELDS, "pga": ""}, 3)

    def test_missing_field(self) -> None:
        fields = dict(FIELDS)
        del fields["inclination"]
        with pytest.raises(ValueError):
            build_data_point(fields, 3)


class TestFromChecklist:
    def test_copies_selected_with_value(self) -> None:
        items = generate_checklist(default_taxonomy())[:5]
        items[0].selected = True
        items[0].value = 4.0
        items[1].selected = True
        items[2].value = 9.0
        points = data_points_from_checklist(items)
        assert len(points) == 1
        assert points[0].value == 4.0
        assert points[0].factor_tuple() == items[0].factor_tuple()

    def test_nothing_eligible(self) -> None:
        items = generate_checklist(default_taxonomy())[:5]
        items[0].selected = True
        with pytest.raises(ValueError, match="No selected items with values"):
            data_points_from_checklist(items)


class TestDataPointCharts:
    def test_mean_per_height_grouped_by_pga(self) -> None:
        points = [
            build_data_point(FIELDS, 2),
            build_data_point(FIELDS, 4),
            build_data_point({**FIELDS, "height": "10m"}, 6),
            build_data_point({**FIELDS, "pga": "0.2g"}, 1),
        ]
        chart = data_point_chart(points)
        series = {s.name: {p.x: p.y for p in s.data} for s in chart.series}
        assert series["0.1g"] == {"5m": 3.0, "10m": 6.0}
        assert series["0.2g"] == {"5m": 1.0}
        assert chart.categories == ["10m", "5m"]

    def test_pie_totals(self) -> None:
        points = [
            build_data_point(FIELDS, 2),
            build_data_point({**FIELDS, "height": "10m"}, 6),
            build_data_point(FIELDS, 1),
        ]
        slices = {s.name: s.value for s in data_point_pie(points)}
        assert slices == {"5m": 3.0, "10m": 6.0}
