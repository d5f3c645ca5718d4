"""Tests for the analytics engine.

Covers: unit-stripping coercion, Pearson edge cases, correlation ranking
and sampling, min-max normalization, point cloud projection, and chart
grouping (scatter, bar/line, pie).
"""

import logging
import math

import pytest

from dikelab.engine.analytics import (
    UNKNOWN_GROUP,
    category_chart,
    coerce_numeric,
    coerce_numeric_or_zero,
    correlate,
    group_label,
    normalize,
    pearson,
    pie_slices,
    project_point_cloud,
    sample_rows,
    scatter_series,
)


def _rows() -> list[dict]:
    return [
        {"id": "item-0", "height": "5m", "pga": "0.1g", "width": "20m",
         "relativeDensity": "Dr=30%", "value": 1.0, "Site": "A"},
        {"id": "item-1", "height": "7.5m", "pga": "0.3g", "width": "25m",
         "relativeDensity": "Dr=50%", "value": 2.0, "Site": "B"},
        {"id": "item-2", "height": "10m", "pga": "0.2g", "width": "30m",
         "relativeDensity": "Dr=70%", "value": 3.0, "Site": "A"},
    ]


# ===================================================================
# Coercion
# ===================================================================


class TestCoerceNumeric:
    @pytest.mark.parametrize(
        ("field", "text", "expected"),
        [
            ("height", "7.5m", 7.5),
            ("width", "25m", 25.0),
            ("pga", "0.2g", 0.2),
            ("slopeRatio", "1:1.5", 1.5),
            ("relativeDensity", "Dr=50%", 50.0),
            ("inclination", "3 degrees", 3.0),
            ("inclination", "1 degree", 1.0),
            ("groundwater", "-3m", -3.0),
            ("h1h2Ratio", "0.4", 0.4),
        ],
    )
    def test_factor_units_stripped(self, field: str, text: str, expected: float) -> None:
        assert coerce_numeric({field: text}, field) == pytest.approx(expected)

    def test_unparseable_factor_is_nan(self) -> None:
        assert math.isnan(coerce_numeric({"slopeRatio": "steep"}, "slopeRatio"))
        assert coerce_numeric_or_zero({"slopeRatio": "steep"}, "slopeRatio") == 0.0

    def test_other_strings_default_to_zero(self) -> None:
        assert coerce_numeric({"Site": "North"}, "Site") == 0.0
        assert coerce_numeric({"Depth": "4.5 m"}, "Depth") == 4.5

    def test_non_numeric_types(self) -> None:
        assert coerce_numeric({"flag": True}, "flag") == 0.0
        assert coerce_numeric({}, "missing") == 0.0
        assert coerce_numeric({"v": 3}, "v") == 3.0


# ===================================================================
# Pearson
# ===================================================================


class TestPearson:
    def test_perfect_positive(self) -> None:
        assert pearson([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)

    def test_perfect_negative(self) -> None:
        assert pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_symmetric(self) -> None:
        x, y = [1.0, 4.0, 2.0, 8.0], [3.0, 1.0, 5.0, 2.0]
        assert pearson(x, y) == pytest.approx(pearson(y, x))

    def test_constant_side_is_zero(self) -> None:
        assert pearson([1, 2, 3], [5, 5, 5]) == 0.0

    def test_empty_or_mismatched_is_zero(self) -> None:
        assert pearson([], []) == 0.0
        assert pearson([1, 2], [1, 2, 3]) == 0.0

    def test_bounded(self) -> None:
        r = pearson([0.1, 0.2, 0.30000000000000004], [0.1, 0.2, 0.3])
        assert -1.0 <= r <= 1.0


# ===================================================================
# Correlation
# ===================================================================


class TestCorrelate:
    def test_ranks_by_absolute_coefficient(self) -> None:
        rows = _rows()
        results = correlate(rows, "value")
        params = [r.parameter for r in results]
        assert "id" not in params
        assert "value" not in params
        assert results[0].correlation == pytest.approx(1.0)
        magnitudes = [abs(r.correlation) for r in results]
        assert magnitudes == sorted(magnitudes, reverse=True)

    def test_height_tracks_value(self) -> None:
        by_param = {r.parameter: r.correlation for r in correlate(_rows())}
        assert by_param["height"] == pytest.approx(1.0)
        assert by_param["width"] == pytest.approx(1.0)
        assert by_param["pga"] == pytest.approx(0.5)

    def test_fewer_than_two_rows(self) -> None:
        assert correlate(_rows()[:1]) == []
        assert correlate([]) == []

    def test_nan_pairs_dropped(self) -> None:
        rows = _rows()
        rows.append({**rows[0], "height": "unknown", "value": 100.0})
        by_param = {r.parameter: r.correlation for r in correlate(rows)}
        assert by_param["height"] == pytest.approx(1.0)

    def test_constant_target(self) -> None:
        rows = [{**r, "value": 5.0} for r in _rows()]
        assert all(r.correlation == 0.0 for r in correlate(rows))

    def test_large_input_is_sampled(self, caplog: pytest.LogCaptureFixture) -> None:
        rows = [{"height": f"{i}m", "value": 2.0 * i + 1} for i in range(1500)]
        with caplog.at_level(logging.INFO, logger="dikelab.engine.analytics"):
            by_param = {r.parameter: r.correlation for r in correlate(rows, seed=11)}
        assert by_param["height"] == pytest.approx(1.0)
        assert "Correlating a sample of 1000 of 1500 rows" in caplog.text

    def test_sample_size_boundary_uses_every_row(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        heights = [float(i) for i in range(1000)]
        values = [i + float((i * 7919) % 13) for i in range(1000)]
        rows = [{"height": f"{h:g}m", "value": v} for h, v in zip(heights, values)]
        with caplog.at_level(logging.INFO, logger="dikelab.engine.analytics"):
            first = correlate(rows)
            second = correlate(rows)
        assert first == second
        assert first[0].correlation == pearson(heights, values)
        assert "Correlating a sample" not in caplog.text


class TestSampleRows:
    def test_small_input_unchanged(self) -> None:
        rows = _rows()
        assert sample_rows(rows, 10) == rows

    def test_sample_size_and_order(self) -> None:
        rows = [{"n": i} for i in range(50)]
        sample = sample_rows(rows, 10, seed=7)
        assert len(sample) == 10
        ns = [r["n"] for r in sample]
        assert ns == sorted(ns)
        assert len(set(ns)) == 10

    def test_seed_is_reproducible(self) -> None:
        rows = [{"n": i} for i in range(50)]
        assert sample_rows(rows, 5, seed=3) == sample_rows(rows, 5, seed=3)


# ===================================================================
# Point cloud
# ===================================================================


class TestNormalize:
    def test_min_max(self) -> None:
        assert normalize([0, 5, 10]) == [0.0, 0.5, 1.0]

    def test_zero_range(self) -> None:
        assert normalize([5, 5, 5]) == [0.5, 0.5, 0.5]

    def test_empty(self) -> None:
        assert normalize([]) == []


class TestProjectPointCloud:
    def test_positions_span_minus_two_to_two(self) -> None:
        cloud = project_point_cloud(_rows())
        assert cloud.positions[0][0] == pytest.approx(-2.0)
        assert cloud.positions[2][0] == pytest.approx(2.0)
        assert cloud.positions[1][0] == pytest.approx(0.0)

    def test_colours_and_sizes(self) -> None:
        cloud = project_point_cloud(_rows(), point_size=4.0)
        assert cloud.colors[0] == pytest.approx((0.0, 0.2, 1.0))
        assert cloud.colors[2] == pytest.approx((1.0, 0.2, 0.0))
        assert cloud.sizes == pytest.approx([2.0, 4.0, 6.0])

    def test_constant_axis_centres(self) -> None:
        rows = [{"height": "5m"}, {"height": "5m"}]
        cloud = project_point_cloud(rows)
        assert all(p[0] == 0.0 for p in cloud.positions)

    def test_axis_names_echoed(self) -> None:
        cloud = project_point_cloud(_rows(), x_axis="Site")
        assert cloud.x_axis == "Site"
        assert cloud.model_dump(by_alias=True)["xAxis"] == "Site"


# ===================================================================
# Charts
# ===================================================================


class TestGroupLabel:
    def test_falsy_is_unknown(self) -> None:
        assert group_label(None) == UNKNOWN_GROUP
        assert group_label("") == UNKNOWN_GROUP
        assert group_label(0) == UNKNOWN_GROUP

    def test_integral_float(self) -> None:
        assert group_label(3.0) == "3"
        assert group_label(2.5) == "2.5"


class TestCharts:
    def test_scatter_groups_in_first_seen_order(self) -> None:
        series = scatter_series(_rows(), "height", "value", "Site")
        assert [s.name for s in series] == ["A", "B"]
        assert [(p.x, p.y) for p in series[0].data] == [(5.0, 1.0), (10.0, 3.0)]

    def test_missing_group_is_unknown(self) -> None:
        series = scatter_series(_rows(), "height", "value", "Region")
        assert [s.name for s in series] == [UNKNOWN_GROUP]

    def test_category_chart_means(self) -> None:
        rows = _rows() + [{**_rows()[0], "value": 3.0}]
        chart = category_chart(rows, "height", "value", "Site")
        a = next(s for s in chart.series if s.name == "A")
        by_x = {p.x: p.y for p in a.data}
        assert by_x["5m"] == pytest.approx(2.0)
        assert by_x["10m"] == pytest.approx(3.0)
        assert chart.categories == ["10m", "5m", "7.5m"]

    def test_pie_sums(self) -> None:
        slices = pie_slices(_rows(), "Site", "value")
        assert {s.name: s.value for s in slices} == {"A": 4.0, "B": 2.0}
