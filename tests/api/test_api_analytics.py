"""Tests for the analytics API.

Covers: dataset fallback order, correlation ranking, point cloud with
default and explicit axes, and the chart endpoints.
"""

import pytest
from httpx import AsyncClient

from dikelab.storage.workspace import Workspace


@pytest.fixture
def imported_workspace(workspace: Workspace) -> Workspace:
    """Checklist where three rows carry imported settlement values."""
    items = workspace.bootstrap_checklist()
    for item, value in zip((items[0], items[2187], items[4374]), (1.0, 2.0, 3.0)):
        item.imported = True
        item.value = value
        item.extra_fields["Depth"] = value * 2
        item.analysis_columns = ["Depth"]
    workspace.save_checklist(items)
    return workspace


class TestDataset:
    @pytest.mark.anyio
    async def test_empty_workspace(self, client: AsyncClient) -> None:
        data = (await client.get("/v1/analytics/dataset")).json()
        assert data["source"] == "empty"
        assert data["noImportedData"] is True
        assert data["rows"] == []

    @pytest.mark.anyio
    async def test_imported_items(
        self, client: AsyncClient, imported_workspace: Workspace,
    ) -> None:
        data = (await client.get("/v1/analytics/dataset")).json()
        assert data["source"] == "imported_items"
        assert len(data["rows"]) == 3
        assert data["customColumns"] == ["Depth"]
        assert data["axes"]["xAxis"] == "Depth"


class TestCorrelations:
    @pytest.mark.anyio
    async def test_ranked(self, client: AsyncClient, imported_workspace: Workspace) -> None:
        results = (await client.get("/v1/analytics/correlations")).json()
        by_param = {r["parameter"]: r["correlation"] for r in results}
        assert by_param["height"] == pytest.approx(1.0)
        assert by_param["Depth"] == pytest.approx(1.0)
        assert by_param["width"] == 0.0
        assert "id" not in by_param

    @pytest.mark.anyio
    async def test_empty(self, client: AsyncClient) -> None:
        assert (await client.get("/v1/analytics/correlations")).json() == []


class TestPointCloud:
    @pytest.mark.anyio
    async def test_explicit_axes(
        self, client: AsyncClient, imported_workspace: Workspace,
    ) -> None:
        data = (
            await client.get(
                "/v1/analytics/point-cloud",
                params={"x_axis": "height", "y_axis": "pga", "z_axis": "value"},
            )
        ).json()
        assert data["xAxis"] == "height"
        xs = [p[0] for p in data["positions"]]
        assert xs == pytest.approx([-2.0, 0.0, 2.0])

    @pytest.mark.anyio
    async def test_default_axes_follow_dataset(
        self, client: AsyncClient, imported_workspace: Workspace,
    ) -> None:
        data = (await client.get("/v1/analytics/point-cloud")).json()
        assert data["xAxis"] == "Depth"
        assert len(data["sizes"]) == 3

    @pytest.mark.anyio
    async def test_point_size_must_be_positive(self, client: AsyncClient) -> None:
        response = await client.get("/v1/analytics/point-cloud", params={"point_size": 0})
        assert response.status_code == 422


class TestCharts:
    @pytest.mark.anyio
    async def test_no_data_404(self, client: AsyncClient) -> None:
        response = await client.get("/v1/analytics/charts/bar")
        assert response.status_code == 404

    @pytest.mark.anyio
    async def test_unknown_kind(self, client: AsyncClient) -> None:
        response = await client.get("/v1/analytics/charts/radar")
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_bar(self, client: AsyncClient, imported_workspace: Workspace) -> None:
        data = (
            await client.get(
                "/v1/analytics/charts/bar",
                params={"x_axis": "height", "y_axis": "value", "group_by": "width"},
            )
        ).json()
        assert data["categories"] == ["10m", "5m", "7.5m"]
        assert [s["name"] for s in data["series"]] == ["20m"]

    @pytest.mark.anyio
    async def test_scatter(self, client: AsyncClient, imported_workspace: Workspace) -> None:
        data = (
            await client.get(
                "/v1/analytics/charts/scatter",
                params={"x_axis": "Depth", "y_axis": "value", "group_by": "height"},
            )
        ).json()
        assert [s["name"] for s in data] == ["5m", "7.5m", "10m"]
        assert data[0]["data"] == [{"x": 2.0, "y": 1.0}]

    @pytest.mark.anyio
    async def test_pie(self, client: AsyncClient, imported_workspace: Workspace) -> None:
        data = (
            await client.get(
                "/v1/analytics/charts/pie", params={"x_axis": "height", "y_axis": "value"},
            )
        ).json()
        assert {s["name"]: s["value"] for s in data} == {"5m": 1.0, "7.5m": 2.0, "10m": 3.0}
