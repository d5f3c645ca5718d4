"""Tests for the manual data point API."""

import pytest
from httpx import AsyncClient

from dikelab.storage.workspace import Workspace

POINT = {
    "height": "5m",
    "width": "20m",
    "slopeRatio": "1:1.2",
    "pga": "0.1g",
    "h1h2Ratio": "0.6",
    "groundwater": "-1m",
    "relativeDensity": "Dr=30%",
    "inclination": "1 degree",
    "value": "3.5",
}


class TestAddDataPoint:
    @pytest.mark.anyio
    async def test_add_and_list(self, client: AsyncClient) -> None:
        response = await client.post("/v1/data-points", json=POINT)
        assert response.status_code == 201
        created = response.json()
        assert created["value"] == 3.5
        assert created["id"].startswith("dp-")

        listed = (await client.get("/v1/data-points")).json()
        assert [p["id"] for p in listed] == [created["id"]]

    @pytest.mark.anyio
    async def test_blank_field_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/v1/data-points", json={**POINT, "pga": ""})
        assert response.status_code == 422
        assert "Please fill in all fields" in response.json()["detail"]

    @pytest.mark.anyio
    async def test_non_numeric_value_rejected(self, client: AsyncClient) -> None:
        response = await client.post("/v1/data-points", json={**POINT, "value": "lots"})
        assert response.status_code == 422


class TestFromChecklist:
    @pytest.mark.anyio
    async def test_no_saved_checklist(self, client: AsyncClient) -> None:
        response = await client.post("/v1/data-points/from-checklist")
        assert response.status_code == 404

    @pytest.mark.anyio
    async def test_nothing_eligible(self, client: AsyncClient, workspace: Workspace) -> None:
        workspace.save_checklist(workspace.bootstrap_checklist()[:5])
        response = await client.post("/v1/data-points/from-checklist")
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_copies_selected_valued(
        self, client: AsyncClient, workspace: Workspace,
    ) -> None:
        await client.post("/v1/data-points", json=POINT)
        items = workspace.bootstrap_checklist()[:5]
        items[1].selected = True
        items[1].value = 8.0
        workspace.save_checklist(items)
        response = await client.post("/v1/data-points/from-checklist")
        assert response.json() == {"imported": 1, "total": 2}


class TestDataPointCharts:
    @pytest.mark.anyio
    async def test_chart_and_pie(self, client: AsyncClient) -> None:
        await client.post("/v1/data-points", json=POINT)
        await client.post("/v1/data-points", json={**POINT, "value": 6.5})
        await client.post("/v1/data-points", json={**POINT, "height": "10m", "value": 1})

        chart = (await client.get("/v1/data-points/chart")).json()
        series = {s["name"]: {p["x"]: p["y"] for p in s["data"]} for s in chart["series"]}
        assert series == {"0.1g": {"5m": 5.0, "10m": 1.0}}

        pie = (await client.get("/v1/data-points/pie")).json()
        assert {s["name"]: s["value"] for s in pie} == {"5m": 10.0, "10m": 1.0}

    @pytest.mark.anyio
    async def test_empty_chart(self, client: AsyncClient) -> None:
        chart = (await client.get("/v1/data-points/chart")).json()
        assert chart == {"series": [], "categories": []}
