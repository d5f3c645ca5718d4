"""Tests for the import API.

Covers: preview with suggested mapping, batch and single commits,
all-or-nothing behaviour on an incomplete mapping, and form validation.
"""

import json

import pytest
from httpx import AsyncClient

from dikelab.storage.workspace import Workspace

CSV = (
    b"Height,Width,Slope,PGA,Ratio,GW,Density,Incl,Settlement\n"
    b"5m,20m,1:1.2,0.1g,0.6,-1m,Dr=30%,1 degree,12.5\n"
    b"10m,30m,1:1.8,0.3g,0.2,-5m,Dr=70%,5 degrees,30.1\n"
)

MAPPING = {
    "height": "Height",
    "width": "Width",
    "slopeRatio": "Slope",
    "pga": "PGA",
    "h1h2Ratio": "Ratio",
    "groundwater": "GW",
    "relativeDensity": "Density",
    "inclination": "Incl",
    "value": "Settlement",
}


def _commit_form(**overrides: str) -> dict[str, str]:
    form = {
        "mapping": json.dumps(MAPPING),
        "analysis_columns": json.dumps(["Settlement"]),
    }
    form.update(overrides)
    return form


def _file(content: bytes = CSV, name: str = "data.csv") -> dict:
    return {"file": (name, content, "text/csv")}


class TestPreview:
    @pytest.mark.anyio
    async def test_preview(self, client: AsyncClient) -> None:
        response = await client.post("/v1/imports/preview", files=_file())
        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "delimited"
        assert data["headers"][0] == "Height"
        assert data["row_count"] == 2
        assert data["preview_rows"][0]["Settlement"] == "12.5"
        assert len(data["raw_preview"]) == 3
        suggestion = data["suggestion"]
        assert suggestion["mapping"]["assignments"]["height"] == "Height"
        assert suggestion["mapping"]["assignments"]["pga"] == "PGA"
        assert "value" not in suggestion["mapping"]["assignments"]
        assert suggestion["analysisColumns"] == ["Height"]
        assert (suggestion["xAxis"], suggestion["yAxis"]) == ("Height", "Width")

    @pytest.mark.anyio
    async def test_preview_json(self, client: AsyncClient) -> None:
        content = json.dumps([{"Height (m)": 5, "PGA Level": "0.1g"}]).encode()
        response = await client.post(
            "/v1/imports/preview",
            files={"file": ("rows.json", content, "application/json")},
        )
        data = response.json()
        assert data["format"] == "json"
        assert data["suggestion"]["xAxis"] == "Height (m)"

    @pytest.mark.anyio
    async def test_unsupported_file(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/preview",
            files={"file": ("scan.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 422
        assert "CSV, Excel, or JSON" in response.json()["detail"]

    @pytest.mark.anyio
    async def test_empty_file(self, client: AsyncClient) -> None:
        response = await client.post("/v1/imports/preview", files=_file(b""))
        assert response.status_code == 422


class TestCommit:
    @pytest.mark.anyio
    async def test_batch_commit(self, client: AsyncClient, workspace: Workspace) -> None:
        await client.post(
            "/v1/checklist/selection",
            json={"ids": ["item-4", "item-9", "item-11"], "selected": True},
        )
        response = await client.post(
            "/v1/imports/commit", files=_file(), data=_commit_form(),
        )
        assert response.status_code == 200
        report = response.json()
        assert report["mode"] == "batch"
        assert report["updatedIds"] == ["item-4", "item-9"]
        assert report["skippedIds"] == ["item-11"]
        assert report["importSource"].startswith("Batch import (")

        saved = {i.id: i for i in workspace.load_checklist() or []}
        assert saved["item-9"].height == "10m"
        assert saved["item-9"].value == 30.1
        assert saved["item-9"].extra_fields["Settlement"] == "30.1"
        assert saved["item-11"].imported is False

    @pytest.mark.anyio
    async def test_single_commit(self, client: AsyncClient, workspace: Workspace) -> None:
        response = await client.post(
            "/v1/imports/commit",
            files=_file(),
            data=_commit_form(mode="single", item_id="item-2"),
        )
        assert response.status_code == 200
        assert response.json()["updatedIds"] == ["item-2"]
        saved = workspace.load_checklist() or []
        assert saved[2].value == 12.5
        assert saved[2].analysis_columns == ["Settlement"]

    @pytest.mark.anyio
    async def test_single_requires_item(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/commit", files=_file(), data=_commit_form(mode="single"),
        )
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_single_unknown_item(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/commit",
            files=_file(),
            data=_commit_form(mode="single", item_id="item-999999"),
        )
        assert response.status_code == 404

    @pytest.mark.anyio
    async def test_no_selection(self, client: AsyncClient, workspace: Workspace) -> None:
        response = await client.post(
            "/v1/imports/commit", files=_file(), data=_commit_form(),
        )
        assert response.status_code == 422
        assert "No Items Selected" in response.json()["detail"]
        assert workspace.load_checklist() is None

    @pytest.mark.anyio
    async def test_incomplete_mapping_saves_nothing(
        self, client: AsyncClient, workspace: Workspace,
    ) -> None:
        partial = {k: v for k, v in MAPPING.items() if k != "inclination"}
        response = await client.post(
            "/v1/imports/commit",
            files=_file(),
            data=_commit_form(mapping=json.dumps(partial)),
        )
        assert response.status_code == 422
        assert "Inclination" in response.json()["detail"]
        assert workspace.load_checklist() is None

    @pytest.mark.anyio
    async def test_too_many_analysis_columns(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/commit",
            files=_file(),
            data=_commit_form(analysis_columns=json.dumps(["A", "B", "C", "D"])),
        )
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_mapping_must_be_json(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/commit", files=_file(), data=_commit_form(mapping="{oops"),
        )
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_unknown_target_field(self, client: AsyncClient) -> None:
        response = await client.post(
            "/v1/imports/commit",
            files=_file(),
            data=_commit_form(mapping=json.dumps({**MAPPING, "crest": "Height"})),
        )
        assert response.status_code == 422
