"""Tests for the FastAPI API endpoints."""

import pytest
from fastapi.testclient import TestClient

from worldsheet_kernel.api.app import create_app
from worldsheet_kernel.implications.engine import ImplicationEngine
from worldsheet_kernel.models.config import KernelConfig
from worldsheet_kernel.store.memory import InMemoryWorksheetStore


@pytest.fixture
def client():
    """Create a test client with fresh components."""
    app = create_app(
        store=InMemoryWorksheetStore(),
        engine=ImplicationEngine(),
        config=KernelConfig(log_level="DEBUG"),
    )
    return TestClient(app)


def _create(client, tool_type, title=None, data=None, world_id="world_1") -> str:
    response = client.post("/worksheets", json={
        "world_id": world_id,
        "tool_type": tool_type,
        "title": title,
        "data": data or {},
    })
    assert response.status_code == 200
    return response.json()["id"]


class TestWorksheetEndpoints:
    def test_create_and_get(self, client):
        ws_id = _create(client, "planetary-profile", "Arrakis", {"starType": "G-type"})
        response = client.get(f"/worksheets/{ws_id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"starType": "G-type"}

    def test_get_missing(self, client):
        assert client.get("/worksheets/nope").status_code == 404

    def test_update(self, client):
        ws_id = _create(client, "planetary-profile", "Arrakis")
        response = client.put(f"/worksheets/{ws_id}", json={"title": "Dune"})
        assert response.status_code == 200
        assert response.json()["title"] == "Dune"

    def test_delete(self, client):
        ws_id = _create(client, "planetary-profile")
        assert client.delete(f"/worksheets/{ws_id}").status_code == 200
        assert client.delete(f"/worksheets/{ws_id}").status_code == 404

    def test_list_by_world_and_tool(self, client):
        _create(client, "planetary-profile", "A")
        _create(client, "planetary-profile", "B", world_id="world_2")
        _create(client, "evolutionary-biology", "C")
        response = client.get("/worlds/world_1/worksheets", params={"tool_type": "planetary-profile"})
        assert [w["title"] for w in response.json()] == ["A"]


class TestLinkEndpoints:
    def test_tool_links(self, client):
        response = client.get("/tools/evolutionary-biology/links")
        links = response.json()
        assert [l["key"] for l in links] == ["planet", "ecr"]
        assert links[0]["targetTool"] == "planetary-profile"
        assert links[0]["targetToolName"] == "Planetary Profile"

    def test_tool_without_links(self, client):
        assert client.get("/tools/drake-equation-calculator/links").json() == []

    def test_link_lifecycle(self, client):
        source = _create(client, "xenomythology-framework-builder", "Myths")
        planet = _create(client, "planetary-profile", None, {"starType": "M-type"})

        options = client.get(f"/worksheets/{source}/links/planet/options").json()
        assert options == [{"id": planet, "title": "Untitled"}]

        response = client.post(f"/worksheets/{source}/links/planet", json={"worksheet_id": planet})
        assert response.status_code == 200
        status = response.json()
        assert status["state"] == "fresh"
        assert status["ref"]["syncedData"] == {"starType": "M-type", "title": "Untitled"}

        client.put(f"/worksheets/{planet}", json={"data": {"starType": "K-type"}})
        refreshed = client.post(f"/worksheets/{source}/links/planet/refresh").json()
        assert refreshed["ref"]["syncedData"]["starType"] == "K-type"

        client.delete(f"/worksheets/{planet}")
        broken = client.get(f"/worksheets/{source}/links/planet").json()
        assert broken["state"] == "stale"
        assert broken["is_broken"] is True
        assert broken["ref"]["worksheetId"] == planet

        unlinked = client.delete(f"/worksheets/{source}/links/planet").json()
        assert unlinked["state"] == "unlinked"
        assert "planet" not in client.get(f"/worksheets/{source}").json()["data"]

    def test_select_wrong_tool(self, client):
        source = _create(client, "xenomythology-framework-builder")
        other = _create(client, "spacecraft-designer")
        response = client.post(f"/worksheets/{source}/links/planet", json={"worksheet_id": other})
        assert response.status_code == 422

    def test_unknown_link_key(self, client):
        source = _create(client, "xenomythology-framework-builder")
        assert client.get(f"/worksheets/{source}/links/propulsion").status_code == 404

    def test_refresh_unlinked(self, client):
        source = _create(client, "xenomythology-framework-builder")
        assert client.post(f"/worksheets/{source}/links/planet/refresh").status_code == 409

    def test_all_link_statuses(self, client):
        source = _create(client, "spacecraft-designer")
        statuses = client.get(f"/worksheets/{source}/links").json()
        assert [s["key"] for s in statuses] == ["propulsion"]


class TestImplicationEndpoints:
    def test_evaluate_with_dismissal(self, client):
        form_state = {
            "sensoryArchitecture": {"primaryModalities": ["visual-visible", "echolocation"]},
            "planetaryConditions": {"dayNightCycle": "regular", "planetType": "desert"},
        }
        response = client.post("/implications/evaluate", json={
            "form_state": form_state,
            "dismissed_ids": ["water-sacred"],
        })
        data = response.json()
        assert [i["id"] for i in data["implications"]] == ["duality-orbs", "water-sacred"]
        assert [i["id"] for i in data["visible"]] == ["duality-orbs"]
        assert data["visible"][0]["biologyFactors"] == ["primaryModalities"]

    def test_worksheet_implications(self, client):
        ws_id = _create(client, "xenomythology-framework-builder", data={
            "planetaryConditions": {"stellarEnvironment": "rogue"},
        })
        response = client.get(f"/worksheets/{ws_id}/implications")
        assert [i["id"] for i in response.json()] == ["eternal-darkness"]


class TestEcrImportEndpoints:
    def test_import(self, client):
        target = _create(client, "xenomythology-framework-builder", data={
            "planetaryConditions": {"geographicDiversity": "fragmented"},
        })
        ecr = _create(client, "environmental-chain-reaction", data={
            "parameter": {"mode": "single", "type": "stellar", "specificValue": "binary"},
        })
        preview = client.get(f"/worksheets/{ecr}/import/ecr/preview").json()
        assert preview[0]["field"] == "stellarEnvironment"

        response = client.post(f"/worksheets/{target}/import/ecr", json={"ecr_worksheet_id": ecr})
        data = response.json()["data"]
        assert data["planetaryConditions"]["stellarEnvironment"] == "binary"
        assert data["planetaryConditions"]["geographicDiversity"] == "fragmented"
        assert data["_linkedWorksheets"]["ecrWorksheetId"] == ecr

    def test_import_from_non_ecr(self, client):
        target = _create(client, "xenomythology-framework-builder")
        other = _create(client, "planetary-profile")
        response = client.post(f"/worksheets/{target}/import/ecr", json={"ecr_worksheet_id": other})
        assert response.status_code == 422
