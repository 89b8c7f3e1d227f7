"""Tests for the HTTP surface.

The app is built with injected services whose feed clients run on fakes,
so the lifespan starts and stops without sockets.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from livedex.api.app import create_app
from livedex.api.startup_state import (
    CatalogReport,
    StartupPhase,
    StartupState,
    get_startup_state,
    reset_startup_state,
)
from livedex.core.catalog import CatalogStore
from livedex.providers.pokeapi.client import PokeAPIClient
from livedex.services.descriptions import DescriptionService
from livedex.services.live_context import LiveContextService


@pytest.fixture
def live(store, route_feed, battle_feed):
    return LiveContextService(store, route_feed.client, battle_feed.client, heartbeat_seconds=3600)


@pytest.fixture
def api(live, fake_pokeapi, monkeypatch):
    # Keep the test runner's logging handlers in place
    monkeypatch.setattr("livedex.utilities.logging._configured", True)
    reset_startup_state()

    descriptions = DescriptionService(PokeAPIClient(transport=httpx.MockTransport(fake_pokeapi), retry_delay=0))
    app = create_app(live_service=live, description_service=descriptions)
    with TestClient(app) as client:
        yield client


def open_and_send(feed, raw):
    feed.connections.last.open()
    feed.connections.last.message(raw)


# =============================================================================
# HEALTH
# =============================================================================


class TestHealth:
    def test_ready_after_startup(self, api, catalog):
        response = api.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["startup"]["phase"] == "ready"
        assert data["startup"]["problems"] == []
        assert data["startup"]["catalog"]["areas"] == len(catalog)
        assert data["startup"]["catalog"]["error"] is None
        assert data["startup"]["feeds"] == {"route": True, "battle": True}
        assert data["connections"] == {"route": "connecting", "battle": "connecting"}

    def test_connections_follow_the_feeds(self, api, route_feed):
        open_and_send(route_feed, "Route 1")
        assert api.get("/health").json()["connections"]["route"] == "open"

    def test_degraded_with_every_feed_disabled(self, api):
        api.put("/api/v1/live/route/enabled", json={"enabled": False})
        api.put("/api/v1/live/battle/enabled", json={"enabled": False})

        data = api.get("/health").json()
        assert data["status"] == "degraded"
        assert data["startup"]["problems"] == ["no feed enabled"]

        api.put("/api/v1/live/battle/enabled", json={"enabled": True})
        assert api.get("/health").json()["status"] == "healthy"

    def test_starting_before_lifespan(self):
        reset_startup_state()
        state = get_startup_state()
        state.set_phase(StartupPhase.LOADING_CATALOG)

        assert not state.is_ready
        assert state.to_dict()["message"] == "Loading area catalog..."
        assert state.to_dict()["catalog"] is None

    def test_empty_catalog_is_a_problem(self):
        state = StartupState()
        state.record_catalog(CatalogReport(areas=0, regions=[], generation=0))
        state.record_feeds({"route": True, "battle": False})

        assert state.problems == ["catalog is empty"]


# =============================================================================
# LIVE FEEDS
# =============================================================================


class TestLiveRoute:
    def test_not_connected(self, api):
        data = api.get("/api/v1/live/route").json()

        assert data["status"] == "not_connected"
        assert data["status_text"] == "Not connected"
        assert data["connection"] == "connecting"
        assert data["encounters"] == []

    def test_matched(self, api, route_feed):
        open_and_send(route_feed, json.dumps({"text": "Mt. Moon Ch 3", "confidence": 0.88}))

        data = api.get("/api/v1/live/route").json()

        assert data["status"] == "matched"
        assert data["connection"] == "open"
        assert data["cleaned_text"] == "Mt. Moon"
        assert data["confidence"] == 0.88
        assert data["match"]["raw_map_name"] == "Mt. Moon"
        assert data["match"]["score"] == 100
        assert data["regions"] == ["Kanto"]

        zubat = next(g for g in data["encounters"] if g["species_name"] == "Zubat")
        assert [s["method_label"] for s in zubat["encounters"]] == ["Cave", "Horde"]
        assert zubat["encounters"][0]["min_level"] == 7

    def test_no_data(self, api, route_feed):
        open_and_send(route_feed, "NO_ROUTE")
        assert api.get("/api/v1/live/route").json()["status"] == "no_data"


class TestLiveBattle:
    def test_species(self, api, battle_feed):
        open_and_send(battle_feed, "Clefairy Lv.10 HP 30/30")

        data = api.get("/api/v1/live/battle").json()

        assert data["status"] == "matched"
        assert data["species"] == ["Clefairy"]
        assert data["status_text"] == "Matched"

    def test_no_match(self, api, battle_feed):
        open_and_send(battle_feed, "Lv.5")
        assert api.get("/api/v1/live/battle").json()["status"] == "no_match"


class TestFeedControls:
    def test_status(self, api, route_feed):
        open_and_send(route_feed, "Route 1")

        data = api.get("/api/v1/live/route/status").json()

        assert data["feed"] == "route"
        assert data["state"] == "open"
        assert data["enabled"] is True
        assert data["has_cached_payload"] is True

    def test_unknown_feed(self, api):
        response = api.get("/api/v1/live/weather/status")
        assert response.status_code == 400

    def test_resync(self, api, route_feed, battle_feed):
        open_and_send(route_feed, "Route 1")

        data = api.post("/api/v1/live/resync").json()

        assert data["reconnected"] == ["battle"]
        assert len(battle_feed.connections.connections) == 2

    def test_reconnect(self, api, route_feed):
        open_and_send(route_feed, "Route 1")

        data = api.post("/api/v1/live/route/reconnect").json()

        assert data["state"] == "connecting"
        assert data["has_cached_payload"] is False
        assert api.get("/api/v1/live/route").json()["status"] == "not_connected"

    def test_disable_and_enable(self, api, battle_feed):
        data = api.put("/api/v1/live/battle/enabled", json={"enabled": False}).json()
        assert data["enabled"] is False
        assert data["state"] == "disconnected"

        data = api.put("/api/v1/live/battle/enabled", json={"enabled": True}).json()
        assert data["enabled"] is True
        assert data["state"] == "connecting"

    def test_enabled_requires_body(self, api):
        assert api.put("/api/v1/live/battle/enabled", json={}).status_code == 422


# =============================================================================
# AREAS
# =============================================================================


class TestAreaMatch:
    def test_match(self, api):
        response = api.get("/api/v1/areas/match", params={"q": "Route 10"})

        assert response.status_code == 200
        data = response.json()
        assert data["query"] == "Route 10"
        assert data["match"]["region"] == "Kanto"
        assert data["regions"] == ["Kanto", "Johto"]
        assert [g["species_name"] for g in data["encounters"]] == ["Spearow", "Voltorb"]

    def test_region_choice(self, api):
        data = api.get("/api/v1/areas/match", params={"q": "Route 10", "region": "Johto"}).json()
        assert data["region"] == "Johto"
        assert [g["species_name"] for g in data["encounters"]] == ["Voltorb"]

    def test_region_without_that_area(self, api):
        response = api.get("/api/v1/areas/match", params={"q": "Route 10", "region": "Hoenn"})
        assert response.status_code == 404

    def test_no_match(self, api):
        assert api.get("/api/v1/areas/match", params={"q": "qq zz"}).status_code == 404

    def test_blank_query(self, api):
        assert api.get("/api/v1/areas/match", params={"q": "  "}).status_code == 400

    def test_missing_query(self, api):
        assert api.get("/api/v1/areas/match").status_code == 422


# =============================================================================
# CATALOG
# =============================================================================


class TestCatalogReload:
    def test_reload_from_path(self, api, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"Hoenn": {"Route 101": [{"speciesName": "Zigzagoon", "method": "Grass"}]}}))

        response = api.post("/api/v1/catalog/reload", json={"path": str(path)})

        assert response.status_code == 200
        assert response.json() == {"areas": 1, "regions": ["Hoenn"], "species": 1, "generation": 1}
        assert api.get("/api/v1/areas/match", params={"q": "Route 101"}).status_code == 200

    def test_reload_without_configured_path(self, api):
        response = api.post("/api/v1/catalog/reload")

        assert response.status_code == 400
        assert "No catalog path" in response.json()["detail"]

    def test_reload_failure_keeps_catalog(self, api, tmp_path):
        response = api.post("/api/v1/catalog/reload", json={"path": str(tmp_path / "missing.json")})

        assert response.status_code == 400
        assert api.get("/api/v1/areas/match", params={"q": "Route 10"}).status_code == 200


# =============================================================================
# DESCRIPTIONS
# =============================================================================


class TestDescribe:
    def test_move(self, api):
        data = api.get("/api/v1/describe/move/Thunder Punch").json()

        assert data["name"] == "Thunder Punch"
        assert data["type"] == "electric"
        assert data["short_effect"] == "Has a 10% chance to paralyze the target."

    def test_ability(self, api):
        data = api.get("/api/v1/describe/ability/static").json()
        assert data["name"] == "Static"
        assert data["power"] is None

    def test_unknown_kind(self, api):
        assert api.get("/api/v1/describe/item/potion").status_code == 400

    def test_not_found(self, api):
        assert api.get("/api/v1/describe/move/not-a-move").status_code == 404


def test_startup_with_missing_catalog_file(catalog, route_feed, battle_feed, monkeypatch, tmp_path):
    monkeypatch.setattr("livedex.utilities.logging._configured", True)
    reset_startup_state()

    store = CatalogStore(catalog, path=tmp_path / "missing.json")
    live = LiveContextService(store, route_feed.client, battle_feed.client, heartbeat_seconds=3600)
    app = create_app(live_service=live, description_service=DescriptionService(PokeAPIClient(retry_delay=0)))

    with TestClient(app) as client:
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert "not found" in data["startup"]["catalog"]["error"]
        assert data["startup"]["problems"][0].startswith("catalog not loaded")

        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"Kanto": {"Route 1": [{"speciesName": "Pidgey", "method": "Grass"}]}}))
        client.post("/api/v1/catalog/reload", json={"path": str(path)})

        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["startup"]["catalog"]["areas"] == 1
        assert data["startup"]["catalog"]["path"] == str(path)
