"""
Tests for API layer.

Tests:
- API service methods
- HTTP endpoints through the FastAPI test client
- Error codes
"""

import importlib

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import ActionRequest, CreateMatchRequest, DeckSpec, ErrorCode
from ..api.service import APIService, ServiceError


BROBNAR = [
    "cota-headhunter", "cota-king-of-the-crag", "cota-little-rapscal", "cota-warsong",
    "cota-bumpsy", "cota-lomir-flamefist", "cota-troll", "cota-anger",
]
OTHERS = ["cota-snufflegator", "cota-urchin", "cota-protect-the-weak", "cota-troll"]


def match_body(seed=5):
    return {
        "deck_one": {"name": "Brobnar", "card_ids": BROBNAR},
        "deck_two": {"name": "Others", "card_ids": OTHERS * 2},
        "player_one_name": "Ada",
        "player_two_name": "Grace",
        "seed": seed,
    }


@pytest.fixture
def service():
    """Create a fresh API service."""
    return APIService()


@pytest.fixture
def client(service):
    return TestClient(create_app(service=service))


class TestAPIService:
    """Tests for APIService."""

    def test_create_match(self, service):
        response = service.create_match(CreateMatchRequest.model_validate(match_body()))

        players = response.game_state.players
        assert [p.name for p in players] == ["Ada", "Grace"]
        assert len(players[0].hand) == 7
        assert len(players[1].hand) == 6
        assert players[0].is_active

    def test_create_match_unknown_card(self, service):
        request = CreateMatchRequest(
            deck_one=DeckSpec(card_ids=["cota-troll", "nope"]),
            deck_two=DeckSpec(card_ids=["cota-troll"]),
        )
        with pytest.raises(ServiceError) as exc:
            service.create_match(request)
        assert exc.value.error_code == ErrorCode.UNKNOWN_CARD

    def test_apply_action(self, service):
        match = service.create_match(CreateMatchRequest.model_validate(match_body()))

        response = service.apply_action(
            match.match_id, ActionRequest(type="AlterPlayerAmber", player_id="p1", amount=3),
        )

        assert response.success
        assert response.game_state.players[0].amber == 3

    def test_apply_action_missing_match(self, service):
        with pytest.raises(ServiceError) as exc:
            service.apply_action("nope", ActionRequest(type="EndTurn"))
        assert exc.value.status_code == 404

    def test_import_deck_extends_catalog(self, service, deck_payload):
        before = len(service.catalog)

        response = service.import_deck(deck_payload)

        assert response.card_count == 3
        assert response.houses == ["Brobnar", "Shadows"]
        assert len(service.catalog) == before + 2
        assert "mv-urchin" in service.catalog


class TestHTTP:
    """Tests for the HTTP endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["catalog_size"] == 13
        assert body["script_count"] >= 8

    def test_list_cards(self, client):
        body = client.get("/api/v1/cards").json()
        assert body["count"] == 13
        urchin = next(c for c in body["cards"] if c["title"] == "Urchin")
        assert urchin["keywords"] == ["elusive"]

    def test_match_lifecycle(self, client):
        created = client.post("/api/v1/matches", json=match_body())
        assert created.status_code == 200
        match_id = created.json()["match_id"]

        assert client.get("/api/v1/matches").json()["matches"] == [match_id]
        assert client.get(f"/api/v1/matches/{match_id}").json()["status"] == "active"

        ended = client.delete(f"/api/v1/matches/{match_id}")
        assert ended.json() == {"success": True, "match_id": match_id}

        missing = client.get(f"/api/v1/matches/{match_id}")
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "MATCH_NOT_FOUND"

    def test_play_and_history(self, client):
        match = client.post("/api/v1/matches", json=match_body()).json()
        match_id = match["match_id"]
        hand = match["game_state"]["players"][0]["hand"]

        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"type": "DiscardCard", "card_id": hand[0]["instance_id"]},
        )
        assert response.status_code == 200
        discard = response.json()["game_state"]["players"][0]["discard"]
        assert [c["instance_id"] for c in discard] == [hand[0]["instance_id"]]

        history = client.get(f"/api/v1/matches/{match_id}/history").json()
        assert [e["type"] for e in history["entries"]] == ["DiscardCard"]
        assert history["entries"][0]["success"]

    def test_card_not_found(self, client):
        match_id = client.post("/api/v1/matches", json=match_body()).json()["match_id"]

        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"type": "PlayAction", "card_id": "ghost"},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "CARD_NOT_FOUND"
        history = client.get(f"/api/v1/matches/{match_id}/history").json()
        assert history["entries"][0]["success"] is False

    def test_player_not_found(self, client):
        match_id = client.post("/api/v1/matches", json=match_body()).json()["match_id"]

        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"type": "DrawCard", "player_id": "p9"},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PLAYER_NOT_FOUND"

    def test_invalid_target(self, client):
        body = match_body()
        body["deck_two"]["card_ids"] = ["cota-protect-the-weak"] * 6
        match = client.post("/api/v1/matches", json=body).json()
        match_id = match["match_id"]
        upgrade = match["game_state"]["players"][1]["hand"][0]

        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"type": "PlayCreature", "card_id": upgrade["instance_id"]},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TARGET"

    def test_unknown_card_in_deck(self, client):
        body = match_body()
        body["deck_two"]["card_ids"] = ["cota-nope"]

        response = client.post("/api/v1/matches", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNKNOWN_CARD"

    def test_validation_error(self, client):
        response = client.post("/api/v1/matches", json={"deck_one": {}})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_bad_side_rejected(self, client):
        match_id = client.post("/api/v1/matches", json=match_body()).json()["match_id"]
        response = client.post(
            f"/api/v1/matches/{match_id}/actions",
            json={"type": "PlayCreature", "card_id": "x", "side": "middle"},
        )
        assert response.status_code == 422

    def test_import_deck(self, client, deck_payload):
        response = client.post("/api/v1/decks/import", json=deck_payload)
        assert response.status_code == 200
        assert response.json()["card_ids"] == ["mv-headhunter", "mv-headhunter", "mv-urchin"]

    def test_import_invalid_deck(self, client):
        response = client.post("/api/v1/decks/import", json={"data": {}})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestAppModule:
    """Tests for the module-level application."""

    def test_bad_catalog_keeps_module_importable(self, monkeypatch, tmp_path):
        from ..api import app as app_module

        monkeypatch.setenv("KEYSMITH_CATALOG", str(tmp_path / "missing.json"))
        try:
            reloaded = importlib.reload(app_module)
            assert reloaded.app is None
        finally:
            monkeypatch.delenv("KEYSMITH_CATALOG")
            importlib.reload(app_module)

        assert app_module.app is not None
