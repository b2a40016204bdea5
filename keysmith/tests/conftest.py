"""
Pytest fixtures for Keysmith tests.
"""

import pytest

from ..catalog import CardCatalog, load_catalog
from ..engine_core.state import GameState, PlayerState, CardInGame, ZoneName, new_instance
from ..engine_core.reducer import Reducer
from ..scripts.registry import ScriptRegistry, default_registry


class Table:
    """
    Places catalog cards straight into a test state's zones.

    Bypasses the reducer, so auras are not applied until the next action
    (or an explicit recompute).
    """

    def __init__(self, state: GameState, catalog: CardCatalog):
        self.state = state
        self.catalog = catalog
        self._count = 0

    def instance(self, player_id: str, title: str) -> CardInGame:
        card = self.catalog.by_title(title)
        assert card is not None, f"{title} missing from sample catalog"
        self._count += 1
        return new_instance(card, f"{player_id}:{card.script_key}:{self._count}", player_id)

    def put(self, player_id: str, zone: ZoneName | str, title: str) -> CardInGame:
        card = self.instance(player_id, title)
        self.state.get_player(player_id).zone(zone).append(card)
        return card

    def attach(self, host: CardInGame, title: str) -> CardInGame:
        upgrade = self.instance(host.owner_id, title)
        host.upgrades.append(upgrade)
        return upgrade


@pytest.fixture
def catalog() -> CardCatalog:
    """The bundled sample catalog."""
    return load_catalog()


@pytest.fixture
def registry() -> ScriptRegistry:
    return default_registry()


@pytest.fixture
def reducer(registry: ScriptRegistry) -> Reducer:
    """A reducer with a fixed seed."""
    return Reducer(registry=registry, seed=42)


@pytest.fixture
def state() -> GameState:
    """An empty two-player state, player one active."""
    return GameState(
        game_id="test_game",
        players=[
            PlayerState(player_id="p1", name="Player One"),
            PlayerState(player_id="p2", name="Player Two"),
        ],
    )


@pytest.fixture
def table(state: GameState, catalog: CardCatalog) -> Table:
    return Table(state, catalog)


@pytest.fixture
def deck_payload() -> dict:
    """A master-vault style deck document with a repeated card."""
    return {
        "data": {
            "id": "deck-1",
            "name": "Sample Brobnar",
            "_links": {
                "houses": ["Brobnar", "Shadows"],
                "cards": ["mv-headhunter", "mv-headhunter", "mv-urchin"],
            },
        },
        "_linked": {
            "cards": [
                {
                    "id": "mv-headhunter",
                    "card_title": "Headhunter",
                    "house": "Brobnar",
                    "card_type": "Creature",
                    "card_text": "Fight: Gain 1A.",
                    "amber": 0,
                    "power": "5",
                    "armor": "0",
                    "traits": "Giant",
                    "expansion": 341,
                    "is_maverick": False,
                },
                {
                    "id": "mv-urchin",
                    "card_title": "Urchin",
                    "house": "Shadows",
                    "card_type": "Creature",
                    "card_text": "Elusive. Play: Steal 1A.",
                    "amber": 0,
                    "power": 1,
                    "armor": None,
                    "traits": "Faerie • Thief",
                    "expansion": 341,
                    "is_maverick": False,
                },
            ],
        },
    }
