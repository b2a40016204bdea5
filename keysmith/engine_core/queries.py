"""
State Queries - Locate, classify and structurally move card instances.

These helpers do not enforce game rules and do not clamp counters.
`remove_by_id` is the single choke point for zone transfers: a handler
that moves a card removes it here first, then inserts it elsewhere, so an
instance is never in two zones at once.
"""

from __future__ import annotations
from enum import Enum
from typing import Iterator

from .state import GameState, PlayerState, CardInGame, Creature, ZoneName
from .errors import CardNotFound, PlayerNotFound


class ZoneKind(str, Enum):
    """Coarse classification of where a card currently sits."""
    CREATURE = "creature"
    ARTIFACT = "artifact"
    HAND = "hand"
    UPGRADE = "upgrade"
    OTHER = "other"


def get_player(state: GameState, player_id: str | None) -> PlayerState:
    """Get a player by id or raise PlayerNotFound."""
    player = state.get_player(player_id)
    if player is None:
        raise PlayerNotFound(player_id)
    return player


def opponent_of(state: GameState, player_id: str) -> PlayerState:
    opponent = state.opponent_of(player_id)
    if opponent is None:
        raise PlayerNotFound(player_id)
    return opponent


def _holds(player: PlayerState, card_id: str) -> bool:
    return any(card.id == card_id for card in player.all_cards())


def find_owner(state: GameState, card_id: str | None) -> PlayerState:
    """
    Find the player whose zones hold the card.

    Attached upgrades and cards underneath count as held by the player
    whose zone holds their host.
    """
    for player in state.players:
        if card_id is not None and _holds(player, card_id):
            return player
    raise CardNotFound(card_id)


def find_in_zone(player: PlayerState, zone: ZoneName | str, card_id: str | None) -> CardInGame | None:
    """Find a card directly in one of a player's zones. Never raises."""
    for card in player.zone(zone):
        if card.id == card_id:
            return card
    return None


def find_creature(player: PlayerState, card_id: str | None) -> Creature | None:
    card = find_in_zone(player, ZoneName.CREATURES, card_id)
    return card if isinstance(card, Creature) else None


def find_card(state: GameState, card_id: str | None) -> CardInGame:
    """Find an instance anywhere in the game or raise CardNotFound."""
    for card in state.all_cards():
        if card.id == card_id:
            return card
    raise CardNotFound(card_id)


def find_host(state: GameState, card_id: str) -> CardInGame | None:
    """Find the card an upgrade (or under-stacked card) is attached to."""
    for player in state.players:
        for _, cards in player.zones():
            for host in cards:
                if any(c.id == card_id for c in host.upgrades):
                    return host
                if any(c.id == card_id for c in host.cards_underneath):
                    return host
    return None


def classify(state: GameState, card_id: str) -> ZoneKind:
    """Classify a card by the zone that currently holds it."""
    for player in state.players:
        if find_in_zone(player, ZoneName.CREATURES, card_id):
            return ZoneKind.CREATURE
        if find_in_zone(player, ZoneName.ARTIFACTS, card_id):
            return ZoneKind.ARTIFACT
        if find_in_zone(player, ZoneName.HAND, card_id):
            return ZoneKind.HAND
        for creature in player.creatures:
            if any(u.id == card_id for u in creature.upgrades):
                return ZoneKind.UPGRADE
    return ZoneKind.OTHER


def discard_upgrades(owner: PlayerState, card: CardInGame) -> None:
    """Move every upgrade attached to the card into the owner's discard."""
    for upgrade in card.upgrades:
        upgrade.reset()
        owner.discard.append(upgrade)
    card.upgrades = []


def discard_cards_underneath(owner: PlayerState, card: CardInGame) -> None:
    """Move every card stacked under the card into the owner's discard."""
    owner.discard.extend(card.cards_underneath)
    card.cards_underneath = []


def remove_by_id(state: GameState, card_id: str | None) -> CardInGame:
    """
    Detach a card from whichever zone holds it and return it.

    Upgrades and cards underneath are moved to the card owner's discard
    before the card itself is removed.
    """
    owner = find_owner(state, card_id)
    card = find_card(state, card_id)

    discard_upgrades(owner, card)
    discard_cards_underneath(owner, card)

    for _, cards in owner.zones():
        for i, candidate in enumerate(cards):
            if candidate.id == card_id:
                del cards[i]
                return card

    host = find_host(state, card_id)
    if host is not None:
        host.upgrades = [u for u in host.upgrades if u.id != card_id]
        host.cards_underneath = [c for c in host.cards_underneath if c.id != card_id]
        return card

    raise CardNotFound(card_id)


def remove_from_zone(player: PlayerState, zone: ZoneName | str, card: CardInGame) -> None:
    """Remove an instance from a zone by identity."""
    player.set_zone(zone, [c for c in player.zone(zone) if c is not card])


# =============================================================================
# Board iteration
# =============================================================================

def cards_in_play(state: GameState) -> Iterator[tuple[PlayerState, CardInGame]]:
    """
    Every card in play with its controller, in board order.

    Player one then player two; creatures, artifacts, then upgrades.
    """
    for player in state.players:
        for creature in player.creatures:
            yield player, creature
        for artifact in player.artifacts:
            yield player, artifact
        for creature in player.creatures:
            for upgrade in creature.upgrades:
                yield player, upgrade


def controller_of(state: GameState, card: CardInGame) -> PlayerState:
    """The player whose board (or hand, etc.) currently holds the card."""
    return find_owner(state, card.id)


def enemy_creatures(state: GameState, player_id: str) -> list[Creature]:
    return list(opponent_of(state, player_id).creatures)
