"""Small state helpers shared by card scripts."""

from __future__ import annotations

from ..engine_core.state import GameState, PlayerState, Creature, CardInGame
from ..engine_core import queries


def active_player_state(state: GameState) -> PlayerState:
    return state.active_player


def controller(state: GameState, card: CardInGame) -> PlayerState:
    return queries.controller_of(state, card)


def opponent(state: GameState, card: CardInGame) -> PlayerState:
    return queries.opponent_of(state, controller(state, card).player_id)


def enemy_creatures(state: GameState, card: CardInGame) -> list[Creature]:
    """Creatures on the opposing side of the card."""
    return queries.enemy_creatures(state, controller(state, card).player_id)


def modify_amber(player: PlayerState, amount: int) -> None:
    """Gain or lose Æmber, never below zero."""
    player.amber = max(player.amber + amount, 0)


def steal_amber(state: GameState, thief: PlayerState, amount: int) -> int:
    """Move up to `amount` Æmber from the thief's opponent. Returns how much moved."""
    victim = queries.opponent_of(state, thief.player_id)
    stolen = min(amount, victim.amber)
    victim.amber -= stolen
    thief.amber += stolen
    return stolen


def must_fight_when_used_if_able(creature: Creature) -> None:
    creature.must_fight = True
