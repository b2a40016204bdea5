"""Call of the Archons - Brobnar."""

from __future__ import annotations

from ...catalog.card import House
from ...engine_core.action import ActionType
from ...engine_core.state import GameState
from ...engine_core import queries
from ..registry import CardScript, Hook, ScriptContext, ScriptRegistryBuilder
from ..helpers import (
    active_player_state,
    enemy_creatures,
    modify_amber,
    must_fight_when_used_if_able,
    opponent,
)


def _headhunter_fight(state: GameState, ctx: ScriptContext) -> None:
    modify_amber(active_player_state(state), 1)


def _king_of_the_crag_aura(state: GameState, ctx: ScriptContext) -> None:
    for creature in enemy_creatures(state, ctx.this_card):
        if creature.card.house == House.BROBNAR:
            creature.power -= 2


def _little_rapscal_aura(state: GameState, ctx: ScriptContext) -> None:
    for player in state.players:
        for creature in player.creatures:
            must_fight_when_used_if_able(creature)


def _warsong_after_action(state: GameState, ctx: ScriptContext) -> None:
    action = ctx.action
    if action is None or action.action_type != ActionType.FIGHT_CREATURE:
        return
    owner = queries.get_player(state, ctx.controller_id)
    # The attacker may already be in a discard pile, so match on its owner
    attacker = queries.find_card(state, action.payload.card_id)
    if attacker.owner_id == owner.player_id:
        modify_amber(owner, 1)


def _bumpsy_play(state: GameState, ctx: ScriptContext) -> None:
    modify_amber(opponent(state, ctx.this_card), -1)


def _lomir_flamefist_play(state: GameState, ctx: ScriptContext) -> None:
    target = opponent(state, ctx.this_card)
    if target.amber >= 7:
        modify_amber(target, -2)


def register(builder: ScriptRegistryBuilder) -> None:
    builder.register("Headhunter", CardScript(
        power=lambda: 5,
        fight=Hook(_headhunter_fight),
    ))
    builder.register("King of the Crag", CardScript(
        power=lambda: 7,
        static_effect=_king_of_the_crag_aura,
    ))
    builder.register("Little Rapscal", CardScript(
        power=lambda: 2,
        elusive=lambda: True,
        static_effect=_little_rapscal_aura,
    ))
    builder.register("Warsong", CardScript(
        run_after_any_action_this_turn=Hook(_warsong_after_action),
    ))
    builder.register("Bumpsy", CardScript(
        power=lambda: 5,
        on_play=Hook(_bumpsy_play),
    ))
    builder.register("Lomir Flamefist", CardScript(
        on_play=Hook(_lomir_flamefist_play),
    ))
