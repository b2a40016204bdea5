"""
Creature handlers - Play, use, fight and token manipulation for creatures.

Each handler takes (reducer, state, action). The reducer binds them into
its dispatch table; they reach the script registry through it.
"""

from __future__ import annotations
from typing import Callable, TYPE_CHECKING

from .state import GameState, PlayerState, Creature, ZoneName
from .action import Action, ActionType
from .errors import CardNotFound, InvalidTarget
from . import queries
from ..scripts.registry import ScriptContext

if TYPE_CHECKING:
    from .reducer import Reducer


def _amount(action: Action) -> int:
    return 1 if action.payload.amount is None else action.payload.amount


def creature_in_play(state: GameState, card_id: str | None) -> tuple[PlayerState, Creature]:
    """Find a creature on either battleline, with the side that holds it."""
    side = queries.find_owner(state, card_id)
    creature = queries.find_creature(side, card_id)
    if creature is None:
        raise CardNotFound(card_id, ZoneName.CREATURES.value)
    return side, creature


def deal_damage(creature: Creature, amount: int) -> int:
    """Deal damage after armor. Returns the damage actually placed."""
    dealt = max(amount - creature.armor, 0)
    creature.tokens.add("damage", dealt)
    return dealt


def play_creature(reducer: Reducer, state: GameState, action: Action) -> None:
    card_id = action.payload.card_id
    owner = queries.find_owner(state, card_id)
    card = queries.find_in_zone(owner, ZoneName.HAND, card_id)
    if card is None:
        raise CardNotFound(card_id, ZoneName.HAND.value)
    if not isinstance(card, Creature):
        raise InvalidTarget(card_id, "not a creature")

    queries.remove_from_zone(owner, ZoneName.HAND, card)
    card.ready = False
    if action.payload.side == "left":
        owner.creatures.insert(0, card)
    else:
        owner.creatures.append(card)
    reducer.run_play_hooks(state, owner, card, action)


def use_creature(reducer: Reducer, state: GameState, action: Action) -> None:
    side, creature = creature_in_play(state, action.payload.card_id)
    if creature.ready and creature.tokens["stun"]:
        # Using a stunned creature only removes the stun
        creature.tokens.set("stun", 0)
        creature.ready = False
    elif creature.ready and creature.must_fight and queries.enemy_creatures(state, side.player_id):
        raise InvalidTarget(creature.id, "must fight when used")
    else:
        creature.ready = not creature.ready


def fight_creature(reducer: Reducer, state: GameState, action: Action) -> None:
    """
    Resolve a fight between an attacker and a defender.

    Elusive defenders take and deal no damage the first time they are
    attacked each turn. Skirmish attackers take no damage. Destroyed
    creatures leave play before the attacker's fight ability resolves,
    and that ability only resolves if the attacker survived.
    """
    _, attacker = creature_in_play(state, action.payload.card_id)
    _, defender = creature_in_play(state, action.payload.target_card_id)

    attacker.ready = False
    if defender.elusive and not defender.attacked_this_turn:
        defender.attacked_this_turn = True
    else:
        defender.attacked_this_turn = True
        attacker_power = attacker.effective_power
        defender_power = defender.effective_power
        deal_damage(defender, attacker_power)
        if not attacker.skirmish:
            deal_damage(attacker, defender_power)

    attacker_destroyed = attacker.is_destroyed
    if defender.is_destroyed:
        reducer.destroy(state, defender)
    if attacker_destroyed:
        reducer.destroy(state, attacker)
        return

    script = reducer.registry.for_card(attacker.card)
    if script is not None and script.fight is not None:
        script.fight.perform(state, ScriptContext(this_card=attacker, action=action, target=defender))


def _move_creature(state: GameState, action: Action, offset: int) -> None:
    side, creature = creature_in_play(state, action.payload.card_id)
    idx = side.creatures.index(creature)
    swap = idx + offset
    if 0 <= swap < len(side.creatures):
        side.creatures[idx], side.creatures[swap] = side.creatures[swap], side.creatures[idx]


def move_creature_left(reducer: Reducer, state: GameState, action: Action) -> None:
    _move_creature(state, action, -1)


def move_creature_right(reducer: Reducer, state: GameState, action: Action) -> None:
    _move_creature(state, action, 1)


def move_creature_to_hand(reducer: Reducer, state: GameState, action: Action) -> None:
    side, creature = creature_in_play(state, action.payload.card_id)
    queries.remove_by_id(state, creature.id)
    creature.reset()
    side.hand.append(creature)


def toggle_stun(reducer: Reducer, state: GameState, action: Action) -> None:
    _, creature = creature_in_play(state, action.payload.card_id)
    creature.tokens.set("stun", 0 if creature.tokens["stun"] else 1)


def toggle_taunt(reducer: Reducer, state: GameState, action: Action) -> None:
    _, creature = creature_in_play(state, action.payload.card_id)
    creature.taunt = not creature.taunt


def toggle_doom_token(reducer: Reducer, state: GameState, action: Action) -> None:
    _, creature = creature_in_play(state, action.payload.card_id)
    creature.tokens.set("doom", 0 if creature.tokens["doom"] else 1)


def capture_amber(reducer: Reducer, state: GameState, action: Action) -> None:
    """Positive amounts capture from the opponent; negative ones give it back."""
    side, creature = creature_in_play(state, action.payload.card_id)
    opponent = queries.opponent_of(state, side.player_id)
    amount = _amount(action)
    if amount >= 0:
        moved = min(amount, opponent.amber)
        opponent.amber -= moved
        creature.tokens.add("amber", moved)
    else:
        moved = min(-amount, creature.tokens["amber"])
        creature.tokens.add("amber", -moved)
        opponent.amber += moved


def alter_creature_power(reducer: Reducer, state: GameState, action: Action) -> None:
    _, creature = creature_in_play(state, action.payload.card_id)
    creature.tokens.add("power", _amount(action))


def alter_creature_damage(reducer: Reducer, state: GameState, action: Action) -> None:
    _, creature = creature_in_play(state, action.payload.card_id)
    creature.tokens.add("damage", _amount(action))


CREATURE_HANDLERS: dict[ActionType, Callable[[Reducer, GameState, Action], None]] = {
    ActionType.PLAY_CREATURE: play_creature,
    ActionType.USE_CREATURE: use_creature,
    ActionType.FIGHT_CREATURE: fight_creature,
    ActionType.MOVE_CREATURE_LEFT: move_creature_left,
    ActionType.MOVE_CREATURE_RIGHT: move_creature_right,
    ActionType.MOVE_CREATURE_TO_HAND: move_creature_to_hand,
    ActionType.TOGGLE_STUN: toggle_stun,
    ActionType.TOGGLE_TAUNT: toggle_taunt,
    ActionType.TOGGLE_DOOM_TOKEN: toggle_doom_token,
    ActionType.CAPTURE_AMBER: capture_amber,
    ActionType.ALTER_CREATURE_POWER: alter_creature_power,
    ActionType.ALTER_CREATURE_DAMAGE: alter_creature_damage,
}
