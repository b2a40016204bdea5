"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply().

Design principles:
- (state, action) -> state: the given state is mutated in place and
  returned; callers that need the previous state clone() first
- Lookup failures raise EngineError subclasses before anything is moved
- Counters clamp silently
- After every action, lingering turn effects run and static effects are
  recomputed from scratch
"""

from __future__ import annotations
from collections import Counter
from functools import partial
from typing import Callable
import logging
import random

from .state import GameState, PlayerState, CardInGame, Creature, TurnEffect, ZoneName, MAX_KEYS
from .action import Action, ActionType
from .errors import CardNotFound
from . import queries
from .queries import ZoneKind
from .creature_actions import CREATURE_HANDLERS
from .artifact_actions import ARTIFACT_HANDLERS
from ..scripts.registry import ScriptRegistry, ScriptContext, default_registry

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, Action], None]


def amount_of(action: Action, default: int = 1) -> int:
    """The signed amount carried by an action, or the default step."""
    amount = action.payload.amount
    return default if amount is None else amount


class Reducer:
    """
    Reducer applies actions to game state.

    Holds no game state of its own. The script registry is injected (the
    bundled registry by default) and the random source used for shuffles
    can be seeded for reproducible games.
    """

    def __init__(
        self,
        registry: ScriptRegistry | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.rng = rng if rng is not None else random.Random(seed)
        # Action type names that reached the default arm, with counts
        self.unhandled: Counter[str] = Counter()
        self._handlers = self._build_handlers()

    def apply(self, state: GameState, action: Action) -> GameState:
        """
        Apply an action to the game state.

        Unknown action types are logged and counted, and leave the state
        untouched. Errors raised by handlers or card scripts propagate.
        """
        handler = self._get_handler(action.action_type)
        if handler is None:
            self.unhandled[action.type_name] += 1
            logger.warning("No handler for action type %s; state left unchanged", action.type_name)
            return state

        logger.debug("Applying %s to game %s", action.type_name, state.game_id)
        handler(state, action)
        self._run_turn_effects(state, action)
        self.recompute_static_effects(state)
        return state

    def _get_handler(self, action_type: ActionType | str) -> Handler | None:
        """Get the handler function for an action type."""
        return self._handlers.get(action_type)

    def _build_handlers(self) -> dict[ActionType, Handler]:
        handlers: dict[ActionType, Handler] = {
            ActionType.PLAY_ACTION: self._handle_play_action,
            ActionType.PLAY_UPGRADE: self._handle_play_upgrade,
            ActionType.SHUFFLE_DECK: self._handle_shuffle_deck,
            ActionType.SHUFFLE_DISCARD_INTO_DECK: self._handle_shuffle_discard_into_deck,
            ActionType.DISCARD_CARD: self._handle_discard_card,
            ActionType.PUT_CARD_ON_DRAW_PILE: self._handle_put_card_on_draw_pile,
            ActionType.MOVE_CARD_FROM_DISCARD_TO_HAND: partial(self._move_to_hand, zone=ZoneName.DISCARD),
            ActionType.MOVE_CARD_FROM_DRAW_PILE_TO_HAND: partial(self._move_to_hand, zone=ZoneName.LIBRARY),
            ActionType.MOVE_CARD_FROM_ARCHIVE_TO_HAND: partial(self._move_to_hand, zone=ZoneName.ARCHIVES),
            ActionType.PURGE_CARD: partial(self._move_to_owner_zone, zone=ZoneName.PURGED),
            ActionType.ARCHIVE_CARD: partial(self._move_to_owner_zone, zone=ZoneName.ARCHIVES),
            ActionType.TAKE_ARCHIVE: self._handle_take_archive,
            ActionType.DRAW_CARD: self._handle_draw_card,
            ActionType.DRAW_FROM_DISCARD: self._handle_draw_from_discard,
            ActionType.ADD_AMBER_TO_CARD: self._handle_add_amber_to_card,
            ActionType.ALTER_PLAYER_CHAINS: self._handle_alter_player_chains,
            ActionType.ALTER_PLAYER_AMBER: self._handle_alter_player_amber,
            ActionType.FORGE_KEY: self._handle_forge_key,
            ActionType.UNFORGE_KEY: self._handle_unforge_key,
            ActionType.END_TURN: self._handle_end_turn,
        }
        for table in (CREATURE_HANDLERS, ARTIFACT_HANDLERS):
            for action_type, fn in table.items():
                handlers[action_type] = partial(fn, self)
        return handlers

    # =========================================================================
    # Shared steps used by handlers
    # =========================================================================

    def player_for(self, state: GameState, action: Action) -> PlayerState:
        """The player an action names, or the active player when it names none."""
        if action.payload.player_id is None:
            return state.active_player
        return queries.get_player(state, action.payload.player_id)

    def run_play_hooks(self, state: GameState, owner: PlayerState, card: CardInGame, action: Action) -> None:
        """
        Resolve a card being played: Æmber bonus, then its play ability.

        Cards with an after-action ability are also registered as turn
        effects here.
        """
        script = self.registry.for_card(card.card)
        if script is None:
            return
        ctx = ScriptContext(this_card=card, action=action)
        if script.amber is not None:
            owner.amber = max(owner.amber + script.amber(state, ctx), 0)
        if script.on_play is not None:
            script.on_play.perform(state, ctx)
        if script.run_after_any_action_this_turn is not None:
            state.turn_effects.append(
                TurnEffect(card=card, controller_id=owner.player_id, registered_by=action.action_id)
            )

    def destroy(self, state: GameState, creature: Creature) -> None:
        """Run the creature's destroyed ability, then send it to its owner's discard."""
        script = self.registry.for_card(creature.card)
        if script is not None and script.destroyed is not None:
            script.destroyed.perform(state, ScriptContext(this_card=creature))
        # The destroyed ability may already have moved it
        try:
            owner = queries.find_owner(state, creature.id)
        except CardNotFound:
            return
        removed = queries.remove_by_id(state, creature.id)
        removed.reset()
        owner.discard.append(removed)
        logger.debug("%s destroyed", creature.title)

    def recompute_static_effects(self, state: GameState) -> None:
        """
        Rebuild every aura-derived value from printed values and tokens.

        Running it twice in a row gives the same result as running it once.
        """
        for player in state.players:
            for creature in player.creatures:
                self._reset_creature(creature)

        for _, card in queries.cards_in_play(state):
            script = self.registry.for_card(card.card)
            if script is not None and script.static_effect is not None:
                script.static_effect(state, ScriptContext(this_card=card))

    def _reset_creature(self, creature: Creature) -> None:
        script = self.registry.for_card(creature.card)
        keywords = creature.card.keywords
        base = creature.card.power
        elusive = "elusive" in keywords
        skirmish = "skirmish" in keywords
        granted_taunt = False
        if script is not None:
            if script.power is not None:
                base = script.power()
            elusive = elusive or bool(script.elusive and script.elusive())
            skirmish = skirmish or bool(script.skirmish and script.skirmish())
            granted_taunt = bool(script.taunt and script.taunt())

        creature.power = base + creature.tokens["power"]
        creature.elusive = elusive
        creature.skirmish = skirmish
        creature.granted_taunt = granted_taunt
        creature.bonus_armor = 0
        creature.must_fight = False

    def _run_turn_effects(self, state: GameState, action: Action) -> None:
        for effect in list(state.turn_effects):
            if effect.registered_by == action.action_id:
                continue
            script = self.registry.for_card(effect.card.card)
            if script is None or script.run_after_any_action_this_turn is None:
                continue
            ctx = ScriptContext(this_card=effect.card, action=action, controller_id=effect.controller_id)
            script.run_after_any_action_this_turn.perform(state, ctx)

    # =========================================================================
    # Card plays
    # =========================================================================

    def _handle_play_action(self, state: GameState, action: Action) -> None:
        card_id = action.payload.card_id
        owner = queries.find_owner(state, card_id)
        card = queries.find_in_zone(owner, ZoneName.HAND, card_id)
        if card is None:
            raise CardNotFound(card_id, ZoneName.HAND.value)

        try:
            self.run_play_hooks(state, owner, card, action)
        finally:
            # The card is spent even if its ability failed
            if queries.find_in_zone(owner, ZoneName.HAND, card.id) is card:
                queries.remove_from_zone(owner, ZoneName.HAND, card)
                owner.discard.append(card)

    def _handle_play_upgrade(self, state: GameState, action: Action) -> None:
        upgrade_id = action.payload.card_id
        creature_id = action.payload.target_card_id

        owner = queries.find_owner(state, upgrade_id)
        upgrade = queries.find_in_zone(owner, ZoneName.HAND, upgrade_id)
        if upgrade is None:
            raise CardNotFound(upgrade_id, ZoneName.HAND.value)
        host_side = queries.find_owner(state, creature_id)
        creature = queries.find_creature(host_side, creature_id)
        if creature is None:
            raise CardNotFound(creature_id, ZoneName.CREATURES.value)

        queries.remove_from_zone(owner, ZoneName.HAND, upgrade)
        creature.upgrades.append(upgrade)
        self.run_play_hooks(state, owner, upgrade, action)

    # =========================================================================
    # Library, discard, archives
    # =========================================================================

    def _handle_shuffle_deck(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        self.rng.shuffle(player.library)

    def _handle_shuffle_discard_into_deck(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.library.extend(player.discard)
        player.discard = []
        self.rng.shuffle(player.library)

    def _handle_discard_card(self, state: GameState, action: Action) -> None:
        card_id = action.payload.card_id
        owner = queries.find_owner(state, card_id)
        if action.payload.player_id is not None:
            destination = queries.get_player(state, action.payload.player_id)
        else:
            destination = owner
        card = queries.remove_by_id(state, card_id)
        card.reset()
        destination.discard.append(card)

    def _handle_put_card_on_draw_pile(self, state: GameState, action: Action) -> None:
        card_id = action.payload.card_id
        owner = queries.find_owner(state, card_id)
        card = queries.remove_by_id(state, card_id)
        card.reset()
        owner.library.insert(0, card)

    def _move_to_hand(self, state: GameState, action: Action, zone: ZoneName) -> None:
        card_id = action.payload.card_id
        owner = queries.find_owner(state, card_id)
        card = queries.find_in_zone(owner, zone, card_id)
        if card is None:
            raise CardNotFound(card_id, zone.value)
        queries.remove_from_zone(owner, zone, card)
        owner.hand.append(card)

    def _move_to_owner_zone(self, state: GameState, action: Action, zone: ZoneName) -> None:
        card_id = action.payload.card_id
        owner = queries.find_owner(state, card_id)
        card = queries.remove_by_id(state, card_id)
        card.reset()
        owner.zone(zone).append(card)

    def _handle_take_archive(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.hand.extend(player.archives)
        player.archives = []

    def _handle_draw_card(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        if not player.library:
            logger.debug("%s has no cards left to draw", player.name)
            return
        player.hand.append(player.library.pop(0))

    def _handle_draw_from_discard(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        if not player.discard:
            return
        player.hand.append(player.discard.pop())

    # =========================================================================
    # Counters
    # =========================================================================

    def _handle_add_amber_to_card(self, state: GameState, action: Action) -> None:
        card_id = action.payload.card_id
        kind = queries.classify(state, card_id)
        if kind not in (ZoneKind.CREATURE, ZoneKind.ARTIFACT):
            logger.debug("Ignoring Æmber for %s: not in play (%s)", card_id, kind.value)
            return
        card = queries.find_card(state, card_id)
        card.tokens.add("amber", amount_of(action))

    def _handle_alter_player_chains(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.chains = max(player.chains + amount_of(action), 0)

    def _handle_alter_player_amber(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.amber = max(player.amber + amount_of(action), 0)

    def _handle_forge_key(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.keys = min(player.keys + 1, MAX_KEYS)

    def _handle_unforge_key(self, state: GameState, action: Action) -> None:
        player = self.player_for(state, action)
        player.keys = max(player.keys - 1, 0)

    # =========================================================================
    # Turn structure
    # =========================================================================

    def _handle_end_turn(self, state: GameState, action: Action) -> None:
        player = state.active_player
        for card in player.in_play():
            card.ready = True
        for each in state.players:
            for creature in each.creatures:
                creature.attacked_this_turn = False

        state.turn_effects.clear()
        state.active_player_idx = (state.active_player_idx + 1) % len(state.players)
        state.turn_number += 1
        logger.info(
            "Game %s: turn %d, %s to play",
            state.game_id, state.turn_number, state.active_player.name,
        )


def apply_action(state: GameState, action: Action, registry: ScriptRegistry | None = None) -> GameState:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(registry=registry)
    return reducer.apply(state, action)
