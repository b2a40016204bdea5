"""
Game Setup - Creates initial game state from two decks.

This module handles:
- Instantiating every card in both decks with match-unique ids
- Shuffling each library with a seeded reducer for determinism
- Drawing opening hands (the first player draws one more)

Shuffles and draws go through the reducer like any other action.
"""

from __future__ import annotations
import logging
import random
import uuid

from ..catalog.loader import Deck
from ..scripts.registry import ScriptRegistry
from .state import GameState, PlayerState, new_instance
from .action import Action
from .reducer import Reducer

logger = logging.getLogger(__name__)

FIRST_PLAYER_HAND = 7
SECOND_PLAYER_HAND = 6


def _create_player(player_id: str, name: str, deck: Deck) -> PlayerState:
    player = PlayerState(player_id=player_id, name=name)
    player.library = [
        new_instance(card, f"{player_id}:{n}", player_id)
        for n, card in enumerate(deck.cards)
    ]
    return player


def create_game(
    deck_one: Deck,
    deck_two: Deck,
    player_names: tuple[str, str] = ("Player 1", "Player 2"),
    player_ids: tuple[str, str] = ("p1", "p2"),
    random_seed: int | None = None,
    registry: ScriptRegistry | None = None,
    game_id: str | None = None,
    deal: bool = True,
    reducer: Reducer | None = None,
) -> GameState:
    """
    Set up a new two-player game.

    Args:
        deck_one: Deck for the first (starting) player
        deck_two: Deck for the second player
        player_names: Display names, in seat order
        player_ids: Player ids, in seat order
        random_seed: Seed for deterministic shuffling (random if omitted)
        registry: Script registry for the setup reducer
        game_id: Explicit game id (generated if omitted)
        deal: Shuffle and draw opening hands; False leaves libraries in deck order
        reducer: Reducer to deal with, already seeded with random_seed; pass
            the match reducer so play continues the dealing random stream

    Returns:
        Initial GameState with player one active on turn 1
    """
    if player_ids[0] == player_ids[1]:
        raise ValueError("Player ids must differ")

    seed = random_seed if random_seed is not None else random.randrange(2**32)
    state = GameState(
        game_id=game_id or str(uuid.uuid4()),
        players=[
            _create_player(player_ids[0], player_names[0], deck_one),
            _create_player(player_ids[1], player_names[1], deck_two),
        ],
        random_seed=seed,
        metadata={"decks": [deck_one.name, deck_two.name]},
    )

    if deal:
        if reducer is None:
            reducer = Reducer(registry=registry, seed=seed)
        hand_sizes = (FIRST_PLAYER_HAND, SECOND_PLAYER_HAND)
        for player, hand_size in zip(state.players, hand_sizes):
            reducer.apply(state, Action.shuffle_deck(player.player_id))
            for _ in range(hand_size):
                reducer.apply(state, Action.draw(player.player_id))

    logger.info(
        "Created game %s: %s (%d cards) vs %s (%d cards), seed %d",
        state.game_id, deck_one.name, len(deck_one), deck_two.name, len(deck_two), seed,
    )
    return state
