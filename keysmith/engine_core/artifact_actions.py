"""Artifact handlers. Same (reducer, state, action) shape as the creature handlers."""

from __future__ import annotations
from typing import Callable, TYPE_CHECKING

from .state import GameState, CardInGame, PlayerState, ZoneName
from .action import Action, ActionType
from .errors import CardNotFound, InvalidTarget
from ..catalog.card import CardType
from . import queries

if TYPE_CHECKING:
    from .reducer import Reducer


def artifact_in_play(state: GameState, card_id: str | None) -> tuple[PlayerState, CardInGame]:
    side = queries.find_owner(state, card_id)
    artifact = queries.find_in_zone(side, ZoneName.ARTIFACTS, card_id)
    if artifact is None:
        raise CardNotFound(card_id, ZoneName.ARTIFACTS.value)
    return side, artifact


def play_artifact(reducer: Reducer, state: GameState, action: Action) -> None:
    card_id = action.payload.card_id
    owner = queries.find_owner(state, card_id)
    card = queries.find_in_zone(owner, ZoneName.HAND, card_id)
    if card is None:
        raise CardNotFound(card_id, ZoneName.HAND.value)
    if card.card.card_type != CardType.ARTIFACT:
        raise InvalidTarget(card_id, "not an artifact")

    queries.remove_from_zone(owner, ZoneName.HAND, card)
    card.ready = False
    owner.artifacts.append(card)
    reducer.run_play_hooks(state, owner, card, action)


def use_artifact(reducer: Reducer, state: GameState, action: Action) -> None:
    _, artifact = artifact_in_play(state, action.payload.card_id)
    artifact.ready = not artifact.ready


def move_artifact_to_hand(reducer: Reducer, state: GameState, action: Action) -> None:
    side, artifact = artifact_in_play(state, action.payload.card_id)
    queries.remove_by_id(state, artifact.id)
    artifact.reset()
    side.hand.append(artifact)


ARTIFACT_HANDLERS: dict[ActionType, Callable[[Reducer, GameState, Action], None]] = {
    ActionType.PLAY_ARTIFACT: play_artifact,
    ActionType.USE_ARTIFACT: use_artifact,
    ActionType.MOVE_ARTIFACT_TO_HAND: move_artifact_to_hand,
}
