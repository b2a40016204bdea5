"""
Engine Core - Game state, queries and the action reducer.

The engine is the runtime that:
1. Holds GameState for a match
2. Locates and moves card instances between zones
3. Applies actions via the reducer, consulting card scripts
"""

from .state import GameState, PlayerState, CardInGame, Creature, Tokens, TurnEffect, ZoneName
from .action import Action, ActionType, ActionPayload, ActionResult
from .errors import EngineError, CardNotFound, PlayerNotFound, InvalidTarget
from .reducer import Reducer, apply_action
from .setup import create_game

__all__ = [
    "GameState",
    "PlayerState",
    "CardInGame",
    "Creature",
    "Tokens",
    "TurnEffect",
    "ZoneName",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "EngineError",
    "CardNotFound",
    "PlayerNotFound",
    "InvalidTarget",
    "Reducer",
    "apply_action",
    "create_game",
]
