"""
Engine errors.

Only lookups surface as errors. Saturating counters (Æmber, chains, keys,
tokens) clamp silently and never raise.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for errors raised while applying an action."""
    error_code = "ENGINE_ERROR"


class CardNotFound(EngineError, LookupError):
    """Raised when a card id is absent from the zone a handler expects it in."""
    error_code = "CARD_NOT_FOUND"

    def __init__(self, card_id: str | None, zone: str | None = None):
        self.card_id = card_id
        self.zone = zone
        if zone:
            message = f"Card {card_id} not found in {zone}"
        else:
            message = f"Card {card_id} not found"
        super().__init__(message)


class PlayerNotFound(EngineError, LookupError):
    """Raised when an action names a player that is not in the game."""
    error_code = "PLAYER_NOT_FOUND"

    def __init__(self, player_id: str | None):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class InvalidTarget(EngineError):
    """Raised when a card is found but cannot take part in the action (e.g. playing a non-creature as a creature)."""
    error_code = "INVALID_TARGET"

    def __init__(self, card_id: str | None, reason: str):
        self.card_id = card_id
        self.reason = reason
        super().__init__(f"Card {card_id}: {reason}")
