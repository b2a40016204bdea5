"""
Action System - Actions, payloads, and results.

Actions represent:
1. Card plays (action, creature, artifact, upgrade)
2. Zone moves (draw, discard, archive, purge, shuffle)
3. Counter changes (Æmber, chains, keys, tokens)
4. Creature and artifact use

All state changes flow through actions. Actions are transient: built by
a caller, consumed once by the reducer, never stored in the GameState.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import time
import uuid


class ActionType(str, Enum):
    """Event kinds the reducer understands."""
    # Card plays
    PLAY_ACTION = "PlayAction"
    PLAY_UPGRADE = "PlayUpgrade"
    PLAY_CREATURE = "PlayCreature"
    PLAY_ARTIFACT = "PlayArtifact"

    # Library and discard
    SHUFFLE_DECK = "ShuffleDeck"
    SHUFFLE_DISCARD_INTO_DECK = "ShuffleDiscardIntoDeck"
    DISCARD_CARD = "DiscardCard"
    PUT_CARD_ON_DRAW_PILE = "PutCardOnDrawPile"
    MOVE_CARD_FROM_DISCARD_TO_HAND = "MoveCardFromDiscardToHand"
    MOVE_CARD_FROM_DRAW_PILE_TO_HAND = "MoveCardFromDrawPileToHand"
    MOVE_CARD_FROM_ARCHIVE_TO_HAND = "MoveCardFromArchiveToHand"
    PURGE_CARD = "PurgeCard"
    ARCHIVE_CARD = "ArchiveCard"
    TAKE_ARCHIVE = "TakeArchive"
    DRAW_CARD = "DrawCard"
    DRAW_FROM_DISCARD = "DrawFromDiscard"

    # Counters
    ADD_AMBER_TO_CARD = "AddAmberToCard"
    ALTER_PLAYER_CHAINS = "AlterPlayerChains"
    ALTER_PLAYER_AMBER = "AlterPlayerAmber"
    FORGE_KEY = "ForgeKey"
    UNFORGE_KEY = "UnForgeKey"

    # Creatures
    USE_CREATURE = "UseCreature"
    FIGHT_CREATURE = "FightCreature"
    MOVE_CREATURE_LEFT = "MoveCreatureLeft"
    MOVE_CREATURE_RIGHT = "MoveCreatureRight"
    MOVE_CREATURE_TO_HAND = "MoveCreatureToHand"
    TOGGLE_STUN = "ToggleStun"
    TOGGLE_TAUNT = "ToggleTaunt"
    CAPTURE_AMBER = "CaptureAmber"
    ALTER_CREATURE_POWER = "AlterCreaturePower"
    ALTER_CREATURE_DAMAGE = "AlterCreatureDamage"
    TOGGLE_DOOM_TOKEN = "ToggleDoomToken"

    # Artifacts
    USE_ARTIFACT = "UseArtifact"
    MOVE_ARTIFACT_TO_HAND = "MoveArtifactToHand"

    # Turn structure
    END_TURN = "EndTurn"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; handlers read what they need.
    """
    player_id: str | None = None
    card_id: str | None = None

    # Upgrade target creature, or fight defender
    target_card_id: str | None = None

    # Signed amount for counter changes
    amount: int | None = None

    # Flank for PlayCreature: "left" or "right"
    side: str | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    `action_type` is normally an ActionType; an unrecognized raw string
    is kept as-is so the reducer can report it.
    """
    action_type: ActionType | str
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: float | None = None
    action_id: str | None = None

    def __post_init__(self):
        if self.action_id is None:
            self.action_id = str(uuid.uuid4())
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def type_name(self) -> str:
        if isinstance(self.action_type, ActionType):
            return self.action_type.value
        return str(self.action_type)

    @classmethod
    def of(cls, action_type: ActionType | str, **payload: Any) -> Action:
        """Build an action from keyword payload fields."""
        return cls(action_type=action_type, payload=ActionPayload(**payload))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Action:
        """
        Build an action from its dict form: {"type": ..., "card_id": ..., ...}.

        Unknown type strings are kept raw rather than rejected.
        """
        raw_type = data.get("type")
        try:
            action_type: ActionType | str = ActionType(raw_type)
        except ValueError:
            action_type = str(raw_type)
        return cls(
            action_type=action_type,
            payload=ActionPayload(
                player_id=data.get("player_id"),
                card_id=data.get("card_id"),
                target_card_id=data.get("target_card_id"),
                amount=data.get("amount"),
                side=data.get("side"),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "player_id": self.payload.player_id,
            "card_id": self.payload.card_id,
            "target_card_id": self.payload.target_card_id,
            "amount": self.payload.amount,
            "side": self.payload.side,
            "action_id": self.action_id,
            "timestamp": self.timestamp,
        }

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def play_action(cls, card_id: str) -> Action:
        return cls.of(ActionType.PLAY_ACTION, card_id=card_id)

    @classmethod
    def play_creature(cls, card_id: str, side: str = "right") -> Action:
        return cls.of(ActionType.PLAY_CREATURE, card_id=card_id, side=side)

    @classmethod
    def play_artifact(cls, card_id: str) -> Action:
        return cls.of(ActionType.PLAY_ARTIFACT, card_id=card_id)

    @classmethod
    def play_upgrade(cls, upgrade_id: str, creature_id: str) -> Action:
        return cls.of(ActionType.PLAY_UPGRADE, card_id=upgrade_id, target_card_id=creature_id)

    @classmethod
    def draw(cls, player_id: str) -> Action:
        return cls.of(ActionType.DRAW_CARD, player_id=player_id)

    @classmethod
    def shuffle_deck(cls, player_id: str) -> Action:
        return cls.of(ActionType.SHUFFLE_DECK, player_id=player_id)

    @classmethod
    def discard(cls, card_id: str, player_id: str | None = None) -> Action:
        """Discard a card; player_id picks whose pile (defaults to the owner)."""
        return cls.of(ActionType.DISCARD_CARD, card_id=card_id, player_id=player_id)

    @classmethod
    def fight(cls, attacker_id: str, defender_id: str) -> Action:
        return cls.of(ActionType.FIGHT_CREATURE, card_id=attacker_id, target_card_id=defender_id)

    @classmethod
    def alter_amber(cls, player_id: str, amount: int) -> Action:
        return cls.of(ActionType.ALTER_PLAYER_AMBER, player_id=player_id, amount=amount)

    @classmethod
    def alter_chains(cls, player_id: str, amount: int) -> Action:
        return cls.of(ActionType.ALTER_PLAYER_CHAINS, player_id=player_id, amount=amount)

    @classmethod
    def forge_key(cls, player_id: str) -> Action:
        return cls.of(ActionType.FORGE_KEY, player_id=player_id)

    @classmethod
    def unforge_key(cls, player_id: str) -> Action:
        return cls.of(ActionType.UNFORGE_KEY, player_id=player_id)

    @classmethod
    def end_turn(cls) -> Action:
        return cls.of(ActionType.END_TURN)


@dataclass
class ActionResult:
    """
    Result of dispatching an action through a match session.

    Contains:
    - Whether action succeeded
    - The state after the action (if succeeded)
    - Errors (if failed)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None

    # Human-readable changes for the history log
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
