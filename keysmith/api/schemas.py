"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- CARD_NOT_FOUND: A card id is not where the action expects it
- PLAYER_NOT_FOUND: An action names a player outside the match
- INVALID_TARGET: The card exists but cannot take part in the action
- MATCH_NOT_FOUND: Match does not exist or has ended
- UNKNOWN_CARD: A deck lists a card id missing from the catalog
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: A card script failed; the match was rolled back
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class MatchStatus(str, Enum):
    """Match status values."""
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    INVALID_TARGET = "INVALID_TARGET"
    MATCH_NOT_FOUND = "MATCH_NOT_FOUND"
    MATCH_NOT_ACTIVE = "MATCH_NOT_ACTIVE"
    UNKNOWN_CARD = "UNKNOWN_CARD"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A printed card from the catalog."""
    card_id: str
    title: str
    house: str
    card_type: str
    power: int = 0
    armor: int = 0
    amber: int = 0
    traits: list[str] = Field(default_factory=list)
    text: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class CardInstanceInfo(BaseModel):
    """A card instance inside a match."""
    instance_id: str
    card_id: str
    title: str
    ready: bool = True
    faceup: bool = True
    tokens: dict[str, int] = Field(default_factory=dict)
    power: Optional[int] = Field(None, description="Effective power, creatures only")
    armor: Optional[int] = None
    taunt: Optional[bool] = None
    elusive: Optional[bool] = None
    must_fight: Optional[bool] = Field(None, description="Can only be used to fight while enemies are in play")
    upgrades: list["CardInstanceInfo"] = Field(default_factory=list)


class PlayerInfo(BaseModel):
    """
    One side of the table.

    Hidden zones are reported as counts only.
    """
    player_id: str
    name: str
    is_active: bool = False
    amber: int = 0
    chains: int = 0
    keys: int = 0
    hand: list[CardInstanceInfo] = Field(default_factory=list)
    creatures: list[CardInstanceInfo] = Field(default_factory=list)
    artifacts: list[CardInstanceInfo] = Field(default_factory=list)
    discard: list[CardInstanceInfo] = Field(default_factory=list)
    library_count: int = 0
    archives_count: int = 0
    purged_count: int = 0


class GameStateInfo(BaseModel):
    """Snapshot of a match's game state."""
    game_id: str
    turn_number: int
    active_player_id: str
    players: list[PlayerInfo] = Field(default_factory=list)
    turn_effects: list[str] = Field(default_factory=list, description="Instance ids with lingering effects")


# =============================================================================
# Request Models
# =============================================================================

class DeckImportRequest(BaseModel):
    """A master-vault deck document."""
    deck: dict[str, Any] = Field(description="Raw deck payload with data and _linked.cards")


class DeckSpec(BaseModel):
    """A deck given as catalog card ids."""
    name: str = "Deck"
    card_ids: list[str] = Field(min_length=1)


class CreateMatchRequest(BaseModel):
    """Request to start a match between two decks."""
    deck_one: DeckSpec
    deck_two: DeckSpec
    player_one_name: str = "Player 1"
    player_two_name: str = "Player 2"
    seed: Optional[int] = None


class ActionRequest(BaseModel):
    """An action to dispatch, in its dict form."""
    type: str = Field(description="Action type, e.g. PlayCreature")
    player_id: Optional[str] = None
    card_id: Optional[str] = None
    target_card_id: Optional[str] = None
    amount: Optional[int] = None
    side: Optional[str] = Field(None, pattern="^(left|right)$")


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    environment: str
    catalog_size: int
    script_count: int


class CardListResponse(BaseModel):
    cards: list[CardInfo] = Field(default_factory=list)
    count: int = 0


class DeckResponse(BaseModel):
    """An imported deck."""
    deck_id: str
    name: str
    houses: list[str] = Field(default_factory=list)
    card_ids: list[str] = Field(default_factory=list)
    card_count: int = 0


class MatchResponse(BaseModel):
    """A match and its current state."""
    match_id: str
    status: MatchStatus
    created_at: float
    game_state: GameStateInfo


class MatchListResponse(BaseModel):
    matches: list[str] = Field(default_factory=list)
    count: int = 0


class EndMatchResponse(BaseModel):
    success: bool
    match_id: str


class ActionResponse(BaseModel):
    """Result of dispatching an action."""
    success: bool
    match_id: str
    changes: list[str] = Field(default_factory=list)
    game_state: Optional[GameStateInfo] = None


class HistoryEntryInfo(BaseModel):
    type: str
    action_id: str
    success: bool
    error: Optional[str] = None
    turn_number: int = 0
    player_id: Optional[str] = None
    card_id: Optional[str] = None
    target_card_id: Optional[str] = None
    amount: Optional[int] = None
    side: Optional[str] = None


class HistoryResponse(BaseModel):
    match_id: str
    entries: list[HistoryEntryInfo] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None
