"""
API Module - HTTP interface.

Exposes the engine via REST API. A client:
1. Lists or imports cards
2. Creates a match from two decks
3. Dispatches actions and reads back state

All state is match-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateMatchRequest,
    DeckSpec,
    ActionRequest,
    # Responses
    MatchResponse,
    ActionResponse,
    HistoryResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    PlayerInfo,
    GameStateInfo,
    ErrorCode,
)
from .service import APIService, ServiceError

__all__ = [
    # Requests
    "CreateMatchRequest",
    "DeckSpec",
    "ActionRequest",
    # Responses
    "MatchResponse",
    "ActionResponse",
    "HistoryResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "PlayerInfo",
    "GameStateInfo",
    "ErrorCode",
    # Service
    "APIService",
    "ServiceError",
]
