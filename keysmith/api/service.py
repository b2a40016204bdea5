"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages matches
3. Imports decks into the shared catalog
4. Formats game state for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import threading

from .schemas import (
    # Requests
    CreateMatchRequest,
    ActionRequest,
    # Responses
    HealthResponse,
    CardListResponse,
    DeckResponse,
    MatchResponse,
    MatchListResponse,
    EndMatchResponse,
    ActionResponse,
    HistoryResponse,
    HistoryEntryInfo,
    # Shared
    CardInfo,
    CardInstanceInfo,
    PlayerInfo,
    GameStateInfo,
    # Enums
    ErrorCode,
    MatchStatus,
)
from ..catalog import Card, CardCatalog, CatalogError, load_catalog, parse_deck
from ..engine_core.action import Action
from ..engine_core.state import GameState, PlayerState, CardInGame, Creature
from ..scripts.registry import ScriptRegistry, default_registry
from ..session import MatchManager, Match

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """A request the service cannot fulfil, with the code and HTTP status to report."""

    def __init__(self, message: str, error_code: ErrorCode, status_code: int = 400, details: dict | None = None):
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


# =============================================================================
# State formatting
# =============================================================================

def card_info(card: Card) -> CardInfo:
    return CardInfo(
        card_id=card.id,
        title=card.title,
        house=card.house.value,
        card_type=card.card_type.value,
        power=card.power,
        armor=card.armor,
        amber=card.amber,
        traits=list(card.traits),
        text=card.text,
        keywords=sorted(card.keywords),
    )


def instance_info(card: CardInGame) -> CardInstanceInfo:
    info = CardInstanceInfo(
        instance_id=card.id,
        card_id=card.card.id,
        title=card.title,
        ready=card.ready,
        faceup=card.faceup,
        tokens={k: v for k, v in card.tokens.as_dict().items() if v},
        upgrades=[instance_info(u) for u in card.upgrades],
    )
    if isinstance(card, Creature):
        info.power = card.effective_power
        info.armor = card.armor
        info.taunt = card.has_taunt
        info.elusive = card.elusive
        info.must_fight = card.must_fight
    return info


def player_info(player: PlayerState, is_active: bool) -> PlayerInfo:
    return PlayerInfo(
        player_id=player.player_id,
        name=player.name,
        is_active=is_active,
        amber=player.amber,
        chains=player.chains,
        keys=player.keys,
        hand=[instance_info(c) for c in player.hand],
        creatures=[instance_info(c) for c in player.creatures],
        artifacts=[instance_info(c) for c in player.artifacts],
        discard=[instance_info(c) for c in player.discard],
        library_count=len(player.library),
        archives_count=len(player.archives),
        purged_count=len(player.purged),
    )


def game_state_info(state: GameState) -> GameStateInfo:
    active_id = state.active_player.player_id
    return GameStateInfo(
        game_id=state.game_id,
        turn_number=state.turn_number,
        active_player_id=active_id,
        players=[player_info(p, p.player_id == active_id) for p in state.players],
        turn_effects=[effect.card.id for effect in state.turn_effects],
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Start a match
        match = service.create_match(request)

        # Dispatch an action
        result = service.apply_action(match.match_id, ActionRequest(type="DrawCard", player_id="p1"))
    """
    catalog: CardCatalog = field(default_factory=load_catalog)
    registry: ScriptRegistry = field(default_factory=default_registry)
    environment: str = "development"
    match_manager: MatchManager | None = None

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        if self.match_manager is None:
            self.match_manager = MatchManager(registry=self.registry)

    def health(self) -> HealthResponse:
        return HealthResponse(
            environment=self.environment,
            catalog_size=len(self.catalog),
            script_count=len(self.registry),
        )

    # =========================================================================
    # Cards and decks
    # =========================================================================

    def list_cards(self) -> CardListResponse:
        cards = [card_info(c) for c in self.catalog]
        return CardListResponse(cards=cards, count=len(cards))

    def import_deck(self, payload: dict[str, Any]) -> DeckResponse:
        """
        Import a master-vault deck document.

        Its cards are merged into the catalog so the deck can be referenced
        by card id when creating matches.
        """
        try:
            deck = parse_deck(payload)
        except CatalogError as e:
            raise ServiceError(str(e), ErrorCode.VALIDATION_ERROR, details={"errors": e.errors}) from e

        with self._lock:
            self.catalog = self.catalog.merge(deck.cards)
        logger.info("Imported deck %s (%d cards)", deck.name, len(deck))
        return DeckResponse(
            deck_id=deck.id,
            name=deck.name,
            houses=[h.value for h in deck.houses],
            card_ids=[c.id for c in deck.cards],
            card_count=len(deck),
        )

    # =========================================================================
    # Matches
    # =========================================================================

    def create_match(self, request: CreateMatchRequest) -> MatchResponse:
        try:
            deck_one = self.catalog.build_deck(request.deck_one.card_ids, name=request.deck_one.name)
            deck_two = self.catalog.build_deck(request.deck_two.card_ids, name=request.deck_two.name)
        except CatalogError as e:
            raise ServiceError(str(e), ErrorCode.UNKNOWN_CARD, details={"card_ids": e.errors}) from e

        match = self.match_manager.create_match(
            deck_one,
            deck_two,
            player_names=(request.player_one_name, request.player_two_name),
            seed=request.seed,
        )
        return self._match_response(match)

    def get_match(self, match_id: str) -> MatchResponse:
        return self._match_response(self._require_match(match_id))

    def list_matches(self) -> MatchListResponse:
        matches = self.match_manager.list_active_matches()
        return MatchListResponse(matches=matches, count=len(matches))

    def end_match(self, match_id: str, reason: str = "finished") -> EndMatchResponse:
        match = self.match_manager.end_match(match_id, reason)
        return EndMatchResponse(success=match is not None, match_id=match_id)

    def apply_action(self, match_id: str, request: ActionRequest) -> ActionResponse:
        """
        Dispatch an action to a match.

        Engine errors become a ServiceError; the match state is unchanged.
        A failing card script also leaves the state unchanged and is
        reported as INTERNAL_ERROR.
        """
        match = self._require_match(match_id)
        action = Action.from_dict(request.model_dump())
        try:
            result = match.dispatch(action)
        except Exception as e:
            raise ServiceError(
                f"{action.type_name} failed: {e}", ErrorCode.INTERNAL_ERROR, status_code=500,
            ) from e

        if not result.success:
            code = ErrorCode(result.error_code) if result.error_code in ErrorCode.__members__ else ErrorCode.VALIDATION_ERROR
            status = 404 if code in (ErrorCode.CARD_NOT_FOUND, ErrorCode.PLAYER_NOT_FOUND) else 400
            raise ServiceError(result.error or "Action failed", code, status_code=status)

        return ActionResponse(
            success=True,
            match_id=match_id,
            changes=result.state_changes,
            game_state=game_state_info(match.game_state),
        )

    def history(self, match_id: str) -> HistoryResponse:
        match = self._require_match(match_id)
        return HistoryResponse(
            match_id=match_id,
            entries=[HistoryEntryInfo.model_validate(entry.to_dict()) for entry in match.history],
        )

    def _require_match(self, match_id: str) -> Match:
        match = self.match_manager.get_match(match_id)
        if match is None:
            raise ServiceError(f"Match {match_id} not found", ErrorCode.MATCH_NOT_FOUND, status_code=404)
        return match

    def _match_response(self, match: Match) -> MatchResponse:
        return MatchResponse(
            match_id=match.match_id,
            status=MatchStatus(match.status.value),
            created_at=match.created_at,
            game_state=game_state_info(match.game_state),
        )
