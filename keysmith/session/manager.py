"""
Match Manager - Creates and manages in-memory matches.

LIFECYCLE:
1. Caller supplies two decks -> match created, opening hands dealt
2. During the match every action goes through Match.dispatch:
   - Dispatch is serialized per match
   - The state is snapshotted first
   - Engine errors roll the state back and become failure results
   - Anything else rolls back, is logged, and propagates
3. Match ends -> removed from memory, ALL state deleted

PERSISTENCE RULES:
- NO database
- Matches live only as long as the process
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import random
import threading
import time
import uuid

from ..catalog.loader import Deck
from ..engine_core.state import GameState
from ..engine_core.action import Action, ActionResult
from ..engine_core.errors import EngineError
from ..engine_core.reducer import Reducer
from ..engine_core.setup import create_game
from ..scripts.registry import ScriptRegistry, default_registry

logger = logging.getLogger(__name__)


class MatchStatus(Enum):
    """State of a match."""
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass
class HistoryEntry:
    """One dispatched action and how it went."""
    action: Action
    success: bool
    error: str | None = None
    turn_number: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.action.to_dict(),
            "success": self.success,
            "error": self.error,
            "turn_number": self.turn_number,
        }


@dataclass
class Match:
    """
    An in-memory match.

    Contains:
    - The current GameState
    - The reducer that owns its randomness
    - The dispatch history

    State is NOT persisted.
    """
    match_id: str
    game_state: GameState
    reducer: Reducer
    created_at: float
    status: MatchStatus = MatchStatus.ACTIVE
    history: list[HistoryEntry] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def is_active(self) -> bool:
        return self.status == MatchStatus.ACTIVE

    def dispatch(self, action: Action) -> ActionResult:
        """
        Apply an action to this match.

        The state is unchanged when the action fails. Engine errors come
        back as a failure result; any other exception is re-raised.
        """
        with self._lock:
            if not self.is_active():
                return ActionResult.failure(
                    f"Match {self.match_id} is {self.status.value}",
                    error_code="MATCH_NOT_ACTIVE",
                )

            snapshot = self.game_state.clone()
            try:
                self.reducer.apply(self.game_state, action)
            except EngineError as e:
                self.game_state = snapshot
                logger.warning("Match %s: %s rejected: %s", self.match_id, action.type_name, e)
                self.history.append(HistoryEntry(
                    action=action, success=False, error=str(e),
                    turn_number=snapshot.turn_number,
                ))
                return ActionResult.failure(str(e), error_code=e.error_code)
            except Exception:
                self.game_state = snapshot
                logger.exception("Match %s: %s failed, state rolled back", self.match_id, action.type_name)
                raise

            self.history.append(HistoryEntry(
                action=action, success=True, turn_number=self.game_state.turn_number,
            ))
            return ActionResult.success_with_state(
                self.game_state,
                changes=[f"{action.type_name} applied"],
            )


class MatchManager:
    """
    Manages matches.

    Responsibilities:
    - Create matches from decks
    - Track active matches
    - Clean up finished matches

    No persistence - matches are in-memory only. The script registry is
    shared by every match.
    """

    def __init__(self, registry: ScriptRegistry | None = None):
        self.registry = registry if registry is not None else default_registry()
        self._matches: dict[str, Match] = {}
        self._lock = threading.Lock()

    def create_match(
        self,
        deck_one: Deck,
        deck_two: Deck,
        player_names: tuple[str, str] = ("Player 1", "Player 2"),
        seed: int | None = None,
    ) -> Match:
        """
        Create a new match and deal opening hands.

        Args:
            deck_one: Deck for the starting player
            deck_two: Deck for the second player
            player_names: Display names in seat order
            seed: Seed for every shuffle in the match

        Returns:
            New active Match
        """
        match_id = str(uuid.uuid4())
        if seed is None:
            seed = random.randrange(2**32)
        # One random stream deals the opening hands and then serves the
        # match, so a whole game replays from its seed
        reducer = Reducer(registry=self.registry, seed=seed)
        state = create_game(
            deck_one,
            deck_two,
            player_names=player_names,
            random_seed=seed,
            registry=self.registry,
            game_id=match_id,
            reducer=reducer,
        )
        match = Match(
            match_id=match_id,
            game_state=state,
            reducer=reducer,
            created_at=time.time(),
        )
        with self._lock:
            self._matches[match_id] = match
        logger.info("Created match %s (%s vs %s)", match_id, *player_names)
        return match

    def get_match(self, match_id: str) -> Match | None:
        """Get a match by ID."""
        return self._matches.get(match_id)

    def end_match(self, match_id: str, reason: str = "finished") -> Match | None:
        """
        End a match and remove it from memory.

        Returns the removed match, or None if it did not exist.
        """
        with self._lock:
            match = self._matches.pop(match_id, None)
        if match is None:
            return None
        match.status = MatchStatus.FINISHED if reason == "finished" else MatchStatus.ABANDONED
        logger.info("Ended match %s (%s)", match_id, reason)
        return match

    def list_active_matches(self) -> list[str]:
        """List IDs of active matches."""
        return [mid for mid, match in self._matches.items() if match.is_active()]

    def cleanup_stale_matches(self, max_age_seconds: int = 3600) -> int:
        """
        End matches older than max_age.

        Returns the number removed.
        """
        now = time.time()
        stale = [
            mid for mid, match in list(self._matches.items())
            if now - match.created_at > max_age_seconds
        ]
        for mid in stale:
            self.end_match(mid, reason="stale")
        return len(stale)
