"""
Session Module - Manages in-memory matches.

A match represents one play-through:
- Created from two decks
- Holds the current game state
- Serializes and rolls back action dispatch
- Destroyed when the match ends

Matches are EPHEMERAL: nothing is written to disk.
"""

from .manager import MatchManager, Match, MatchStatus, HistoryEntry

__all__ = [
    "MatchManager",
    "Match",
    "MatchStatus",
    "HistoryEntry",
]
