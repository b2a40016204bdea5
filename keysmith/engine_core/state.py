"""
Game State - The snapshot of an in-progress match.

Design principles:
- Mutable by replacement: the reducer is the only writer
- Every card instance lives in exactly one zone at a time
- Counters and tokens saturate at their bounds, they never go negative
- Snapshot with clone() before apply() if you need the previous state
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterator
from copy import deepcopy
from enum import Enum

from ..catalog.card import Card


MAX_KEYS = 3

TOKEN_KINDS = ("amber", "damage", "armor", "power", "stun", "doom")


class ZoneName(str, Enum):
    """Named card containers on a player's side."""
    HAND = "hand"
    LIBRARY = "library"
    DISCARD = "discard"
    ARCHIVES = "archives"
    PURGED = "purged"
    CREATURES = "creatures"
    ARTIFACTS = "artifacts"


class Tokens:
    """
    Token counts on a card, keyed by kind.

    Every mutation clamps at zero.
    """

    def __init__(self, **counts: int):
        self._counts = {kind: 0 for kind in TOKEN_KINDS}
        for kind, amount in counts.items():
            self.set(kind, amount)

    def __getitem__(self, kind: str) -> int:
        return self._counts.get(kind, 0)

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __eq__(self, other):
        if not isinstance(other, Tokens):
            return NotImplemented
        return self._counts == other._counts

    def __repr__(self):
        active = {k: v for k, v in self._counts.items() if v}
        return f"Tokens({active})"

    def add(self, kind: str, amount: int) -> int:
        """Add a signed amount, clamp at zero, return the new count."""
        self._counts[kind] = max(self[kind] + amount, 0)
        return self._counts[kind]

    def set(self, kind: str, amount: int) -> None:
        self._counts[kind] = max(amount, 0)

    def clear(self) -> None:
        for kind in self._counts:
            self._counts[kind] = 0

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)


@dataclass(eq=False)
class CardInGame:
    """
    A card instance in the game.

    Note: This is a runtime instance, not the definition.
    The printed definition is `card`, shared by every copy.
    """
    id: str  # Unique instance ID, fixed for the whole match
    card: Card
    owner_id: str
    faceup: bool = True
    ready: bool = True
    tokens: Tokens = field(default_factory=Tokens)
    cards_underneath: list[CardInGame] = field(default_factory=list)
    upgrades: list[CardInGame] = field(default_factory=list)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, CardInGame):
            return False
        return self.id == other.id

    @property
    def title(self) -> str:
        return self.card.title

    def reset(self) -> None:
        """Drop per-play state when the card leaves play."""
        self.ready = True
        self.faceup = True
        self.tokens.clear()


@dataclass(eq=False)
class Creature(CardInGame):
    """
    A creature instance.

    `power` is the current effective power as recomputed by the static
    effect pass; it may dip below zero while auras apply, so compare with
    `effective_power`.
    """
    taunt: bool = False
    elusive: bool = False
    skirmish: bool = False
    must_fight: bool = False
    power: int = 0

    # Granted by auras and upgrades, rebuilt by the static effect pass
    granted_taunt: bool = False
    bonus_armor: int = 0

    # Set when the creature is attacked, cleared at end of turn (elusive)
    attacked_this_turn: bool = False

    def __post_init__(self):
        self.power = self.card.power
        self.taunt = "taunt" in self.card.keywords
        self.elusive = "elusive" in self.card.keywords
        self.skirmish = "skirmish" in self.card.keywords

    __hash__ = CardInGame.__hash__

    @property
    def has_taunt(self) -> bool:
        return self.taunt or self.granted_taunt

    @property
    def effective_power(self) -> int:
        return max(self.power, 0)

    @property
    def armor(self) -> int:
        return self.card.armor + self.bonus_armor + self.tokens["armor"]

    @property
    def is_destroyed(self) -> bool:
        return self.tokens["damage"] > 0 and self.tokens["damage"] >= self.effective_power

    def reset(self) -> None:
        super().reset()
        self.__post_init__()
        self.must_fight = False
        self.granted_taunt = False
        self.bonus_armor = 0
        self.attacked_this_turn = False


def new_instance(card: Card, instance_id: str, owner_id: str) -> CardInGame:
    """Instantiate a printed card. Creatures get the Creature type up front."""
    if card.is_creature:
        return Creature(id=instance_id, card=card, owner_id=owner_id)
    return CardInGame(id=instance_id, card=card, owner_id=owner_id)


@dataclass
class PlayerState:
    """
    State for a single player.

    Library convention: index 0 is the top of the draw pile.
    Discard convention: the last element is the top of the pile.
    """
    player_id: str
    name: str

    hand: list[CardInGame] = field(default_factory=list)
    library: list[CardInGame] = field(default_factory=list)
    discard: list[CardInGame] = field(default_factory=list)
    archives: list[CardInGame] = field(default_factory=list)
    purged: list[CardInGame] = field(default_factory=list)
    creatures: list[Creature] = field(default_factory=list)  # left-to-right
    artifacts: list[CardInGame] = field(default_factory=list)

    amber: int = 0
    chains: int = 0
    keys: int = 0

    def zone(self, name: ZoneName | str) -> list[CardInGame]:
        """Get a zone list by name."""
        return getattr(self, ZoneName(name).value)

    def set_zone(self, name: ZoneName | str, cards: list[CardInGame]) -> None:
        setattr(self, ZoneName(name).value, cards)

    def zones(self) -> Iterator[tuple[ZoneName, list[CardInGame]]]:
        for name in ZoneName:
            yield name, self.zone(name)

    def in_play(self) -> list[CardInGame]:
        return [*self.creatures, *self.artifacts]

    def all_cards(self) -> Iterator[CardInGame]:
        """Every instance on this side, including attachments."""
        for _, cards in self.zones():
            for card in cards:
                yield card
                yield from card.upgrades
                yield from card.cards_underneath

    @property
    def card_count(self) -> int:
        return sum(1 for _ in self.all_cards())


@dataclass
class TurnEffect:
    """A hook a played card keeps running until the end of the turn."""
    card: CardInGame
    controller_id: str
    # The action that put the effect in place does not trigger it
    registered_by: str | None = None


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    This is the unit of transition: every action maps one GameState to
    its successor. Actions themselves are never stored here.
    """
    game_id: str
    players: list[PlayerState] = field(default_factory=list)

    active_player_idx: int = 0
    turn_number: int = 1

    # Lingering "for the remainder of the turn" effects
    turn_effects: list[TurnEffect] = field(default_factory=list)

    random_seed: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def active_player(self) -> PlayerState:
        """Get the active player."""
        return self.players[self.active_player_idx]

    @property
    def player_one(self) -> PlayerState:
        return self.players[0]

    @property
    def player_two(self) -> PlayerState:
        return self.players[1]

    def get_player(self, player_id: str | None) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def opponent_of(self, player_id: str) -> PlayerState | None:
        for p in self.players:
            if p.player_id != player_id:
                return p
        return None

    def all_cards(self) -> Iterator[CardInGame]:
        for player in self.players:
            yield from player.all_cards()

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
