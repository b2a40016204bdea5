"""
Card Catalog - Static reference data for printed cards.

A Card is the printed definition, never the instance on the table.
Instances (CardInGame) wrap a Card reference; every copy of a printed
card shares the same Card object.

Card structure:
- House (Brobnar, Dis, Logos, ...)
- Type (creature, action, artifact, upgrade)
- Power / armor / Æmber bonus
- Traits and rules text
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


TRAIT_DELIMITER = " • "

# Printed keywords we recognize at the start of rules text
KEYWORDS = frozenset({
    "elusive",
    "skirmish",
    "taunt",
    "poison",
    "deploy",
    "alpha",
    "omega",
    "assault",
    "hazardous",
})


class House(str, Enum):
    """Houses a card can belong to."""
    BROBNAR = "Brobnar"
    DIS = "Dis"
    LOGOS = "Logos"
    MARS = "Mars"
    SANCTUM = "Sanctum"
    SHADOWS = "Shadows"
    UNTAMED = "Untamed"
    SAURIAN = "Saurian"
    STAR_ALLIANCE = "Star Alliance"
    UNFATHOMABLE = "Unfathomable"


class CardType(str, Enum):
    """Printed card types."""
    CREATURE = "Creature"
    ACTION = "Action"
    ARTIFACT = "Artifact"
    UPGRADE = "Upgrade"


def normalize_title(title: str) -> str:
    """Canonical script key for a card title ("King of the Crag" -> "king-of-the-crag")."""
    return title.replace(" ", "-").lower()


def parse_traits(raw: str | None) -> tuple[str, ...]:
    """Split a " • " delimited trait string into an ordered tuple."""
    if not raw:
        return ()
    return tuple(t.strip() for t in raw.split(TRAIT_DELIMITER) if t.strip())


def parse_keywords(text: str | None) -> frozenset[str]:
    """
    Extract printed keywords from the leading sentences of rules text.

    "Elusive. Skirmish. Play: ..." -> {"elusive", "skirmish"}
    Numbered keywords ("Assault 2.") keep only the keyword name.
    Parsing stops at the first sentence that is not a keyword.
    """
    if not text:
        return frozenset()

    found = set()
    for sentence in text.replace("\n", " ").split("."):
        words = sentence.strip().split()
        if not words:
            continue
        word = words[0].lower().rstrip(",")
        if word not in KEYWORDS:
            break
        if len(words) > 1 and not words[1].isdigit():
            break
        found.add(word)
    return frozenset(found)


@dataclass(frozen=True)
class Card:
    """
    A printed card.

    Immutable; shared by reference across all instances of the card.
    The script key is derived once here and used for every script lookup.
    """
    id: str
    title: str
    house: House
    card_type: CardType
    power: int = 0
    armor: int = 0
    amber: int = 0
    traits: tuple[str, ...] = ()
    text: str = ""
    flavor_text: str | None = None
    card_number: str | None = None
    expansion: int | None = None
    maverick: bool = False
    front_image: str | None = None

    script_key: str = field(init=False)
    keywords: frozenset[str] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "script_key", normalize_title(self.title))
        object.__setattr__(self, "keywords", parse_keywords(self.text))

    @property
    def is_creature(self) -> bool:
        return self.card_type == CardType.CREATURE
