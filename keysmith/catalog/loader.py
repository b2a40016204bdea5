"""
Catalog Loader - Validates card and deck records into Cards.

Records arrive in the public "master vault" shape (snake_case keys,
power/armor as strings, traits as one " • " delimited string). Fetching
them is somebody else's job; this module only validates and converts.

Usage:
    catalog = load_catalog("cards.json")
    deck = parse_deck(payload)   # payload already fetched and json-decoded
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional
import json

from pydantic import BaseModel, Field, ValidationError, field_validator

from .card import Card, CardType, House, normalize_title, parse_traits


SAMPLE_CATALOG = Path(__file__).parent / "data" / "cota_sample.json"


class CatalogError(Exception):
    """Raised when a catalog or deck document cannot be loaded."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(message)


# =============================================================================
# Wire models
# =============================================================================

class MasterVaultCard(BaseModel):
    """One card record as published by the catalog."""
    id: str
    card_title: str
    house: House
    card_type: CardType
    front_image: Optional[str] = None
    card_text: Optional[str] = ""
    amber: int = 0
    power: Optional[str] = None
    armor: Optional[str] = None
    flavor_text: Optional[str] = None
    card_number: Optional[str] = None
    expansion: Optional[int] = None
    is_maverick: bool = False
    traits: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("power", "armor", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # The catalog sends numbers, numeric strings, or null
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def to_card(self) -> Card:
        return Card(
            id=self.id,
            title=self.card_title,
            house=self.house,
            card_type=self.card_type,
            power=_to_int(self.power),
            armor=_to_int(self.armor),
            amber=self.amber,
            traits=parse_traits(self.traits),
            text=self.card_text or "",
            flavor_text=self.flavor_text,
            card_number=self.card_number,
            expansion=self.expansion,
            maverick=self.is_maverick,
            front_image=self.front_image,
        )


class MasterVaultDeckLinks(BaseModel):
    houses: list[House] = Field(default_factory=list)
    cards: list[str] = Field(default_factory=list)


class MasterVaultDeckData(BaseModel):
    id: str
    name: str
    expansion: Optional[int] = None
    links: MasterVaultDeckLinks = Field(default_factory=MasterVaultDeckLinks, alias="_links")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class MasterVaultLinked(BaseModel):
    cards: list[MasterVaultCard] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class MasterVaultDeck(BaseModel):
    """A deck document: deck data plus the linked card records."""
    data: MasterVaultDeckData
    linked: MasterVaultLinked = Field(alias="_linked")

    model_config = {"populate_by_name": True, "extra": "ignore"}


def _to_int(value: str | None) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except ValueError:
        # Printed values like "X" count as zero
        return 0


# =============================================================================
# Domain containers
# =============================================================================

@dataclass
class Deck:
    """
    A normalized deck: name, houses, and the list of cards in deck order.

    The deck list may repeat a card; duplicates are the same Card object.
    """
    id: str
    name: str
    houses: list[House] = field(default_factory=list)
    cards: list[Card] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cards)


class CardCatalog:
    """
    Read-only lookup of printed cards by id and by title.

    Shared across matches; never mutated after construction except by
    `merge`, which returns a new catalog.
    """

    def __init__(self, cards: Iterable[Card] = ()):
        self._by_id: dict[str, Card] = {}
        self._by_key: dict[str, Card] = {}
        for card in cards:
            self._by_id[card.id] = card
            self._by_key.setdefault(card.script_key, card)

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._by_id.values())

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id

    def get(self, card_id: str) -> Card | None:
        return self._by_id.get(card_id)

    def by_title(self, title: str) -> Card | None:
        return self._by_key.get(normalize_title(title))

    def merge(self, cards: Iterable[Card]) -> CardCatalog:
        """Return a new catalog with the given cards added (later ids win)."""
        return CardCatalog([*self._by_id.values(), *cards])

    def build_deck(self, card_ids: list[str], name: str = "Deck", deck_id: str = "") -> Deck:
        """Resolve a list of card ids (or titles) into a Deck."""
        cards = []
        missing = []
        for ref in card_ids:
            card = self.get(ref) or self.by_title(ref)
            if card is None:
                missing.append(ref)
            else:
                cards.append(card)
        if missing:
            raise CatalogError(f"Unknown cards: {', '.join(missing)}", errors=missing)
        houses = list(dict.fromkeys(card.house for card in cards))
        return Deck(id=deck_id or name, name=name, houses=houses, cards=cards)


# =============================================================================
# Entry points
# =============================================================================

def parse_cards(records: list[dict[str, Any]]) -> list[Card]:
    """Validate raw card records into Cards."""
    try:
        return [MasterVaultCard.model_validate(r).to_card() for r in records]
    except ValidationError as e:
        raise CatalogError("Invalid card record", errors=[str(err["loc"]) for err in e.errors()]) from e


def load_catalog(path: str | Path | None = None) -> CardCatalog:
    """Load a JSON list of card records. Defaults to the bundled sample catalog."""
    path = Path(path) if path else SAMPLE_CATALOG
    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog is not valid JSON: {path}") from e

    if not isinstance(records, list):
        raise CatalogError("Catalog must be a JSON list of card records")
    return CardCatalog(parse_cards(records))


def parse_deck(payload: dict[str, Any]) -> Deck:
    """
    Validate a deck document into a Deck.

    Card order follows `data._links.cards`, which may repeat ids; when that
    list is empty the linked card records are used as-is.
    """
    try:
        document = MasterVaultDeck.model_validate(payload)
    except ValidationError as e:
        raise CatalogError("Invalid deck document", errors=[str(err["loc"]) for err in e.errors()]) from e

    cards_by_id = {c.id: c.to_card() for c in document.linked.cards}
    order = document.data.links.cards or list(cards_by_id)

    missing = [card_id for card_id in order if card_id not in cards_by_id]
    if missing:
        raise CatalogError("Deck references cards missing from _linked", errors=missing)

    return Deck(
        id=document.data.id,
        name=document.data.name,
        houses=list(document.data.links.houses),
        cards=[cards_by_id[card_id] for card_id in order],
    )
