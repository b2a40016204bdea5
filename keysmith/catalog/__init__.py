"""Card Catalog - printed card definitions and deck import."""

from .card import Card, CardType, House, normalize_title, parse_traits, parse_keywords
from .loader import (
    CardCatalog,
    CatalogError,
    Deck,
    MasterVaultCard,
    MasterVaultDeck,
    load_catalog,
    parse_cards,
    parse_deck,
)

__all__ = [
    "Card",
    "CardType",
    "House",
    "normalize_title",
    "parse_traits",
    "parse_keywords",
    "CardCatalog",
    "CatalogError",
    "Deck",
    "MasterVaultCard",
    "MasterVaultDeck",
    "load_catalog",
    "parse_cards",
    "parse_deck",
]
