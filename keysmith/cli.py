"""
Keysmith CLI - Command-line interface for the engine.

Usage:
    keysmith cards                   List cards in the catalog
    keysmith import-deck <file>      Validate a master-vault deck document
    keysmith demo [--seed N]         Play a short scripted match
    keysmith serve [--port N]        Run the HTTP API with uvicorn
"""

import argparse
import json
import logging
import os
import random
import sys

from .catalog import CatalogError, load_catalog, parse_deck

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Keysmith - two-player card game rules engine",
        prog="keysmith",
    )
    parser.add_argument("--catalog", default=os.getenv("KEYSMITH_CATALOG"), help="Catalog JSON file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("cards", help="List cards in the catalog")

    import_parser = subparsers.add_parser("import-deck", help="Validate a deck document")
    import_parser.add_argument("deck_file", help="Path to deck JSON")

    demo_parser = subparsers.add_parser("demo", help="Play a short scripted match")
    demo_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)

    logging.basicConfig(level=os.getenv("KEYSMITH_LOG_LEVEL", "WARNING").upper())

    if args.command == "cards":
        return cmd_cards(args)
    elif args.command == "import-deck":
        return cmd_import_deck(args)
    elif args.command == "demo":
        return cmd_demo(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def _load(args):
    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        print(f"Error: {e}")
        sys.exit(1)
    logger.debug("Loaded %d cards", len(catalog))
    return catalog


def cmd_cards(args):
    """List cards in the catalog."""
    catalog = _load(args)
    for card in sorted(catalog, key=lambda c: (c.house.value, c.title)):
        stats = f"{card.power}/{card.armor}" if card.is_creature else "-"
        print(f"{card.house.value:<14} {card.card_type.value:<9} {stats:<5} {card.title}")
    print(f"\n{len(catalog)} cards")
    return 0


def cmd_import_deck(args):
    """Validate a deck document and print its contents."""
    try:
        with open(args.deck_file, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.deck_file}")
        return 1
    except json.JSONDecodeError as e:
        print(f"Error: {args.deck_file} is not valid JSON: {e}")
        return 1

    try:
        deck = parse_deck(payload)
    except CatalogError as e:
        print(f"Error: {e}")
        for err in e.errors:
            print(f"  - {err}")
        return 1

    print(f"Deck: {deck.name}")
    print(f"Houses: {', '.join(h.value for h in deck.houses)}")
    print(f"Cards: {len(deck)}")
    for card in deck.cards:
        print(f"  {card.title}")
    return 0


def cmd_demo(args):
    """Deal a match from the sample catalog and play a first fight."""
    from .engine_core import Action, Reducer, create_game

    catalog = _load(args)
    brobnar = [c.id for c in catalog if c.house.value == "Brobnar"]
    others = [c.id for c in catalog if c.house.value != "Brobnar"]
    deck_one = catalog.build_deck(brobnar * 2, name="Brobnar Sampler")
    deck_two = catalog.build_deck(others * 2, name="Mixed Sampler")

    seed = args.seed if args.seed is not None else random.randrange(2**32)
    reducer = Reducer(seed=seed)
    state = create_game(deck_one, deck_two, random_seed=seed, reducer=reducer)
    print(f"Game {state.game_id} (seed {state.random_seed})")

    # Each player plays the first creature in hand, then player one attacks
    for player in state.players:
        creature = next((c for c in player.hand if c.card.is_creature), None)
        if creature is None:
            print(f"{player.name} has no creature to play")
            continue
        reducer.apply(state, Action.play_creature(creature.id))
        print(f"{player.name} plays {creature.title}")
        if player is state.player_one:
            reducer.apply(state, Action.end_turn())
            reducer.apply(state, Action.end_turn())

    one, two = state.player_one, state.player_two
    if one.creatures and two.creatures:
        attacker, defender = one.creatures[0], two.creatures[0]
        reducer.apply(state, Action.fight(attacker.id, defender.id))
        print(f"{attacker.title} fights {defender.title}")

    for player in state.players:
        board = ", ".join(f"{c.title} ({c.effective_power}, {c.tokens['damage']} dmg)" for c in player.creatures)
        print(f"{player.name}: {player.amber} Æmber, {len(player.hand)} in hand, board: {board or 'empty'}")
    return 0


def cmd_serve(args):
    """Run the HTTP API."""
    import uvicorn

    # Fail here rather than inside the app import
    _load(args)
    if args.catalog:
        os.environ["KEYSMITH_CATALOG"] = args.catalog
    uvicorn.run("keysmith.api.app:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
