#!/usr/bin/env python3
"""
MTG Deck Analyzer - Simulate opening hands and detect synergies in a decklist
"""

import argparse
import logging
import random
import sys
import traceback
from pathlib import Path

from config import AnalyzerConfig
from deck_parser import parse_decklist
from land_classifier import land_category_breakdown
from scryfall_api import ScryfallAPI
from simulator import (
    generate_simulation_summary,
    simulate_early_game,
    simulate_key_card_draw_rate,
    simulate_opening_hands,
)
from synergy import analyze_deck_synergies, generate_synergy_summary


def build_arg_parser(settings: AnalyzerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze Magic: The Gathering decklists",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py elves.txt
  python main.py elves.txt --simulations 5000 --seed 42
  python main.py elves.txt --key-card "Llanowar Elves" --key-card "Elvish Archdruid"

Supported formats:
  - "4 Card Name"
  - "4x Lightning Bolt"
  - "1 Card Name (SET) 123"
  - "Card Name" (assumes quantity 1)
  - a "Sideboard" line starts the sideboard

The program fetches card information from Scryfall.
        """
    )

    parser.add_argument(
        'decklist',
        help='Path to the decklist file'
    )

    parser.add_argument(
        '--simulations',
        type=int,
        default=settings.simulations,
        help=f'Number of simulated games (default: {settings.simulations})'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=settings.seed,
        help='Random seed for reproducible simulations'
    )

    parser.add_argument(
        '--key-card',
        action='append',
        default=[],
        dest='key_cards',
        metavar='NAME',
        help='Card to track draw rates for (repeatable)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        default=settings.debug,
        help='Show debug logging and tracebacks'
    )

    return parser


def print_land_breakdown(mainboard) -> None:
    breakdown = land_category_breakdown(mainboard)
    print("\nLand Breakdown")
    for category, count in breakdown.items():
        print(f"  {category.value.title()}: {count}")


def main(argv=None):
    """Main entry point for the deck analyzer."""
    settings = AnalyzerConfig.from_env()
    args = build_arg_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        decklist_path = Path(args.decklist)
        print(f"Parsing decklist: {decklist_path.name}")
        decklist = parse_decklist(str(decklist_path))

        print("Fetching cards from Scryfall...")
        api = ScryfallAPI.from_config(settings)
        deck, missing = api.build_deck(decklist)

        if not deck.mainboard:
            raise ValueError("None of the mainboard cards could be resolved")

        print(f"\n{deck.name or 'Deck'}: {deck.total_cards} cards ({deck.unique_cards} unique)")
        if missing:
            print(f"Could not find {len(missing)} card(s): {', '.join(missing)}")

        rng = random.Random(args.seed)
        opening = simulate_opening_hands(deck.mainboard, args.simulations, rng)
        early = simulate_early_game(deck.mainboard, args.simulations, rng)
        key_cards = [
            simulate_key_card_draw_rate(deck.mainboard, name, args.simulations, rng)
            for name in args.key_cards
        ]

        print("\n" + "=" * 60)
        print(generate_simulation_summary(opening, early, key_cards))
        print_land_breakdown(deck.mainboard)
        print("\n" + "=" * 60)
        print(generate_synergy_summary(analyze_deck_synergies(deck.mainboard)))
        print("=" * 60)

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
