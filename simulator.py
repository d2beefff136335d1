"""
Monte Carlo simulation of opening hands and early turns.
Estimates land counts, keepability, color availability, curve-outs and key card timing.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import config
from land_classifier import is_available_on_turn1
from models import Card, DeckCardEntry
from utils import percent

_LOG = logging.getLogger(__name__)


# ===== RESULT MODELS =====

@dataclass(frozen=True)
class OpeningHandStats:
    """Aggregate statistics over N simulated opening hands"""
    total_simulations: int
    land_distribution: Dict[int, float]  # lands in hand (0-7) -> % of hands
    average_lands: float
    keepable_hand_rate: float  # % of hands with 2-5 lands
    color_requirements: Dict[str, float]  # color -> % of hands producing it on T1


@dataclass(frozen=True)
class EarlyGameStats:
    """Chance of having an on-curve play for turns 1-3"""
    turn1_playable_spells: float
    turn2_playable_spells: float
    turn3_playable_spells: float
    curve_out_rate: float

    def playable_rate(self, turn: int) -> float:
        return {
            1: self.turn1_playable_spells,
            2: self.turn2_playable_spells,
            3: self.turn3_playable_spells,
        }[turn]


@dataclass(frozen=True)
class KeyCardStats:
    """How often a named card has been seen by a given point"""
    card_name: str
    opening_hand_rate: float
    turn3_rate: float  # opening 7 + 2 draws
    turn4_rate: float  # opening 7 + 3 draws


# ===== DRAW PRIMITIVES =====

def _check_simulations(simulations: int) -> None:
    if simulations < 1:
        raise ValueError("simulations must be at least 1")


def flatten_deck(entries: Sequence[DeckCardEntry]) -> List[Card]:
    """Expand each entry into `quantity` copies of its card."""
    library: List[Card] = []
    for entry in entries:
        library.extend([entry.card] * entry.quantity)
    return library


def shuffled(library: List[Card], rng: random.Random) -> List[Card]:
    """Return a Fisher-Yates shuffled copy; the input list is left untouched."""
    deck = list(library)
    rng.shuffle(deck)
    return deck


def count_lands(cards: Sequence[Card]) -> int:
    return sum(1 for card in cards if card.is_land)


def turn1_colors(hand: Sequence[Card]) -> set:
    """Colors (WUBRG only) produced by lands usable on turn 1."""
    colors = set()
    for card in hand:
        if card.is_land and is_available_on_turn1(card):
            colors.update(mana for mana in card.produced_mana if mana in config.COLOR_SYMBOLS)
    return colors


def is_keepable(land_count: int) -> bool:
    return config.KEEPABLE_MIN_LANDS <= land_count <= config.KEEPABLE_MAX_LANDS


def deck_colors(entries: Sequence[DeckCardEntry]) -> List[str]:
    """Colors the nonland cards ask for, in WUBRG order."""
    present = set()
    for entry in entries:
        if entry.quantity > 0 and not entry.card.is_land:
            present.update(entry.card.colors)
    return [color for color in config.COLOR_SYMBOLS if color in present]


# ===== SIMULATIONS =====

def simulate_opening_hands(
    mainboard: Sequence[DeckCardEntry],
    simulations: int = config.DEFAULT_SIMULATIONS,
    rng: Optional[random.Random] = None,
) -> OpeningHandStats:
    """
    Draw N random opening hands and summarize their land content.

    Args:
        mainboard: Deck entries to draw from
        simulations: Number of independent trials (>= 1)
        rng: Random source; a fresh unseeded one is used if omitted

    Returns:
        OpeningHandStats with all rates as percentages
    """
    _check_simulations(simulations)
    rng = rng or random.Random()
    library = flatten_deck(mainboard)
    colors = deck_colors(mainboard)

    land_counts = {lands: 0 for lands in range(config.HAND_SIZE + 1)}
    color_hits = {color: 0 for color in colors}
    total_lands = 0
    keepable = 0

    for _ in range(simulations):
        hand = shuffled(library, rng)[:config.HAND_SIZE]
        lands = count_lands(hand)
        land_counts[lands] += 1
        total_lands += lands
        if is_keepable(lands):
            keepable += 1

        available = turn1_colors(hand)
        for color in colors:
            if color in available:
                color_hits[color] += 1

    _LOG.debug("Simulated %d opening hands from %d cards", simulations, len(library))

    return OpeningHandStats(
        total_simulations=simulations,
        land_distribution={lands: percent(n, simulations) for lands, n in land_counts.items()},
        average_lands=total_lands / simulations,
        keepable_hand_rate=percent(keepable, simulations),
        color_requirements={color: percent(n, simulations) for color, n in color_hits.items()},
    )


def simulate_early_game(
    mainboard: Sequence[DeckCardEntry],
    simulations: int = config.DEFAULT_SIMULATIONS,
    rng: Optional[random.Random] = None,
) -> EarlyGameStats:
    """
    Estimate on-curve plays from the opening hand alone.

    A turn N play needs at least N lands in hand and a nonland card with
    cmc exactly N. Colors are not checked. A curve-out needs 3+ lands and
    at least three nonland cards costing 1 to 3.
    """
    _check_simulations(simulations)
    rng = rng or random.Random()
    library = flatten_deck(mainboard)

    playable = {turn: 0 for turn in config.EARLY_TURNS}
    curve_outs = 0

    for _ in range(simulations):
        hand = shuffled(library, rng)[:config.HAND_SIZE]
        lands = count_lands(hand)
        spells = [card for card in hand if not card.is_land]

        for turn in config.EARLY_TURNS:
            if lands >= turn and any(card.cmc == turn for card in spells):
                playable[turn] += 1

        cheap_spells = [card for card in spells if 1 <= card.cmc <= 3]
        if lands >= 3 and len(cheap_spells) >= config.CURVE_OUT_MIN_SPELLS:
            curve_outs += 1

    _LOG.debug("Simulated %d early games", simulations)

    return EarlyGameStats(
        turn1_playable_spells=percent(playable[1], simulations),
        turn2_playable_spells=percent(playable[2], simulations),
        turn3_playable_spells=percent(playable[3], simulations),
        curve_out_rate=percent(curve_outs, simulations),
    )


def simulate_key_card_draw_rate(
    mainboard: Sequence[DeckCardEntry],
    card_name: str,
    simulations: int = config.DEFAULT_SIMULATIONS,
    rng: Optional[random.Random] = None,
) -> KeyCardStats:
    """
    Measure how often card_name is seen in the opening hand, by turn 3 and by turn 4.

    The card is matched on its exact English name. A card that is not in
    the deck is not an error; every rate is then 0.
    """
    _check_simulations(simulations)
    rng = rng or random.Random()
    library = flatten_deck(mainboard)

    in_opening = 0
    by_turn3 = 0
    by_turn4 = 0

    for _ in range(simulations):
        deck = shuffled(library, rng)
        positions = [i for i, card in enumerate(deck[:config.CARDS_SEEN_BY_TURN4])
                     if card.name == card_name]
        if not positions:
            continue
        first_seen = positions[0]
        if first_seen < config.HAND_SIZE:
            in_opening += 1
        if first_seen < config.CARDS_SEEN_BY_TURN3:
            by_turn3 += 1
        by_turn4 += 1

    _LOG.debug("Simulated %d draws for key card %r", simulations, card_name)

    return KeyCardStats(
        card_name=card_name,
        opening_hand_rate=percent(in_opening, simulations),
        turn3_rate=percent(by_turn3, simulations),
        turn4_rate=percent(by_turn4, simulations),
    )


# ===== REPORTING =====

def generate_simulation_summary(
    opening: OpeningHandStats,
    early: Optional[EarlyGameStats] = None,
    key_cards: Sequence[KeyCardStats] = (),
) -> str:
    """Generate human-readable simulation summary"""
    lines = [
        f"Opening Hands ({opening.total_simulations} simulations)",
        f"  Average lands: {opening.average_lands:.2f}",
        f"  Keepable (2-5 lands): {opening.keepable_hand_rate:.1f}%",
        "  Land distribution:",
    ]
    for lands, rate in sorted(opening.land_distribution.items()):
        lines.append(f"    {lands} lands: {rate:5.1f}%")

    if opening.color_requirements:
        lines.append("  Turn 1 color access:")
        for color, rate in opening.color_requirements.items():
            lines.append(f"    {config.COLOR_NAMES.get(color, color)}: {rate:.1f}%")

    if early is not None:
        lines.append("")
        lines.append("Early Game")
        for turn in config.EARLY_TURNS:
            lines.append(f"  Turn {turn} play: {early.playable_rate(turn):.1f}%")
        lines.append(f"  Curve out: {early.curve_out_rate:.1f}%")

    if key_cards:
        lines.append("")
        lines.append("Key Cards")
        for stats in key_cards:
            lines.append(
                f"  {stats.card_name}: opening {stats.opening_hand_rate:.1f}% | "
                f"T3 {stats.turn3_rate:.1f}% | T4 {stats.turn4_rate:.1f}%"
            )

    return "\n".join(lines)
