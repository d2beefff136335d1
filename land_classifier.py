"""
Land classification module.
Sorts land cards by how their mana is available: untapped, conditional, tapped or restricted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from models import Card, DeckCardEntry

_LOG = logging.getLogger(__name__)


class LandCategory(Enum):
    UNTAPPED = "untapped"
    CONDITIONAL = "conditional"
    TAPPED = "tapped"
    RESTRICTED = "restricted"


@dataclass(frozen=True)
class LandClassification:
    category: LandCategory
    reason: str  # diagnostic only


# ===== TEXT RULES =====
# Checked in order; conditional lands come before the generic tapped rule
# because their text usually reads "enters tapped unless ...".

SHOCK_PHRASES = (
    "unless you pay 2 life",
    "2点のライフを払わない限り",
    "2点のライフを支払わない限り",
)

FAST_LAND_PHRASES = (
    "unless you control two or more other lands",
    "unless you control three or more other lands",
    "他の土地を2つ以上コントロールしている",
    "他の土地を3つ以上コントロールしている",
)

PAIN_DAMAGE_PHRASES = ("deals 1 damage to you", "1点のダメージを与える")
PAIN_MANA_PHRASES = ("add", "加える")

CHECK_LAND_PHRASE = "unless you control a"
BASIC_LAND_TYPE_NAMES = (
    "plains", "island", "swamp", "mountain", "forest",
    "平地", "島", "沼", "山", "森",
)

TAPPED_PHRASES = (
    "enters the battlefield tapped",
    "enters tapped",
    "タップ状態で戦場に出る",
    "タップ状態で出る",
)

RESTRICTED_PHRASE = "spend this mana only to"


def _contains_any(text: str, phrases: Tuple[str, ...]) -> bool:
    return any(phrase in text for phrase in phrases)


def _is_mana_restricted(text: str) -> bool:
    if RESTRICTED_PHRASE in text:
        return True
    if "このマナは" in text and "のみ使用" in text:
        return True
    return "のみ使える" in text


def classify_land(card: Card) -> LandClassification:
    """
    Classify a card by when its mana can be used.

    Non-land cards come back as untapped so callers can pass whole hands
    through without filtering first.

    Args:
        card: Card to classify

    Returns:
        LandClassification with category and a short reason
    """
    type_line = card.type_line.lower()
    if "land" not in type_line:
        return LandClassification(LandCategory.UNTAPPED, "Not a land")

    if "basic" in type_line:
        return LandClassification(LandCategory.UNTAPPED, "Basic land")

    text = f"{card.oracle_text.lower()} {card.printed_text.lower()}"

    if _contains_any(text, SHOCK_PHRASES):
        return LandClassification(LandCategory.CONDITIONAL, "Shock land (2 life)")

    if _contains_any(text, FAST_LAND_PHRASES):
        return LandClassification(LandCategory.CONDITIONAL, "Fast land")

    if _contains_any(text, PAIN_DAMAGE_PHRASES) and _contains_any(text, PAIN_MANA_PHRASES):
        return LandClassification(LandCategory.CONDITIONAL, "Pain land")

    if CHECK_LAND_PHRASE in text and _contains_any(text, BASIC_LAND_TYPE_NAMES):
        return LandClassification(LandCategory.CONDITIONAL, "Check land")

    if _contains_any(text, TAPPED_PHRASES):
        return LandClassification(LandCategory.TAPPED, "Always enters tapped")

    if _is_mana_restricted(text):
        return LandClassification(LandCategory.RESTRICTED, "Mana usage restricted")

    if not card.produced_mana:
        return LandClassification(LandCategory.RESTRICTED, "No mana production")

    return LandClassification(LandCategory.UNTAPPED, "No tapped condition found")


def is_available_on_turn1(card: Card) -> bool:
    """
    True if the land can plausibly be the untapped first land drop.

    Conditional lands count as available even when the condition may not
    be met, e.g. a check land without its basic type in play.
    """
    category = classify_land(card).category
    return category in (LandCategory.UNTAPPED, LandCategory.CONDITIONAL)


def classify_lands(cards: Iterable[Card]) -> Dict[str, LandClassification]:
    """Classify every land among cards, keyed by card name."""
    return {card.name: classify_land(card) for card in cards if card.is_land}


def land_category_breakdown(entries: List[DeckCardEntry]) -> Dict[LandCategory, int]:
    """
    Count land copies per category.

    Args:
        entries: Deck entries (non-land entries are ignored)

    Returns:
        Mapping of every LandCategory to a quantity-weighted count
    """
    breakdown = {category: 0 for category in LandCategory}
    for entry in entries:
        if not entry.card.is_land:
            continue
        classification = classify_land(entry.card)
        breakdown[classification.category] += entry.quantity
        _LOG.debug("%s -> %s (%s)", entry.card.name,
                   classification.category.value, classification.reason)
    return breakdown
