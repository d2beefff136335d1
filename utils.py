"""
Shared utility functions for the MTG deck analysis engine.
Common operations used across multiple modules.
"""
from __future__ import annotations

import math
import re
import unicodedata
from typing import Callable, Iterable, List, Pattern, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from models import DeckCardEntry


def canonicalize_name(name: str) -> str:
    """
    Canonicalize card names for consistent matching.

    Transforms:
    - Normalizes Unicode (NFKD)
    - Removes combining characters (accents)
    - Case-folds to lowercase
    - Normalizes curly apostrophes
    - Collapses whitespace

    Args:
        name: Card name to canonicalize

    Returns:
        Canonicalized string for comparison

    Examples:
        >>> canonicalize_name("Lim-Dûl's Vault")
        "lim-dul's vault"
    """
    if not name:
        return ""

    name = unicodedata.normalize("NFKD", name)
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = name.casefold()
    name = name.replace("’", "'").replace("‘", "'")
    name = re.sub(r"\s+", " ", name).strip()

    return name


def percent(successes: int, total: int) -> float:
    """
    Express a success count as a percentage of trials.

    Args:
        successes: Number of trials that met the condition
        total: Number of trials run (must be >= 1)

    Returns:
        Percentage in [0, 100]
    """
    return (successes / total) * 100


def matches_any(patterns: Iterable[Pattern[str]], text: str) -> bool:
    """True if any compiled pattern matches somewhere in text."""
    return any(pattern.search(text) for pattern in patterns)


def add_unique(names: List[str], name: str) -> None:
    """Append name unless the evidence list already holds it."""
    if name not in names:
        names.append(name)


def total_quantity(
    entries: Sequence["DeckCardEntry"],
    predicate: Callable[["DeckCardEntry"], bool],
) -> int:
    """Sum the quantities of the entries that satisfy predicate."""
    return sum(entry.quantity for entry in entries if predicate(entry))


def round_half_up(value: float, digits: int = 1) -> float:
    """
    Round to a fixed number of decimals, with ties going up.

    Examples:
        >>> round_half_up(6.25)
        6.3
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale
