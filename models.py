"""
Data models for MTG deck analysis.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class Card:
    """
    A single Magic card as resolved from the card database.

    Only the fields the analysis engine reads are kept. Text fields default to
    empty strings and collections to empty sets, so detectors never need to
    null-check.
    """
    name: str
    type_line: str = ""
    oracle_text: str = ""
    cmc: float = 0.0
    colors: FrozenSet[str] = frozenset()
    keywords: Tuple[str, ...] = ()
    produced_mana: FrozenSet[str] = frozenset()
    mana_cost: str = ""
    oracle_id: str = ""
    printed_name: Optional[str] = None
    printed_type_line: Optional[str] = None
    printed_text: str = ""

    def __post_init__(self):
        """Normalize missing or loosely-typed fields."""
        # frozen dataclass: assign through object.__setattr__
        object.__setattr__(self, "type_line", _text(self.type_line))
        object.__setattr__(self, "oracle_text", _text(self.oracle_text))
        object.__setattr__(self, "printed_text", _text(self.printed_text))
        object.__setattr__(self, "mana_cost", _text(self.mana_cost))
        object.__setattr__(self, "oracle_id", _text(self.oracle_id))
        object.__setattr__(self, "colors", frozenset(self.colors or ()))
        object.__setattr__(self, "keywords", tuple(self.keywords or ()))
        object.__setattr__(self, "produced_mana", frozenset(self.produced_mana or ()))
        try:
            cmc = float(self.cmc or 0)
        except (TypeError, ValueError):
            cmc = 0.0
        object.__setattr__(self, "cmc", max(cmc, 0.0))

    @property
    def display_name(self) -> str:
        """Localized printed name when available, English name otherwise."""
        return self.printed_name or self.name

    @property
    def is_land(self) -> bool:
        return "land" in self.type_line.lower()

    @property
    def is_creature(self) -> bool:
        return "creature" in self.type_line.lower()

    @property
    def is_instant_or_sorcery(self) -> bool:
        type_line = self.type_line.lower()
        return "instant" in type_line or "sorcery" in type_line

    @classmethod
    def from_scryfall(cls, data: Dict[str, Any]) -> "Card":
        """
        Build a Card from a Scryfall card object.

        Double-faced cards carry their rules text per face; the faces are joined
        so pattern matching sees both sides.
        """
        oracle_text = _text(data.get("oracle_text"))
        printed_text = _text(data.get("printed_text"))
        faces = data.get("card_faces")
        if not oracle_text and isinstance(faces, list):
            oracle_text = "\n".join(
                _text(face.get("oracle_text")) for face in faces
                if isinstance(face, dict) and face.get("oracle_text")
            )
            printed_text = printed_text or "\n".join(
                _text(face.get("printed_text")) for face in faces
                if isinstance(face, dict) and face.get("printed_text")
            )

        type_line = _text(data.get("type_line"))
        if not type_line and isinstance(faces, list) and faces:
            type_line = _text(faces[0].get("type_line"))

        colors = data.get("colors")
        if colors is None and isinstance(faces, list):
            colors = [c for face in faces if isinstance(face, dict) for c in face.get("colors", [])]

        return cls(
            name=_text(data.get("name")),
            oracle_id=_text(data.get("oracle_id")),
            type_line=type_line,
            printed_name=data.get("printed_name"),
            printed_type_line=data.get("printed_type_line"),
            oracle_text=oracle_text,
            printed_text=printed_text,
            mana_cost=_text(data.get("mana_cost")),
            cmc=data.get("cmc", 0),
            colors=frozenset(colors or ()),
            keywords=tuple(data.get("keywords") or ()),
            produced_mana=frozenset(data.get("produced_mana") or ()),
        )


@dataclass(frozen=True)
class DeckCardEntry:
    """A card paired with its copy count in one section of a deck."""
    card: Card
    quantity: int = 1

    def __post_init__(self):
        if self.quantity < 0:
            raise ValueError(
                f"Quantity for '{self.card.name}' must not be negative (got {self.quantity})"
            )


@dataclass
class Deck:
    """Represents a Magic: The Gathering deck."""
    mainboard: List[DeckCardEntry]
    sideboard: List[DeckCardEntry] = field(default_factory=list)
    name: Optional[str] = None

    @property
    def total_cards(self) -> int:
        """Total number of mainboard cards."""
        return sum(entry.quantity for entry in self.mainboard)

    @property
    def unique_cards(self) -> int:
        """Number of unique mainboard cards."""
        return len(self.mainboard)

    def get_card_names(self) -> List[str]:
        """Get a list of all unique mainboard card names."""
        return [entry.card.name for entry in self.mainboard]

    @staticmethod
    def merge_entries(entries: List[DeckCardEntry]) -> List[DeckCardEntry]:
        """
        Merge entries that refer to the same card name.

        The analysis functions expect each card once per section, so callers
        assembling decks from several sources run their entries through here.
        """
        quantities: Dict[str, int] = defaultdict(int)
        cards: Dict[str, Card] = {}
        for entry in entries:
            cards.setdefault(entry.card.name, entry.card)
            quantities[entry.card.name] += entry.quantity
        return [DeckCardEntry(card=cards[name], quantity=qty) for name, qty in quantities.items()]
