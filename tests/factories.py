"""Factory helpers for building cards and deck entries in tests."""
from __future__ import annotations

from models import Card, DeckCardEntry


def make_card(name, type_line="", oracle_text="", cmc=0, **kwargs) -> Card:
    return Card(name=name, type_line=type_line, oracle_text=oracle_text, cmc=cmc, **kwargs)


def make_entry(name, quantity=1, **kwargs) -> DeckCardEntry:
    return DeckCardEntry(card=make_card(name, **kwargs), quantity=quantity)


def basic_land(name="Plains", color="W", quantity=1) -> DeckCardEntry:
    return make_entry(
        name,
        quantity=quantity,
        type_line=f"Basic Land — {name}",
        produced_mana=frozenset({color}),
    )


def creature(name, quantity=1, cmc=2, subtypes="", oracle_text="", **kwargs) -> DeckCardEntry:
    type_line = f"Creature — {subtypes}" if subtypes else "Creature"
    return make_entry(name, quantity=quantity, type_line=type_line,
                      oracle_text=oracle_text, cmc=cmc, **kwargs)


def spell(name, quantity=1, cmc=1, oracle_text="", type_line="Instant", **kwargs) -> DeckCardEntry:
    return make_entry(name, quantity=quantity, type_line=type_line,
                      oracle_text=oracle_text, cmc=cmc, **kwargs)


def scryfall_card(name, **overrides) -> dict:
    """A minimal Scryfall card object."""
    data = {
        "object": "card",
        "name": name,
        "oracle_id": f"oracle-{name.lower().replace(' ', '-')}",
        "type_line": "Instant",
        "oracle_text": "",
        "mana_cost": "{R}",
        "cmc": 1.0,
        "colors": ["R"],
        "keywords": [],
    }
    data.update(overrides)
    return data
