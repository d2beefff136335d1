import pytest

from deck_parser import MAINBOARD, SIDEBOARD, DeckParser, parse_decklist

DECKLIST = """
# Elves
4 Llanowar Elves
4x Elvish Mystic
1 Craterhoof Behemoth (AVR) 172
2 Collected Company (DTK)
// basics
Forest
20 Forest

Sideboard
2 Naturalize (M19) 190
"""


def test_parse_text_sections_and_formats():
    decklist = DeckParser().parse_text(DECKLIST)
    assert decklist.mainboard == {
        "Llanowar Elves": 4,
        "Elvish Mystic": 4,
        "Craterhoof Behemoth": 1,
        "Collected Company": 2,
        "Forest": 21,
    }
    assert decklist.sideboard == {"Naturalize": 2}
    assert decklist.set_codes == {
        "Craterhoof Behemoth": "AVR",
        "Collected Company": "DTK",
        "Naturalize": "M19",
    }


def test_maybeboard_is_skipped():
    decklist = DeckParser().parse_text("4 Opt\nMaybeboard\n1 Brainstorm\nSideboard:\n1 Negate")
    assert decklist.sections[MAINBOARD] == {"Opt": 4}
    assert decklist.sections[SIDEBOARD] == {"Negate": 1}


def test_empty_decklist_raises():
    with pytest.raises(ValueError):
        DeckParser().parse_text("# just a comment\n\n// and another")


def test_parse_file_names_deck_from_filename(tmp_path):
    path = tmp_path / "mono_green-elves.txt"
    path.write_text("4 Llanowar Elves\n", encoding="utf-8")
    decklist = parse_decklist(str(path))
    assert decklist.name == "Mono Green Elves"
    assert decklist.mainboard == {"Llanowar Elves": 4}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_decklist(str(tmp_path / "nope.txt"))
