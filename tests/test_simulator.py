import random

import pytest

from factories import basic_land, creature, make_entry, spell
from simulator import (
    deck_colors,
    flatten_deck,
    generate_simulation_summary,
    shuffled,
    simulate_early_game,
    simulate_key_card_draw_rate,
    simulate_opening_hands,
)


def test_flatten_deck_expands_quantities():
    library = flatten_deck([basic_land(quantity=3), creature("Bear", quantity=2)])
    assert len(library) == 5
    assert sum(1 for card in library if card.is_land) == 3


def test_shuffled_leaves_input_untouched():
    library = flatten_deck([creature(f"Card {i}") for i in range(10)])
    original = list(library)
    result = shuffled(library, random.Random(3))
    assert library == original
    assert sorted(c.name for c in result) == sorted(c.name for c in original)


def test_opening_hand_histogram_sums_to_100(white_weenie, rng):
    stats = simulate_opening_hands(white_weenie, 500, rng)
    assert stats.total_simulations == 500
    assert set(stats.land_distribution) == set(range(8))
    assert sum(stats.land_distribution.values()) == pytest.approx(100.0)
    assert 0 <= stats.keepable_hand_rate <= 100
    assert 0 <= stats.average_lands <= 7


def test_plains_deck_always_has_white_when_it_has_a_land(white_weenie, rng):
    stats = simulate_opening_hands(white_weenie, 1000, rng)
    assert list(stats.color_requirements) == ["W"]
    assert stats.color_requirements["W"] == pytest.approx(100.0 - stats.land_distribution[0])
    # 20 lands in 60 cards averages 7/3 lands per hand
    assert stats.average_lands == pytest.approx(7 / 3, abs=0.15)


def test_24_plains_and_36_one_drops(rng):
    deck = [
        basic_land("Plains", "W", quantity=24),
        creature("Savannah Lions", quantity=36, cmc=1, colors=frozenset({"W"})),
    ]
    stats = simulate_opening_hands(deck, 1000, rng)
    assert 2 < stats.average_lands < 4
    assert stats.keepable_hand_rate > 70
    assert stats.color_requirements["W"] > 90


def test_no_lands_means_no_keepable_hands(no_lands, rng):
    stats = simulate_opening_hands(no_lands, 200, rng)
    assert stats.land_distribution[0] == 100.0
    assert stats.keepable_hand_rate == 0.0
    assert stats.color_requirements == {"G": 0.0}

    early = simulate_early_game(no_lands, 200, rng)
    assert early.turn1_playable_spells == 0.0
    assert early.curve_out_rate == 0.0


def test_tapped_lands_do_not_give_turn1_colors(rng):
    deck = [
        make_entry("Tranquil Cove", quantity=30, type_line="Land",
                   oracle_text="Tranquil Cove enters the battlefield tapped.",
                   produced_mana=frozenset({"W", "U"})),
        creature("Lion", quantity=30, cmc=1, colors=frozenset({"W"})),
    ]
    stats = simulate_opening_hands(deck, 200, rng)
    assert stats.color_requirements["W"] == 0.0


def test_deck_colors_ignore_lands_and_empty_entries():
    entries = [
        make_entry("Land", type_line="Land", colors=frozenset({"G"})),
        creature("Ghost", quantity=0, colors=frozenset({"B"})),
        creature("Lion", colors=frozenset({"W"})),
        spell("Bolt", colors=frozenset({"R"})),
    ]
    assert deck_colors(entries) == ["W", "R"]


def test_early_game_all_one_drops(white_weenie, rng):
    early = simulate_early_game(white_weenie, 500, rng)
    for turn in (1, 2, 3):
        assert 0 <= early.playable_rate(turn) <= 100
    # only one-drops in the deck
    assert early.turn2_playable_spells == 0.0
    assert early.turn3_playable_spells == 0.0
    assert early.turn1_playable_spells > 80.0


def test_key_card_rates_are_monotonic(rng):
    deck = [basic_land(quantity=24), creature("Filler", quantity=35), creature("Bomb", cmc=6)]
    stats = simulate_key_card_draw_rate(deck, "Bomb", 2000, rng)
    assert stats.card_name == "Bomb"
    assert 0 <= stats.opening_hand_rate <= stats.turn3_rate <= stats.turn4_rate <= 100
    # one copy in 60: 7/60 in the opening hand, 10/60 by turn 4
    assert stats.opening_hand_rate == pytest.approx(100 * 7 / 60, abs=3)
    assert stats.turn4_rate == pytest.approx(100 * 10 / 60, abs=3)


def test_more_copies_are_drawn_more_often():
    one_copy = [basic_land(quantity=24), creature("Filler", quantity=35), creature("Bomb")]
    four_copies = [basic_land(quantity=24), creature("Filler", quantity=32), creature("Bomb", quantity=4)]
    single = simulate_key_card_draw_rate(one_copy, "Bomb", 2000, random.Random(7))
    quad = simulate_key_card_draw_rate(four_copies, "Bomb", 2000, random.Random(7))
    assert quad.opening_hand_rate > single.opening_hand_rate
    assert quad.turn3_rate > single.turn3_rate


def test_unknown_key_card_is_zero(white_weenie, rng):
    stats = simulate_key_card_draw_rate(white_weenie, "Black Lotus", 100, rng)
    assert (stats.opening_hand_rate, stats.turn3_rate, stats.turn4_rate) == (0.0, 0.0, 0.0)


def test_seeded_runs_are_reproducible(white_weenie):
    first = simulate_opening_hands(white_weenie, 300, random.Random(99))
    second = simulate_opening_hands(white_weenie, 300, random.Random(99))
    assert first == second


@pytest.mark.parametrize("simulate", [simulate_opening_hands, simulate_early_game])
def test_zero_simulations_rejected(white_weenie, simulate):
    with pytest.raises(ValueError, match="simulations must be at least 1"):
        simulate(white_weenie, 0)


def test_key_card_zero_simulations_rejected(white_weenie):
    with pytest.raises(ValueError):
        simulate_key_card_draw_rate(white_weenie, "Savannah Lions", 0)


def test_summary_mentions_every_section(white_weenie, rng):
    opening = simulate_opening_hands(white_weenie, 100, rng)
    early = simulate_early_game(white_weenie, 100, rng)
    key = simulate_key_card_draw_rate(white_weenie, "Savannah Lions", 100, rng)
    summary = generate_simulation_summary(opening, early, [key])
    assert "Opening Hands (100 simulations)" in summary
    assert "White:" in summary
    assert "Curve out:" in summary
    assert "Savannah Lions" in summary
