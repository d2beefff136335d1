from dataclasses import fields

from factories import basic_land, creature, make_entry, spell
from synergy import (
    SYNERGY_DETECTORS,
    SynergyAnalysis,
    analyze_card_synergies,
    analyze_deck_synergies,
    detect_attack_trigger_synergy,
    detect_counter_synergy,
    detect_enchantment_artifact_synergy,
    detect_energy_synergy,
    detect_equipment_aura_synergy,
    detect_etb_synergy,
    detect_exile_zone_synergy,
    detect_feedback_loops,
    detect_food_synergy,
    detect_graveyard_synergy,
    detect_keyword_clusters,
    detect_landfall_synergy,
    detect_library_top_synergy,
    detect_lifegain_synergy,
    detect_mana_acceleration_synergy,
    detect_sacrifice_synergy,
    detect_spellslinger_synergy,
    detect_storm_synergy,
    detect_tap_untap_synergy,
    detect_threshold_synergies,
    detect_token_synergy,
    detect_treasure_synergy,
    detect_tribal_synergy,
    generate_synergy_summary,
)
from synergy_rules import ladder_lookup

SOLDIER_TOKENS = "Create two 1/1 white Soldier creature tokens."


def _token_deck(quantity=4):
    return [spell("Raise the Alarm", quantity=quantity, oracle_text=SOLDIER_TOKENS)]


def _elf_deck():
    return [
        creature(name, quantity=4, cmc=1, subtypes="Elf Druid")
        for name in ("Llanowar Elves", "Elvish Mystic", "Fyndhorn Elves")
    ]


# ===== LADDERS =====

def test_ladder_lookup_first_tier_wins():
    ladder = ((9, ((4, 4),)), (7, ((3, 3),)), (5, ((2, 2), (0, 5))))
    assert ladder_lookup(ladder, (4, 4), 3) == 9
    assert ladder_lookup(ladder, (3, 10), 3) == 7
    assert ladder_lookup(ladder, (0, 6), 3) == 5
    assert ladder_lookup(ladder, (1, 1), 3) == 3


# ===== TOKENS =====

def test_lone_token_producer_scores_base():
    result = detect_token_synergy(_token_deck())
    assert result is not None
    assert result.producers == ["Raise the Alarm"]
    assert result.payoffs == []
    assert result.score == 4


def test_token_producers_and_payoffs_score_higher():
    cards = _token_deck() + [
        spell("Lingering Souls", oracle_text="Create two 1/1 white Spirit creature tokens with flying."),
        spell("Spectral Procession", oracle_text="Create three 1/1 white Spirit creature tokens with flying."),
        make_entry("Intangible Virtue", type_line="Enchantment",
                   oracle_text="Creature tokens you control get +1/+1 and have vigilance."),
        make_entry("Anthem", type_line="Enchantment", oracle_text="Creatures you control get +1/+1."),
    ]
    result = detect_token_synergy(cards)
    assert len(result.producers) == 3
    assert result.payoffs == ["Intangible Virtue", "Anthem"]
    assert result.score == 8


def test_zero_quantity_entries_are_ignored():
    assert detect_token_synergy(_token_deck(quantity=0)) is None


# ===== TRIBAL =====

def test_twelve_elves_score_eight():
    synergies = detect_tribal_synergy(_elf_deck())
    elves = next(s for s in synergies if s.type == "Elf")
    assert elves.count == 12
    assert elves.score == 8
    assert elves.cards == ["Llanowar Elves", "Elvish Mystic", "Fyndhorn Elves"]


def test_tribal_needs_eight_creatures():
    cards = [creature("Goblin Guide", quantity=7, subtypes="Goblin Scout")]
    assert detect_tribal_synergy(cards) == []


def test_tribal_ignores_noncreature_subtypes():
    cards = [make_entry("Fable", quantity=10, type_line="Enchantment — Saga")]
    assert detect_tribal_synergy(cards) == []


def test_tribal_reads_localized_type_line():
    cards = [
        make_entry(f"Elf {i}", quantity=4, type_line="Creature — Elf Warrior",
                   printed_name=f"エルフ{i}", printed_type_line="クリーチャー — エルフ・戦士")
        for i in range(4)
    ]
    synergies = detect_tribal_synergy(cards)
    assert {s.type for s in synergies} == {"エルフ", "戦士"}
    assert all(s.count == 16 and s.score == 10 for s in synergies)
    assert synergies[0].cards[0] == "エルフ0"


def test_tribal_sorted_by_count():
    cards = _elf_deck() + [creature("Elvish Warrior", quantity=4, subtypes="Elf Warrior")]
    synergies = detect_tribal_synergy(cards)
    assert synergies[0].type == "Elf"
    assert synergies[0].count == 16


# ===== GRAVEYARD AND COUNTERS =====

def test_graveyard_deep_build_scores_nine():
    cards = [spell(f"Filler {i}", oracle_text="Mill four cards.") for i in range(4)]
    cards += [spell(f"Payoff {i}", oracle_text="Return target creature card from your graveyard to your hand.")
              for i in range(4)]
    result = detect_graveyard_synergy(cards)
    assert len(result.graveyard_fillers) == 4
    assert len(result.graveyard_payoffs) == 4
    assert result.score == 9


def test_counters_with_proliferate_score_nine():
    cards = [spell(f"Counter {i}", oracle_text="Put a +1/+1 counter on target creature.") for i in range(6)]
    cards += [spell(f"Proliferate {i}", oracle_text="Proliferate.") for i in range(2)]
    assert detect_counter_synergy(cards).score == 9


def test_single_counter_card_gets_floor_score():
    cards = [spell("Counter", oracle_text="Put a +1/+1 counter on target creature.")]
    assert detect_counter_synergy(cards).score == 2


# ===== KEYWORDS =====

def test_keyword_clusters_sorted_and_filtered():
    cards = [
        creature("Bird", quantity=6, keywords=("Flying",)),
        creature("Wurm", quantity=4, keywords=("Trample",)),
        creature("Scout", quantity=3, keywords=("Haste",)),
        creature("Sliver", quantity=8, keywords=("Changeling",)),
    ]
    clusters = detect_keyword_clusters(cards)
    assert [(c.keyword, c.count) for c in clusters] == [("Flying", 6), ("Trample", 4)]


# ===== FEEDBACK LOOPS =====

SOUL_WARDEN = "Whenever another creature enters the battlefield under your control, you gain 1 life."
AJANIS_PRIDEMATE = "Whenever you gain life, create a 1/1 white Cat creature token."
DRAW_ON_LIFEGAIN = "Whenever you gain life, draw a card."


def test_one_way_enablement_is_not_a_loop():
    cards = [
        creature("Soul Warden", quantity=4, oracle_text=SOUL_WARDEN),
        make_entry("Well of Lost Dreams", quantity=4, type_line="Artifact", oracle_text=DRAW_ON_LIFEGAIN),
    ]
    assert detect_feedback_loops(cards) == []


def test_bidirectional_loop_detected():
    cards = [
        creature("Soul Warden", quantity=4, oracle_text=SOUL_WARDEN),
        make_entry("Cat Maker", quantity=4, type_line="Enchantment", oracle_text=AJANIS_PRIDEMATE),
    ]
    loops = detect_feedback_loops(cards)
    assert len(loops) == 1
    loop = loops[0]
    assert (loop.card_a, loop.card_b) == ("Soul Warden", "Cat Maker")
    assert loop.output_a == "lifegain"
    assert loop.output_b == "creature_etb"
    assert loop.loop_type == "creature_etb_lifegain"
    assert loop.score == 9
    assert "Soul Warden produces lifegain" in loop.description


def test_loop_score_follows_quantity():
    cards = [
        creature("Soul Warden", quantity=1, oracle_text=SOUL_WARDEN),
        make_entry("Cat Maker", quantity=1, type_line="Enchantment", oracle_text=AJANIS_PRIDEMATE),
    ]
    assert detect_feedback_loops(cards)[0].score == 6


# ===== OTHER DETECTORS =====

def test_sacrifice_needs_two_roles():
    outlet = creature("Viscera Seer", oracle_text="Sacrifice a creature: Scry 1.")
    assert detect_sacrifice_synergy([outlet]) is None

    cards = [
        outlet,
        creature("Doomed Traveler",
                 oracle_text="When Doomed Traveler dies, create a 1/1 white Spirit creature token with flying."),
        creature("Blood Artist",
                 oracle_text="Whenever Blood Artist or another creature dies, target player loses 1 life."),
    ]
    result = detect_sacrifice_synergy(cards)
    assert result.outlets == ["Viscera Seer"]
    assert result.fodder == ["Doomed Traveler"]
    assert result.payoffs == ["Blood Artist"]
    assert result.score == 6


def test_ramp_splits_creatures_and_artifacts():
    cards = [
        creature("Llanowar Elves", quantity=4, cmc=1, oracle_text="{T}: Add {G}."),
        make_entry("Sol Ring", type_line="Artifact", cmc=1, oracle_text="{T}: Add {C}{C}."),
        creature("Craterhoof Behemoth", cmc=8, oracle_text="Haste"),
    ]
    result = detect_mana_acceleration_synergy(cards)
    assert result.mana_creatures == ["Llanowar Elves"]
    assert result.mana_artifacts == ["Sol Ring"]
    assert result.payoffs == ["Craterhoof Behemoth"]
    assert result.total_accelerators == 2
    assert result.score == 4


def test_ramp_without_payoffs_is_none():
    cards = [creature("Llanowar Elves", quantity=4, cmc=1, oracle_text="{T}: Add {G}.")]
    assert detect_mana_acceleration_synergy(cards) is None


def test_spellslinger_needs_eight_spells():
    pyromancer = creature("Young Pyromancer", oracle_text=(
        "Whenever you cast an instant or sorcery spell, create a 1/1 red Elemental creature token."
    ))
    seven = [pyromancer, spell("Shock", quantity=7, oracle_text="Shock deals 2 damage to any target.")]
    assert detect_spellslinger_synergy(seven) is None

    eight = [pyromancer, spell("Shock", quantity=8, oracle_text="Shock deals 2 damage to any target.")]
    result = detect_spellslinger_synergy(eight)
    assert result.spell_triggers == ["Young Pyromancer"]
    assert result.instants_and_sorceries == 8
    assert result.score == 4


def test_metalcraft_requires_a_payoff():
    artifacts = [make_entry("Ornithopter", quantity=4, type_line="Artifact Creature — Thopter")]
    assert detect_threshold_synergies(artifacts) == []

    forger = creature("Carapace Forger", subtypes="Human Artificer", oracle_text=(
        "Metalcraft — Carapace Forger gets +2/+2 as long as you control three or more artifacts."
    ))
    synergies = detect_threshold_synergies(artifacts + [forger])
    assert len(synergies) == 1
    metalcraft = synergies[0]
    assert metalcraft.mechanic == "metalcraft"
    assert metalcraft.current_count == 4
    assert metalcraft.required_count == 3
    assert metalcraft.payoffs == ["Carapace Forger"]
    assert metalcraft.achievement_likelihood == "low"
    assert metalcraft.score == 6


def test_delirium_counts_card_types_and_fillers():
    cards = [
        creature("Traverse Payoff", oracle_text=(
            "Delirium — Traverse Payoff gets +1/+1 as long as there are four or more "
            "card types among cards in your graveyard."
        )),
        spell("Thought Scour", oracle_text="Target player mills two cards. Draw a card."),
        spell("Careful Study", type_line="Sorcery", oracle_text="Draw two cards, then discard two cards."),
        make_entry("Mishra's Bauble", type_line="Artifact",
                   oracle_text="{T}, Sacrifice Mishra's Bauble: Look at the top card of target player's library."),
        make_entry("Evolving Wilds", type_line="Land",
                   oracle_text="{T}, Sacrifice Evolving Wilds: Search your library for a basic land card, "
                               "put it onto the battlefield tapped, then shuffle."),
    ]
    synergies = detect_threshold_synergies(cards)
    assert [s.mechanic for s in synergies] == ["delirium"]
    delirium = synergies[0]
    assert delirium.current_count == 5
    assert delirium.required_count == 4
    assert delirium.enablers == ["Thought Scour", "Careful Study", "Mishra's Bauble", "Evolving Wilds"]
    assert delirium.achievement_likelihood == "medium"
    assert delirium.score == 7


def test_domain_counts_basic_land_types():
    cards = [
        spell("Tribal Flames", type_line="Sorcery", oracle_text=(
            "Domain — Tribal Flames deals X damage to any target, where X is the number "
            "of basic land types among lands you control."
        )),
        basic_land("Plains", "W"),
        basic_land("Island", "U"),
        basic_land("Swamp", "B"),
        basic_land("Mountain", "R"),
    ]
    synergies = detect_threshold_synergies(cards)
    assert [s.mechanic for s in synergies] == ["domain"]
    domain = synergies[0]
    assert domain.current_count == 4
    assert domain.enablers == ["Plains", "Island", "Swamp", "Mountain"]
    assert domain.achievement_likelihood == "medium"
    assert domain.score == 7


def test_threshold_and_descend_share_graveyard_fillers():
    cards = [spell(f"Mill {i}", oracle_text="Mill three cards.") for i in range(3)] + [
        creature("Werebear", oracle_text=(
            "Threshold — Werebear gets +3/+3 as long as seven or more cards are in your graveyard."
        )),
        creature("Descender", oracle_text=(
            "Descend 4 — As long as there are four or more permanent cards in your graveyard, "
            "this creature gets +1/+1."
        )),
    ]
    threshold, descend = detect_threshold_synergies(cards)

    assert threshold.mechanic == "threshold"
    assert threshold.current_count == 3
    assert threshold.required_count == 7
    assert threshold.achievement_likelihood == "medium"
    assert threshold.score == 6

    assert descend.mechanic == "descend"
    assert descend.payoffs == ["Descender"]
    assert descend.required_count == 8
    assert descend.achievement_likelihood == "low"
    assert descend.score == 4


# ===== ATTACK TRIGGERS =====

SENTRY_TEXT = "Whenever this creature attacks, it gets +1/+0 until end of turn."


def test_attack_triggers_need_ten_creatures():
    sentry = creature("Sentry", quantity=4, oracle_text=SENTRY_TEXT)
    assert detect_attack_trigger_synergy([sentry, creature("Bear", quantity=5)]) is None

    result = detect_attack_trigger_synergy([sentry, creature("Bear", quantity=6)])
    assert result.attackers == 10
    assert result.attack_triggers == ["Sentry"]
    assert result.score == 4


def test_raid_counts_as_an_attack_trigger():
    cards = [
        creature("Raider", quantity=4, oracle_text=(
            "Raid — When Raider enters the battlefield, if you attacked this turn, draw a card."
        )),
        creature("Bear", quantity=8),
    ]
    result = detect_attack_trigger_synergy(cards)
    assert result.attack_triggers == []
    assert result.raid_cards == ["Raider"]


def test_attack_enablers_from_keywords_and_text():
    cards = [creature(f"Sentry {i}", quantity=3, oracle_text=SENTRY_TEXT) for i in range(5)] + [
        creature("Goblin Guide", keywords=("Haste",)),
        creature("Serra Angel", keywords=("Flying", "Vigilance")),
        creature("Rogue", oracle_text="Rogue can't be blocked."),
        creature("Prowling Serpent", keywords=("Shroud",)),
    ]
    result = detect_attack_trigger_synergy(cards)
    assert result.enablers == ["Goblin Guide", "Serra Angel", "Rogue"]
    assert result.attackers == 19
    assert result.score == 7


# ===== SUPPORTING DETECTORS =====

TAPPER_TEXT = "{T}: Tap target creature."
UNTAP_TEXT = "Untap target permanent."


def test_tap_untap_needs_two_enablers():
    tappers = [creature(f"Tapper {i}", oracle_text=TAPPER_TEXT) for i in range(4)]
    untapper = spell("Twiddle", oracle_text=UNTAP_TEXT)
    assert detect_tap_untap_synergy(tappers + [untapper]) is None

    result = detect_tap_untap_synergy(tappers + [untapper, creature("Serra Angel", keywords=("Vigilance",))])
    assert result.untappers == ["Twiddle"]
    assert result.vigilance_cards == ["Serra Angel"]
    assert result.score == 5


def test_tap_untap_engine_scores_eight():
    cards = [creature(f"Tapper {i}", oracle_text=TAPPER_TEXT) for i in range(6)]
    cards += [spell(f"Untap {i}", oracle_text=UNTAP_TEXT) for i in range(3)]
    result = detect_tap_untap_synergy(cards)
    assert len(result.tap_abilities) == 6
    assert result.score == 8


def _enchantress_cards(auras):
    return [
        make_entry("Eidolon", type_line="Enchantment Creature — Spirit", oracle_text=(
            "Constellation — Whenever Eidolon or another enchantment enters the battlefield "
            "under your control, draw a card."
        )),
        make_entry("Sphere", type_line="Enchantment",
                   oracle_text="Creatures you control get +1/+1 for each enchantment you control."),
        make_entry("Pacifism", quantity=auras, type_line="Enchantment — Aura"),
    ]


def test_enchantment_theme_needs_six_enchantments():
    assert detect_enchantment_artifact_synergy(_enchantress_cards(auras=3)) is None

    result = detect_enchantment_artifact_synergy(_enchantress_cards(auras=6))
    assert result.enchantment_triggers == ["Eidolon"]
    assert result.enchantment_payoffs == ["Sphere"]
    assert result.enchantment_count == 8
    assert result.artifact_count == 0
    assert result.score == 6


def test_library_top_needs_manipulators_or_payoffs():
    scry = [spell(f"Opt {i}", oracle_text="Scry 2.") for i in range(5)]
    assert detect_library_top_synergy(scry[:2]) is None

    miracles = [spell(f"Terminus {i}", type_line="Sorcery", oracle_text="Miracle {W}") for i in range(2)]
    result = detect_library_top_synergy(scry + miracles)
    assert len(result.top_manipulators) == 5
    assert result.top_payoffs == ["Terminus 0", "Terminus 1"]
    assert result.score == 7


BLINK_TEXT = "Exile target creature you control, then return it to the battlefield under its owner's control."


def test_exile_zone_blink_is_kept_apart_from_exilers():
    removal = [spell(f"Removal {i}", oracle_text="Exile target creature.") for i in range(2)]
    assert detect_exile_zone_synergy(removal) is None

    blink = [spell("Cloudshift", oracle_text=BLINK_TEXT), spell("Ephemerate", oracle_text=BLINK_TEXT)]
    result = detect_exile_zone_synergy(removal + blink)
    assert result.exilers == ["Removal 0", "Removal 1"]
    assert result.blink_effects == ["Cloudshift", "Ephemerate"]
    assert result.score == 6


ETB_TEXT = "When this creature enters the battlefield, draw a card."


def test_etb_needs_triggers_and_enablers():
    triggers = [creature(f"Visionary {i}", oracle_text=ETB_TEXT) for i in range(6)]
    blink = [spell(f"Blink {i}", oracle_text=BLINK_TEXT) for i in range(3)]
    assert detect_etb_synergy(triggers[:3] + blink[:1]) is None

    result = detect_etb_synergy(triggers + blink)
    assert len(result.etb_triggers) == 6
    assert len(result.blink_effects) == 3
    # three blink effects over six triggers outscore the plain trigger count
    assert result.score == 7


LANDFALL_TEXT = ("Landfall — Whenever a land enters the battlefield under your control, "
                 "this creature gets +2/+2 until end of turn.")
FETCH_BASIC = "Search your library for a basic land card, put it onto the battlefield tapped, then shuffle."


def test_landfall_gate_and_score():
    assert detect_landfall_synergy([creature("Steppe Lynx", oracle_text=LANDFALL_TEXT)]) is None

    cards = [creature(f"Lynx {i}", oracle_text=LANDFALL_TEXT) for i in range(4)]
    cards += [spell(f"Ramp {i}", type_line="Sorcery", oracle_text=FETCH_BASIC) for i in range(4)]
    cards.append(basic_land("Forest", "G", quantity=20))
    result = detect_landfall_synergy(cards)
    assert len(result.land_ramp) == 4
    assert result.land_count == 20
    assert result.score == 7


def test_energy_needs_producers_and_payoffs():
    producers = [creature(f"Harnesser {i}", oracle_text=(
        "When this creature enters the battlefield, you get two energy counters."
    )) for i in range(6)]
    payoffs = [creature(f"Spender {i}", oracle_text="Pay {E}{E}: This creature gets +1/+1 until end of turn.")
               for i in range(4)]
    assert detect_energy_synergy(producers[:3] + payoffs[:1]) is None

    result = detect_energy_synergy(producers + payoffs)
    assert len(result.energy_producers) == 6
    assert len(result.energy_payoffs) == 4
    assert result.score == 7


TREASURE_TEXT = "When this creature enters the battlefield, create a Treasure token."


def test_treasure_gate_and_score():
    producers = [creature(f"Pirate {i}", oracle_text=TREASURE_TEXT) for i in range(6)]
    assert detect_treasure_synergy(producers[:2]) is None
    assert detect_treasure_synergy(producers[:3]).score == 5

    payoffs = [creature(f"Collector {i}", oracle_text=(
        "Whenever an artifact you control is put into a graveyard from the battlefield, draw a card."
    )) for i in range(3)]
    result = detect_treasure_synergy(producers + payoffs)
    assert len(result.treasure_payoffs) == 3
    assert result.score == 7


def test_storm_reports_on_spell_density():
    shock = "Shock deals 2 damage to any target."
    assert detect_storm_synergy([spell("Shock", quantity=24, oracle_text=shock)]) is None

    result = detect_storm_synergy([spell("Shock", quantity=25, oracle_text=shock)])
    assert result.storm_cards == []
    assert result.instants_and_sorceries == 25
    assert result.score == 5


def test_storm_card_with_rituals():
    cards = [
        spell("Grapeshot", type_line="Sorcery", cmc=2, keywords=("Storm",),
              oracle_text="Grapeshot deals 1 damage to any target.\nStorm"),
        spell("Pyretic Ritual", cmc=2, oracle_text="Add {R}{R}{R}."),
        spell("Desperate Ritual", cmc=2, oracle_text="Add {R}{R}{R}."),
    ]
    result = detect_storm_synergy(cards)
    assert result.storm_cards == ["Grapeshot"]
    assert result.rituals == ["Pyretic Ritual", "Desperate Ritual"]
    assert result.score == 7


def _equipment(count):
    return [make_entry(f"Blade {i}", type_line="Artifact — Equipment",
                       oracle_text="Equipped creature gets +2/+0.\nEquip {2}") for i in range(count)]


def test_equipment_aura_gate_and_score():
    assert detect_equipment_aura_synergy(_equipment(3)) is None

    bogles = [creature("Slippery Bogle", keywords=("Hexproof",)),
              creature("Gladecover Scout", keywords=("Hexproof",))]
    result = detect_equipment_aura_synergy(_equipment(8) + bogles)
    assert len(result.equipments) == 8
    assert result.auras == []
    assert result.hexproof_creatures == ["Slippery Bogle", "Gladecover Scout"]
    assert result.score == 7


LIFEGAIN_TRIGGER = "Whenever you gain life, put a +1/+1 counter on this creature."


def test_lifegain_needs_triggers_and_sources():
    triggers = [creature(f"Pridemate {i}", oracle_text=LIFEGAIN_TRIGGER) for i in range(3)]
    assert detect_lifegain_synergy(triggers) is None

    nighthawk = creature("Vampire Nighthawk", keywords=("Flying", "Deathtouch", "Lifelink"))
    result = detect_lifegain_synergy(triggers + [nighthawk])
    assert result.lifelink_creatures == ["Vampire Nighthawk"]
    assert result.score == 5

    healing = [spell(f"Healing Salve {i}", oracle_text="You gain 3 life.") for i in range(2)]
    assert detect_lifegain_synergy(triggers + [nighthawk] + healing).score == 6


FOOD_TEXT = "When this creature enters the battlefield, create a Food token."


def test_food_gate_and_score():
    producers = [creature(f"Cook {i}", oracle_text=FOOD_TEXT) for i in range(6)]
    assert detect_food_synergy(producers[:3]) is None
    assert detect_food_synergy(producers[:4]).score == 5

    support = [
        creature("Gingerbrute Fan", oracle_text="Whenever you sacrifice a Food, target opponent loses 1 life."),
        creature("Tasty Fan", oracle_text="Whenever you sacrifice a Food, scry 1."),
        make_entry("Altar", type_line="Artifact", oracle_text="Sacrifice an artifact: Scry 1."),
    ]
    result = detect_food_synergy(producers + support)
    assert len(result.food_payoffs) == 2
    assert result.sacrifice_outlets == ["Altar"]
    assert result.score == 7


# ===== AGGREGATION =====

def test_no_synergies_scores_neutral(no_lands):
    analysis = analyze_deck_synergies(no_lands)
    assert analysis.overall_score == 5.0
    assert analysis.active_categories() == []


def test_token_deck_overall_score():
    analysis = analyze_deck_synergies(_token_deck())
    assert analysis.token_synergy.score == 4
    assert analysis.overall_score == 4.0


def test_tribal_counts_once_with_best_score():
    analysis = analyze_deck_synergies(_elf_deck())
    assert len(analysis.tribal_synergies) == 2  # Elf and Druid
    assert analysis.overall_score == 8.0


def test_keyword_clusters_add_bonus():
    cards = [
        creature("Bird", quantity=4, keywords=("Flying",)),
        creature("Wurm", quantity=4, keywords=("Trample",)),
    ]
    analysis = analyze_deck_synergies(cards)
    assert analysis.overall_score == 5.0  # only the multi-cluster bonus


def test_overall_score_never_exceeds_ten():
    cards = [
        creature(f"Elf {i}", quantity=4, subtypes="Elf", keywords=("Flying",)) for i in range(5)
    ] + [
        creature("Soul Warden", quantity=4, oracle_text=SOUL_WARDEN),
        make_entry("Cat Maker", quantity=4, type_line="Enchantment", oracle_text=AJANIS_PRIDEMATE),
    ]
    analysis = analyze_deck_synergies(cards)
    assert 1 <= analysis.overall_score <= 10


def test_overall_score_rounds_ties_up():
    cards = [creature(f"Elf {i}", quantity=4, subtypes="Elf") for i in range(4)]
    cards += [spell(f"Muster {i}", type_line="Sorcery",
                    oracle_text="Create a 1/1 white Soldier creature token.") for i in range(3)]
    cards += [make_entry(f"Anthem {i}", type_line="Enchantment",
                         oracle_text="Creatures you control get +1/+1.") for i in range(2)]
    cards += [spell(f"Looting {i}", type_line="Sorcery",
                    oracle_text="Draw two cards, then discard two cards.") for i in range(2)]
    cards += [spell(f"Raise Dead {i}", type_line="Sorcery",
                    oracle_text="Return target creature card from your graveyard to your hand.") for i in range(2)]
    cards.append(spell("Battlegrowth", oracle_text="Put a +1/+1 counter on target creature."))

    analysis = analyze_deck_synergies(cards)
    assert analysis.active_categories() == [
        ("Tribal", 10), ("Tokens", 8), ("Graveyard", 5), ("+1/+1 Counters", 2),
    ]
    # (10 + 8 + 5 + 2) / 4 == 6.25
    assert analysis.overall_score == 6.3


def test_registry_covers_every_analysis_field():
    analysis_fields = {f.name for f in fields(SynergyAnalysis)} - {"overall_score"}
    assert {d.field for d in SYNERGY_DETECTORS} == analysis_fields
    assert len(SYNERGY_DETECTORS) == len(analysis_fields)


def test_detectors_do_not_mutate_input():
    cards = _token_deck() + _elf_deck()
    snapshot = list(cards)
    analyze_deck_synergies(cards)
    assert cards == snapshot


# ===== PER-CARD AND SUMMARY =====

def test_card_synergies_for_token_producer():
    cards = _token_deck() + [
        make_entry("Intangible Virtue", type_line="Enchantment",
                   oracle_text="Creature tokens you control get +1/+1 and have vigilance."),
    ]
    info = analyze_card_synergies(cards[0].card, cards)
    assert info.card_name == "Raise the Alarm"
    assert [role.type for role in info.synergies] == ["token_producer"]
    assert info.related_cards == ["Intangible Virtue"]
    assert info.synergy_score == 2.0


def test_card_with_no_synergies():
    cards = _token_deck()
    loner = make_entry("Vanilla", type_line="Creature").card
    info = analyze_card_synergies(loner, cards)
    assert info.synergies == []
    assert info.synergy_score == 0.0


def test_summary_lists_active_categories():
    summary = generate_synergy_summary(analyze_deck_synergies(_token_deck()))
    assert "Synergy Score: 4.0/10" in summary
    assert "Tokens (4/10)" in summary
    assert "Raise the Alarm" in summary


def test_summary_without_synergies(no_lands):
    summary = generate_synergy_summary(analyze_deck_synergies(no_lands))
    assert "No notable synergies detected." in summary
