"""
Synergy detection module for deck analysis.
Identifies deck strategies from card text and scores how well cards support the plan.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

import synergy_rules as rules
from models import Card, DeckCardEntry
from synergy_rules import ladder_lookup
from utils import add_unique, matches_any, round_half_up, total_quantity

_LOG = logging.getLogger(__name__)


# ===== RESULT MODELS =====

@dataclass(frozen=True)
class TribalSynergy:
    type: str
    count: int
    cards: List[str]
    score: int  # 1-10


@dataclass(frozen=True)
class TokenSynergy:
    producers: List[str]
    payoffs: List[str]
    score: int


@dataclass(frozen=True)
class GraveyardSynergy:
    graveyard_fillers: List[str]
    graveyard_payoffs: List[str]
    score: int


@dataclass(frozen=True)
class CounterSynergy:
    counter_cards: List[str]
    proliferate_cards: List[str]
    score: int


@dataclass(frozen=True)
class KeywordCluster:
    """Four or more copies sharing an important keyword. Not scored on its own."""
    keyword: str
    count: int
    cards: List[str]


@dataclass(frozen=True)
class FeedbackLoop:
    """Two cards whose outputs each trigger the other"""
    loop_type: str  # e.g. "lifegain_creature_etb"
    card_a: str
    card_b: str
    trigger_a: str  # what A triggers on
    output_a: str  # what A produces
    trigger_b: str
    output_b: str
    description: str
    score: int


@dataclass(frozen=True)
class ThresholdSynergy:
    mechanic: str  # metalcraft, delirium, domain, threshold, descend
    name: str
    required_count: int
    current_count: int
    enablers: List[str]
    payoffs: List[str]
    achievement_likelihood: str  # high, medium, low
    score: int


@dataclass(frozen=True)
class SacrificeSynergy:
    outlets: List[str]
    fodder: List[str]
    payoffs: List[str]
    score: int


@dataclass(frozen=True)
class ManaAccelerationSynergy:
    mana_creatures: List[str]
    mana_artifacts: List[str]
    land_ramp: List[str]
    extra_land_plays: List[str]
    cost_reduction: List[str]
    payoffs: List[str]  # nonland cards with cmc 5+
    score: int

    @property
    def total_accelerators(self) -> int:
        return (len(self.mana_creatures) + len(self.mana_artifacts) + len(self.land_ramp)
                + len(self.extra_land_plays) + len(self.cost_reduction))


@dataclass(frozen=True)
class SpellslingerSynergy:
    spell_triggers: List[str]
    spell_copiers: List[str]
    spell_recursion: List[str]
    card_advantage: List[str]
    cost_reduction: List[str]
    instants_and_sorceries: int
    score: int


@dataclass(frozen=True)
class AttackTriggerSynergy:
    attack_triggers: List[str]
    raid_cards: List[str]
    enablers: List[str]
    attackers: int  # creature copies
    score: int


@dataclass(frozen=True)
class TapUntapSynergy:
    tap_abilities: List[str]
    untappers: List[str]
    tap_triggers: List[str]
    vigilance_cards: List[str]
    score: int


@dataclass(frozen=True)
class EnchantmentArtifactSynergy:
    enchantment_triggers: List[str]
    enchantment_payoffs: List[str]
    artifact_triggers: List[str]
    artifact_payoffs: List[str]
    enchantment_count: int
    artifact_count: int
    score: int


@dataclass(frozen=True)
class LibraryTopSynergy:
    top_manipulators: List[str]
    top_payoffs: List[str]
    score: int


@dataclass(frozen=True)
class ExileZoneSynergy:
    exilers: List[str]
    exile_payoffs: List[str]
    blink_effects: List[str]
    score: int


@dataclass(frozen=True)
class ETBSynergy:
    etb_triggers: List[str]
    blink_effects: List[str]
    reanimation: List[str]
    cheat_into_play: List[str]
    clones: List[str]
    pan_effects: List[str]
    score: int


@dataclass(frozen=True)
class LandfallSynergy:
    landfall_triggers: List[str]
    land_ramp: List[str]
    extra_land_plays: List[str]
    land_count: int
    score: int


@dataclass(frozen=True)
class EnergySynergy:
    energy_producers: List[str]
    energy_payoffs: List[str]
    score: int


@dataclass(frozen=True)
class TreasureSynergy:
    treasure_producers: List[str]
    treasure_payoffs: List[str]
    score: int


@dataclass(frozen=True)
class StormSynergy:
    storm_cards: List[str]
    rituals: List[str]
    cantrips: List[str]
    cost_reduction: List[str]
    instants_and_sorceries: int
    score: int


@dataclass(frozen=True)
class EquipmentAuraSynergy:
    equipments: List[str]
    auras: List[str]
    equipment_payoffs: List[str]
    aura_payoffs: List[str]
    equipment_enablers: List[str]
    hexproof_creatures: List[str]
    score: int


@dataclass(frozen=True)
class LifegainSynergy:
    lifegain_triggers: List[str]
    lifegain_sources: List[str]
    lifelink_creatures: List[str]
    score: int


@dataclass(frozen=True)
class FoodSynergy:
    food_producers: List[str]
    food_payoffs: List[str]
    sacrifice_outlets: List[str]
    score: int


@dataclass(frozen=True)
class SynergyAnalysis:
    """Complete synergy analysis for one deck snapshot"""
    tribal_synergies: List[TribalSynergy]
    token_synergy: Optional[TokenSynergy]
    graveyard_synergy: Optional[GraveyardSynergy]
    counter_synergy: Optional[CounterSynergy]
    keyword_clusters: List[KeywordCluster]
    feedback_loops: List[FeedbackLoop]
    threshold_synergies: List[ThresholdSynergy]
    sacrifice_synergy: Optional[SacrificeSynergy]
    mana_acceleration_synergy: Optional[ManaAccelerationSynergy]
    spellslinger_synergy: Optional[SpellslingerSynergy]
    attack_trigger_synergy: Optional[AttackTriggerSynergy]
    tap_untap_synergy: Optional[TapUntapSynergy]
    enchantment_artifact_synergy: Optional[EnchantmentArtifactSynergy]
    library_top_synergy: Optional[LibraryTopSynergy]
    exile_zone_synergy: Optional[ExileZoneSynergy]
    etb_synergy: Optional[ETBSynergy]
    landfall_synergy: Optional[LandfallSynergy]
    energy_synergy: Optional[EnergySynergy]
    treasure_synergy: Optional[TreasureSynergy]
    storm_synergy: Optional[StormSynergy]
    equipment_aura_synergy: Optional[EquipmentAuraSynergy]
    lifegain_synergy: Optional[LifegainSynergy]
    food_synergy: Optional[FoodSynergy]
    overall_score: float  # 1-10, one decimal

    def active_categories(self) -> List[Tuple[str, int]]:
        """(detector name, best score) for every scored category that fired."""
        active = []
        for detector in SYNERGY_DETECTORS:
            if detector.kind == KIND_BONUS:
                continue
            results = detector.results_from(self)
            if results:
                active.append((detector.name, max(result.score for result in results)))
        return active


# ===== HELPERS =====

def _in_deck(cards: Sequence[DeckCardEntry]) -> List[DeckCardEntry]:
    """Entries that actually contribute copies."""
    return [entry for entry in cards if entry.quantity > 0]


def _has_keyword(card: Card, *keywords: str) -> bool:
    wanted = {keyword.lower() for keyword in keywords}
    return any(keyword.lower() in wanted for keyword in card.keywords)


def _match_roles(cards: Sequence[DeckCardEntry], family: str) -> Dict[str, List[str]]:
    """
    Collect display names per role for one pattern family.

    A card lands in every role whose patterns match its oracle text, at most
    once per role.
    """
    table = rules.SYNERGY_PATTERNS[family]
    found: Dict[str, List[str]] = {role: [] for role in table}
    for entry in _in_deck(cards):
        text = entry.card.oracle_text
        for role, patterns in table.items():
            if matches_any(patterns, text):
                add_unique(found[role], entry.card.display_name)
    return found


def _unique_names(entries: Sequence[DeckCardEntry]) -> List[str]:
    names: List[str] = []
    for entry in entries:
        add_unique(names, entry.card.display_name)
    return names


# ===== CORE DETECTORS =====

def detect_tribal_synergy(cards: Sequence[DeckCardEntry]) -> List[TribalSynergy]:
    """
    Find creature subtypes shared by 8+ creature copies.

    The subtype segment comes from the localized type line when there is one,
    so a Japanese deck reports its tribes in Japanese.

    Args:
        cards: Mainboard entries

    Returns:
        Tribal synergies, most populous first
    """
    counts: Dict[str, int] = {}
    members: Dict[str, List[str]] = {}

    for entry in _in_deck(cards):
        card = entry.card
        if not card.is_creature:
            continue

        type_line = card.printed_type_line or card.type_line
        parts = type_line.split(rules.SUBTYPE_DASH)
        if len(parts) < 2:
            continue

        subtypes = [t for t in rules.SUBTYPE_SPLITTER.split(parts[1].strip()) if t]
        for subtype in dict.fromkeys(subtypes):
            counts[subtype] = counts.get(subtype, 0) + entry.quantity
            add_unique(members.setdefault(subtype, []), card.display_name)

    synergies = [
        TribalSynergy(
            type=subtype,
            count=count,
            cards=members[subtype],
            score=ladder_lookup(rules.TRIBAL_LADDER, (count,), rules.TRIBAL_BASE),
        )
        for subtype, count in counts.items()
        if count >= rules.TRIBAL_MIN_COUNT
    ]
    return sorted(synergies, key=lambda s: s.count, reverse=True)


def detect_token_synergy(cards: Sequence[DeckCardEntry]) -> Optional[TokenSynergy]:
    """Token producers and the cards that reward going wide."""
    found = _match_roles(cards, "token")
    producers, payoffs = found["producers"], found["payoffs"]
    if not producers and not payoffs:
        return None

    score = ladder_lookup(rules.TOKEN_LADDER, (len(producers), len(payoffs)), rules.TOKEN_BASE)
    return TokenSynergy(producers=producers, payoffs=payoffs, score=score)


def detect_graveyard_synergy(cards: Sequence[DeckCardEntry]) -> Optional[GraveyardSynergy]:
    found = _match_roles(cards, "graveyard")
    fillers, payoffs = found["fillers"], found["payoffs"]
    if not fillers and not payoffs:
        return None

    score = ladder_lookup(rules.GRAVEYARD_LADDER, (len(fillers), len(payoffs)), rules.GRAVEYARD_BASE)
    return GraveyardSynergy(graveyard_fillers=fillers, graveyard_payoffs=payoffs, score=score)


def detect_counter_synergy(cards: Sequence[DeckCardEntry]) -> Optional[CounterSynergy]:
    """
    +1/+1 counter placement and proliferate.

    A lone counter card with no proliferate still reports, at the floor score.
    """
    found = _match_roles(cards, "counter")
    counter_cards, proliferate = found["counters"], found["proliferate"]
    if not counter_cards and not proliferate:
        return None

    score = ladder_lookup(rules.COUNTER_LADDER, (len(counter_cards), len(proliferate)),
                          rules.FLOOR_SCORE)
    return CounterSynergy(counter_cards=counter_cards, proliferate_cards=proliferate, score=score)


def detect_keyword_clusters(cards: Sequence[DeckCardEntry]) -> List[KeywordCluster]:
    """Important keywords carried by 4+ copies, most common first."""
    counts: Dict[str, int] = {}
    members: Dict[str, List[str]] = {}

    for entry in _in_deck(cards):
        for keyword in entry.card.keywords:
            if keyword not in rules.IMPORTANT_KEYWORDS:
                continue
            counts[keyword] = counts.get(keyword, 0) + entry.quantity
            add_unique(members.setdefault(keyword, []), entry.card.display_name)

    clusters = [
        KeywordCluster(keyword=keyword, count=count, cards=members[keyword])
        for keyword, count in counts.items()
        if count >= rules.KEYWORD_CLUSTER_MIN_COUNT
    ]
    return sorted(clusters, key=lambda c: c.count, reverse=True)


def _feedback_signals(card: Card) -> Tuple[List[str], List[str]]:
    text = card.oracle_text
    triggers = [signal for signal, patterns in rules.FEEDBACK_TRIGGERS.items()
                if matches_any(patterns, text)]
    outputs: List[str] = []
    for patterns, signals in rules.FEEDBACK_OUTPUTS:
        if matches_any(patterns, text):
            outputs.extend(signals)
    return triggers, outputs


def detect_feedback_loops(cards: Sequence[DeckCardEntry]) -> List[FeedbackLoop]:
    """
    Find pairs of cards that keep triggering each other.

    A pair only counts when A's output triggers B AND B's output triggers A.
    One-way enablement is ordinary synergy and is not reported here.

    Args:
        cards: Mainboard entries

    Returns:
        One FeedbackLoop per (pair, output A, output B) combination found
    """
    entries = _in_deck(cards)
    signals = [_feedback_signals(entry.card) for entry in entries]
    loops: List[FeedbackLoop] = []

    for i, entry_a in enumerate(entries):
        triggers_a, outputs_a = signals[i]
        for j in range(i + 1, len(entries)):
            entry_b = entries[j]
            triggers_b, outputs_b = signals[j]

            for output_a in outputs_a:
                if output_a not in triggers_b:
                    continue
                for output_b in outputs_b:
                    if output_b not in triggers_a:
                        continue

                    name_a = entry_a.card.display_name
                    name_b = entry_b.card.display_name
                    combined = entry_a.quantity + entry_b.quantity
                    loops.append(FeedbackLoop(
                        loop_type=f"{output_b}_{output_a}",
                        card_a=name_a,
                        card_b=name_b,
                        trigger_a=output_b,
                        output_a=output_a,
                        trigger_b=output_a,
                        output_b=output_b,
                        description=(
                            f"{name_a} produces {output_a}, triggering {name_b}, "
                            f"which produces {output_b}, triggering {name_a}"
                        ),
                        score=ladder_lookup(rules.FEEDBACK_LADDER, (combined,), rules.FEEDBACK_BASE),
                    ))

    return loops


def _names_matching(entries: Sequence[DeckCardEntry], patterns) -> List[DeckCardEntry]:
    return [entry for entry in entries if matches_any(patterns, entry.card.oracle_text)]


def detect_threshold_synergies(cards: Sequence[DeckCardEntry]) -> List[ThresholdSynergy]:
    """
    Count-based mechanics: Metalcraft, Delirium, Domain, Threshold and Descend.

    A mechanic is reported only when at least one card in the deck mentions
    it. Payoffs whose count requirement is out of reach score the floor.
    """
    entries = _in_deck(cards)
    table = rules.SYNERGY_PATTERNS["threshold"]
    limit = rules.THRESHOLD_ENABLER_LIMIT
    fillers = _names_matching(entries, table["graveyard_fillers"])
    filler_names = _unique_names(fillers)
    synergies: List[ThresholdSynergy] = []

    # Metalcraft: artifacts on the battlefield
    metalcraft_payoffs = _names_matching(entries, table["metalcraft"])
    if metalcraft_payoffs:
        artifacts = [entry for entry in entries if "artifact" in entry.card.type_line.lower()]
        artifact_count = sum(entry.quantity for entry in artifacts)
        synergies.append(ThresholdSynergy(
            mechanic="metalcraft",
            name="Metalcraft",
            required_count=rules.METALCRAFT_REQUIRED,
            current_count=artifact_count,
            enablers=_unique_names(artifacts),
            payoffs=_unique_names(metalcraft_payoffs),
            achievement_likelihood=ladder_lookup(
                rules.METALCRAFT_LIKELIHOOD, (artifact_count,), "low"),
            score=ladder_lookup(
                rules.METALCRAFT_LADDER, (artifact_count, len(metalcraft_payoffs)), rules.FLOOR_SCORE),
        ))

    # Delirium: card types the deck can put in the graveyard
    delirium_payoffs = _names_matching(entries, table["delirium"])
    if delirium_payoffs:
        card_types: Set[str] = set()
        for entry in entries:
            type_line = entry.card.type_line.lower()
            card_types.update(t for t in rules.DELIRIUM_CARD_TYPES if t.lower() in type_line)
        synergies.append(ThresholdSynergy(
            mechanic="delirium",
            name="Delirium",
            required_count=rules.DELIRIUM_REQUIRED,
            current_count=len(card_types),
            enablers=filler_names[:limit],
            payoffs=_unique_names(delirium_payoffs),
            achievement_likelihood=ladder_lookup(
                rules.DELIRIUM_LIKELIHOOD, (len(card_types), len(fillers)), "low"),
            score=ladder_lookup(
                rules.DELIRIUM_LADDER,
                (len(card_types), len(delirium_payoffs), len(fillers)),
                rules.FLOOR_SCORE,
            ),
        ))

    # Domain: basic land types
    domain_payoffs = _names_matching(entries, table["domain"])
    if domain_payoffs:
        land_types: Set[str] = set()
        for entry in entries:
            type_line = entry.card.type_line.lower()
            for land_type, pattern in rules.BASIC_LAND_TYPE_PATTERNS.items():
                if land_type.lower() in type_line or pattern.search(entry.card.oracle_text):
                    land_types.add(land_type)
        domain_enablers = [
            entry for entry in entries
            if entry.card.is_land or matches_any(table["domain_enablers"], entry.card.oracle_text)
        ]
        synergies.append(ThresholdSynergy(
            mechanic="domain",
            name="Domain",
            required_count=rules.DOMAIN_REQUIRED,
            current_count=len(land_types),
            enablers=_unique_names(domain_enablers)[:limit],
            payoffs=_unique_names(domain_payoffs),
            achievement_likelihood=ladder_lookup(
                rules.DOMAIN_LIKELIHOOD, (len(land_types),), "low"),
            score=ladder_lookup(
                rules.DOMAIN_LADDER, (len(land_types), len(domain_payoffs)), rules.FLOOR_SCORE),
        ))

    # Threshold and Descend both lean on the same graveyard fillers
    for mechanic, name, required, ladder, likelihood in (
        ("threshold", "Threshold", rules.THRESHOLD_REQUIRED,
         rules.THRESHOLD_LADDER, rules.THRESHOLD_LIKELIHOOD),
        ("descend", "Descend", rules.DESCEND_REQUIRED,
         rules.DESCEND_LADDER, rules.DESCEND_LIKELIHOOD),
    ):
        payoffs = _names_matching(entries, table[mechanic])
        if not payoffs:
            continue
        synergies.append(ThresholdSynergy(
            mechanic=mechanic,
            name=name,
            required_count=required,
            current_count=len(fillers),
            enablers=filler_names[:limit],
            payoffs=_unique_names(payoffs),
            achievement_likelihood=ladder_lookup(likelihood, (len(fillers),), "low"),
            score=ladder_lookup(ladder, (len(fillers), len(payoffs)), rules.FLOOR_SCORE),
        ))

    return synergies


def detect_sacrifice_synergy(cards: Sequence[DeckCardEntry]) -> Optional[SacrificeSynergy]:
    """
    Aristocrats: sacrifice outlets, fodder and death-trigger payoffs.

    Needs at least two of the three roles to report anything.
    """
    found = _match_roles(cards, "sacrifice")
    outlets, fodder, payoffs = found["outlets"], found["fodder"], found["payoffs"]
    roles_present = sum(1 for role in (outlets, fodder, payoffs) if role)
    if roles_present < 2:
        return None

    score = ladder_lookup(rules.SACRIFICE_LADDER, (len(outlets), len(fodder), len(payoffs)),
                          rules.SACRIFICE_PARTIAL)
    return SacrificeSynergy(outlets=outlets, fodder=fodder, payoffs=payoffs, score=score)


def detect_mana_acceleration_synergy(
    cards: Sequence[DeckCardEntry],
) -> Optional[ManaAccelerationSynergy]:
    """
    Ramp: mana sources, land ramp, extra land drops and cost reducers,
    paired with expensive spells worth ramping into.

    Payoffs are nonland cards with cmc 5+ that are not land ramp themselves.
    """
    table = rules.SYNERGY_PATTERNS["ramp"]
    mana_creatures: List[str] = []
    mana_artifacts: List[str] = []
    land_ramp: List[str] = []
    extra_land_plays: List[str] = []
    cost_reduction: List[str] = []
    payoffs: List[str] = []

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        type_line = card.type_line.lower()
        makes_mana = matches_any(table["mana_sources"], text)
        is_land_ramp = matches_any(table["land_ramp"], text)

        if card.is_creature and makes_mana:
            add_unique(mana_creatures, name)
        if "artifact" in type_line and not card.is_creature and makes_mana:
            add_unique(mana_artifacts, name)
        if is_land_ramp:
            add_unique(land_ramp, name)
        if matches_any(table["extra_land_plays"], text):
            add_unique(extra_land_plays, name)
        if matches_any(table["cost_reduction"], text):
            add_unique(cost_reduction, name)
        if card.cmc >= rules.RAMP_PAYOFF_MIN_CMC and not card.is_land and not is_land_ramp:
            add_unique(payoffs, name)

    accelerators = (len(mana_creatures) + len(mana_artifacts) + len(land_ramp)
                    + len(extra_land_plays) + len(cost_reduction))
    if accelerators == 0 or not payoffs:
        return None

    return ManaAccelerationSynergy(
        mana_creatures=mana_creatures,
        mana_artifacts=mana_artifacts,
        land_ramp=land_ramp,
        extra_land_plays=extra_land_plays,
        cost_reduction=cost_reduction,
        payoffs=payoffs,
        score=ladder_lookup(rules.RAMP_LADDER, (accelerators, len(payoffs)), rules.RAMP_BASE),
    )


def detect_spellslinger_synergy(cards: Sequence[DeckCardEntry]) -> Optional[SpellslingerSynergy]:
    """
    Instant/sorcery decks with cards that reward casting them.

    Args:
        cards: Mainboard entries

    Returns:
        SpellslingerSynergy when the deck runs 8+ instants/sorceries and at
        least one enabler, else None
    """
    table = rules.SYNERGY_PATTERNS["spellslinger"]
    roles: Dict[str, List[str]] = {role: [] for role in table}
    spells = 0

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        if card.is_instant_or_sorcery:
            spells += entry.quantity

        keyword_roles = {
            "triggers": _has_keyword(card, "Prowess"),
            "copiers": _has_keyword(card, "Storm"),
            "recursion": _has_keyword(card, "Flashback"),
        }
        for role, patterns in table.items():
            if matches_any(patterns, text) or keyword_roles.get(role, False):
                add_unique(roles[role], card.display_name)

    enablers = sum(len(names) for names in roles.values())
    if enablers == 0 or spells < rules.SPELLSLINGER_MIN_SPELLS:
        return None

    enabler_types = sum(1 for names in roles.values() if names)
    score = ladder_lookup(rules.SPELLSLINGER_LADDER, (enablers, spells, enabler_types),
                          rules.SPELLSLINGER_BASE)
    return SpellslingerSynergy(
        spell_triggers=roles["triggers"],
        spell_copiers=roles["copiers"],
        spell_recursion=roles["recursion"],
        card_advantage=roles["card_advantage"],
        cost_reduction=roles["cost_reduction"],
        instants_and_sorceries=spells,
        score=score,
    )


def detect_attack_trigger_synergy(cards: Sequence[DeckCardEntry]) -> Optional[AttackTriggerSynergy]:
    """Attack triggers and raid, backed by enough creatures and attack enablers."""
    table = rules.SYNERGY_PATTERNS["attack"]
    attack_triggers: List[str] = []
    raid_cards: List[str] = []
    enablers: List[str] = []
    attackers = 0

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        if card.is_creature:
            attackers += entry.quantity

        if matches_any(table["triggers"], text):
            add_unique(attack_triggers, name)
        if matches_any(table["raid"], text):
            add_unique(raid_cards, name)

        keyword_enabler = (
            any(keyword in rules.EVASION_KEYWORDS for keyword in card.keywords)
            or _has_keyword(card, "Haste", "Vigilance")
        )
        if matches_any(table["enablers"], text) or keyword_enabler:
            add_unique(enablers, name)

    triggers = len(attack_triggers) + len(raid_cards)
    if triggers == 0 or attackers < rules.ATTACK_MIN_CREATURES:
        return None

    score = ladder_lookup(rules.ATTACK_LADDER, (triggers, attackers, len(enablers)), rules.ATTACK_BASE)
    return AttackTriggerSynergy(
        attack_triggers=attack_triggers,
        raid_cards=raid_cards,
        enablers=enablers,
        attackers=attackers,
        score=score,
    )


# ===== SUPPORTING DETECTORS =====

def detect_tap_untap_synergy(cards: Sequence[DeckCardEntry]) -> Optional[TapUntapSynergy]:
    """Non-mana tap abilities and tap triggers, with untappers or vigilance to reuse them."""
    table = rules.SYNERGY_PATTERNS["tap_untap"]
    tap_abilities: List[str] = []
    untappers: List[str] = []
    tap_triggers: List[str] = []
    vigilance_cards: List[str] = []

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        if matches_any(table["tap_abilities"], text):
            add_unique(tap_abilities, name)
        if matches_any(table["untappers"], text):
            add_unique(untappers, name)
        if matches_any(table["tap_triggers"], text):
            add_unique(tap_triggers, name)
        has_vigilance = _has_keyword(card, "Vigilance") or matches_any(table["vigilance"], text)
        if has_vigilance and card.is_creature:
            add_unique(vigilance_cards, name)

    tap_matters = len(tap_abilities) + len(tap_triggers)
    enablers = len(untappers) + len(vigilance_cards)
    if tap_matters < rules.TAP_UNTAP_MIN_TAP_MATTERS or enablers < rules.TAP_UNTAP_MIN_ENABLERS:
        return None

    score = ladder_lookup(
        rules.TAP_UNTAP_LADDER,
        (len(tap_abilities), len(untappers), len(tap_triggers), tap_matters, enablers),
        rules.TAP_UNTAP_BASE,
    )
    return TapUntapSynergy(
        tap_abilities=tap_abilities,
        untappers=untappers,
        tap_triggers=tap_triggers,
        vigilance_cards=vigilance_cards,
        score=score,
    )


def detect_enchantment_artifact_synergy(
    cards: Sequence[DeckCardEntry],
) -> Optional[EnchantmentArtifactSynergy]:
    """
    Enchantress and artifacts-matter themes.

    Each theme is scored on its own; the deck takes the better one, with a
    point on top when both themes are real.
    """
    found = _match_roles(cards, "enchantment_artifact")
    entries = _in_deck(cards)
    enchantment_count = total_quantity(entries, lambda e: "Enchantment" in e.card.type_line)
    artifact_count = total_quantity(entries, lambda e: "Artifact" in e.card.type_line)

    enchantment_synergy = len(found["enchantment_triggers"]) + len(found["enchantment_payoffs"])
    artifact_synergy = len(found["artifact_triggers"]) + len(found["artifact_payoffs"])

    too_few_permanents = (enchantment_count < rules.ENCHANTMENT_ARTIFACT_MIN_COUNT
                          and artifact_count < rules.ENCHANTMENT_ARTIFACT_MIN_COUNT)
    if too_few_permanents or enchantment_synergy + artifact_synergy < rules.ENCHANTMENT_ARTIFACT_MIN_SYNERGY:
        return None

    score = max(
        rules.PERMANENT_THEME_BASE,
        ladder_lookup(rules.PERMANENT_THEME_LADDER, (enchantment_count, enchantment_synergy), 0),
        ladder_lookup(rules.PERMANENT_THEME_LADDER, (artifact_count, artifact_synergy), 0),
    )
    dual_theme = (
        enchantment_count >= rules.DUAL_THEME_MIN_COUNT
        and artifact_count >= rules.DUAL_THEME_MIN_COUNT
        and enchantment_synergy >= rules.DUAL_THEME_MIN_SYNERGY
        and artifact_synergy >= rules.DUAL_THEME_MIN_SYNERGY
    )
    if dual_theme:
        score = min(rules.MAX_SCORE, score + 1)

    return EnchantmentArtifactSynergy(
        enchantment_triggers=found["enchantment_triggers"],
        enchantment_payoffs=found["enchantment_payoffs"],
        artifact_triggers=found["artifact_triggers"],
        artifact_payoffs=found["artifact_payoffs"],
        enchantment_count=enchantment_count,
        artifact_count=artifact_count,
        score=score,
    )


def detect_library_top_synergy(cards: Sequence[DeckCardEntry]) -> Optional[LibraryTopSynergy]:
    found = _match_roles(cards, "library_top")
    manipulators, payoffs = found["manipulators"], found["payoffs"]
    if (len(manipulators) < rules.LIBRARY_TOP_MIN_MANIPULATORS
            and len(payoffs) < rules.LIBRARY_TOP_MIN_PAYOFFS):
        return None

    total = len(manipulators) + len(payoffs)
    score = ladder_lookup(rules.LIBRARY_TOP_LADDER, (len(manipulators), len(payoffs), total),
                          rules.LIBRARY_TOP_BASE)
    return LibraryTopSynergy(top_manipulators=manipulators, top_payoffs=payoffs, score=score)


def detect_exile_zone_synergy(cards: Sequence[DeckCardEntry]) -> Optional[ExileZoneSynergy]:
    """
    Exile-matters cards and blink effects.

    Blink cards are counted only as blink, never as plain exilers or payoffs.
    """
    table = rules.SYNERGY_PATTERNS["exile"]
    exilers: List[str] = []
    exile_payoffs: List[str] = []
    blink_effects: List[str] = []

    for entry in _in_deck(cards):
        text = entry.card.oracle_text
        name = entry.card.display_name
        if matches_any(table["blink"], text):
            add_unique(blink_effects, name)
            continue
        if matches_any(table["payoffs"], text):
            add_unique(exile_payoffs, name)
        if matches_any(table["exilers"], text) and name not in blink_effects:
            add_unique(exilers, name)

    total = len(exilers) + len(exile_payoffs) + len(blink_effects)
    if total < rules.EXILE_MIN_CARDS and len(blink_effects) < rules.EXILE_MIN_BLINK:
        return None

    score = max(
        rules.EXILE_BASE,
        ladder_lookup(rules.EXILE_BLINK_LADDER, (len(blink_effects),), 0),
        ladder_lookup(rules.EXILE_PAYOFF_LADDER, (len(exile_payoffs),), 0),
        ladder_lookup(rules.EXILER_LADDER, (len(exilers),), 0),
    )
    return ExileZoneSynergy(
        exilers=exilers, exile_payoffs=exile_payoffs, blink_effects=blink_effects, score=score,
    )


def detect_etb_synergy(cards: Sequence[DeckCardEntry]) -> Optional[ETBSynergy]:
    """Enter-the-battlefield triggers and the blink, reanimation, cheat and clone effects that reuse them."""
    found = _match_roles(cards, "etb")
    triggers = found["triggers"]
    enablers = (len(found["blink"]) + len(found["reanimation"])
                + len(found["cheat"]) + len(found["clones"]))
    if len(triggers) < rules.ETB_MIN_TRIGGERS or enablers < rules.ETB_MIN_ENABLERS:
        return None

    score = max(
        ladder_lookup(rules.ETB_LADDER, (len(triggers), enablers), rules.ETB_BASE),
        ladder_lookup(rules.ETB_REUSE_LADDER, (len(found["blink"]), len(triggers)), 0),
        ladder_lookup(rules.ETB_REUSE_LADDER, (len(found["reanimation"]), len(triggers)), 0),
    )
    return ETBSynergy(
        etb_triggers=triggers,
        blink_effects=found["blink"],
        reanimation=found["reanimation"],
        cheat_into_play=found["cheat"],
        clones=found["clones"],
        pan_effects=found["pan"],
        score=score,
    )


def detect_landfall_synergy(cards: Sequence[DeckCardEntry]) -> Optional[LandfallSynergy]:
    found = _match_roles(cards, "landfall")
    triggers = found["triggers"]
    enablers = len(found["land_ramp"]) + len(found["extra_land_plays"])
    land_count = total_quantity(_in_deck(cards), lambda e: e.card.is_land)

    if not triggers:
        return None
    if len(triggers) < rules.LANDFALL_MIN_TRIGGERS and enablers < rules.LANDFALL_MIN_ENABLERS:
        return None

    return LandfallSynergy(
        landfall_triggers=triggers,
        land_ramp=found["land_ramp"],
        extra_land_plays=found["extra_land_plays"],
        land_count=land_count,
        score=ladder_lookup(rules.LANDFALL_LADDER, (len(triggers), enablers), rules.LANDFALL_BASE),
    )


def detect_energy_synergy(cards: Sequence[DeckCardEntry]) -> Optional[EnergySynergy]:
    found = _match_roles(cards, "energy")
    producers, payoffs = found["producers"], found["payoffs"]
    if len(producers) < rules.ENERGY_MIN_PRODUCERS or len(payoffs) < rules.ENERGY_MIN_PAYOFFS:
        return None

    score = ladder_lookup(rules.ENERGY_LADDER, (len(producers), len(payoffs)), rules.SUPPORT_THEME_BASE)
    return EnergySynergy(energy_producers=producers, energy_payoffs=payoffs, score=score)


def detect_treasure_synergy(cards: Sequence[DeckCardEntry]) -> Optional[TreasureSynergy]:
    found = _match_roles(cards, "treasure")
    producers, payoffs = found["producers"], found["payoffs"]
    if len(producers) < rules.TREASURE_MIN_PRODUCERS:
        return None

    score = ladder_lookup(rules.TREASURE_LADDER, (len(producers), len(payoffs)), rules.SUPPORT_THEME_BASE)
    return TreasureSynergy(treasure_producers=producers, treasure_payoffs=payoffs, score=score)


def detect_storm_synergy(cards: Sequence[DeckCardEntry]) -> Optional[StormSynergy]:
    """
    Storm and spell-chain decks.

    Reports when the deck has a Storm card, or when it is so dense in
    instants and sorceries (25+) that chaining is the plan anyway.
    """
    table = rules.SYNERGY_PATTERNS["storm"]
    storm_cards: List[str] = []
    rituals: List[str] = []
    cantrips: List[str] = []
    cost_reduction: List[str] = []
    spells = 0

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        if card.is_instant_or_sorcery:
            spells += entry.quantity

        if _has_keyword(card, "Storm"):
            add_unique(storm_cards, name)
        if matches_any(table["rituals"], text) or (
                card.is_instant_or_sorcery and matches_any(table["spell_mana"], text)):
            add_unique(rituals, name)
        if card.cmc <= 2 and card.is_instant_or_sorcery and matches_any(table["cantrips"], text):
            add_unique(cantrips, name)
        if matches_any(table["cost_reduction"], text):
            add_unique(cost_reduction, name)

    if not storm_cards and spells < rules.STORM_MIN_SPELLS:
        return None

    score = ladder_lookup(rules.STORM_LADDER, (len(storm_cards), len(rituals), len(cantrips)),
                          rules.SUPPORT_THEME_BASE)
    return StormSynergy(
        storm_cards=storm_cards,
        rituals=rituals,
        cantrips=cantrips,
        cost_reduction=cost_reduction,
        instants_and_sorceries=spells,
        score=score,
    )


def detect_equipment_aura_synergy(cards: Sequence[DeckCardEntry]) -> Optional[EquipmentAuraSynergy]:
    """Voltron: equipment and auras, plus the creatures that carry them well."""
    table = rules.SYNERGY_PATTERNS["equipment_aura"]
    equipments: List[str] = []
    auras: List[str] = []
    equipment_payoffs: List[str] = []
    aura_payoffs: List[str] = []
    equipment_enablers: List[str] = []
    hexproof_creatures: List[str] = []

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        type_line = card.type_line.lower()

        if "equipment" in type_line:
            add_unique(equipments, name)
        if "enchantment" in type_line and "aura" in type_line:
            add_unique(auras, name)
        if matches_any(table["equipment_payoffs"], text):
            add_unique(equipment_payoffs, name)
        if matches_any(table["aura_payoffs"], text):
            add_unique(aura_payoffs, name)
        if matches_any(table["equipment_enablers"], text):
            add_unique(equipment_enablers, name)

        protected = (any(matches_any(table["hexproof"], keyword) for keyword in card.keywords)
                     or matches_any(table["hexproof"], text))
        if card.is_creature and protected:
            add_unique(hexproof_creatures, name)

    if len(equipments) < rules.EQUIPMENT_AURA_MIN_COUNT and len(auras) < rules.EQUIPMENT_AURA_MIN_COUNT:
        return None

    total = len(equipments) + len(auras)
    enablers = len(equipment_enablers) + len(hexproof_creatures)
    return EquipmentAuraSynergy(
        equipments=equipments,
        auras=auras,
        equipment_payoffs=equipment_payoffs,
        aura_payoffs=aura_payoffs,
        equipment_enablers=equipment_enablers,
        hexproof_creatures=hexproof_creatures,
        score=ladder_lookup(rules.EQUIPMENT_AURA_LADDER, (total, enablers), rules.SUPPORT_THEME_BASE),
    )


def detect_lifegain_synergy(cards: Sequence[DeckCardEntry]) -> Optional[LifegainSynergy]:
    table = rules.SYNERGY_PATTERNS["lifegain"]
    triggers: List[str] = []
    sources: List[str] = []
    lifelink_creatures: List[str] = []

    for entry in _in_deck(cards):
        card = entry.card
        text = card.oracle_text
        name = card.display_name
        if matches_any(table["triggers"], text):
            add_unique(triggers, name)
        if matches_any(table["sources"], text):
            add_unique(sources, name)
        if card.is_creature and (_has_keyword(card, "Lifelink") or matches_any(table["lifelink"], text)):
            add_unique(lifelink_creatures, name)

    total_sources = len(sources) + len(lifelink_creatures)
    if len(triggers) < rules.LIFEGAIN_MIN_TRIGGERS or total_sources < rules.LIFEGAIN_MIN_SOURCES:
        return None

    return LifegainSynergy(
        lifegain_triggers=triggers,
        lifegain_sources=sources,
        lifelink_creatures=lifelink_creatures,
        score=ladder_lookup(rules.LIFEGAIN_LADDER, (len(triggers), total_sources),
                            rules.SUPPORT_THEME_BASE),
    )


def detect_food_synergy(cards: Sequence[DeckCardEntry]) -> Optional[FoodSynergy]:
    found = _match_roles(cards, "food")
    producers = found["producers"]
    if len(producers) < rules.FOOD_MIN_PRODUCERS:
        return None

    support = len(found["payoffs"]) + len(found["sacrifice_outlets"])
    return FoodSynergy(
        food_producers=producers,
        food_payoffs=found["payoffs"],
        sacrifice_outlets=found["sacrifice_outlets"],
        score=ladder_lookup(rules.FOOD_LADDER, (len(producers), support), rules.SUPPORT_THEME_BASE),
    )


# ===== DETECTOR REGISTRY =====

KIND_LIST = "list"
KIND_SINGLE = "single"
KIND_BONUS = "bonus"  # unscored; feeds the keyword bonus


@dataclass(frozen=True)
class SynergyDetector:
    """
    Uniform handle on a detector.

    Whatever shape the detector returns, run() gives back a list: empty when
    nothing was found, one item for single-result detectors.
    """
    name: str
    field: str  # attribute on SynergyAnalysis
    fn: Callable[[Sequence[DeckCardEntry]], Any]
    kind: str = KIND_SINGLE

    def run(self, cards: Sequence[DeckCardEntry]) -> list:
        return self._as_list(self.fn(cards))

    def results_from(self, analysis: SynergyAnalysis) -> list:
        return self._as_list(getattr(analysis, self.field))

    def _as_list(self, result: Any) -> list:
        if self.kind == KIND_SINGLE:
            return [] if result is None else [result]
        return list(result)


SYNERGY_DETECTORS: Tuple[SynergyDetector, ...] = (
    SynergyDetector("Tribal", "tribal_synergies", detect_tribal_synergy, KIND_LIST),
    SynergyDetector("Tokens", "token_synergy", detect_token_synergy),
    SynergyDetector("Graveyard", "graveyard_synergy", detect_graveyard_synergy),
    SynergyDetector("+1/+1 Counters", "counter_synergy", detect_counter_synergy),
    SynergyDetector("Keyword Clusters", "keyword_clusters", detect_keyword_clusters, KIND_BONUS),
    SynergyDetector("Feedback Loops", "feedback_loops", detect_feedback_loops, KIND_LIST),
    SynergyDetector("Threshold Mechanics", "threshold_synergies", detect_threshold_synergies, KIND_LIST),
    SynergyDetector("Sacrifice", "sacrifice_synergy", detect_sacrifice_synergy),
    SynergyDetector("Mana Acceleration", "mana_acceleration_synergy", detect_mana_acceleration_synergy),
    SynergyDetector("Spellslinger", "spellslinger_synergy", detect_spellslinger_synergy),
    SynergyDetector("Attack Triggers", "attack_trigger_synergy", detect_attack_trigger_synergy),
    SynergyDetector("Tap/Untap", "tap_untap_synergy", detect_tap_untap_synergy),
    SynergyDetector("Enchantments/Artifacts", "enchantment_artifact_synergy",
                    detect_enchantment_artifact_synergy),
    SynergyDetector("Library Top", "library_top_synergy", detect_library_top_synergy),
    SynergyDetector("Exile Zone", "exile_zone_synergy", detect_exile_zone_synergy),
    SynergyDetector("ETB", "etb_synergy", detect_etb_synergy),
    SynergyDetector("Landfall", "landfall_synergy", detect_landfall_synergy),
    SynergyDetector("Energy", "energy_synergy", detect_energy_synergy),
    SynergyDetector("Treasure", "treasure_synergy", detect_treasure_synergy),
    SynergyDetector("Storm", "storm_synergy", detect_storm_synergy),
    SynergyDetector("Equipment/Auras", "equipment_aura_synergy", detect_equipment_aura_synergy),
    SynergyDetector("Lifegain", "lifegain_synergy", detect_lifegain_synergy),
    SynergyDetector("Food", "food_synergy", detect_food_synergy),
)


# ===== MAIN ENTRY POINT =====

def analyze_deck_synergies(cards: Sequence[DeckCardEntry]) -> SynergyAnalysis:
    """
    Run every detector and compute the overall synergy score.

    Each active category adds its score (list categories add their best).
    Keyword clusters add a flat bonus. The overall score is the mean over
    active categories, capped at 10, or 5 when nothing was detected.

    Args:
        cards: Mainboard entries, one per card name

    Returns:
        SynergyAnalysis with every detector's result
    """
    results: Dict[str, Any] = {}
    total = 0.0
    active = 0

    for detector in SYNERGY_DETECTORS:
        found = detector.run(cards)
        results[detector.field] = (found[0] if found else None) if detector.kind == KIND_SINGLE else found

        if detector.kind == KIND_BONUS:
            if len(found) >= 2:
                total += rules.KEYWORD_BONUS_MULTI
                active += 1
            elif len(found) == 1:
                total += rules.KEYWORD_BONUS_SINGLE
                active += 1
            continue

        if not found:
            continue
        best = max(result.score for result in found)
        if best > 0:
            total += best
            active += 1
            _LOG.debug("%s synergy active (score %d)", detector.name, best)

    if active == 0:
        overall = rules.NEUTRAL_SCORE
    else:
        overall = round_half_up(min(rules.MAX_SCORE, total / active))

    return SynergyAnalysis(overall_score=overall, **results)


# ===== PER-CARD ANALYSIS =====

@dataclass(frozen=True)
class CardSynergyRole:
    type: str  # e.g. "token_producer"
    category: str
    role: str
    description: str


@dataclass(frozen=True)
class CardSynergyInfo:
    """One card's place in the deck's active synergies"""
    card_name: str
    synergies: List[CardSynergyRole] = field(default_factory=list)
    related_cards: List[str] = field(default_factory=list)
    synergy_score: float = 0.0  # contribution, capped at 10


# (analysis field, member lists, type, category, role, description, related lists, divisor)
CARD_ROLE_RULES: Tuple[Tuple[str, Tuple[str, ...], str, str, str, str, Tuple[str, ...], int], ...] = (
    ("token_synergy", ("producers",), "token_producer", "Token Synergy", "Producer",
     "Creates tokens for the deck's token payoffs", ("payoffs",), 2),
    ("token_synergy", ("payoffs",), "token_payoff", "Token Synergy", "Payoff",
     "Rewards the deck's token producers", ("producers",), 2),
    ("graveyard_synergy", ("graveyard_fillers",), "graveyard_filler", "Graveyard Synergy", "Filler",
     "Fills the graveyard for the deck's graveyard payoffs", ("graveyard_payoffs",), 2),
    ("graveyard_synergy", ("graveyard_payoffs",), "graveyard_payoff", "Graveyard Synergy", "Payoff",
     "Uses cards the fillers put in the graveyard", ("graveyard_fillers",), 2),
    ("counter_synergy", ("counter_cards",), "counter_card", "+1/+1 Counter Synergy", "Counters",
     "Places +1/+1 counters for proliferate to grow", ("proliferate_cards",), 2),
    ("counter_synergy", ("proliferate_cards",), "proliferate", "+1/+1 Counter Synergy", "Proliferate",
     "Multiplies the counters other cards place", ("counter_cards",), 2),
    ("sacrifice_synergy", ("outlets",), "sacrifice_outlet", "Sacrifice Synergy", "Outlet",
     "Sacrifices fodder to set off death triggers", ("fodder", "payoffs"), 3),
    ("sacrifice_synergy", ("fodder",), "sacrifice_fodder", "Sacrifice Synergy", "Fodder",
     "Expendable bodies for the sacrifice outlets", ("outlets",), 3),
    ("sacrifice_synergy", ("payoffs",), "death_trigger", "Sacrifice Synergy", "Death Trigger",
     "Triggers whenever a creature dies", ("outlets", "fodder"), 3),
    ("mana_acceleration_synergy",
     ("mana_creatures", "mana_artifacts", "land_ramp", "extra_land_plays", "cost_reduction"),
     "mana_acceleration", "Mana Acceleration", "Ramp",
     "Accelerates mana toward the deck's expensive spells", ("payoffs",), 2),
    ("mana_acceleration_synergy", ("payoffs",), "mana_payoff", "Mana Acceleration", "Top End",
     "Expensive card that ramp brings down early", (), 2),
    ("attack_trigger_synergy", ("attack_triggers",), "attack_trigger", "Attack Triggers", "Trigger",
     "Triggers on attack; enablers make attacking safer", ("enablers",), 2),
    ("attack_trigger_synergy", ("enablers",), "attack_enabler", "Attack Triggers", "Enabler",
     "Makes attacking easier for the attack triggers", ("attack_triggers",), 2),
    ("tap_untap_synergy", ("tap_abilities",), "tap_ability", "Tap/Untap", "Tap Ability",
     "Tap ability that untappers let you reuse", ("untappers",), 2),
    ("tap_untap_synergy", ("untappers",), "untapper", "Tap/Untap", "Untapper",
     "Untaps permanents with tap abilities", ("tap_abilities",), 2),
    ("etb_synergy", ("etb_triggers",), "etb_trigger", "ETB Synergy", "ETB Trigger",
     "Enters-the-battlefield value that blink and reanimation repeat",
     ("blink_effects", "reanimation", "clones"), 2),
    ("etb_synergy", ("blink_effects",), "blink", "ETB Synergy", "Blink",
     "Exiles and returns creatures to reuse their ETB triggers", ("etb_triggers",), 2),
    ("etb_synergy", ("reanimation",), "reanimate", "ETB Synergy", "Reanimation",
     "Returns creatures from the graveyard to trigger them again", ("etb_triggers",), 2),
    ("etb_synergy", ("cheat_into_play",), "cheat", "ETB Synergy", "Cheat Into Play",
     "Puts cards onto the battlefield directly", ("etb_triggers",), 2),
    ("etb_synergy", ("clones",), "clone", "ETB Synergy", "Clone",
     "Copies creatures and their ETB triggers", ("etb_triggers",), 2),
)


def analyze_card_synergies(
    card: Card,
    cards: Sequence[DeckCardEntry],
    analysis: Optional[SynergyAnalysis] = None,
) -> CardSynergyInfo:
    """
    Describe how one card fits the deck's detected synergies.

    Args:
        card: The card to look up
        cards: Mainboard entries (analyzed here when analysis is not given)
        analysis: A precomputed analysis of the same cards

    Returns:
        CardSynergyInfo with roles, related cards and a 0-10 contribution score
    """
    if analysis is None:
        analysis = analyze_deck_synergies(cards)

    name = card.display_name
    roles: List[CardSynergyRole] = []
    related: List[str] = []
    score = 0.0

    def relate(names: Sequence[str]) -> None:
        for other in names:
            if other != name:
                add_unique(related, other)

    for tribal in analysis.tribal_synergies:
        if name in tribal.cards:
            roles.append(CardSynergyRole(
                "tribal", "Tribal Synergy", tribal.type,
                f"Member of the {tribal.type} tribe ({tribal.count} in deck)",
            ))
            relate(tribal.cards)
            score += tribal.score / tribal.count

    for field_name, members, role_type, category, role, description, related_fields, divisor in CARD_ROLE_RULES:
        result = getattr(analysis, field_name)
        if result is None:
            continue
        if any(name in getattr(result, member) for member in members):
            roles.append(CardSynergyRole(role_type, category, role, description))
            for related_field in related_fields:
                relate(getattr(result, related_field))
            score += result.score / divisor

    for loop in analysis.feedback_loops:
        if name in (loop.card_a, loop.card_b):
            partner = loop.card_b if loop.card_a == name else loop.card_a
            roles.append(CardSynergyRole(
                "feedback_loop", "Feedback Loop", "Loop Piece",
                f"Feeds and is fed by {partner}",
            ))
            relate([partner])
            score += loop.score

    spellslinger = analysis.spellslinger_synergy
    if spellslinger is not None:
        is_copier = name in spellslinger.spell_copiers
        if is_copier or name in spellslinger.spell_triggers:
            roles.append(CardSynergyRole(
                "spellslinger_enabler", "Spellslinger",
                "Spell Copier" if is_copier else "Spell Trigger",
                "Gets extra value from instants and sorceries",
            ))
            score += spellslinger.score / 2
        if card.is_instant_or_sorcery:
            roles.append(CardSynergyRole(
                "spell", "Spellslinger", "Spell",
                "Fuels the deck's spell triggers and copiers",
            ))
            relate(spellslinger.spell_triggers)
            relate(spellslinger.spell_copiers)
            score += spellslinger.score / 2

    return CardSynergyInfo(
        card_name=name,
        synergies=roles,
        related_cards=related,
        synergy_score=round_half_up(min(rules.MAX_SCORE, score)),
    )


# ===== REPORTING =====

def _evidence_names(result: Any, limit: int = 5) -> List[str]:
    names: List[str] = []
    for result_field in fields(result):
        value = getattr(result, result_field.name)
        if isinstance(value, list):
            for name in value:
                add_unique(names, name)
    return names[:limit]


def generate_synergy_summary(analysis: SynergyAnalysis) -> str:
    """Generate human-readable synergy summary"""
    lines = [
        f"Synergy Score: {analysis.overall_score:.1f}/10",
        "",
    ]

    active = analysis.active_categories()
    if not active and not analysis.keyword_clusters:
        lines.append("No notable synergies detected.")
        return "\n".join(lines)

    lines.append("Active Synergies:")
    for detector in SYNERGY_DETECTORS:
        results = detector.results_from(analysis)
        if not results or detector.kind == KIND_BONUS:
            continue

        if detector.field == "tribal_synergies":
            for tribal in results:
                lines.append(f"  • Tribal: {tribal.type} x{tribal.count} ({tribal.score}/10)")
        elif detector.field == "feedback_loops":
            for loop in results:
                lines.append(f"  • Feedback Loop ({loop.score}/10): {loop.description}")
        elif detector.field == "threshold_synergies":
            for mechanic in results:
                lines.append(
                    f"  • {mechanic.name}: {mechanic.current_count}/{mechanic.required_count} "
                    f"[{mechanic.achievement_likelihood}] ({mechanic.score}/10)"
                )
        else:
            result = results[0]
            lines.append(f"  • {detector.name} ({result.score}/10)")
            key_cards = _evidence_names(result)
            if key_cards:
                lines.append(f"      {', '.join(key_cards)}")

    if analysis.keyword_clusters:
        lines.append("\nKeyword Clusters:")
        for cluster in analysis.keyword_clusters:
            lines.append(f"  • {cluster.keyword} x{cluster.count}")

    return "\n".join(lines)
