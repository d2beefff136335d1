"""
Rule tables for synergy detection.
Patterns are grouped by synergy family and role; scoring ladders and thresholds are plain data.
"""
from __future__ import annotations

import re
from typing import Dict, Pattern, Sequence, Tuple, TypeVar

T = TypeVar("T")

Patterns = Tuple[Pattern[str], ...]
# A ladder is a list of (result, alternatives). A tier applies when every value
# meets the matching minimum in any one alternative. First tier wins.
Ladder = Tuple[Tuple[T, Tuple[Tuple[int, ...], ...]], ...]


def _c(*patterns: str) -> Patterns:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def ladder_lookup(ladder: Ladder, values: Sequence[int], default: T) -> T:
    """
    Walk a scoring ladder from the top tier down.

    Args:
        ladder: Tiers of (result, alternatives of per-value minimums)
        values: Observed counts, in the order the ladder expects
        default: Result when no tier matches

    Returns:
        The first matching tier's result, or default
    """
    for result, alternatives in ladder:
        for minimums in alternatives:
            if all(value >= minimum for value, minimum in zip(values, minimums)):
                return result
    return default


# ===== PATTERN TABLES =====
# family -> role -> compiled patterns, matched against oracle text

SYNERGY_PATTERNS: Dict[str, Dict[str, Patterns]] = {
    "token": {
        "producers": _c(
            r"create.*token",
            r"put.*token.*onto the battlefield",
            r"token.*copy",
        ),
        "payoffs": _c(
            r"whenever.*creature enters",
            r"whenever.*enters.*you control",
            r"sacrifice.*creature",
            r"creatures you control get",
            r"creature tokens you control",
            r"tokens you control",
            r"for each creature you control",
        ),
    },
    "graveyard": {
        "fillers": _c(
            r"mill",
            r"put.*from your library into your graveyard",
            r"discard",
            r"dredge",
            r"surveil",
        ),
        "payoffs": _c(
            r"from.*graveyard",
            r"flashback",
            r"delve",
            r"escape",
            r"embalm",
            r"eternalize",
            r"unearth",
            r"return.*from.*graveyard",
            r"threshold",
            r"delirium",
        ),
    },
    "counter": {
        "counters": _c(
            r"\+1/\+1 counter",
            r"put.*\+1/\+1 counter",
            r"enters.*with.*\+1/\+1 counter",
            r"counters on.*creature",
        ),
        "proliferate": _c(r"proliferate"),
    },
    "sacrifice": {
        "outlets": _c(
            r"sacrifice.*creature",
            r"sacrifice a creature",
        ),
        "fodder": _c(
            r"create.*token",
            r"put.*token.*onto",
            r"when.*dies.*create",
            r"when.*dies.*return",
            r"persist|undying",
        ),
        "payoffs": _c(
            r"whenever.*creature.*dies",
            r"whenever.*creature.*put into.*graveyard",
            r"whenever.*dies",
        ),
    },
    "ramp": {
        # shared by mana creatures and noncreature mana artifacts
        "mana_sources": _c(
            r"add.*\{[WUBRGC]\}",
            r"add.*mana",
            r"\{T\}:.*add",
        ),
        "land_ramp": _c(
            r"search.*library.*land",
            r"search.*library.*basic land",
            r"put.*land.*onto the battlefield",
            r"put.*land.*into play",
            r"rampant growth|cultivate|kodama's reach|explosive vegetation|skyshroud claim",
        ),
        "extra_land_plays": _c(
            r"play an additional land",
            r"play.*additional land",
            r"play any number of lands",
            r"play.*land.*each turn",
            r"azusa|exploration|oracle of mul daya|burgeoning",
        ),
        "cost_reduction": _c(
            r"affinity",
            r"convoke",
            r"delve",
            r"cost.*less to cast",
            r"costs?.*\{[0-9]\}.*less",
            r"improvise",
        ),
    },
    "spellslinger": {
        "triggers": _c(
            r"whenever you cast an instant or sorcery",
            r"whenever you cast.*instant.*sorcery",
            r"whenever you cast a noncreature spell",
            r"whenever you cast.*noncreature",
            r"prowess",
        ),
        "copiers": _c(
            r"copy.*instant.*sorcery",
            r"copy target.*spell",
            r"copy.*instant spell",
            r"copy.*sorcery spell",
            r"storm",
            r"fork|twincast|reverberate",
        ),
        "recursion": _c(
            r"flashback",
            r"cast.*from.*graveyard",
            r"cast.*instant.*sorcery.*from.*graveyard",
            r"you may cast.*from.*graveyard",
            r"snapcaster|past in flames|mission briefing",
        ),
        "card_advantage": _c(
            r"whenever you cast.*instant.*draw",
            r"whenever you cast.*sorcery.*draw",
            r"whenever you cast.*noncreature.*draw",
            r"whenever you cast.*spell.*draw",
            r"archmage emeritus|niv-mizzet|izzet chemister",
        ),
        "cost_reduction": _c(
            r"instant.*sorcery.*cost.*less",
            r"instant.*sorcery.*cost.*\{[0-9]\}.*less",
            r"noncreature.*cost.*less",
            r"goblin electromancer|baral|jace's sanctum",
        ),
    },
    "attack": {
        "triggers": _c(
            r"whenever.*attacks",
            r"when.*attacks",
            r"whenever.*creature.*attacks",
            r"whenever.*attack",
            r"battle cry",
        ),
        "raid": _c(
            r"raid",
            r"if you attacked",
        ),
        "enablers": _c(
            r"haste",
            r"can't be blocked",
            r"unblockable",
            r"untap.*creature",
            r"untap all creatures",
            r"vigilance",
            r"extra combat",
            r"additional combat",
        ),
    },
    "tap_untap": {
        "tap_abilities": _c(
            r"\{T\}:(?!.*add)",
            r"\{T\}.*draw",
            r"\{T\}.*deal.*damage",
            r"\{T\}.*destroy",
            r"\{T\}.*exile",
            r"\{T\}.*search",
            r"\{T\}.*return",
            r"\{T\}.*create",
            r"\{T\}.*put",
            r"\{T\}.*counter",
            r"\{T\}.*gain",
            r"\{T\}.*target",
            r"tap.*creature.*:",
            r"tap.*permanent.*:",
            r"tap.*wizard.*:",
            r"tap.*artifact.*:",
        ),
        "untappers": _c(
            r"untap.*permanent",
            r"untap.*creature",
            r"untap.*artifact",
            r"untap all",
            r"untap target",
            r"untap.*you control",
            r"doesn't untap",
        ),
        "tap_triggers": _c(
            r"whenever.*becomes tapped",
            r"when.*becomes tapped",
            r"whenever.*taps",
            r"when.*taps",
            r"inspired",
            r"whenever.*becomes untapped",
            r"when.*becomes untapped",
        ),
        "vigilance": _c(r"vigilance"),
    },
    "enchantment_artifact": {
        "enchantment_triggers": _c(
            r"constellation",
            r"whenever.*enchantment.*enters",
            r"when.*enchantment.*enters",
            r"whenever you cast an enchantment",
            r"when you cast an enchantment",
        ),
        "enchantment_payoffs": _c(
            r"enchantment you control",
            r"number of enchantments",
            r"each enchantment",
            r"for each enchantment",
            r"enchantments you control",
        ),
        "artifact_triggers": _c(
            r"whenever.*artifact.*enters",
            r"when.*artifact.*enters",
            r"whenever you cast an artifact",
            r"when you cast an artifact",
        ),
        "artifact_payoffs": _c(
            r"artifact you control",
            r"number of artifacts",
            r"each artifact",
            r"for each artifact",
            r"artifacts you control",
            r"affinity for artifacts",
            r"improvise",
        ),
    },
    "library_top": {
        "manipulators": _c(
            r"\bscry\b",
            r"\bfateseal\b",
            r"\bbrainstorm\b",
            r"put.*on top of.*library",
            r"look at the top.*card",
            r"reveal the top.*card",
            r"top.*library.*hand",
            r"rearrange.*top",
        ),
        "payoffs": _c(
            r"\bmiracle\b",
            r"top card of.*library",
            r"top of.*library",
            r"reveal.*top",
            r"play.*top.*library",
            r"cast.*top.*library",
        ),
    },
    "exile": {
        "exilers": _c(r"\bexile\b"),
        "payoffs": _c(
            r"\badventure\b",
            r"\bforetell\b",
            r"\bescape\b",
            r"exile.*you own",
            r"exile.*opponent",
            r"from exile",
            r"exiled.*card",
        ),
        "blink": _c(
            r"exile.*until.*end.*turn",
            r"exile.*return.*battlefield",
            r"flicker",
            r"blink",
        ),
    },
    "etb": {
        "triggers": _c(
            r"when.*enters.*battlefield",
            r"enters.*battlefield.*trigger",
            r"enters.*battlefield.*you",
            r"when.*enters",
        ),
        "blink": _c(
            r"exile.*until.*end.*turn",
            r"exile.*return.*battlefield",
            r"exile.*return.*at.*beginning",
            r"flicker",
            r"blink",
            r"exile.*return.*under",
        ),
        "reanimation": _c(
            r"return.*creature.*from.*graveyard.*battlefield",
            r"return.*graveyard.*battlefield",
            r"put.*creature.*from.*graveyard.*battlefield",
            r"reanimate",
            r"unearth",
            r"return.*target.*creature.*battlefield",
        ),
        "cheat": _c(
            r"put.*onto.*battlefield",
            r"put.*into.*play",
            r"show and tell",
            r"sneak attack",
            r"through the breach",
            r"aether vial",
        ),
        "clones": _c(
            r"copy.*creature",
            r"clone",
            r"may have.*copy",
            r"enter.*copy",
            r"as a copy",
        ),
        "pan": _c(
            r"create.*token",
            r"put.*token.*onto.*battlefield",
        ),
    },
    "landfall": {
        "triggers": _c(
            r"landfall",
            r"whenever.*land enters",
            r"when.*land enters",
            r"whenever.*land.*battlefield",
        ),
        "land_ramp": _c(
            r"search.*library.*land.*battlefield",
            r"put.*land.*battlefield",
            r"rampant growth",
            r"cultivate",
            r"kodama's reach",
        ),
        "extra_land_plays": _c(
            r"play.*additional.*land",
            r"play.*extra.*land",
            r"play.*more.*land",
            r"land.*each turn",
        ),
    },
    "energy": {
        "producers": _c(r"get.*energy counter", r"energy counter.*you"),
        "payoffs": _c(r"pay.*\{e\}", r"spend.*energy"),
    },
    "treasure": {
        "producers": _c(r"create.*treasure", r"treasure token"),
        "payoffs": _c(r"whenever.*artifact", r"sacrifice.*artifact", r"artifact.*enter"),
    },
    "storm": {
        "rituals": _c(
            r"add.*\{r\}\{r\}\{r\}",
            r"add.*\{b\}\{b\}\{b\}",
            r"dark ritual",
            r"desperate ritual",
            r"pyretic ritual",
            r"seething song",
        ),
        "spell_mana": _c(r"add.*mana"),
        "cantrips": _c(r"draw.*card"),
        "cost_reduction": _c(r"cost.*less", r"reduce.*cost", r"this spell costs"),
    },
    "equipment_aura": {
        "equipment_payoffs": _c(r"whenever.*equipped", r"equipped creature"),
        "aura_payoffs": _c(r"whenever.*enchanted", r"enchanted creature"),
        "equipment_enablers": _c(
            r"equip.*costs.*less",
            r"auto-attach",
            r"when.*enters.*attach",
        ),
        "hexproof": _c(r"hexproof|shroud"),
    },
    "lifegain": {
        "triggers": _c(r"whenever.*gain.*life", r"when.*gain.*life"),
        "sources": _c(r"you gain.*life", r"gain.*life"),
        "lifelink": _c(r"lifelink"),
    },
    "food": {
        "producers": _c(r"create.*food", r"food token"),
        "payoffs": _c(r"whenever.*food", r"sacrifice.*food"),
        "sacrifice_outlets": _c(r"sacrifice.*artifact"),
    },
    "threshold": {
        "metalcraft": _c(r"metalcraft|artifact.*control"),
        "delirium": _c(r"delirium"),
        "domain": _c(r"domain"),
        "threshold": _c(r"threshold"),
        "descend": _c(r"descend|fathom"),
        "graveyard_fillers": _c(r"mill|discard|sacrifice|fetch"),
        "domain_enablers": _c(r"search.*basic land|fetch"),
    },
}


# ===== FEEDBACK LOOP SIGNALS =====

# signal a card listens for -> patterns
FEEDBACK_TRIGGERS: Dict[str, Patterns] = {
    "creature_etb": _c(r"whenever.*creature.*enters"),
    "lifegain": _c(r"whenever you gain life|whenever.*life.*gained"),
    "creature_dies": _c(r"whenever.*creature.*dies|whenever.*creature.*put into.*graveyard"),
    "counter_placed": _c(r"whenever.*\+1/\+1 counter.*placed|whenever.*counter.*put on"),
    "spell_cast": _c(r"whenever you cast.*instant or sorcery|whenever you cast.*spell"),
    "card_draw": _c(r"whenever you draw|when.*draws a card"),
    "token_created": _c(r"whenever.*token.*created|whenever.*token.*enters"),
}

# patterns -> signals a card emits
FEEDBACK_OUTPUTS: Tuple[Tuple[Patterns, Tuple[str, ...]], ...] = (
    # entering tokens also count as creatures entering
    (_c(r"create.*token", r"put.*token.*onto"), ("creature_token", "creature_etb")),
    (_c(r"you gain.*life|gain.*life"), ("lifegain",)),
    (_c(r"draw.*card"), ("card_draw",)),
    (_c(r"put.*\+1/\+1 counter", r"enters.*with.*\+1/\+1 counter"), ("counter_placed",)),
    (_c(r"sacrifice.*creature"), ("creature_dies",)),
)


# ===== KEYWORDS AND TYPES =====

IMPORTANT_KEYWORDS = (
    "Flying", "First Strike", "Double Strike", "Deathtouch", "Hexproof",
    "Indestructible", "Lifelink", "Menace", "Reach", "Trample",
    "Vigilance", "Flash", "Haste",
)

EVASION_KEYWORDS = (
    "Flying", "Menace", "Trample", "Unblockable", "Shadow",
    "Horsemanship", "Fear", "Intimidate",
)

DELIRIUM_CARD_TYPES = (
    "Artifact", "Creature", "Enchantment", "Instant", "Land", "Planeswalker", "Sorcery",
)

BASIC_LAND_TYPES = ("Plains", "Island", "Swamp", "Mountain", "Forest")
BASIC_LAND_TYPE_PATTERNS: Dict[str, Pattern[str]] = {
    land_type: re.compile(rf"\b{land_type}\b", re.IGNORECASE) for land_type in BASIC_LAND_TYPES
}

SUBTYPE_DASH = "—"  # em dash between types and subtypes
SUBTYPE_SPLITTER = re.compile(r"[\s・/,]+")


# ===== THRESHOLDS =====

TRIBAL_MIN_COUNT = 8
KEYWORD_CLUSTER_MIN_COUNT = 4
SPELLSLINGER_MIN_SPELLS = 8
ATTACK_MIN_CREATURES = 10
RAMP_PAYOFF_MIN_CMC = 5
STORM_MIN_SPELLS = 25
THRESHOLD_ENABLER_LIMIT = 5

TAP_UNTAP_MIN_TAP_MATTERS = 4
TAP_UNTAP_MIN_ENABLERS = 2
ENCHANTMENT_ARTIFACT_MIN_COUNT = 6
ENCHANTMENT_ARTIFACT_MIN_SYNERGY = 2
LIBRARY_TOP_MIN_MANIPULATORS = 3
LIBRARY_TOP_MIN_PAYOFFS = 2
EXILE_MIN_CARDS = 3
EXILE_MIN_BLINK = 2
ETB_MIN_TRIGGERS = 3
ETB_MIN_ENABLERS = 2
LANDFALL_MIN_TRIGGERS = 2
LANDFALL_MIN_ENABLERS = 3
ENERGY_MIN_PRODUCERS = 3
ENERGY_MIN_PAYOFFS = 2
TREASURE_MIN_PRODUCERS = 3
EQUIPMENT_AURA_MIN_COUNT = 4
LIFEGAIN_MIN_TRIGGERS = 3
LIFEGAIN_MIN_SOURCES = 4
FOOD_MIN_PRODUCERS = 4

KEYWORD_BONUS_MULTI = 5  # two or more clusters
KEYWORD_BONUS_SINGLE = 3
NEUTRAL_SCORE = 5.0
MAX_SCORE = 10
FLOOR_SCORE = 2


# ===== SCORING LADDERS =====

TRIBAL_LADDER: Ladder = ((10, ((16,),)), (8, ((12,),)))
TRIBAL_BASE = 6

# (producers, payoffs)
TOKEN_LADDER: Ladder = ((8, ((3, 2),)), (6, ((2, 1),)))
TOKEN_BASE = 4

# (fillers, payoffs)
GRAVEYARD_LADDER: Ladder = ((9, ((4, 4),)), (7, ((3, 3),)), (5, ((2, 2),)))
GRAVEYARD_BASE = 3

# (counter cards, proliferate cards)
COUNTER_LADDER: Ladder = ((9, ((6, 2),)), (7, ((4, 1),)), (6, ((4, 0),)), (4, ((2, 0),)))

# (combined quantity of both cards)
FEEDBACK_LADDER: Ladder = ((9, ((8,),)), (8, ((6,),)), (7, ((4,),)))
FEEDBACK_BASE = 6

# (outlets, fodder, payoffs)
SACRIFICE_LADDER: Ladder = (
    (9, ((2, 3, 2),)),
    (8, ((1, 2, 2),)),
    (7, ((1, 2, 1),)),
    (6, ((1, 1, 1),)),
)
SACRIFICE_PARTIAL = 5

# (accelerators, payoffs)
RAMP_LADDER: Ladder = (
    (9, ((12, 8),)),
    (8, ((10, 6), (7, 8), (5, 10))),
    (7, ((8, 5), (6, 7))),
    (6, ((6, 4), (5, 6))),
    (5, ((4, 3),)),
)
RAMP_BASE = 4

# (enablers, instants and sorceries, enabler types)
SPELLSLINGER_LADDER: Ladder = (
    (9, ((8, 20, 4),)),
    (8, ((6, 18, 3), (8, 15, 0))),
    (7, ((5, 15, 3), (6, 12, 0))),
    (6, ((4, 12, 0), (5, 10, 0))),
    (5, ((3, 10, 0),)),
)
SPELLSLINGER_BASE = 4

# (triggers incl. raid, attackers, enablers)
ATTACK_LADDER: Ladder = (
    (9, ((8, 20, 6),)),
    (8, ((6, 18, 4), (8, 15, 0))),
    (7, ((5, 15, 3), (6, 12, 0))),
    (6, ((4, 12, 0), (5, 10, 0))),
    (5, ((3, 10, 0),)),
)
ATTACK_BASE = 4

# (tap abilities, untappers, tap triggers, tap-matters total, enablers total)
TAP_UNTAP_LADDER: Ladder = (
    (9, ((8, 4, 2, 0, 0),)),
    (8, ((6, 3, 0, 0, 0), (6, 0, 2, 0, 0))),
    (7, ((5, 0, 0, 0, 4),)),
    (6, ((0, 0, 0, 6, 3),)),
    (5, ((0, 0, 0, 4, 2),)),
)
TAP_UNTAP_BASE = 4

# (type count, synergy cards); applied to enchantments and artifacts separately
PERMANENT_THEME_LADDER: Ladder = (
    (9, ((15, 5),)),
    (8, ((12, 4),)),
    (7, ((10, 3),)),
    (6, ((8, 2),)),
    (5, ((6, 1),)),
)
PERMANENT_THEME_BASE = 4
DUAL_THEME_MIN_COUNT = 8
DUAL_THEME_MIN_SYNERGY = 2

# (manipulators, payoffs, total)
LIBRARY_TOP_LADDER: Ladder = (
    (9, ((8, 4, 0),)),
    (8, ((6, 3, 0),)),
    (7, ((5, 2, 0),)),
    (6, ((4, 2, 0),)),
    (5, ((0, 0, 4),)),
)
LIBRARY_TOP_BASE = 4

EXILE_BLINK_LADDER: Ladder = ((8, ((4,),)), (7, ((3,),)), (6, ((2,),)))
EXILE_PAYOFF_LADDER: Ladder = ((9, ((8,),)), (8, ((6,),)), (7, ((4,),)), (6, ((2,),)))
EXILER_LADDER: Ladder = ((6, ((10,),)), (5, ((6,),)))
EXILE_BASE = 4

# (etb triggers, enablers)
ETB_LADDER: Ladder = (
    (9, ((12, 6),)),
    (8, ((10, 5),)),
    (7, ((8, 4),)),
    (6, ((6, 3),)),
    (5, ((4, 2),)),
)
# (blink or reanimation cards, etb triggers)
ETB_REUSE_LADDER: Ladder = ((8, ((4, 6),)), (7, ((3, 4),)))
ETB_BASE = 4

# (landfall triggers, enablers)
LANDFALL_LADDER: Ladder = (
    (9, ((8, 6),)),
    (8, ((6, 5),)),
    (7, ((4, 4),)),
    (6, ((3, 3),)),
    (5, ((2, 0),)),
)
LANDFALL_BASE = 4

# (producers, payoffs)
ENERGY_LADDER: Ladder = ((9, ((10, 6),)), (8, ((8, 5),)), (7, ((6, 4),)), (6, ((5, 3),)))
TREASURE_LADDER: Ladder = ((8, ((8, 4),)), (7, ((6, 3),)), (6, ((5, 0),)))

# (storm cards, rituals, cantrips)
STORM_LADDER: Ladder = (
    (9, ((2, 4, 8),)),
    (8, ((1, 3, 6),)),
    (7, ((1, 2, 0), (1, 0, 5))),
    (6, ((1, 0, 0),)),
)

# (equipment + auras, enablers + hexproof creatures)
EQUIPMENT_AURA_LADDER: Ladder = ((9, ((12, 4),)), (8, ((10, 3),)), (7, ((8, 2),)), (6, ((6, 0),)))

# (triggers, sources + lifelink creatures)
LIFEGAIN_LADDER: Ladder = ((9, ((6, 10),)), (8, ((5, 8),)), (7, ((4, 6),)), (6, ((3, 5),)))

# (producers, payoffs + sacrifice outlets)
FOOD_LADDER: Ladder = ((8, ((8, 4),)), (7, ((6, 3),)), (6, ((5, 0),)))

# detectors whose gate already guarantees a light theme start here
SUPPORT_THEME_BASE = 5


# ===== THRESHOLD MECHANICS =====

METALCRAFT_REQUIRED = 3
DELIRIUM_REQUIRED = 4
DOMAIN_REQUIRED = 5
THRESHOLD_REQUIRED = 7
DESCEND_REQUIRED = 8

# (artifacts, payoffs)
METALCRAFT_LADDER: Ladder = ((8, ((3, 2),)), (6, ((3, 1),)))
METALCRAFT_LIKELIHOOD: Ladder = (("high", ((12,),)), ("medium", ((6,),)))

# (card types, payoffs, fillers)
DELIRIUM_LADDER: Ladder = ((9, ((5, 2, 3),)), (7, ((4, 1, 2),)), (5, ((4, 1, 0),)))
# (card types, fillers)
DELIRIUM_LIKELIHOOD: Ladder = (("high", ((6, 4),)), ("medium", ((5, 2),)))

# (basic land types, payoffs)
DOMAIN_LADDER: Ladder = ((9, ((5, 2),)), (7, ((4, 1),)), (5, ((3, 1),)))
DOMAIN_LIKELIHOOD: Ladder = (("high", ((5,),)), ("medium", ((4,),)))

# (fillers, payoffs)
THRESHOLD_LADDER: Ladder = ((8, ((6, 2),)), (6, ((3, 1),)), (4, ((0, 1),)))
THRESHOLD_LIKELIHOOD: Ladder = (("high", ((6,),)), ("medium", ((3,),)))

DESCEND_LADDER: Ladder = ((8, ((8, 2),)), (6, ((4, 1),)), (4, ((0, 1),)))
DESCEND_LIKELIHOOD: Ladder = (("high", ((8,),)), ("medium", ((4,),)))
