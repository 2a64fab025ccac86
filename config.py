"""
MTG Deck Archetype Analyzer - Configuration
===========================================

All the tuning constants for feature extraction, archetype classification,
deck health scoring, sideboard analysis and archetype clustering live here.

Most of the thresholds below are hand-tuned. They are kept as named
constants so they can be reviewed and adjusted in one place without touching
the analysis code.
"""

import os

# ============================================================================
# SCRYFALL API CONFIGURATION
# ============================================================================
SCRYFALL_API_BASE = "https://api.scryfall.com"
SCRYFALL_RATE_LIMIT_MS = 100  # Minimum ms between requests (10 requests/sec max)
SCRYFALL_USER_AGENT = "MTGArchetypeAnalyzer/1.0"
SCRYFALL_TIMEOUT_SECONDS = 10

# ============================================================================
# CLUSTER MODEL STORAGE
# Where the learned archetype centroids are written. Override with the
# ARCHETYPE_MODEL_PATH environment variable (or in a .env file).
# ============================================================================
CLUSTER_MODEL_PATH = os.getenv("ARCHETYPE_MODEL_PATH", "learned_archetypes.json")

# ============================================================================
# COLORS
# ============================================================================
COLOR_ORDER = ["W", "U", "B", "R", "G"]

COLOR_NAMES = {
    "W": "White",
    "U": "Blue",
    "B": "Black",
    "R": "Red",
    "G": "Green",
}

# ============================================================================
# CARD TYPES
# A card counts toward every category its type line mentions
# (an "Artifact Creature" is both an artifact and a creature).
# ============================================================================
CARD_TYPE_CATEGORIES = [
    "creature",
    "instant",
    "sorcery",
    "enchantment",
    "artifact",
    "planeswalker",
    "land",
]

MANA_CURVE_MAX_BUCKET = 7  # Everything at 7+ shares the last bucket

# ============================================================================
# SYNERGY DETECTION
# Each tag needs a broad hit somewhere in the deck's oracle text AND a minimum
# number of distinct cards matching the narrower per-card keywords. The
# second check keeps one stray reminder text from tagging a whole deck.
#
#   corpus_keywords: any of these in the concatenated oracle text
#   card_keywords:   any of these in a single card's oracle text
#   card_type:       alternatively, this word in the card's type line
#   min_cards:       distinct card names that must match
# ============================================================================
SYNERGY_RULES = [
    {
        "tag": "Lifegain",
        "corpus_keywords": ["gain", "lifelink"],
        "card_keywords": ["gain life", "gains life", "you gain", "lifelink"],
        "min_cards": 3,
    },
    {
        "tag": "Prowess",
        "corpus_keywords": ["prowess", "instant or sorcery"],
        "card_keywords": [
            "prowess",
            "whenever you cast an instant or sorcery",
            "whenever you cast a noncreature spell",
            "instant or sorcery spell",
            "magecraft",
        ],
        "min_cards": 3,
    },
    {
        "tag": "Sacrifice",
        "corpus_keywords": ["sacrifice"],
        "card_keywords": [
            "sacrifice a creature",
            "sacrifice another",
            "sacrifice an artifact",
            "whenever a creature you control dies",
            "whenever another creature you control dies",
        ],
        "min_cards": 3,
    },
    {
        "tag": "Graveyard",
        "corpus_keywords": ["graveyard"],
        "card_keywords": [
            "from your graveyard",
            "flashback",
            "escape",
            "dredge",
            "unearth",
            "mill",
        ],
        "min_cards": 3,
    },
    {
        "tag": "Card Draw",
        "corpus_keywords": ["draw"],
        "card_keywords": [
            "draw a card",
            "draw two cards",
            "draw three cards",
            "draws a card",
            "draw cards",
        ],
        "min_cards": 4,
    },
    {
        "tag": "Aggro",
        "corpus_keywords": ["haste", "attacks"],
        "card_keywords": ["haste", "whenever this creature attacks", "attacks each combat", "first strike"],
        "min_cards": 4,
    },
    {
        "tag": "Counters",
        "corpus_keywords": ["+1/+1 counter", "proliferate"],
        "card_keywords": ["+1/+1 counter", "proliferate"],
        "min_cards": 3,
    },
    {
        "tag": "Artifacts",
        "corpus_keywords": ["artifact"],
        "card_keywords": ["artifact you control", "artifacts you control", "artifact spell"],
        "card_type": "artifact",
        "min_cards": 4,
    },
]

# ============================================================================
# DECK CONSISTENCY
# ============================================================================
CONSISTENCY_GOOD = 70  # consistency score at/above this is rewarded
CONSISTENCY_POOR = 50  # consistency score below this is penalized

# ============================================================================
# MANA BASE
# ============================================================================

# Basic land names (unlimited copies allowed)
BASIC_LAND_NAMES = {
    "plains", "island", "swamp", "mountain", "forest", "wastes",
    "snow-covered plains", "snow-covered island", "snow-covered swamp",
    "snow-covered mountain", "snow-covered forest", "snow-covered wastes",
}

# Oracle text patterns that identify the well-known dual land cycles.
# Checked in this order, only for lands producing two or more colors.
LAND_TEXT_PATTERNS = {
    "fastland": ["two or fewer other lands"],
    "shockland": ["pay 2 life"],
    "checkland": ["unless you control a"],
}

LAND_TYPE_KEYS = ["basic", "dual", "fastland", "shockland", "checkland", "utility"]

MANABASE_SCORING = {
    "base": 50,
    # Land count band
    "land_count_min": 22,
    "land_count_max": 26,
    "land_count_in_band": 15,
    "land_count_too_few": -10,
    "land_count_too_many": -5,
    # Multicolor land support: need min(per_color * colors, cap) of them
    "dual_lands_per_color": 2,
    "dual_lands_cap": 8,
    "dual_lands_sufficient": 15,
    "dual_lands_insufficient": -10,
    # Utility lands
    "utility_land_max": 3,
    "utility_land_overuse": -10,
    # Share of basics among lands, in percent
    "basic_ratio_min": 40,
    "basic_ratio_max": 70,
    "basic_ratio_reward": 10,
}

# Recommended land count = deck size * ratio, nudged by color pip intensity
RECOMMENDED_LAND_RATIO = 0.40
HEAVY_PIP_DENSITY = 1.0   # pips per non-land card at/above this -> +1 land
LIGHT_PIP_DENSITY = 0.5   # pips per non-land card below this -> -1 land

# Letter grades shared by the mana base and deck health scores
GRADE_THRESHOLDS = [
    (80, "A"),
    (65, "B"),
    (50, "C"),
]
GRADE_FLOOR = "D"

# ============================================================================
# ARCHETYPE CLASSIFICATION
# Rules are evaluated in order: Aggro, Control, Midrange, synergy fallback,
# then the color default. The first rule whose guard holds decides the label.
# ============================================================================
AGGRO_MAX_AVG_MANA_VALUE = 2.5
MIDRANGE_MIN_AVG_MANA_VALUE = 2.5
MIDRANGE_MAX_AVG_MANA_VALUE = 4.0
CONTROL_REQUIRED_SYNERGY = "Card Draw"

# Color combinations are keyed by the colors in WUBRG order joined together
AGGRO_PAIR_NAMES = {
    "WR": "Boros Aggro",
    "RG": "Gruul Aggro",
    "BR": "Rakdos Aggro",
    "WG": "Selesnya Aggro",
    "WB": "Orzhov Aggro",
}

CONTROL_COMBINATION_NAMES = {
    "WU": "Azorius Control",
    "UB": "Dimir Control",
    "UR": "Izzet Control",
    "WB": "Orzhov Control",
    "WUB": "Esper Control",
    "UBR": "Grixis Control",
    "WUR": "Jeskai Control",
}

MIDRANGE_PAIR_NAMES = {
    "BG": "Golgari Midrange",
    "RG": "Gruul Midrange",
    "WG": "Selesnya Midrange",
    "UG": "Simic Midrange",
    "BR": "Rakdos Midrange",
    "WB": "Orzhov Midrange",
}

# Synergy tag -> archetype, checked in this order when no strategy rule fires
SYNERGY_FALLBACK_ARCHETYPES = [
    ("Graveyard", "Graveyard Combo"),
    ("Artifacts", "Artifacts"),
    ("Lifegain", "Lifegain"),
]

MULTICOLOR_ARCHETYPE = "Multicolor Deck"
UNKNOWN_ARCHETYPE = "Unknown Archetype"

# ============================================================================
# MATCHUPS
# Keyed by archetype family. The family is found by looking for the key in
# the archetype label, in this order.
# ============================================================================
MATCHUP_TABLE = {
    "Aggro": {
        "favorable": ["Control", "Combo"],
        "challenging": ["Midrange", "Lifegain"],
    },
    "Control": {
        "favorable": ["Midrange", "Combo"],
        "challenging": ["Aggro", "Prowess Tempo"],
    },
    "Combo": {
        "favorable": ["Midrange", "Control"],
        "challenging": ["Aggro", "Graveyard Hate"],
    },
    "Midrange": {
        "favorable": ["Aggro", "Lifegain"],
        "challenging": ["Control", "Combo"],
    },
}

# Meta comparison (Jaccard similarity of card names)
META_FAVORABLE_SIMILARITY = 0.4
META_CHALLENGING_SIMILARITY = 0.1

# ============================================================================
# DECK HEALTH
# ============================================================================
DECK_HEALTH_SCORING = {
    "base": 50,
    "curve_good_min": 1.8,
    "curve_good_max": 3.2,
    "curve_good": 10,
    "curve_too_high": 4.0,
    "curve_high_penalty": -10,
    "synergy_good_count": 2,
    "synergy_good": 10,
    "synergy_none": -10,
    "consistency_good": 10,
    "consistency_poor": -10,
    "manabase_weight": 0.2,
}

# ============================================================================
# RECOMMENDATIONS
# ============================================================================
RECOMMENDATION_THRESHOLDS = {
    "curve_high": 4.0,
    "curve_low": 1.5,
    "aggro_min_creatures": 8,
    "land_min": 20,
    "land_max": 28,
    "synergy_praise_count": 3,
}

# ============================================================================
# SIDEBOARD PURPOSES
# Evaluated in this order; a card lands in the first bucket that matches.
# "threats" is decided by type line instead of oracle text.
# ============================================================================
SIDEBOARD_PURPOSE_RULES = [
    ("removal", [
        "destroy target creature",
        "destroy target nonartifact creature",
        "destroy target nonblack creature",
        "exile target creature",
        "destroy all creatures",
        "exile all creatures",
        "damage to target creature",
        "damage to any target",
        "damage to each creature",
        "destroy target planeswalker",
        "target creature gets -",
        "all creatures get -",
        "destroy target nonland permanent",
        "exile target nonland permanent",
    ]),
    ("counterspells", [
        "counter target",
    ]),
    ("graveyard_hate", [
        "exile all graveyards",
        "exile target player's graveyard",
        "exile all cards from target player's graveyard",
        "exile target card from a graveyard",
        "cards in graveyards",
        "from graveyards",
        "would be put into a graveyard",
    ]),
    ("artifact_enchantment_hate", [
        "destroy target artifact",
        "destroy target enchantment",
        "exile target artifact",
        "exile target enchantment",
        "artifact or enchantment",
        "destroy all artifacts",
        "destroy all enchantments",
    ]),
    ("hand_disruption", [
        "discards",
        "discard a card",
        "reveals their hand",
        "look at target opponent's hand",
        "look at target player's hand",
    ]),
    ("card_draw", [
        "draw a card",
        "draw two cards",
        "draw three cards",
        "draw cards",
    ]),
    ("threats", []),
    ("protection", [
        "hexproof",
        "protection from",
        "indestructible",
        "can't be countered",
        "phase out",
    ]),
    ("combo_hate", [
        "can't search",
        "can't cast more than",
        "activated abilities",
        "can't gain life",
        "cost {1} more",
        "players can't",
        "each opponent can't",
    ]),
]

SIDEBOARD_OTHER = "other"
SIDEBOARD_THREAT_TYPES = ["creature", "planeswalker"]

SIDEBOARD_COVERAGE_FOCUSED = 80
SIDEBOARD_COVERAGE_REASONABLE = 60
SIDEBOARD_MIN_COUNTERSPELLS_FOR_CONTROL = 2
SIDEBOARD_MIN_REMOVAL_FOR_AGGRO = 2

# ============================================================================
# ARCHETYPE CLUSTERING
# Changing the vector layout below invalidates any model already on disk.
# ============================================================================
CLUSTER_COUNT = 5
CLUSTER_RANDOM_STATE = 42
CLUSTER_N_INIT = 10
CLUSTER_SYNERGY_VOCABULARY = [
    "Lifegain",
    "Prowess",
    "Sacrifice",
    "Graveyard",
    "Card Draw",
    "Aggro",
]
CLUSTER_UNKNOWN = "Unknown"

# ============================================================================
# DEFAULT REFERENCE DECKS
# Known metagame decks used for meta comparison and as the default corpus
# for learning archetype clusters.
# ============================================================================
REFERENCE_DECKS = [
    {
        "name": "Mono-Red Aggro",
        "key_cards": ["Play with Fire", "Kumano Faces Kakkazan", "Furnace Punisher"],
    },
    {
        "name": "Esper Control",
        "key_cards": ["Sunfall", "The Wandering Emperor", "Disdainful Stroke"],
    },
    {
        "name": "Domain Ramp",
        "key_cards": ["Herd Migration", "Topiary Stomper", "The Kami War"],
    },
    {
        "name": "Dimir Midrange",
        "key_cards": ["Go for the Throat", "Faerie Mastermind", "Sheoldred, the Apocalypse"],
    },
    {
        "name": "Golgari Midrange",
        "key_cards": ["Glissa Sunslayer", "Virtue of Persistence"],
    },
    {
        "name": "Azorius Control",
        "key_cards": ["Sunfall", "Memory Deluge"],
    },
]
