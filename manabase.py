"""
MTG Deck Archetype Analyzer - Mana Base Analysis
================================================

Looks at the lands in a deck and estimates how well they support the
deck's colors:

- Classifies each land (basic, dual, fastland, shockland, checkland, utility)
- Counts the colored mana symbols ("pips") the spells ask for
- Suggests a land count and how many sources of each color to run
- Scores the whole mana base from 0 to 100 with a letter grade
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from config import (
    BASIC_LAND_NAMES, COLOR_ORDER, GRADE_FLOOR, GRADE_THRESHOLDS,
    HEAVY_PIP_DENSITY, LAND_TEXT_PATTERNS, LAND_TYPE_KEYS, LIGHT_PIP_DENSITY,
    MANABASE_SCORING, RECOMMENDED_LAND_RATIO,
)
from scryfall_client import Card

_MANA_SYMBOL = re.compile(r"\{([^}]+)\}")

MULTICOLOR_LAND_TYPES = ("dual", "fastland", "shockland", "checkland")


def letter_grade(score: float) -> str:
    """A/B/C/D grade shared by the mana base and deck health scores."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return GRADE_FLOOR


def _empty_color_counts() -> Dict[str, int]:
    return {color: 0 for color in COLOR_ORDER}


@dataclass
class ManabaseReport:
    """Everything we learn about a deck's lands. Zeroes when there are none."""
    total_lands: int = 0
    land_types: Dict[str, int] = field(default_factory=lambda: {key: 0 for key in LAND_TYPE_KEYS})
    color_pips: Dict[str, int] = field(default_factory=_empty_color_counts)
    land_ratio_percent: float = 0.0
    recommended_land_count: int = 0
    recommended_color_sources: Dict[str, int] = field(default_factory=_empty_color_counts)
    quality_score: int = 0
    grade: str = GRADE_FLOOR
    notes: List[str] = field(default_factory=list)

    @property
    def multicolor_lands(self) -> int:
        return sum(self.land_types.get(key, 0) for key in MULTICOLOR_LAND_TYPES)


def is_land(card: Card) -> bool:
    return "land" in card.type_line.lower()


def count_color_pips(mana_cost: str) -> Dict[str, int]:
    """
    Count colored mana symbols in a mana cost.

    Hybrid symbols count once for each color they name, so {W/U} adds one
    white and one blue pip. Generic, colorless and snow symbols are ignored.
    """
    pips = _empty_color_counts()
    for symbol in _MANA_SYMBOL.findall(mana_cost or ""):
        for part in symbol.upper().split("/"):
            if part in pips:
                pips[part] += 1
    return pips


def produced_colors(card: Card) -> List[str]:
    """The distinct colored mana symbols mentioned in a land's text."""
    mentioned = set()
    for symbol in _MANA_SYMBOL.findall(card.oracle_text):
        for part in symbol.upper().split("/"):
            if part in COLOR_ORDER:
                mentioned.add(part)
    return [color for color in COLOR_ORDER if color in mentioned]


def classify_land(card: Card) -> str:
    """
    Put a land in one of the LAND_TYPE_KEYS buckets.

    Basics are recognized by name or supertype. Anything tapping for two or
    more colors is a dual, refined into the well-known cycles by their
    oracle text. Everything else is a utility land.
    """
    if card.name.lower() in BASIC_LAND_NAMES or "basic" in card.type_line.lower():
        return "basic"

    if len(produced_colors(card)) >= 2:
        text = card.oracle_text.lower()
        for land_type, patterns in LAND_TEXT_PATTERNS.items():
            if any(pattern in text for pattern in patterns):
                return land_type
        return "dual"

    return "utility"


def recommend_land_count(deck_size: int, nonland_count: int, total_pips: int) -> int:
    """
    Suggest how many lands the deck wants.

    Starts from a fixed share of the deck and adds a land for pip-heavy
    decks (or drops one for decks that barely ask for colored mana).
    """
    if deck_size <= 0:
        return 0

    recommended = round(deck_size * RECOMMENDED_LAND_RATIO)
    if nonland_count > 0:
        density = total_pips / nonland_count
        if density >= HEAVY_PIP_DENSITY:
            recommended += 1
        elif density < LIGHT_PIP_DENSITY:
            recommended -= 1
    return max(recommended, 0)


def recommend_color_sources(recommended_lands: int, color_pips: Dict[str, int]) -> Dict[str, int]:
    """Split the recommended lands between colors by their share of pips."""
    sources = _empty_color_counts()
    total_pips = sum(color_pips.values())
    if total_pips == 0 or recommended_lands == 0:
        return sources

    for color in COLOR_ORDER:
        sources[color] = round(recommended_lands * color_pips.get(color, 0) / total_pips)
    return sources


def score_mana_base(total_lands: int, land_types: Dict[str, int], color_count: int) -> Tuple[int, List[str]]:
    """
    Score a mana base from 0 to 100.

    Returns the score and a note for every adjustment made.
    """
    s = MANABASE_SCORING
    score = s["base"]
    notes = []

    # Land count
    if s["land_count_min"] <= total_lands <= s["land_count_max"]:
        score += s["land_count_in_band"]
        notes.append(f"Land count ({total_lands}) is in the {s['land_count_min']}-{s['land_count_max']} sweet spot")
    elif total_lands < s["land_count_min"]:
        score += s["land_count_too_few"]
        notes.append(f"Only {total_lands} lands - below {s['land_count_min']}")
    else:
        score += s["land_count_too_many"]
        notes.append(f"{total_lands} lands - above {s['land_count_max']}")

    # Multicolor support only matters for decks with two or more colors
    if color_count >= 2:
        multicolor = sum(land_types.get(key, 0) for key in MULTICOLOR_LAND_TYPES)
        needed = min(s["dual_lands_per_color"] * color_count, s["dual_lands_cap"])
        if multicolor >= needed:
            score += s["dual_lands_sufficient"]
            notes.append(f"{multicolor} multicolor lands support {color_count} colors")
        else:
            score += s["dual_lands_insufficient"]
            notes.append(f"Only {multicolor} multicolor lands for {color_count} colors (want {needed}+)")

    # Utility lands
    utility = land_types.get("utility", 0)
    if utility > s["utility_land_max"]:
        score += s["utility_land_overuse"]
        notes.append(f"{utility} utility lands may hurt color consistency")

    # Basics
    if total_lands > 0:
        basic_ratio = land_types.get("basic", 0) / total_lands * 100
        if s["basic_ratio_min"] <= basic_ratio <= s["basic_ratio_max"]:
            score += s["basic_ratio_reward"]
            notes.append(f"Healthy share of basics ({basic_ratio:.0f}%)")

    return max(0, min(100, score)), notes


def analyze_mana_base(cards: Sequence[Card], color_count: int = None) -> ManabaseReport:
    """
    Analyze the lands of a resolved deck.

    Args:
        cards: The resolved deck (one entry per copy)
        color_count: Number of colors the deck plays. Worked out from the
            cards' color identity when not given.

    Returns:
        A ManabaseReport. An empty deck gives the zero-valued report with
        the score the empty land count earns.
    """
    lands = [card for card in cards if is_land(card)]
    nonlands = [card for card in cards if not is_land(card)]

    if color_count is None:
        color_count = len({color for card in cards for color in card.color_identity})

    land_types = {key: 0 for key in LAND_TYPE_KEYS}
    for land in lands:
        land_types[classify_land(land)] += 1

    color_pips = _empty_color_counts()
    for card in nonlands:
        for color, count in count_color_pips(card.mana_cost).items():
            color_pips[color] += count

    deck_size = len(cards)
    total_pips = sum(color_pips.values())
    recommended = recommend_land_count(deck_size, len(nonlands), total_pips)

    score, notes = score_mana_base(len(lands), land_types, color_count)

    return ManabaseReport(
        total_lands=len(lands),
        land_types=land_types,
        color_pips=color_pips,
        land_ratio_percent=round(len(lands) / deck_size * 100, 1) if deck_size else 0.0,
        recommended_land_count=recommended,
        recommended_color_sources=recommend_color_sources(recommended, color_pips),
        quality_score=score,
        grade=letter_grade(score),
        notes=notes,
    )
