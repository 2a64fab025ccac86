"""
MTG Deck Archetype Analyzer - Feature Extraction
================================================

Pure functions that turn a resolved deck (a list of Card objects, one per
copy) into the numbers the classifier works from:

- Mana curve and average mana value
- Color identity
- Card type counts
- Synergy tags (see synergy.py)
- Consistency (how many playsets vs. singletons)
- Mana base quality (see manabase.py)

Nothing in here does I/O, reads the clock or uses randomness, so running it
twice on the same cards always gives the same profile.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from config import (
    CARD_TYPE_CATEGORIES, COLOR_ORDER, MANA_CURVE_MAX_BUCKET,
)
from manabase import ManabaseReport, analyze_mana_base
from scryfall_client import Card
from synergy import detect_synergies

MULTIPLES_KEYS = ["4+", "3", "2", "1"]


def _empty_curve() -> Dict[int, int]:
    return {bucket: 0 for bucket in range(MANA_CURVE_MAX_BUCKET + 1)}


@dataclass
class ManaCurve:
    """Mana value distribution. Bucket 7 holds everything at 7 or more."""
    distribution: Dict[int, int] = field(default_factory=_empty_curve)
    creature_count: int = 0
    noncreature_count: int = 0  # non-creature, non-land cards
    land_count: int = 0
    average_mana_value: float = 0.0


@dataclass
class ColorIdentity:
    colors: List[str] = field(default_factory=list)  # WUBRG order
    counts: Dict[str, int] = field(default_factory=lambda: {c: 0 for c in COLOR_ORDER})


@dataclass
class ConsistencyStats:
    unique_cards: int = 0
    total_cards: int = 0
    multiples: Dict[str, int] = field(default_factory=lambda: {key: 0 for key in MULTIPLES_KEYS})
    score: int = 0


@dataclass
class FeatureProfile:
    """
    Everything the classifier, health score and recommendations need.

    Every field defaults to its zero/empty value.
    """
    curve: ManaCurve = field(default_factory=ManaCurve)
    colors: ColorIdentity = field(default_factory=ColorIdentity)
    card_types: Dict[str, int] = field(default_factory=lambda: {t: 0 for t in CARD_TYPE_CATEGORIES})
    synergies: List[str] = field(default_factory=list)
    consistency: ConsistencyStats = field(default_factory=ConsistencyStats)
    manabase: ManabaseReport = field(default_factory=ManabaseReport)

    @classmethod
    def empty(cls) -> "FeatureProfile":
        """The all-zero profile used when extraction fails."""
        return cls()

    @property
    def total_cards(self) -> int:
        return self.consistency.total_cards

    @property
    def spell_count(self) -> int:
        """Instants plus sorceries."""
        return self.card_types.get("instant", 0) + self.card_types.get("sorcery", 0)


def compute_mana_curve(cards: Sequence[Card]) -> ManaCurve:
    """
    Bucket every card by mana value and tally creatures, other spells and lands.

    Lands sit in bucket 0, so the buckets always add up to the deck size.
    The average only looks at non-land cards and is 0 for a deck without any.
    """
    curve = ManaCurve()
    total_mana_value = 0.0
    nonland_count = 0

    for card in cards:
        bucket = min(int(card.mana_value), MANA_CURVE_MAX_BUCKET)
        curve.distribution[bucket] += 1

        type_line = card.type_line.lower()
        if "land" in type_line:
            curve.land_count += 1
            continue

        if "creature" in type_line:
            curve.creature_count += 1
        else:
            curve.noncreature_count += 1

        total_mana_value += card.mana_value
        nonland_count += 1

    curve.average_mana_value = round(total_mana_value / nonland_count, 2) if nonland_count else 0.0
    return curve


def get_color_identity(cards: Sequence[Card]) -> ColorIdentity:
    """
    Union of the cards' color identities, in WUBRG order, plus how many
    cards carry each color.
    """
    identity = ColorIdentity()
    for card in cards:
        for color in card.color_identity:
            if color in identity.counts:
                identity.counts[color] += 1

    identity.colors = [color for color in COLOR_ORDER if identity.counts[color] > 0]
    return identity


def analyze_card_types(cards: Sequence[Card]) -> Dict[str, int]:
    """Count cards per type. Multi-type cards count in every matching category."""
    counts = {category: 0 for category in CARD_TYPE_CATEGORIES}
    for card in cards:
        type_line = card.type_line.lower()
        for category in CARD_TYPE_CATEGORIES:
            if category in type_line:
                counts[category] += 1
    return counts


def analyze_deck_consistency(cards: Sequence[Card]) -> ConsistencyStats:
    """
    How committed is the deck to redundant copies of its cards?

    Cards are grouped by exact name and bucketed by copies played (4+, 3, 2, 1).
    The score rewards playsets: 4 points per card run as 4+ copies, 3 per
    card at 3 copies, 2 per card at 2, relative to the deck size.
    """
    copies = Counter(card.name for card in cards)
    stats = ConsistencyStats(unique_cards=len(copies), total_cards=len(cards))

    for count in copies.values():
        if count >= 4:
            stats.multiples["4+"] += 1
        else:
            stats.multiples[str(count)] += 1

    if stats.total_cards:
        weighted = (4 * stats.multiples["4+"]
                    + 3 * stats.multiples["3"]
                    + 2 * stats.multiples["2"])
        stats.score = max(0, min(100, round(100 * weighted / stats.total_cards)))

    return stats


def build_feature_profile(cards: Sequence[Card]) -> FeatureProfile:
    """
    Run every extractor over a resolved deck.

    An empty deck gets the all-zero profile.
    """
    if not cards:
        return FeatureProfile.empty()

    colors = get_color_identity(cards)
    return FeatureProfile(
        curve=compute_mana_curve(cards),
        colors=colors,
        card_types=analyze_card_types(cards),
        synergies=detect_synergies(cards),
        consistency=analyze_deck_consistency(cards),
        manabase=analyze_mana_base(cards, color_count=len(colors.colors)),
    )
