"""
MTG Deck Archetype Analyzer - Archetype Classification
======================================================

Maps a FeatureProfile to a human-readable archetype label such as
"Mono-Red Aggro", "Azorius Control" or "Graveyard Combo".

The rules form a flat decision list evaluated in priority order:

1. Aggro     - low curve, at least as many creatures as instants + sorceries
2. Control   - more instants + sorceries than creatures, with card draw
3. Midrange  - curve between 2.5 and 4 with some creatures
4. Synergy   - Graveyard, Artifacts or Lifegain themes
5. Default   - named by color count

The first rule whose guard holds decides the label, even if a later rule
would also match. Rules 1-3 are named after the deck's colors, so they only
apply to decks with at least one color; colorless decks go straight to the
synergy and default rules.
"""

from typing import Callable, Dict, List, Optional, Tuple

from config import (
    AGGRO_MAX_AVG_MANA_VALUE, AGGRO_PAIR_NAMES, COLOR_NAMES,
    CONTROL_COMBINATION_NAMES, CONTROL_REQUIRED_SYNERGY,
    MIDRANGE_MAX_AVG_MANA_VALUE, MIDRANGE_MIN_AVG_MANA_VALUE,
    MIDRANGE_PAIR_NAMES, MULTICOLOR_ARCHETYPE, SYNERGY_FALLBACK_ARCHETYPES,
    UNKNOWN_ARCHETYPE,
)
from deck_features import FeatureProfile


def color_key(colors: List[str]) -> str:
    """Colors (already in WUBRG order) joined into a lookup key, e.g. "WU"."""
    return "".join(colors)


def _aggro(profile: FeatureProfile) -> Optional[str]:
    creatures = profile.card_types.get("creature", 0)
    if profile.curve.average_mana_value > AGGRO_MAX_AVG_MANA_VALUE or creatures < profile.spell_count:
        return None

    colors = profile.colors.colors
    if len(colors) == 1:
        return f"Mono-{COLOR_NAMES[colors[0]]} Aggro"
    return AGGRO_PAIR_NAMES.get(color_key(colors), "Aggro")


def _control(profile: FeatureProfile) -> Optional[str]:
    creatures = profile.card_types.get("creature", 0)
    if profile.spell_count <= creatures or CONTROL_REQUIRED_SYNERGY not in profile.synergies:
        return None
    return CONTROL_COMBINATION_NAMES.get(color_key(profile.colors.colors), "Control")


def _midrange(profile: FeatureProfile) -> Optional[str]:
    avg = profile.curve.average_mana_value
    if not (MIDRANGE_MIN_AVG_MANA_VALUE <= avg <= MIDRANGE_MAX_AVG_MANA_VALUE):
        return None
    if profile.card_types.get("creature", 0) <= 0:
        return None
    return MIDRANGE_PAIR_NAMES.get(color_key(profile.colors.colors), "Midrange")


def _synergy_fallback(profile: FeatureProfile) -> Optional[str]:
    for tag, archetype in SYNERGY_FALLBACK_ARCHETYPES:
        if tag in profile.synergies:
            return archetype
    return None


def _color_default(profile: FeatureProfile) -> str:
    colors = profile.colors.colors
    if len(colors) == 1:
        return f"Mono-{COLOR_NAMES[colors[0]]} Deck"
    if len(colors) >= 3:
        return MULTICOLOR_ARCHETYPE
    return UNKNOWN_ARCHETYPE


# (rule, needs at least one color)
ARCHETYPE_RULES: List[Tuple[Callable[[FeatureProfile], Optional[str]], bool]] = [
    (_aggro, True),
    (_control, True),
    (_midrange, True),
    (_synergy_fallback, False),
]


def classify_archetype(profile: FeatureProfile) -> str:
    """
    Return the archetype label for a profile. Never returns None.

    Deterministic: the label depends only on the profile.
    """
    has_colors = bool(profile.colors.colors)

    for rule, needs_colors in ARCHETYPE_RULES:
        if needs_colors and not has_colors:
            continue
        label = rule(profile)
        if label:
            return label

    return _color_default(profile)


def archetype_family(archetype: str, families: Dict[str, dict]) -> Optional[str]:
    """First family name (Aggro, Control, ...) that appears in the label."""
    for family in families:
        if family in archetype:
            return family
    return None
