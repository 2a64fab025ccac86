"""
MTG Deck Archetype Analyzer - Recommendations
=============================================

Turns the analysis into a short paragraph of plain-English advice.

The text is advisory only: nothing here feeds back into the structured
results, and it copes with missing pieces (no profile, no matchups) by
treating them as empty.
"""

from typing import List, Optional

from config import (
    CONSISTENCY_GOOD, CONSISTENCY_POOR, RECOMMENDATION_THRESHOLDS,
    UNKNOWN_ARCHETYPE,
)
from deck_features import FeatureProfile
from matchups import MatchupAnalysis


def generate_recommendations(archetype: Optional[str],
                             profile: Optional[FeatureProfile] = None,
                             matchups: Optional[MatchupAnalysis] = None) -> str:
    """Compose the recommendation text for an analyzed deck."""
    t = RECOMMENDATION_THRESHOLDS
    profile = profile or FeatureProfile()
    matchups = matchups or MatchupAnalysis()
    archetype = archetype or UNKNOWN_ARCHETYPE

    avg = profile.curve.average_mana_value
    creatures = profile.card_types.get("creature", 0)
    lands = profile.manabase.total_lands
    total_cards = profile.total_cards

    sentences: List[str] = [
        f"This deck looks like {archetype} with an average mana value of {avg:.2f}."
    ]

    # Creature / spell balance
    creature_spells = profile.curve.creature_count
    other_spells = profile.curve.noncreature_count
    if creature_spells or other_spells:
        lean = "creature-heavy" if creature_spells > other_spells else "spell-heavy"
        sentences.append(
            f"The deck leans {lean} ({creature_spells} creatures vs "
            f"{other_spells} non-creature spells)."
        )

    # Curve
    if avg > t["curve_high"]:
        sentences.append("The curve is high; cut some expensive spells for cheaper plays.")
    elif 0 < avg < t["curve_low"]:
        sentences.append("The curve is very low; make sure the deck has enough late-game power.")

    # Creature density for aggressive decks
    if "Aggro" in archetype and creatures < t["aggro_min_creatures"]:
        sentences.append(
            f"Only {creatures} creatures is light for an aggro deck; add more cheap threats."
        )

    # Land count
    if total_cards and not (t["land_min"] <= lands <= t["land_max"]):
        sentences.append(
            f"{lands} lands is outside the usual {t['land_min']}-{t['land_max']} range; "
            f"around {profile.manabase.recommended_land_count} is suggested."
        )

    # Synergy focus
    if not profile.synergies:
        sentences.append("No synergy focus was detected; build around a clear theme.")
    elif len(profile.synergies) >= t["synergy_praise_count"]:
        sentences.append(f"Great synergy between {', '.join(profile.synergies)}.")

    # Consistency
    consistency = profile.consistency.score
    if total_cards and consistency >= CONSISTENCY_GOOD:
        sentences.append("The deck is highly consistent thanks to multiple copies of key cards.")
    elif total_cards and consistency < CONSISTENCY_POOR:
        sentences.append("Many singletons lower consistency; run more copies of your best cards.")

    # Mana base
    if profile.manabase.grade == "A":
        sentences.append("The mana base is excellent.")
    elif total_cards and profile.manabase.grade == "D":
        sentences.append("The mana base needs work; revisit land count and color sources.")

    # Matchups
    if matchups.challenging:
        sentences.append(
            f"Consider sideboard options against {matchups.challenging[0]} decks."
        )

    return " ".join(sentences)
