"""
MTG Deck Archetype Analyzer - Deck Health
=========================================

A single 0-100 score (with letter grade) summarizing how well-built a deck
looks: curve shape, synergy focus, consistency, and a share of the mana
base score.
"""

from dataclasses import dataclass, field
from typing import List

from config import CONSISTENCY_GOOD, CONSISTENCY_POOR, DECK_HEALTH_SCORING
from deck_features import FeatureProfile
from manabase import letter_grade


@dataclass
class DeckHealth:
    score: int = 0
    grade: str = "D"
    feedback: List[str] = field(default_factory=list)


def calculate_deck_health(profile: FeatureProfile) -> DeckHealth:
    """
    Score a deck's overall health.

    Starts at 50 and applies fixed adjustments; every adjustment leaves a
    line of feedback explaining it. The result is clamped to [0, 100].
    """
    s = DECK_HEALTH_SCORING
    score = float(s["base"])
    feedback = []

    # Curve shape
    avg = profile.curve.average_mana_value
    if s["curve_good_min"] <= avg <= s["curve_good_max"]:
        score += s["curve_good"]
        feedback.append(f"✅ Efficient curve (average mana value {avg:.2f})")
    elif avg > s["curve_too_high"]:
        score += s["curve_high_penalty"]
        feedback.append(f"⚠️ Curve is top-heavy (average mana value {avg:.2f})")

    # Synergy focus
    synergy_count = len(profile.synergies)
    if synergy_count >= s["synergy_good_count"]:
        score += s["synergy_good"]
        feedback.append(f"✅ Strong synergy focus ({', '.join(profile.synergies)})")
    elif synergy_count == 0:
        score += s["synergy_none"]
        feedback.append("⚠️ No clear synergy themes detected")

    # Consistency
    consistency = profile.consistency.score
    if consistency >= CONSISTENCY_GOOD:
        score += s["consistency_good"]
        feedback.append(f"✅ Consistent deck (score {consistency})")
    elif consistency < CONSISTENCY_POOR:
        score += s["consistency_poor"]
        feedback.append(f"⚠️ Low consistency (score {consistency}) - consider more copies of key cards")

    # Mana base
    manabase_share = profile.manabase.quality_score * s["manabase_weight"]
    score += manabase_share
    feedback.append(f"Mana base grade {profile.manabase.grade} adds {manabase_share:.0f} points")

    final = int(max(0, min(100, round(score))))
    return DeckHealth(score=final, grade=letter_grade(final), feedback=feedback)
