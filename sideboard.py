"""
MTG Deck Archetype Analyzer - Sideboard Analysis
================================================

Sorts sideboard cards into the jobs they do (removal, counterspells,
graveyard hate, ...) and checks how focused the sideboard is, given what
the main deck is trying to do.

Each card goes in exactly one bucket: the first rule in
SIDEBOARD_PURPOSE_RULES whose keywords appear in its oracle text. Cards
with no text or no match end up in "other".
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from config import (
    SIDEBOARD_COVERAGE_FOCUSED, SIDEBOARD_COVERAGE_REASONABLE,
    SIDEBOARD_MIN_COUNTERSPELLS_FOR_CONTROL, SIDEBOARD_MIN_REMOVAL_FOR_AGGRO,
    SIDEBOARD_OTHER, SIDEBOARD_PURPOSE_RULES, SIDEBOARD_THREAT_TYPES,
)
from deck_features import ColorIdentity, ManaCurve, compute_mana_curve, get_color_identity
from scryfall_client import Card

PURPOSE_KEYS = [purpose for purpose, _ in SIDEBOARD_PURPOSE_RULES] + [SIDEBOARD_OTHER]


@dataclass
class SideboardAnalysis:
    purposes: Dict[str, List[str]] = field(default_factory=lambda: {key: [] for key in PURPOSE_KEYS})
    total_cards: int = 0
    coverage: float = 0.0
    strategy: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    curve: ManaCurve = field(default_factory=ManaCurve)
    colors: ColorIdentity = field(default_factory=ColorIdentity)
    off_color_cards: List[str] = field(default_factory=list)


def card_purpose(card: Card) -> str:
    """The first purpose bucket this card belongs to."""
    text = card.oracle_text.lower()
    if not text:
        return SIDEBOARD_OTHER
    type_line = card.type_line.lower()

    for purpose, keywords in SIDEBOARD_PURPOSE_RULES:
        if purpose == "threats":
            if any(card_type in type_line for card_type in SIDEBOARD_THREAT_TYPES):
                return purpose
            continue
        if any(keyword in text for keyword in keywords):
            return purpose

    return SIDEBOARD_OTHER


def categorize_sideboard(cards: Sequence[Card]) -> Dict[str, List[str]]:
    """Bucket every sideboard card (one entry per copy) by purpose."""
    purposes = {key: [] for key in PURPOSE_KEYS}
    for card in cards:
        purposes[card_purpose(card)].append(card.name)
    return purposes


def sideboard_coverage(purposes: Dict[str, List[str]]) -> float:
    """Percentage of sideboard cards with a recognized purpose."""
    total = sum(len(names) for names in purposes.values())
    if total == 0:
        return 0.0
    categorized = total - len(purposes.get(SIDEBOARD_OTHER, []))
    return round(categorized / total * 100, 1)


def _strategy_notes(purposes: Dict[str, List[str]], coverage: float) -> List[str]:
    notes = []
    if coverage >= SIDEBOARD_COVERAGE_FOCUSED:
        notes.append(f"Well-focused sideboard: {coverage}% of cards have a clear purpose")
    elif coverage >= SIDEBOARD_COVERAGE_REASONABLE:
        notes.append(f"Reasonably focused sideboard: {coverage}% of cards have a clear purpose")
    else:
        notes.append(f"Unfocused sideboard: only {coverage}% of cards have a clear purpose")

    # The biggest bucket tells you what the sideboard is mostly for
    ranked = sorted(
        (purpose for purpose in PURPOSE_KEYS if purpose != SIDEBOARD_OTHER and purposes[purpose]),
        key=lambda purpose: len(purposes[purpose]),
        reverse=True,
    )
    if ranked:
        top = ranked[0]
        notes.append(f"Main focus: {top.replace('_', ' ')} ({len(purposes[top])} cards)")

    return notes


def _recommendations(purposes: Dict[str, List[str]], main_archetype: str,
                     off_color_cards: List[str]) -> List[str]:
    recs = []
    archetype = main_archetype or ""

    if "Control" in archetype and len(purposes["counterspells"]) < SIDEBOARD_MIN_COUNTERSPELLS_FOR_CONTROL:
        recs.append("Control decks benefit from more counterspells in the sideboard")
    if "Aggro" in archetype and len(purposes["removal"]) < SIDEBOARD_MIN_REMOVAL_FOR_AGGRO:
        recs.append("Add cheap removal to clear blockers in aggro mirrors")
    if "Combo" in archetype and not purposes["protection"]:
        recs.append("Consider protection spells to shield your combo from disruption")
    if not purposes["graveyard_hate"]:
        recs.append("No graveyard hate - consider answers to graveyard strategies")
    if not purposes["artifact_enchantment_hate"]:
        recs.append("No artifact/enchantment removal - consider flexible answers")
    if off_color_cards:
        recs.append(
            f"{len(off_color_cards)} sideboard card(s) are outside the main deck's colors: "
            f"{', '.join(sorted(set(off_color_cards)))}"
        )

    return recs


def analyze_sideboard_cards(cards: Sequence[Card], main_archetype: str = "",
                            main_colors: Optional[Sequence[str]] = None) -> SideboardAnalysis:
    """
    Analyze resolved sideboard cards against the main deck.

    Args:
        cards: Resolved sideboard (one entry per copy)
        main_archetype: Archetype label of the main deck
        main_colors: Colors of the main deck; cards needing other colors are
            flagged. Skipped when not given or empty.
    """
    purposes = categorize_sideboard(cards)
    coverage = sideboard_coverage(purposes)

    off_color = []
    if main_colors:
        allowed = set(main_colors)
        off_color = [card.name for card in cards if not set(card.color_identity) <= allowed]

    return SideboardAnalysis(
        purposes=purposes,
        total_cards=len(cards),
        coverage=coverage,
        strategy=_strategy_notes(purposes, coverage) if cards else [],
        recommendations=_recommendations(purposes, main_archetype, off_color) if cards else [],
        curve=compute_mana_curve(cards),
        colors=get_color_identity(cards),
        off_color_cards=off_color,
    )
