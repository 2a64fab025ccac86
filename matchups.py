"""
MTG Deck Archetype Analyzer - Matchups
======================================

Two views of how a deck lines up against the field:

- generate_matchup_analysis: a static table of which archetype families
  the deck's family tends to beat or struggle against.
- score_meta_matchups: card-overlap (Jaccard) comparison against known
  metagame decks.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from archetype_classifier import archetype_family
from config import (
    MATCHUP_TABLE, META_CHALLENGING_SIMILARITY, META_FAVORABLE_SIMILARITY,
    REFERENCE_DECKS,
)


@dataclass(frozen=True)
class ReferenceDeck:
    """A known deck: its name and the cards that define it."""
    name: str
    key_cards: tuple = ()

    @classmethod
    def from_dict(cls, data: dict) -> "ReferenceDeck":
        return cls(name=data["name"], key_cards=tuple(data.get("key_cards") or data.get("keyCards") or ()))


def default_reference_decks() -> List[ReferenceDeck]:
    return [ReferenceDeck.from_dict(deck) for deck in REFERENCE_DECKS]


@dataclass
class MatchupAnalysis:
    family: str = ""
    favorable: List[str] = field(default_factory=list)
    challenging: List[str] = field(default_factory=list)


@dataclass
class MetaMatchups:
    """Similarity of the deck to each reference deck (0 = nothing shared, 1 = identical)."""
    similarity: Dict[str, float] = field(default_factory=dict)
    favorable: List[str] = field(default_factory=list)
    challenging: List[str] = field(default_factory=list)
    closest: str = ""


def generate_matchup_analysis(archetype: str) -> MatchupAnalysis:
    """
    Look up favorable and challenging opponents for the archetype's family.

    Archetypes outside the table (e.g. "Unknown Archetype") get empty lists.
    """
    family = archetype_family(archetype or "", MATCHUP_TABLE)
    if family is None:
        return MatchupAnalysis()

    entry = MATCHUP_TABLE[family]
    return MatchupAnalysis(
        family=family,
        favorable=list(entry["favorable"]),
        challenging=list(entry["challenging"]),
    )


def similarity_score(deck_a: Iterable[str], deck_b: Iterable[str]) -> float:
    """
    Jaccard-style similarity between a deck and a reference card list.

    Every copy in deck_a that appears in deck_b counts toward the overlap,
    while the union is taken over distinct names, so a deck running full
    playsets of a reference deck's key cards scores high even though the
    reference only lists each card once. Capped at 1.0.
    """
    deck_a = list(deck_a)
    reference = set(deck_b)
    union = set(deck_a) | reference
    if not union:
        return 0.0
    overlap = sum(1 for card in deck_a if card in reference)
    return min(overlap / len(union), 1.0)


def score_meta_matchups(deck_names: Sequence[str],
                        reference_decks: Sequence[ReferenceDeck]) -> MetaMatchups:
    """
    Compare a deck against known metagame decks by shared cards.

    Decks with similarity above 0.4 are listed as favorable and below 0.1 as
    challenging. Reference decks without key cards can't be compared and
    are skipped.
    """
    result = MetaMatchups()
    best = 0.0

    for reference in reference_decks:
        if not reference.key_cards:
            continue
        score = round(similarity_score(deck_names, reference.key_cards), 3)
        result.similarity[reference.name] = score

        if score > META_FAVORABLE_SIMILARITY:
            result.favorable.append(reference.name)
        elif score < META_CHALLENGING_SIMILARITY:
            result.challenging.append(reference.name)

        if score > best:
            best = score
            result.closest = reference.name

    return result
