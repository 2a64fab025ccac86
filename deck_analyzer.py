"""
MTG Deck Archetype Analyzer - Deck Analysis Engine
==================================================

This module ties everything together. Given a list of card names it:

- Resolves the cards through Scryfall (each distinct name once, cached)
- Extracts the feature profile (curve, colors, types, synergies, ...)
- Classifies the archetype and looks up matchups
- Scores deck health and writes recommendations
- Compares the deck against known metagame decks

It also runs sideboard analysis and the learned (clustering) archetype
model.
"""

import threading
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from archetype_classifier import classify_archetype
from archetype_learner import ArchetypeLearner, ClusterModel, ClusterStore
from config import CLUSTER_MODEL_PATH
from deck_features import FeatureProfile, build_feature_profile
from deck_health import DeckHealth, calculate_deck_health
from matchups import (
    MatchupAnalysis, MetaMatchups, ReferenceDeck, default_reference_decks,
    generate_matchup_analysis, score_meta_matchups,
)
from recommendations import generate_recommendations
from scryfall_client import Card, CardResolver
from sideboard import SideboardAnalysis, analyze_sideboard_cards


class EmptyDeckError(ValueError):
    """Raised when asked to analyze a deck without any card names."""


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _camel_asdict(obj) -> Dict[str, Any]:
    """asdict() with camelCase field names. Keys of plain dict values are data and stay as they are."""
    return asdict(obj, dict_factory=lambda items: {_camel(key): value for key, value in items})


@dataclass
class DeckAnalysis:
    """
    Container for all the analysis results of a deck.

    Every field has a sensible empty default so a deck whose cards all
    failed to resolve still produces a complete (if uninteresting) result.
    """
    archetype: str
    profile: FeatureProfile = field(default_factory=FeatureProfile)
    matchups: MatchupAnalysis = field(default_factory=MatchupAnalysis)
    deck_health: DeckHealth = field(default_factory=DeckHealth)
    recommendations: str = ""
    meta_matchups: MetaMatchups = field(default_factory=MetaMatchups)

    # Deck bookkeeping
    total_cards: int = 0
    unresolved_cards: List[str] = field(default_factory=list)

    @property
    def colors(self) -> List[str]:
        return self.profile.colors.colors

    @property
    def synergies(self) -> List[str]:
        return self.profile.synergies

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view of the analysis."""
        profile = self.profile
        return {
            "archetype": self.archetype,
            "colors": list(profile.colors.colors),
            "colorCounts": dict(profile.colors.counts),
            "manaCurve": _camel_asdict(profile.curve),
            "cardTypes": dict(profile.card_types),
            "synergies": list(profile.synergies),
            "consistency": _camel_asdict(profile.consistency),
            "manabase": _camel_asdict(profile.manabase),
            "matchups": _camel_asdict(self.matchups),
            "deckHealth": _camel_asdict(self.deck_health),
            "recommendations": self.recommendations,
            "metaMatchups": _camel_asdict(self.meta_matchups),
            "totalCards": self.total_cards,
            "unresolvedCards": list(self.unresolved_cards),
        }


def _clean_names(names: Sequence[str]) -> List[str]:
    return [name.strip() for name in names if name and name.strip()]


class DeckAnalyzer:
    """
    Analyzes decks for archetype, health and matchups.

    This is the main analysis engine. It takes card names, resolves them
    through the CardResolver, and computes everything the report needs.
    """

    def __init__(self, resolver: CardResolver = None,
                 cluster_store: ClusterStore = None,
                 reference_decks: Sequence[ReferenceDeck] = None):
        """
        Args:
            resolver: Card resolver to use. A new one (with its own cache)
                is created if None.
            cluster_store: Where the learned archetype model lives.
                Defaults to CLUSTER_MODEL_PATH.
            reference_decks: Known metagame decks for meta comparison.
                Defaults to the list in config.py.
        """
        self.resolver = resolver or CardResolver()
        self.reference_decks = (list(reference_decks) if reference_decks is not None
                                else default_reference_decks())
        self.learner = ArchetypeLearner(
            store=cluster_store or ClusterStore(CLUSTER_MODEL_PATH),
            profile_builder=self._profile_for_learning,
        )

    # ------------------------------------------------------------------
    # Card resolution
    # ------------------------------------------------------------------

    def resolve_deck(self, card_names: Sequence[str],
                     cancel_event: Optional[threading.Event] = None) -> Tuple[List[Card], List[str]]:
        """
        Resolve card names, keeping one Card per copy.

        Returns:
            Tuple of (resolved cards, names that couldn't be resolved)
        """
        results = self.resolver.resolve_many(card_names, cancel_event=cancel_event)

        cards = []
        unresolved = []
        for name, card in zip(card_names, results):
            if card is None:
                if name not in unresolved:
                    unresolved.append(name)
            else:
                cards.append(card)
        return cards, unresolved

    def _safe_profile(self, cards: Sequence[Card]) -> FeatureProfile:
        try:
            return build_feature_profile(cards)
        except Exception as e:
            print(f"  ⚠️  Feature extraction failed, using an empty profile: {e}")
            return FeatureProfile.empty()

    def _profile_for_learning(self, card_names: Sequence[str]) -> Optional[FeatureProfile]:
        cards, _ = self.resolve_deck(_clean_names(card_names))
        if not cards:
            return None
        return self._safe_profile(cards)

    # ------------------------------------------------------------------
    # Main deck analysis
    # ------------------------------------------------------------------

    def analyze_cards(self, cards: Sequence[Card], card_names: Sequence[str] = (),
                      unresolved: Sequence[str] = ()) -> DeckAnalysis:
        """
        Analyze an already-resolved deck.

        Args:
            cards: Resolved cards, one per copy
            card_names: The names as given (used for meta comparison).
                Defaults to the resolved cards' names.
            unresolved: Names that couldn't be resolved, for the report
        """
        profile = self._safe_profile(cards)
        archetype = classify_archetype(profile)
        matchups = generate_matchup_analysis(archetype)

        names = list(card_names) or [card.name for card in cards]

        return DeckAnalysis(
            archetype=archetype,
            profile=profile,
            matchups=matchups,
            deck_health=calculate_deck_health(profile),
            recommendations=generate_recommendations(archetype, profile, matchups),
            meta_matchups=score_meta_matchups(names, self.reference_decks),
            total_cards=len(cards),
            unresolved_cards=list(unresolved),
        )

    def analyze(self, card_names: Sequence[str],
                cancel_event: Optional[threading.Event] = None) -> DeckAnalysis:
        """
        Perform a complete analysis of a deck.

        Args:
            card_names: Card names, one entry per copy
            cancel_event: Set it to stop card lookups early

        Returns:
            DeckAnalysis with all computed metrics

        Raises:
            EmptyDeckError: no card names were given
        """
        names = _clean_names(card_names)
        if not names:
            raise EmptyDeckError("No card names supplied")

        print("\n🔮 Starting deck analysis...")
        print(f"  🌐 Resolving {len(set(names))} distinct card(s)...")
        cards, unresolved = self.resolve_deck(names, cancel_event=cancel_event)
        print(f"  ✅ Found data for {len(cards)}/{len(names)} cards")

        analysis = self.analyze_cards(cards, card_names=names, unresolved=unresolved)
        print(f"  🎯 Analysis complete! Archetype: {analysis.archetype}")
        return analysis

    # ------------------------------------------------------------------
    # Sideboard
    # ------------------------------------------------------------------

    def analyze_sideboard(self, sideboard_names: Sequence[str],
                          main_analysis: Optional[DeckAnalysis] = None) -> Optional[SideboardAnalysis]:
        """
        Analyze a sideboard in the context of the main deck.

        Returns None for an empty sideboard.
        """
        names = _clean_names(sideboard_names or [])
        if not names:
            return None

        print("  🧰 Analyzing sideboard...")
        cards, unresolved = self.resolve_deck(names)
        if unresolved:
            print(f"  ⚠️  {len(unresolved)} sideboard card(s) not found")

        main_archetype = main_analysis.archetype if main_analysis else ""
        main_colors = main_analysis.colors if main_analysis else []
        return analyze_sideboard_cards(cards, main_archetype=main_archetype, main_colors=main_colors)

    # ------------------------------------------------------------------
    # Learned archetypes
    # ------------------------------------------------------------------

    def learn_clusters(self, reference_decks: Sequence[ReferenceDeck] = None) -> Optional[ClusterModel]:
        """Learn archetype clusters (from the default reference decks if none given)."""
        decks = list(reference_decks) if reference_decks is not None else self.reference_decks
        print(f"\n🧠 Learning archetypes from {len(decks)} reference deck(s)...")
        return self.learner.learn_clusters(decks)

    def classify_deck(self, card_names: Sequence[str]) -> Dict[str, Union[int, str]]:
        """
        Label a deck with its nearest learned archetype cluster.

        Returns {"cluster": index} or {"cluster": "Unknown"} when no model
        has been learned yet.

        Raises:
            EmptyDeckError: no card names were given
        """
        names = _clean_names(card_names)
        if not names:
            raise EmptyDeckError("No card names supplied")

        cards, _ = self.resolve_deck(names)
        return {"cluster": self.learner.classify_profile(self._safe_profile(cards))}
