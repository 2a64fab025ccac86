"""
MTG Deck Archetype Analyzer - Synergy Detection
===============================================

Detects the mechanical themes a deck is built around (Lifegain, Sacrifice,
Graveyard, ...) from its oracle text.

Detection is two-tiered:
1. The deck's combined oracle text has to mention the theme at all
   (a cheap, broad scan).
2. Enough distinct cards have to match the theme's narrower per-card
   keywords. One card with lifelink in its reminder text doesn't make a
   lifegain deck.

The rules are data (see SYNERGY_RULES in config.py), so adding a theme never
touches the detection loop below.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from config import SYNERGY_RULES
from scryfall_client import Card


@dataclass(frozen=True)
class SynergyRule:
    """One synergy tag and what it takes to fire."""
    tag: str
    corpus_keywords: Sequence[str]
    card_keywords: Sequence[str]
    min_cards: int
    card_type: str = ""

    def corpus_matches(self, corpus: str) -> bool:
        return any(keyword in corpus for keyword in self.corpus_keywords)

    def card_matches(self, card: Card) -> bool:
        if self.card_type and self.card_type in card.type_line.lower():
            return True
        text = card.oracle_text.lower()
        return any(keyword in text for keyword in self.card_keywords)


def load_synergy_rules(rule_config: Optional[List[dict]] = None) -> List[SynergyRule]:
    """Build SynergyRule objects from the config table (order is kept)."""
    rules = []
    for entry in rule_config if rule_config is not None else SYNERGY_RULES:
        rules.append(SynergyRule(
            tag=entry["tag"],
            corpus_keywords=tuple(entry.get("corpus_keywords", [])),
            card_keywords=tuple(entry.get("card_keywords", [])),
            min_cards=entry.get("min_cards", 1),
            card_type=entry.get("card_type", ""),
        ))
    return rules


DEFAULT_SYNERGY_RULES = load_synergy_rules()


def detect_synergies(cards: Sequence[Card],
                     rules: Sequence[SynergyRule] = DEFAULT_SYNERGY_RULES) -> List[str]:
    """
    Return the synergy tags the deck qualifies for, in rule order.

    Tags are independent of each other; any number may fire.
    """
    corpus = " ".join(card.oracle_text for card in cards).lower()

    detected = []
    for rule in rules:
        if not rule.corpus_matches(corpus):
            continue

        matching_names: Set[str] = {card.name for card in cards if rule.card_matches(card)}
        if len(matching_names) >= rule.min_cards:
            detected.append(rule.tag)

    return detected
