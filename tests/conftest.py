"""
tests/conftest.py
Shared fixtures: an in-memory stand-in for Scryfall and card builders,
so no test ever touches the network.
"""

import pytest

from archetype_learner import ClusterStore
from deck_analyzer import DeckAnalyzer
from matchups import ReferenceDeck
from scryfall_client import Card, CardCache, CardLookupError, CardResolver


def scryfall_payload(name, cmc=0, type_line="Creature", oracle_text="",
                     color_identity=(), mana_cost="", power=None, toughness=None):
    """A minimal Scryfall card object."""
    return {
        "object": "card",
        "name": name,
        "cmc": cmc,
        "type_line": type_line,
        "oracle_text": oracle_text,
        "color_identity": list(color_identity),
        "mana_cost": mana_cost,
        "power": power,
        "toughness": toughness,
        "legalities": {"standard": "legal", "pioneer": "legal"},
        "set_type": "expansion",
        "keywords": [],
    }


def make_card(name, mana_value=0, type_line="Creature", oracle_text="",
              color_identity=(), mana_cost="", **kwargs):
    """Build a Card directly, skipping the resolver."""
    return Card(
        name=name,
        mana_value=mana_value,
        type_line=type_line,
        oracle_text=oracle_text,
        color_identity=tuple(color_identity),
        mana_cost=mana_cost,
        **kwargs,
    )


def basic_land(name="Mountain", color="R"):
    return make_card(name, 0, f"Basic Land — {name}", f"({{T}}: Add {{{color}}}.)", ())


# A small, realistic card pool for the fake Scryfall
CARD_POOL = [
    scryfall_payload("Mountain", 0, "Basic Land — Mountain", "({T}: Add {R}.)"),
    scryfall_payload("Island", 0, "Basic Land — Island", "({T}: Add {U}.)"),
    scryfall_payload("Swamp", 0, "Basic Land — Swamp", "({T}: Add {B}.)"),
    scryfall_payload("Plains", 0, "Basic Land — Plains", "({T}: Add {W}.)"),
    scryfall_payload("Forest", 0, "Basic Land — Forest", "({T}: Add {G}.)"),
    scryfall_payload("Monastery Swiftspear", 1, "Creature — Human Monk",
                     "Haste\nProwess", ["R"], "{R}", "1", "2"),
    scryfall_payload("Lightning Bolt", 1, "Instant",
                     "Lightning Bolt deals 3 damage to any target.", ["R"], "{R}"),
    scryfall_payload("Play with Fire", 1, "Instant",
                     "Play with Fire deals 2 damage to any target. If a player is dealt damage "
                     "this way, scry 1 instead.", ["R"], "{R}"),
    scryfall_payload("Kumano Faces Kakkazan", 1, "Enchantment — Saga",
                     "I — Kumano Faces Kakkazan deals 1 damage to each opponent and each "
                     "planeswalker they control.", ["R"], "{R}"),
    scryfall_payload("Furnace Punisher", 3, "Creature — Devil",
                     "Menace\nAt the beginning of each player's upkeep, Furnace Punisher deals 2 "
                     "damage to that player unless they control two or more basic lands.",
                     ["R"], "{1}{R}{R}", "3", "3"),
    scryfall_payload("Sunfall", 5, "Sorcery",
                     "Exile all creatures. Incubate X, where X is the number of creatures "
                     "exiled this way.", ["W"], "{3}{W}{W}"),
    scryfall_payload("Memory Deluge", 4, "Instant",
                     "Look at the top X cards of your library, where X is the amount of mana "
                     "spent to cast this spell. Put two of them into your hand and the rest "
                     "on the bottom of your library in a random order.\nFlashback {5}{U}{U}",
                     ["U"], "{2}{U}{U}"),
    scryfall_payload("Go for the Throat", 2, "Instant",
                     "Destroy target nonartifact creature.", ["B"], "{1}{B}"),
    scryfall_payload("Sheoldred, the Apocalypse", 4, "Legendary Creature — Phyrexian Praetor",
                     "Deathtouch\nWhenever you draw a card, you gain 2 life.\nWhenever an "
                     "opponent draws a card, they lose 2 life.", ["B"], "{2}{B}{B}", "4", "5"),
    scryfall_payload("Glissa Sunslayer", 3, "Legendary Creature — Phyrexian Elf",
                     "First strike, deathtouch\nWhenever Glissa Sunslayer deals combat damage "
                     "to a player, choose one —", ["B", "G"], "{1}{B}{G}", "3", "3"),
    scryfall_payload("Herd Migration", 7, "Sorcery",
                     "Domain — Create a 3/3 green Beast creature token for each basic land "
                     "type among lands you control.", ["G"], "{6}{G}"),
]


class FakeScryfallClient:
    """
    Stands in for ScryfallClient. Exact lookups are case-sensitive, fuzzy
    lookups ignore case. Every call is recorded in `calls`.
    """

    def __init__(self, payloads=CARD_POOL, failing=()):
        self.cards = {payload["name"]: payload for payload in payloads}
        self.failing = set(failing)
        self.calls = []

    def add(self, payload):
        self.cards[payload["name"]] = payload

    def get_card_by_name(self, name, fuzzy=True):
        self.calls.append((name, fuzzy))
        if name in self.failing:
            raise CardLookupError(f"Error fetching '{name}': HTTP 503")

        if not fuzzy:
            return self.cards.get(name)

        for card_name, payload in self.cards.items():
            if card_name.lower() == name.lower():
                return payload
        return None


@pytest.fixture
def fake_client():
    return FakeScryfallClient()


@pytest.fixture
def resolver(fake_client):
    return CardResolver(client=fake_client, cache=CardCache())


@pytest.fixture
def model_path(tmp_path):
    return tmp_path / "learned_archetypes.json"


@pytest.fixture
def analyzer(resolver, model_path):
    return DeckAnalyzer(
        resolver=resolver,
        cluster_store=ClusterStore(model_path),
        reference_decks=[
            ReferenceDeck("Mono-Red Aggro", ("Play with Fire", "Kumano Faces Kakkazan", "Furnace Punisher")),
            ReferenceDeck("Azorius Control", ("Sunfall", "Memory Deluge")),
            ReferenceDeck("Golgari Midrange", ("Glissa Sunslayer", "Go for the Throat")),
        ],
    )


@pytest.fixture
def card():
    return make_card


@pytest.fixture
def land():
    return basic_land
