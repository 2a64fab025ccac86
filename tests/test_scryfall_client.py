import threading
from unittest.mock import MagicMock

import pytest
import requests

from scryfall_client import (
    Card, CardCache, CardLookupError, CardResolver, ScryfallClient, parse_decklist,
)


class TestCardFromScryfall:
    def test_basic_fields(self):
        card = Card.from_scryfall({
            "name": "Lightning Bolt", "cmc": 1.0, "type_line": "Instant",
            "oracle_text": "Lightning Bolt deals 3 damage to any target.",
            "color_identity": ["R"], "mana_cost": "{R}",
            "legalities": {"modern": "legal"}, "set_type": "core",
        })
        assert card.name == "Lightning Bolt"
        assert card.mana_value == 1.0
        assert card.color_identity == ("R",)
        assert card.legalities == {"modern": "legal"}

    def test_double_faced_card(self):
        card = Card.from_scryfall({
            "name": "Fable of the Mirror-Breaker // Reflection of Kiki-Jiki",
            "cmc": 3.0,
            "type_line": "Enchantment — Saga // Enchantment Creature — Goblin Shaman",
            "color_identity": ["R"],
            "card_faces": [
                {"mana_cost": "{2}{R}", "oracle_text": "(As this Saga enters...)"},
                {"mana_cost": "", "oracle_text": "{1}, {T}: Create a token that's a copy..."},
            ],
        })
        assert card.mana_cost == "{2}{R}"
        assert "Saga enters" in card.oracle_text
        assert "Create a token" in card.oracle_text

    def test_colors_are_filtered_and_ordered(self):
        card = Card.from_scryfall({"name": "Odd", "color_identity": ["G", "C", "W"]})
        assert card.color_identity == ("W", "G")


class TestScryfallClient:
    def client_with_response(self, status_code, payload=None):
        session = MagicMock()
        session.headers = {}
        session.get.return_value.status_code = status_code
        session.get.return_value.json.return_value = payload
        client = ScryfallClient(session=session)
        client._rate_limit = lambda: None
        return client, session

    def test_found(self):
        client, session = self.client_with_response(200, {"name": "Opt"})
        assert client.get_card_by_name("Opt", fuzzy=False) == {"name": "Opt"}
        assert session.get.call_args.kwargs["params"] == {"exact": "Opt"}
        assert "User-Agent" in session.headers

    def test_not_found(self):
        client, _ = self.client_with_response(404)
        assert client.get_card_by_name("Nope") is None

    def test_server_error(self):
        client, _ = self.client_with_response(503)
        with pytest.raises(CardLookupError):
            client.get_card_by_name("Opt")

    def test_network_error(self):
        client, session = self.client_with_response(200)
        session.get.side_effect = requests.ConnectionError("offline")
        with pytest.raises(CardLookupError):
            client.get_card_by_name("Opt")


class TestCardResolver:
    def test_exact_then_fuzzy(self, resolver, fake_client):
        card = resolver.resolve("lightning bolt")
        assert card.name == "Lightning Bolt"
        assert fake_client.calls == [("lightning bolt", False), ("lightning bolt", True)]

    def test_results_are_cached(self, resolver, fake_client):
        resolver.resolve("Opt-less Name")
        resolver.resolve("Lightning Bolt")
        calls = len(fake_client.calls)

        assert resolver.resolve("Lightning Bolt").name == "Lightning Bolt"
        # not-found answers are cached too
        assert resolver.resolve("Opt-less Name") is None
        assert len(fake_client.calls) == calls
        assert "Opt-less Name" in resolver.cache

    def test_lookup_errors_are_not_cached(self, fake_client):
        fake_client.failing.add("Lightning Bolt")
        resolver = CardResolver(client=fake_client, cache=CardCache())

        assert resolver.resolve("Lightning Bolt") is None
        assert "Lightning Bolt" not in resolver.cache

        fake_client.failing.clear()
        assert resolver.resolve("Lightning Bolt").name == "Lightning Bolt"

    def test_resolve_many_dedupes_and_keeps_multiplicity(self, resolver, fake_client):
        names = ["Mountain", "Lightning Bolt", "Mountain", "Nope", "Lightning Bolt"]
        cards = resolver.resolve_many(names)

        assert [c.name if c else None for c in cards] == [
            "Mountain", "Lightning Bolt", "Mountain", None, "Lightning Bolt",
        ]
        looked_up = [name for name, _ in fake_client.calls]
        assert looked_up.count("Mountain") == 1
        assert looked_up.count("Lightning Bolt") == 1

    def test_cancelled_batch_stops_looking_up(self, resolver, fake_client):
        cancel = threading.Event()
        cancel.set()
        cards = resolver.resolve_many(["Mountain", "Island"], cancel_event=cancel)

        assert cards == [None, None]
        assert fake_client.calls == []

    def test_fresh_cache_per_resolver(self, fake_client):
        CardResolver(client=fake_client, cache=CardCache()).resolve("Mountain")
        other = CardResolver(client=fake_client, cache=CardCache())
        assert len(other.cache) == 0


class TestParseDecklist:
    def test_quantities_and_sideboard_header(self):
        text = """
Deck
4 Lightning Bolt
2x Monastery Swiftspear
Mountain

Sideboard
3 Abrade
"""
        sections = parse_decklist(text)
        assert sections["main"] == ["Lightning Bolt"] * 4 + ["Monastery Swiftspear"] * 2 + ["Mountain"]
        assert sections["sideboard"] == ["Abrade"] * 3

    def test_blank_line_starts_sideboard(self):
        sections = parse_decklist("4 Opt\n20 Island\n\n2 Negate")
        assert len(sections["main"]) == 24
        assert sections["sideboard"] == ["Negate", "Negate"]

    def test_comments_are_skipped(self):
        assert parse_decklist("# my deck\n// notes\n1 Opt")["main"] == ["Opt"]
