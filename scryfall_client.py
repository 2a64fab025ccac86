"""
MTG Deck Archetype Analyzer - Scryfall Card Resolver
====================================================

This module turns card names into card data. It has three layers:

- ScryfallClient talks HTTP to the Scryfall API (rate limited, with a
  User-Agent header as Scryfall requires).
- CardCache remembers every lookup result for the life of the process,
  including "not found" answers so a typo isn't looked up again and again.
- CardResolver sits on top: it deduplicates names, checks the cache, falls
  back to fuzzy matching and hands back normalized Card records.

The rest of the analyzer only ever sees Card objects (or None for a card
that couldn't be found).
"""

import re
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from config import (
    COLOR_ORDER, SCRYFALL_API_BASE, SCRYFALL_RATE_LIMIT_MS,
    SCRYFALL_TIMEOUT_SECONDS, SCRYFALL_USER_AGENT,
)


class CardLookupError(Exception):
    """Raised when Scryfall couldn't be asked (network trouble, HTTP 5xx, ...)."""


@dataclass(frozen=True)
class Card:
    """
    Normalized card metadata.

    Only the fields the analyzer needs are kept. color_identity is always
    in WUBRG order and only ever contains W, U, B, R or G.
    """
    name: str
    mana_value: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    color_identity: Tuple[str, ...] = ()
    power: Optional[str] = None
    toughness: Optional[str] = None
    legalities: Dict[str, str] = field(default_factory=dict, compare=False)
    set_type: str = ""
    mana_cost: str = ""
    keywords: Tuple[str, ...] = ()

    @classmethod
    def from_scryfall(cls, data: Dict[str, Any]) -> "Card":
        """
        Build a Card from a Scryfall card object.

        Double-faced and split cards keep most of their text on the faces,
        so oracle text is joined across faces and the front face's mana cost
        is used when the card itself has none.
        """
        faces = data.get("card_faces") or []

        oracle_text = data.get("oracle_text")
        if oracle_text is None:
            oracle_text = "\n".join(face.get("oracle_text", "") for face in faces)

        mana_cost = data.get("mana_cost")
        if not mana_cost and faces:
            mana_cost = faces[0].get("mana_cost", "")

        type_line = data.get("type_line")
        if type_line is None and faces:
            type_line = " // ".join(face.get("type_line", "") for face in faces)

        identity = set(data.get("color_identity") or [])

        return cls(
            name=data.get("name", ""),
            mana_value=max(float(data.get("cmc") or 0), 0.0),
            type_line=type_line or "",
            oracle_text=oracle_text or "",
            color_identity=tuple(c for c in COLOR_ORDER if c in identity),
            power=data.get("power"),
            toughness=data.get("toughness"),
            legalities=dict(data.get("legalities") or {}),
            set_type=data.get("set_type", ""),
            mana_cost=mana_cost or "",
            keywords=tuple(data.get("keywords") or []),
        )


class ScryfallClient:
    """
    A simple client for the Scryfall API with rate limiting.

    This class handles:
    - Making API requests with proper headers
    - Rate limiting to avoid getting blocked
    - Telling "card doesn't exist" (None) apart from "couldn't ask" (CardLookupError)
    """

    def __init__(self, session: Optional[requests.Session] = None):
        # Track when we last made a request (for rate limiting)
        self._last_request_time = 0
        self._rate_lock = threading.Lock()

        # Session keeps connections alive for better performance
        self._session = session or requests.Session()

        # Scryfall requires a User-Agent header identifying your app
        self._session.headers.update({
            "User-Agent": SCRYFALL_USER_AGENT,
            "Accept": "application/json"
        })

    def _rate_limit(self):
        """
        Wait if necessary to respect Scryfall's rate limit.

        Scryfall allows ~10 requests per second. We track time between
        requests and sleep if we're going too fast.
        """
        with self._rate_lock:
            now = time.time() * 1000  # Convert to milliseconds
            elapsed = now - self._last_request_time

            if elapsed < SCRYFALL_RATE_LIMIT_MS:
                time.sleep((SCRYFALL_RATE_LIMIT_MS - elapsed) / 1000)

            self._last_request_time = time.time() * 1000

    def get_card_by_name(self, name: str, fuzzy: bool = True) -> Optional[Dict[str, Any]]:
        """
        Fetch a single card by name from Scryfall.

        Args:
            name: The card name to search for (e.g., "Lightning Bolt")
            fuzzy: If True, allows approximate matching

        Returns:
            The Scryfall card object, or None if no card matches

        Raises:
            CardLookupError: the request failed or Scryfall answered with
                something other than 200/404
        """
        self._rate_limit()

        endpoint = f"{SCRYFALL_API_BASE}/cards/named"
        params = {
            "fuzzy" if fuzzy else "exact": name
        }

        try:
            response = self._session.get(endpoint, params=params, timeout=SCRYFALL_TIMEOUT_SECONDS)
        except requests.RequestException as e:
            raise CardLookupError(f"Network error fetching '{name}': {e}") from e

        if response.status_code == 200:
            return response.json()
        if response.status_code == 404:
            # Card not found - this is normal for typos or wrong names
            return None
        raise CardLookupError(f"Error fetching '{name}': HTTP {response.status_code}")


_MISSING = object()


class CardCache:
    """
    Process-wide memory of lookup results, keyed by the exact input name.

    A stored None means "Scryfall has no such card" and is a valid cache
    hit. Pass a fresh CardCache to get a clean slate (tests do this).
    """

    def __init__(self):
        self._entries: Dict[str, Optional[Card]] = {}
        self._lock = threading.Lock()

    def get(self, name: str, default: Any = _MISSING) -> Any:
        with self._lock:
            return self._entries.get(name, default)

    def set(self, name: str, card: Optional[Card]):
        with self._lock:
            self._entries[name] = card

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CardResolver:
    """
    Resolves card names to Card records.

    Lookups try an exact match first and fall back to Scryfall's fuzzy
    matching. Every answer (found or not) is cached; lookups that failed
    because Scryfall couldn't be reached are not.
    """

    def __init__(self, client: Optional[ScryfallClient] = None,
                 cache: Optional[CardCache] = None,
                 fuzzy_fallback: bool = True):
        self.client = client or ScryfallClient()
        self.cache = cache if cache is not None else CardCache()
        self.fuzzy_fallback = fuzzy_fallback

    def resolve(self, name: str) -> Optional[Card]:
        """Resolve one card name, or return None if it can't be matched."""
        cached = self.cache.get(name)
        if cached is not _MISSING:
            return cached

        try:
            data = self.client.get_card_by_name(name, fuzzy=False)
            if data is None and self.fuzzy_fallback:
                data = self.client.get_card_by_name(name, fuzzy=True)
        except CardLookupError as e:
            print(f"  ❌ {e}")
            return None

        if data is None:
            print(f"  ⚠️  Card not found: '{name}'")
            card = None
        else:
            card = Card.from_scryfall(data)

        self.cache.set(name, card)
        return card

    def resolve_many(self, names: Iterable[str],
                     cancel_event: Optional[threading.Event] = None) -> List[Optional[Card]]:
        """
        Resolve a whole deck.

        Each distinct name is looked up once, then the results are expanded
        back so the output lines up with the input (same order, same number
        of copies). If cancel_event gets set, no further lookups are made and
        the names not yet looked up come back as None.
        """
        names = list(names)

        resolved: Dict[str, Optional[Card]] = {}
        for name in dict.fromkeys(names):
            if cancel_event is not None and cancel_event.is_set():
                print("  ⏹️  Card lookup cancelled")
                break
            resolved[name] = self.resolve(name)

        return [resolved.get(name) for name in names]


_DECKLIST_LINE = re.compile(r"^(\d+)[xX]?\s+(.+)$")

_SECTION_HEADERS = ("DECK", "MAINBOARD", "SIDEBOARD", "COMMANDER", "COMPANION")


def parse_decklist(decklist_text: str) -> Dict[str, List[str]]:
    """
    Parse a decklist into main deck and sideboard card name lists.

    Supports formats like:
        4 Lightning Bolt
        4x Lightning Bolt
        Mountain (quantity assumed 1 if missing)

    A "Sideboard" header line, or the first blank line after some cards in
    Arena exports, starts the sideboard. Names are repeated once per copy.

    Returns:
        {"main": [...], "sideboard": [...]}
    """
    sections = {"main": [], "sideboard": []}
    current = "main"

    for raw_line in decklist_text.strip().splitlines():
        line = raw_line.strip()

        if not line:
            if sections["main"]:
                current = "sideboard"
            continue

        # Skip comments
        if line.startswith("#") or line.startswith("//"):
            continue

        header = line.rstrip(":").upper()
        if header in _SECTION_HEADERS:
            current = "sideboard" if header == "SIDEBOARD" else "main"
            continue

        match = _DECKLIST_LINE.match(line)
        if match:
            quantity, name = int(match.group(1)), match.group(2).strip()
        else:
            quantity, name = 1, line

        sections[current].extend([name] * quantity)

    return sections
