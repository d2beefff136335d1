"""
Scryfall API client for resolving decklist names into Card objects.
"""
from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import requests

from config import AnalyzerConfig
from deck_parser import DecklistSpec, MAINBOARD, SIDEBOARD
from models import Card, Deck, DeckCardEntry
from utils import canonicalize_name

_LOG = logging.getLogger(__name__)

CardRequest = Union[str, Tuple[str, Optional[str]]]


class RateLimiter:
    """
    Enforces a minimum delay between consecutive requests.

    The clock and sleep functions are injected so tests can run without
    real waiting.
    """

    def __init__(
        self,
        min_delay: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_delay = min_delay
        self.clock = clock
        self.sleep = sleep
        self.last_request_time: Optional[float] = None

    def wait(self) -> None:
        """Block until min_delay has passed since the previous call, then mark a request."""
        if self.last_request_time is not None:
            elapsed = self.clock() - self.last_request_time
            if elapsed < self.min_delay:
                self.sleep(self.min_delay - elapsed)
        self.last_request_time = self.clock()


class ScryfallAPI:
    """Client for interacting with the Scryfall API."""

    def __init__(
        self,
        base_url: str = "https://api.scryfall.com",
        min_delay: float = 0.1,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
        max_retries: int = 3,
        timeout: float = 10.0,
        user_agent: str = "MTGDeckAnalyzer/2.0",
    ):
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(min_delay)
        self.session = session or requests.Session()
        self.max_retries = max_retries
        self.timeout = timeout
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "application/json;q=0.9,*/*;q=0.8",
        }
        self.cache: Dict[str, Optional[Card]] = {}

    @classmethod
    def from_config(cls, settings: AnalyzerConfig, **kwargs) -> "ScryfallAPI":
        return cls(
            base_url=settings.scryfall_base_url,
            min_delay=settings.scryfall_min_delay,
            max_retries=settings.scryfall_max_retries,
            timeout=settings.scryfall_timeout,
            user_agent=settings.scryfall_user_agent,
            **kwargs,
        )

    def _backoff(self, attempt: int) -> float:
        return 2 ** attempt + random.uniform(0, 1)

    def _make_request_with_retry(self, url: str, params: Dict) -> Optional[requests.Response]:
        """
        Make a request with exponential backoff retry for rate limiting.

        Args:
            url: The URL to request
            params: Query parameters

        Returns:
            Response for 200 and 404, None once retries are exhausted or on
            any other HTTP error
        """
        for attempt in range(self.max_retries + 1):
            self.rate_limiter.wait()

            try:
                response = self.session.get(url, headers=self.headers, params=params,
                                            timeout=self.timeout)
            except requests.RequestException as exc:
                if attempt < self.max_retries:
                    wait_time = self._backoff(attempt)
                    _LOG.info("Request to %s failed (%s); retrying in %.1fs", url, exc, wait_time)
                    self.rate_limiter.sleep(wait_time)
                    continue
                _LOG.warning("Giving up on %s after %d attempts: %s", url, attempt + 1, exc)
                return None

            if response.status_code in (200, 404):
                return response

            if response.status_code == 429:
                if attempt < self.max_retries:
                    retry_after = response.headers.get("Retry-After")
                    try:
                        wait_time = float(retry_after) if retry_after else self._backoff(attempt)
                    except ValueError:
                        wait_time = 2 ** attempt
                    _LOG.info("Rate limited by Scryfall; retrying in %.1fs", wait_time)
                    self.rate_limiter.sleep(wait_time)
                    continue
                _LOG.warning("Still rate limited after %d attempts: %s", attempt + 1, url)
                return None

            _LOG.warning("Scryfall returned HTTP %d for %s", response.status_code, url)
            return None

        return None

    def _fetch_named(self, card_name: str, set_code: Optional[str] = None) -> Optional[Card]:
        params = {"exact": card_name}
        if set_code:
            params["set"] = set_code.lower()

        response = self._make_request_with_retry(f"{self.base_url}/cards/named", params)
        if response is None:
            return None
        if response.status_code == 404:
            _LOG.debug("Card not found: %s (set %s)", card_name, set_code)
            return None

        try:
            return Card.from_scryfall(response.json())
        except ValueError as exc:
            _LOG.warning("Could not decode Scryfall response for %s: %s", card_name, exc)
            return None

    def get_card(self, card_name: str, set_code: Optional[str] = None) -> Optional[Card]:
        """
        Fetch a card by exact name.

        A set-specific lookup is tried first when set_code is given, then the
        plain name lookup. Results, including misses, are cached.

        Args:
            card_name: The exact name of the card to fetch
            set_code: Optional set code for a specific printing

        Returns:
            Card if found, None otherwise
        """
        name_key = canonicalize_name(card_name)
        cache_key = f"{name_key}|{set_code.lower()}" if set_code else name_key
        if cache_key in self.cache:
            return self.cache[cache_key]

        card = None
        if set_code:
            card = self._fetch_named(card_name, set_code)
        if card is None:
            card = self._fetch_named(card_name)

        self.cache[cache_key] = card
        return card

    def get_cards_batch(self, card_requests: Iterable[CardRequest]) -> Dict[str, Optional[Card]]:
        """
        Fetch multiple cards through the shared rate limiter.

        Args:
            card_requests: Card names or (card_name, set_code) tuples

        Returns:
            Dictionary mapping card names to Card objects (or None if not found)
        """
        results: Dict[str, Optional[Card]] = {}
        for request in card_requests:
            if isinstance(request, tuple):
                card_name, set_code = request
            else:
                card_name, set_code = request, None
            results[card_name] = self.get_card(card_name, set_code)
        return results

    def build_deck(self, decklist: DecklistSpec) -> Tuple[Deck, List[str]]:
        """
        Resolve every name in a parsed decklist.

        Returns:
            The Deck and the names Scryfall could not resolve, in decklist order
        """
        missing: List[str] = []
        sections: Dict[str, List[DeckCardEntry]] = {MAINBOARD: [], SIDEBOARD: []}

        for section in (MAINBOARD, SIDEBOARD):
            for card_name, quantity in decklist.sections.get(section, {}).items():
                card = self.get_card(card_name, decklist.set_codes.get(card_name))
                if card is None:
                    if card_name not in missing:
                        missing.append(card_name)
                    continue
                sections[section].append(DeckCardEntry(card=card, quantity=quantity))

        if missing:
            _LOG.warning("%d card(s) could not be resolved: %s", len(missing), ", ".join(missing))

        deck = Deck(
            mainboard=Deck.merge_entries(sections[MAINBOARD]),
            sideboard=Deck.merge_entries(sections[SIDEBOARD]),
            name=decklist.name,
        )
        return deck, missing
