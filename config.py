"""
Configuration for the MTG deck analysis engine.
Simulation constants live here as named values; runtime settings are read from the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


# ===== SIMULATION CONSTANTS =====

HAND_SIZE = 7
KEEPABLE_MIN_LANDS = 2
KEEPABLE_MAX_LANDS = 5
CARDS_SEEN_BY_TURN3 = 9   # opening 7 + 2 draws
CARDS_SEEN_BY_TURN4 = 10  # opening 7 + 3 draws
CURVE_OUT_MIN_SPELLS = 3
EARLY_TURNS = (1, 2, 3)

DEFAULT_SIMULATIONS = 1000

COLOR_SYMBOLS = ("W", "U", "B", "R", "G")

COLOR_NAMES = {
    'W': 'White',
    'U': 'Blue',
    'B': 'Black',
    'R': 'Red',
    'G': 'Green',
    'C': 'Colorless'
}


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Runtime settings for the CLI, the dashboard and the Scryfall client."""
    simulations: int = DEFAULT_SIMULATIONS
    seed: Optional[int] = None
    scryfall_base_url: str = "https://api.scryfall.com"
    scryfall_user_agent: str = "MTGDeckAnalyzer/2.0"
    scryfall_min_delay: float = 0.1  # 100ms between requests (10 req/sec max)
    scryfall_max_retries: int = 3
    scryfall_timeout: float = 10.0
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Build a config from MTG_ANALYZER_* and SCRYFALL_* environment variables."""
        return cls(
            simulations=int(os.getenv("MTG_ANALYZER_SIMULATIONS", DEFAULT_SIMULATIONS)),
            seed=_env_optional_int("MTG_ANALYZER_SEED"),
            scryfall_base_url=os.getenv("SCRYFALL_BASE_URL", "https://api.scryfall.com").rstrip("/"),
            scryfall_user_agent=os.getenv("SCRYFALL_USER_AGENT", "MTGDeckAnalyzer/2.0"),
            scryfall_min_delay=float(os.getenv("SCRYFALL_MIN_DELAY", 0.1)),
            scryfall_max_retries=int(os.getenv("SCRYFALL_MAX_RETRIES", 3)),
            scryfall_timeout=float(os.getenv("SCRYFALL_TIMEOUT", 10)),
            debug=_env_flag("MTG_ANALYZER_DEBUG"),
        )
