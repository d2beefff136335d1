"""Shared test fixtures."""
import os
import random
import sys

import pytest

# Add project root to path so tests can import the flat modules
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from factories import basic_land, creature  # noqa: E402


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def white_weenie():
    """20 Plains plus 40 white one-drops."""
    return [
        basic_land("Plains", "W", quantity=20),
        creature("Savannah Lions", quantity=40, cmc=1, subtypes="Cat",
                 colors=frozenset({"W"})),
    ]


@pytest.fixture
def no_lands():
    return [creature("Grizzly Bears", quantity=60, cmc=2, colors=frozenset({"G"}))]
