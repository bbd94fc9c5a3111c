"""FastAPI dependencies for dicepool."""

from __future__ import annotations

from dicepool.random_source import RandomSource
from dicepool.random_source import get_random_source as _default_source


def get_random_source() -> RandomSource:
    """Return the random source for one request.

    Tests override this dependency with a FixedRandomSource.
    """
    return _default_source()
