"""Sources of die rolls.

The evaluator never touches the ``random`` module directly; it asks a
RandomSource for each face. Production code uses SystemRandomSource, tests
substitute a FixedRandomSource that replays a known sequence.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from typing import Protocol

from dicepool.config import settings


class RandomSource(Protocol):
    """Interface for rolling a single die."""

    def roll(self, sides: int) -> int:
        """Return a uniformly distributed integer in ``[1, sides]``."""
        ...


class SystemRandomSource:
    """``random.Random``-backed source.

    Args:
        seed: Optional seed; two sources with the same seed roll identically.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def roll(self, sides: int) -> int:
        return self._rng.randint(1, sides)


class FixedRandomSource:
    """Replays a fixed sequence of faces, in order.

    Raises:
        LookupError: When more rolls are requested than were supplied.
        ValueError: When the next face does not fit the requested die.
    """

    def __init__(self, faces: Iterable[int]) -> None:
        self._faces = list(faces)
        self._position = 0

    @property
    def remaining(self) -> int:
        return len(self._faces) - self._position

    def roll(self, sides: int) -> int:
        if self._position >= len(self._faces):
            raise LookupError(f"Fixed random source exhausted after {len(self._faces)} rolls")
        face = self._faces[self._position]
        if not 1 <= face <= sides:
            raise ValueError(f"Fixed face {face} is not a valid roll of a d{sides}")
        self._position += 1
        return face


def get_random_source() -> RandomSource:
    """Return a fresh source, seeded from settings when a seed is configured."""
    return SystemRandomSource(settings.seed)
