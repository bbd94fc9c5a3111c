"""Evaluation results: individual dice and the aggregate value of a roll."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class DieStatus(str, enum.Enum):
    """How a die takes part in the total."""

    kept = "kept"
    discarded = "discarded"
    bonus = "bonus"


@dataclass(frozen=True)
class Die:
    """A single die outcome.

    ``negative`` marks a die on the subtracted side of a difference; its
    contribution to totals and hit counts is negated.
    """

    value: int
    status: DieStatus = DieStatus.kept
    negative: bool = False

    @property
    def contribution(self) -> int:
        """Amount this die adds to the total (zero when discarded)."""
        if self.status == DieStatus.discarded:
            return 0
        return -self.value if self.negative else self.value


@dataclass(frozen=True)
class Value:
    """Outcome of evaluating one expression.

    ``total`` is the sum of every non-discarded die plus ``constant`` (the
    flat numbers in the expression). ``success_level`` is set only under a
    success wrapper. ``operands`` holds both sides of a comparison, whose
    own ``total`` is the comparison result.
    """

    dice: tuple[Die, ...] = ()
    total: int = 0
    constant: int = 0
    success_level: int | None = None
    operands: tuple[Value, Value] | None = None

    @property
    def score(self) -> int:
        """The figure a roll reports: its success level if any, else its total."""
        return self.total if self.success_level is None else self.success_level

    @property
    def kept(self) -> tuple[Die, ...]:
        return tuple(d for d in self.dice if d.status == DieStatus.kept)

    @property
    def discarded(self) -> tuple[Die, ...]:
        return tuple(d for d in self.dice if d.status == DieStatus.discarded)

    @property
    def bonus(self) -> tuple[Die, ...]:
        return tuple(d for d in self.dice if d.status == DieStatus.bonus)
