"""Repeated evaluation: lists of rolls and frequency tables over many samples."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

from dicepool.evaluator import Evaluator
from dicepool.expression import Expression
from dicepool.random_source import RandomSource
from dicepool.results import Value

logger = logging.getLogger(__name__)


def run(expression: Expression, source: RandomSource, count: int) -> list[Value]:
    """Evaluate ``expression`` ``count`` times against one random source.

    Raises:
        ValueError: If count is less than 1.
        DiceError: If the expression cannot be evaluated.
    """
    if count < 1:
        raise ValueError(f"Run count must be at least 1, got {count}")
    evaluator = Evaluator(source)
    return [evaluator.evaluate(expression) for _ in range(count)]


@dataclass(frozen=True)
class Histogram:
    """Tally of scores over ``samples`` evaluations.

    ``counts`` maps each observed score to how often it came up, in
    ascending order of score.
    """

    counts: dict[int, int]
    samples: int

    @property
    def minimum(self) -> int:
        return min(self.counts)

    @property
    def maximum(self) -> int:
        return max(self.counts)

    @property
    def max_count(self) -> int:
        return max(self.counts.values())

    def at_least(self, fill_gaps: bool = False) -> dict[int, float]:
        """Return the fraction of samples at or above each observed score.

        Args:
            fill_gaps: Also include every unobserved score between minimum and
                maximum. The row count then grows with the spread of scores
                rather than the number of samples.
        """
        scores = range(self.minimum, self.maximum + 1) if fill_gaps else self.counts
        result: dict[int, float] = {}
        remaining = self.samples
        for score in scores:
            result[score] = remaining / self.samples
            remaining -= self.counts.get(score, 0)
        return result


def histogram(expression: Expression, source: RandomSource, sample_count: int) -> Histogram:
    """Evaluate ``expression`` ``sample_count`` times and tally the scores.

    Raises:
        ValueError: If sample_count is less than 1.
        DiceError: If the expression cannot be evaluated.
    """
    if sample_count < 1:
        raise ValueError(f"Sample count must be at least 1, got {sample_count}")
    evaluator = Evaluator(source)
    tally = Counter(evaluator.evaluate(expression).score for _ in range(sample_count))
    logger.debug("Sampled %s %d times, %d distinct scores", expression, sample_count, len(tally))
    return Histogram(counts=dict(sorted(tally.items())), samples=sample_count)
