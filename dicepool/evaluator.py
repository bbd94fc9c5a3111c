"""Evaluate expression trees into concrete rolls.

Every face comes from the RandomSource handed to the Evaluator, so a run is
fully determined by the tree and the source's sequence of faces.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace

from dicepool.config import settings
from dicepool.errors import InvalidPool, NonTerminatingExplosion
from dicepool.expression import (
    AddEach,
    Advantage,
    BestGroup,
    CompareOp,
    Comparison,
    Difference,
    Disadvantage,
    Explode,
    ExplodeEach,
    Expression,
    Number,
    Pool,
    SubtractEach,
    Success,
    Sum,
    TakeHigh,
    TakeLow,
    TakeMiddle,
    Target,
    ThresholdKind,
)
from dicepool.parser import parse_strict
from dicepool.random_source import RandomSource, get_random_source
from dicepool.results import Die, DieStatus, Value

logger = logging.getLogger(__name__)


def _total(dice: list[Die] | tuple[Die, ...]) -> int:
    return sum(d.contribution for d in dice)


def _mark(dice: list[Die], kept: set[int]) -> list[Die]:
    """Return new dice with positions in ``kept`` kept and all others discarded."""
    return [
        replace(d, status=DieStatus.kept if i in kept else DieStatus.discarded)
        for i, d in enumerate(dice)
    ]


def success_level(total: int, threshold: int, step: int = 1) -> int:
    """Return 0 below ``threshold``, else 1 plus one level per full ``step`` above it."""
    if total < threshold:
        return 0
    return 1 + (total - threshold) // step


def compare(left: int, op: CompareOp, right: int) -> int:
    """Apply a comparison, returning 1/0 for relations and -1/0/1 for ``<=>``."""
    if op == CompareOp.cmp:
        return (left > right) - (left < right)
    relations = {
        CompareOp.gt: left > right,
        CompareOp.lt: left < right,
        CompareOp.ge: left >= right,
        CompareOp.le: left <= right,
        CompareOp.eq: left == right,
    }
    return int(relations[op])


class Evaluator:
    """Walks an expression tree, drawing faces from ``source``.

    Args:
        source: Where die faces come from.
        max_dice: Largest pool accepted (defaults to settings.max_dice).
        max_sides: Largest die accepted (defaults to settings.max_sides).
    """

    def __init__(
        self,
        source: RandomSource,
        *,
        max_dice: int | None = None,
        max_sides: int | None = None,
    ) -> None:
        self.source = source
        self.max_dice = settings.max_dice if max_dice is None else max_dice
        self.max_sides = settings.max_sides if max_sides is None else max_sides

    def evaluate(self, expression: Expression) -> Value:
        if isinstance(expression, Number):
            return Value(total=expression.value, constant=expression.value)
        if isinstance(expression, Pool):
            return self.pool(expression)
        if isinstance(expression, Sum):
            return self.add(self.evaluate(expression.left), self.evaluate(expression.right))
        if isinstance(expression, Difference):
            return self.subtract(self.evaluate(expression.left), self.evaluate(expression.right))
        if isinstance(expression, Target):
            return self.target(self.evaluate(expression.expression), expression)
        if isinstance(expression, Success):
            value = self.evaluate(expression.expression)
            level = success_level(value.total, expression.threshold, expression.step)
            return replace(value, success_level=level)
        if isinstance(expression, Comparison):
            left = self.evaluate(expression.left)
            right = self.evaluate(expression.right)
            result = compare(left.score, expression.op, right.score)
            return Value(total=result, operands=(left, right))
        raise TypeError(f"Not an expression: {expression!r}")

    # -- arithmetic ---------------------------------------------------------

    def add(self, left: Value, right: Value) -> Value:
        return Value(
            dice=left.dice + right.dice,
            total=left.total + right.total,
            constant=left.constant + right.constant,
        )

    def subtract(self, left: Value, right: Value) -> Value:
        flipped = tuple(replace(d, negative=not d.negative) for d in right.dice)
        return Value(
            dice=left.dice + flipped,
            total=left.total - right.total,
            constant=left.constant - right.constant,
        )

    def target(self, value: Value, target: Target) -> Value:
        """Recode each contributing die to 1 for a hit and 0 for a miss."""
        high = target.kind == ThresholdKind.high

        def recode(die: Die) -> Die:
            if die.status == DieStatus.discarded:
                return die
            hit = die.value >= target.threshold if high else die.value <= target.threshold
            return replace(die, value=int(hit))

        dice = tuple(recode(d) for d in value.dice)
        return Value(dice=dice, total=_total(dice) + value.constant, constant=value.constant)

    # -- pools --------------------------------------------------------------

    def roll(self, count: int, sides: int, status: DieStatus = DieStatus.kept) -> list[Die]:
        return [Die(self.source.roll(sides), status) for _ in range(count)]

    def pool(self, pool: Pool) -> Value:
        if pool.count < 0:
            raise InvalidPool(f"Die count cannot be negative: {pool.count}")
        if pool.sides < 1:
            raise InvalidPool(f"Dice need at least one side: d{pool.sides}")
        if pool.count > self.max_dice:
            raise InvalidPool(f"Too many dice: {pool.count} (max {self.max_dice})")
        if pool.sides > self.max_sides:
            raise InvalidPool(f"Too many sides: {pool.sides} (max {self.max_sides})")

        modifier = pool.modifier
        if isinstance(modifier, (Explode, ExplodeEach)):
            threshold = pool.sides if modifier.threshold is None else modifier.threshold
            # Every face is at least 1, so a threshold of 1 or less always triggers.
            if modifier.repeat and threshold <= 1:
                raise NonTerminatingExplosion(
                    f"{pool} would reroll forever: every face meets threshold {threshold}"
                )
            if isinstance(modifier, Explode):
                dice = self.explode(pool, threshold, modifier.repeat)
            else:
                dice = self.explode_each(pool, threshold, modifier.repeat)
        elif isinstance(modifier, (Advantage, Disadvantage)):
            dice = self.advantage(pool, prefer_high=isinstance(modifier, Advantage))
        else:
            dice = self.roll(pool.count, pool.sides)
            if isinstance(modifier, AddEach):
                dice = [replace(d, value=d.value + modifier.amount) for d in dice]
            elif isinstance(modifier, SubtractEach):
                dice = [replace(d, value=d.value - modifier.amount) for d in dice]
            elif isinstance(modifier, TakeLow):
                dice = self.take(dice, modifier.count, highest=False)
            elif isinstance(modifier, TakeHigh):
                dice = self.take(dice, modifier.count, highest=True)
            elif isinstance(modifier, TakeMiddle):
                dice = self.take_middle(dice, modifier.count)
            elif isinstance(modifier, BestGroup):
                dice = self.best_group(dice)
        return Value(dice=tuple(dice), total=_total(dice))

    def explode(self, pool: Pool, threshold: int, repeat: bool) -> list[Die]:
        """Roll a whole new bonus set while every die of the newest set meets ``threshold``."""
        dice = self.roll(pool.count, pool.sides)
        newest = dice
        while newest and all(d.value >= threshold for d in newest):
            newest = self.roll(pool.count, pool.sides, DieStatus.bonus)
            logger.debug("%s exploded, bonus set %s", pool, [d.value for d in newest])
            dice = dice + newest
            if not repeat:
                break
        return dice

    def explode_each(self, pool: Pool, threshold: int, repeat: bool) -> list[Die]:
        """Follow each die meeting ``threshold`` with a bonus die."""
        dice: list[Die] = []
        for die in self.roll(pool.count, pool.sides):
            dice.append(die)
            current = die
            while current.value >= threshold:
                current = Die(self.source.roll(pool.sides), DieStatus.bonus)
                dice.append(current)
                if not repeat:
                    break
        return dice

    def advantage(self, pool: Pool, prefer_high: bool) -> list[Die]:
        """Roll the pool twice and keep the instance with the better total.

        Ties keep the first instance.
        """
        first = self.roll(pool.count, pool.sides)
        second = self.roll(pool.count, pool.sides)
        first_total, second_total = _total(first), _total(second)
        logger.debug("%s rolled %d against %d", pool, first_total, second_total)
        if prefer_high:
            first_wins = first_total >= second_total
        else:
            first_wins = first_total <= second_total
        winner, loser = (first, second) if first_wins else (second, first)
        discarded = [replace(d, status=DieStatus.discarded) for d in loser]
        return winner + discarded if first_wins else discarded + winner

    def take(self, dice: list[Die], count: int, highest: bool) -> list[Die]:
        """Keep the ``count`` highest or lowest dice; earlier dice win ties."""
        if highest:
            order = sorted(range(len(dice)), key=lambda i: (-dice[i].value, i))
        else:
            order = sorted(range(len(dice)), key=lambda i: (dice[i].value, i))
        return _mark(dice, set(order[: max(count, 0)]))

    def take_middle(self, dice: list[Die], count: int) -> list[Die]:
        """Keep the central ``count`` dice; an odd exclusion drops one more low die."""
        excluded = len(dice) - count
        if excluded <= 0:
            return dice
        low = excluded - excluded // 2
        order = sorted(range(len(dice)), key=lambda i: (dice[i].value, i))
        return _mark(dice, set(order[low : low + count]))

    def best_group(self, dice: list[Die]) -> list[Die]:
        """Keep the largest group of equal faces, preferring the higher face on a tie."""
        if not dice:
            return dice
        groups = Counter(d.value for d in dice)
        best = max(groups, key=lambda face: (groups[face], face))
        return _mark(dice, {i for i, d in enumerate(dice) if d.value == best})


def evaluate(expression: Expression, source: RandomSource) -> Value:
    """Evaluate ``expression`` once, drawing faces from ``source``.

    Raises:
        InvalidPool: If a pool's count or die size is unusable.
        NonTerminatingExplosion: If a repeating explosion could never stop.
    """
    return Evaluator(source).evaluate(expression)


def roll(notation: str, source: RandomSource | None = None) -> Value:
    """Parse and evaluate notation in one step.

    Raises:
        DiceError: If the notation does not fully parse or cannot be evaluated.
    """
    return evaluate(parse_strict(notation), source or get_random_source())
