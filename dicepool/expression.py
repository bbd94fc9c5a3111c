"""Expression tree for parsed dice notation.

Nodes are immutable; the parser builds a tree once and the evaluator walks
it as many times as needed. ``str()`` of any node gives back canonical
notation that parses to an equal tree.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union

# Named die sizes written with percent markers instead of a face count.
PERCENTILE_SIZES: dict[str, int] = {
    "%": 100,
    "%%": 1000,
    "%%%": 10000,
}


class ThresholdKind(str, enum.Enum):
    """Which side of a target threshold counts as a hit."""

    high = "high"
    low = "low"


class CompareOp(str, enum.Enum):
    """Relation used by a pool-to-pool comparison."""

    gt = ">"
    lt = "<"
    ge = ">="
    le = "<="
    eq = "="
    cmp = "<=>"


# ---------------------------------------------------------------------------
# Pool modifiers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Explode:
    """Roll a fresh set of bonus dice when every die meets the threshold.

    ``threshold`` of None means the die's maximum face. With ``repeat`` the
    check runs again on each new set.
    """

    threshold: int | None = None
    repeat: bool = False

    def __str__(self) -> str:
        tag = "!!" if self.repeat else "!"
        return tag if self.threshold is None else f"{tag}{self.threshold}"


@dataclass(frozen=True)
class ExplodeEach:
    """Add a bonus die for each die that meets the threshold."""

    threshold: int | None = None
    repeat: bool = False

    def __str__(self) -> str:
        tag = "**" if self.repeat else "*"
        return tag if self.threshold is None else f"{tag}{self.threshold}"


@dataclass(frozen=True)
class AddEach:
    amount: int = 1

    def __str__(self) -> str:
        return f"++{self.amount}"


@dataclass(frozen=True)
class SubtractEach:
    amount: int = 1

    def __str__(self) -> str:
        return f"--{self.amount}"


@dataclass(frozen=True)
class TakeLow:
    count: int

    def __str__(self) -> str:
        return f"`{self.count}"


@dataclass(frozen=True)
class TakeHigh:
    count: int

    def __str__(self) -> str:
        return f"^{self.count}"


@dataclass(frozen=True)
class TakeMiddle:
    count: int

    def __str__(self) -> str:
        return f"~{self.count}"


@dataclass(frozen=True)
class Advantage:
    def __str__(self) -> str:
        return "ADV"


@dataclass(frozen=True)
class Disadvantage:
    def __str__(self) -> str:
        return "DIS"


@dataclass(frozen=True)
class BestGroup:
    def __str__(self) -> str:
        return "Y"


PoolModifier = Union[
    Explode,
    ExplodeEach,
    AddEach,
    SubtractEach,
    TakeLow,
    TakeHigh,
    TakeMiddle,
    Advantage,
    Disadvantage,
    BestGroup,
]


# ---------------------------------------------------------------------------
# Expression nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Number:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Pool:
    """``count`` dice of ``sides`` faces with at most one modifier.

    ``size_label`` keeps the percent marker the size was written with so the
    notation round-trips.
    """

    count: int
    sides: int
    modifier: PoolModifier | None = None
    size_label: str | None = None

    def __str__(self) -> str:
        size = self.size_label or str(self.sides)
        modifier = "" if self.modifier is None else str(self.modifier)
        return f"{self.count}d{size}{modifier}"


@dataclass(frozen=True)
class Sum:
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"{self.left} + {self.right}"


@dataclass(frozen=True)
class Difference:
    left: Expression
    right: Expression

    def __str__(self) -> str:
        return f"{self.left} - {self.right}"


@dataclass(frozen=True)
class Target:
    """Count dice meeting ``threshold`` instead of summing their faces."""

    expression: Expression
    kind: ThresholdKind
    threshold: int

    def __str__(self) -> str:
        if self.kind == ThresholdKind.high:
            return f"{self.expression}[{self.threshold}]"
        return f"{self.expression}({self.threshold})"


@dataclass(frozen=True)
class Success:
    """Turn a total into a success level: one at ``threshold``, one more per ``step``."""

    expression: Expression
    threshold: int
    step: int = 1

    def __str__(self) -> str:
        if self.step == 1:
            return f"{self.expression}{{{self.threshold}}}"
        return f"{self.expression}{{{self.threshold},{self.step}}}"


@dataclass(frozen=True)
class Comparison:
    left: Expression
    op: CompareOp
    right: Expression

    def __str__(self) -> str:
        return f"{self.left} {self.op.value} {self.right}"


Expression = Union[Number, Pool, Sum, Difference, Target, Success, Comparison]
