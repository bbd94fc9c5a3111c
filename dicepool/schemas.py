"""Pydantic response models for the HTTP roll routes."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dicepool.aggregator import Histogram
from dicepool.rendering import render_value
from dicepool.results import Die, DieStatus, Value


class DieOut(BaseModel):
    value: int
    status: DieStatus
    negative: bool = False

    @classmethod
    def from_die(cls, die: Die) -> DieOut:
        return cls(value=die.value, status=die.status, negative=die.negative)


class RollOut(BaseModel):
    dice: list[DieOut]
    total: int
    success_level: int | None = None
    score: int = Field(description="Success level when present, otherwise the total.")
    text: str = Field(description="The roll as the full display mode prints it.")

    @classmethod
    def from_value(cls, value: Value) -> RollOut:
        return cls(
            dice=[DieOut.from_die(d) for d in value.dice],
            total=value.total,
            success_level=value.success_level,
            score=value.score,
            text=render_value(value),
        )


class RollResponse(BaseModel):
    expression: str = Field(description="Canonical notation of the part that parsed.")
    remainder: str | None = Field(
        default=None, description="Trailing input that could not be parsed, if any."
    )
    rolls: list[RollOut]


class ChartRow(BaseModel):
    value: int
    count: int
    at_least: float = Field(description="Fraction of samples scoring this value or higher.")


class ChartResponse(BaseModel):
    expression: str
    remainder: str | None = None
    samples: int
    rows: list[ChartRow]

    @staticmethod
    def rows_from(histogram: Histogram) -> list[ChartRow]:
        return [
            ChartRow(value=score, count=histogram.counts.get(score, 0), at_least=fraction)
            for score, fraction in histogram.at_least().items()
        ]
