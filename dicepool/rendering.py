"""Plain-text renderers for the full, value, and chart display modes."""

from __future__ import annotations

from dicepool.aggregator import Histogram
from dicepool.config import settings
from dicepool.expression import Expression
from dicepool.results import Die, DieStatus, Value

DISPLAY_MODES: tuple[str, ...] = ("full", "value", "chart")


def render_die(die: Die) -> str:
    """Format one die: ``*`` marks a bonus die, a trailing ``-`` a discarded one."""
    text = str(-die.value if die.negative else die.value)
    if die.status == DieStatus.bonus:
        return f"{text}*"
    if die.status == DieStatus.discarded:
        return f"{text}-"
    return text


def render_value(value: Value) -> str:
    """Format a value as ``<dice> = <total>`` with ``{level}`` for a success level."""
    if value.operands is not None:
        left, right = value.operands
        return f"{render_value(left)} <> {render_value(right)} = {value.total}"
    items = [render_die(d) for d in value.dice]
    if value.constant:
        items.append(f"{value.constant:+d}")
    text = f"{', '.join(items)} = {value.total}".lstrip()
    if value.success_level is not None:
        text = f"{text} {{{value.success_level}}}"
    return text


def render_full(expression: Expression, value: Value) -> str:
    return f"{expression}: {render_value(value)}"


def render_values(values: list[Value]) -> str:
    """One score per line."""
    return "\n".join(str(v.score) for v in values)


def render_chart(histogram: Histogram, bar_width: int | None = None) -> str:
    """Render rows of ``<score>. <percent at least>: <bar>`` in ascending score order.

    Args:
        histogram: Tallied samples.
        bar_width: Star count of the longest bar (defaults to settings.chart_bar_width).
    """
    width = settings.chart_bar_width if bar_width is None else bar_width
    unit = max(1, histogram.max_count // max(width, 1))
    rows = []
    for score, fraction in histogram.at_least(fill_gaps=True).items():
        row = f"{score:>3}. {fraction * 100:>5.1f}:"
        count = histogram.counts.get(score, 0)
        if count:
            row = f"{row} {'*' * (count // unit + 1)}"
        rows.append(row)
    return "\n".join(rows)
