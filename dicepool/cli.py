"""Command-line entry point: ``dicepool "4d6^3" -c 6``."""

from __future__ import annotations

import argparse
import logging
import sys

from dicepool.aggregator import histogram, run
from dicepool.config import settings
from dicepool.parser import parse
from dicepool.random_source import SystemRandomSource
from dicepool.rendering import DISPLAY_MODES, render_chart, render_full, render_values

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dicepool", description="Generates random dice rolls")
    parser.add_argument("expression", help='Dice notation, e.g. "3d6 + 2" or "4d6^3"')
    parser.add_argument(
        "-d",
        "--display",
        choices=DISPLAY_MODES,
        default=settings.default_display,
        help="Display the results: full, value, or chart",
    )
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        help="Run the expression this many times (chart defaults to %d samples)"
        % settings.chart_samples,
    )
    parser.add_argument("--seed", type=int, default=settings.seed, help="Seed the dice for repeatable rolls")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level)

    result = parse(args.expression)
    if result.expression is None:
        print(f"error: could not parse {args.expression!r}", file=sys.stderr)
        return 1
    logger.debug("Parsed %r as %s", args.expression, result.expression)

    source = SystemRandomSource(args.seed)
    try:
        if args.display == "chart":
            count = settings.chart_samples if args.count is None else args.count
            output = render_chart(histogram(result.expression, source, count))
        else:
            count = settings.default_count if args.count is None else args.count
            values = run(result.expression, source, count)
            if args.display == "value":
                output = render_values(values)
            else:
                output = "\n".join(render_full(result.expression, v) for v in values)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(output)
    if result.remainder is not None:
        reason = f" ({result.error})" if result.error is not None else ""
        print(f"unparsed: {result.remainder}{reason}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
