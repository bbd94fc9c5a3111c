"""Error types raised while parsing and evaluating dice expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dicepool.parser import ParseResult


class DiceError(ValueError):
    """Base class for every dice notation or evaluation error."""


class ParseIncomplete(DiceError):
    """Raised by parse_strict when part of the input could not be parsed.

    The best-effort result is kept on ``result`` so callers can still show
    the portion that parsed.
    """

    def __init__(self, result: ParseResult) -> None:
        self.result = result
        if result.expression is None:
            message = f"Could not parse {(result.remainder or '')!r}"
        else:
            message = f"Parsed {result.consumed!r} but could not parse {result.remainder!r}"
        if result.error is not None:
            message = f"{message}: {result.error}"
        super().__init__(message)


class InvalidPool(DiceError):
    """Raised when a pool has a negative count or an unusable die size."""


class InvalidModifierArgument(DiceError):
    """A modifier's required numeric argument is missing or invalid."""


class NonTerminatingExplosion(DiceError):
    """Raised when a repeating explosion could never stop rerolling."""
