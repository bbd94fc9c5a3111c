"""Dice notation parser.

Grammar, loosest binding first::

    comparison := success (> | < | >= | <= | = | <=>) success | success
    success    := target {n,m} | target {n} | target
    target     := grouped [n] | grouped (n) | grouped
    grouped    := ( sum ) | sum
    sum        := term { (+ | -) term }
    term       := pool | number
    pool       := [number] (d | D) (number | % | %% | %%%) [modifier]

Modifiers: ``!`` ``!!`` ``*`` ``**`` (optional threshold), ``++`` ``--``
(optional amount, default 1), ``~n`` ``^n`` `` `n `` (required count),
``ADV`` ``DIS`` ``Y``.

Parsing never fails on bad input. It keeps the longest prefix that forms a
valid expression and reports the rest as the remainder, e.g.
``parse("3d4**{6} x")`` gives the ``3d4**{6}`` tree and remainder ``"x"``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import NamedTuple

from dicepool.errors import DiceError, InvalidModifierArgument, ParseIncomplete
from dicepool.expression import (
    PERCENTILE_SIZES,
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
    PoolModifier,
    SubtractEach,
    Success,
    Sum,
    TakeHigh,
    TakeLow,
    TakeMiddle,
    Target,
    ThresholdKind,
)

logger = logging.getLogger(__name__)

# Multi-character operators come first so they win over their prefixes.
_TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<number>\d+)
    | (?P<keyword>ADV|DIS|Y)
    | (?P<die>[dD])
    | (?P<percent>%{1,3})
    | (?P<op><=>|!!|\*\*|\+\+|--|<=|>=|[!*~^`+\-<>=()\[\]{},])
    | (?P<error>.)
    """,
    re.VERBOSE,
)

_COMPARE_OPS: dict[str, CompareOp] = {op.value: op for op in CompareOp}

_KEYWORD_MODIFIERS: dict[str, PoolModifier] = {
    "ADV": Advantage(),
    "DIS": Disadvantage(),
    "Y": BestGroup(),
}


class Token(NamedTuple):
    kind: str
    text: str
    start: int
    end: int


def tokenize(text: str) -> list[Token]:
    """Split text into tokens, dropping whitespace and ending with an ``eof`` token."""
    tokens = [
        Token(m.lastgroup or "error", m.group(), m.start(), m.end())
        for m in _TOKEN_RE.finditer(text)
        if m.lastgroup != "space"
    ]
    tokens.append(Token("eof", "", len(text), len(text)))
    return tokens


@dataclass(frozen=True)
class ParseResult:
    """Best-effort parse of a dice expression.

    Attributes:
        expression: Tree for the longest valid prefix, or None if nothing parsed.
        consumed: The text that produced ``expression``.
        remainder: Unparsed trailing text, or None when everything parsed.
        error: Why parsing stopped early, when a more specific reason is known.
    """

    expression: Expression | None
    consumed: str
    remainder: str | None
    error: DiceError | None = None

    @property
    def complete(self) -> bool:
        return self.expression is not None and self.remainder is None


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.error: DiceError | None = None
        self.error_index = -1

    # -- token helpers ------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        return self.tokens[min(self.index + offset, len(self.tokens) - 1)]

    def at(self, kind: str, text: str | None = None, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token.kind == kind and (text is None or token.text == text)

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != "eof":
            self.index += 1
        return token

    def fail(self, error: DiceError) -> None:
        """Record why the parser could not continue at the current token."""
        self.error = error
        self.error_index = self.index

    def _starts_term(self, offset: int = 0) -> bool:
        if self.at("number", offset=offset):
            return True
        return self.at("die", offset=offset) and self._is_size(offset + 1)

    def _is_size(self, offset: int) -> bool:
        return self.at("number", offset=offset) or self.at("percent", offset=offset)

    # -- grammar ------------------------------------------------------------

    def comparison(self) -> Expression | None:
        left = self.success()
        if left is None:
            return None
        token = self.peek()
        if token.kind == "op" and token.text in _COMPARE_OPS:
            mark = self.index
            self.advance()
            right = self.success()
            if right is None:
                self.index = mark
                return left
            return Comparison(left, _COMPARE_OPS[token.text], right)
        return left

    def success(self) -> Expression | None:
        expression = self.target()
        if expression is None or not self.at("op", "{"):
            return expression
        if not self.at("number", offset=1):
            self.fail(InvalidModifierArgument("Success needs a threshold, e.g. {7} or {7,3}"))
            return expression
        threshold = int(self.peek(1).text)
        if self.at("op", "}", offset=2):
            self.index += 3
            return Success(expression, threshold)
        if (
            self.at("op", ",", offset=2)
            and self.at("number", offset=3)
            and self.at("op", "}", offset=4)
        ):
            step = int(self.peek(3).text)
            if step < 1:
                self.fail(InvalidModifierArgument(f"Success step must be at least 1, got {step}"))
                return expression
            self.index += 5
            return Success(expression, threshold, step)
        self.fail(InvalidModifierArgument("Malformed success threshold"))
        return expression

    def target(self) -> Expression | None:
        expression = self.grouped()
        if expression is None:
            return None
        for opening, closing, kind in (("[", "]", ThresholdKind.high), ("(", ")", ThresholdKind.low)):
            if not self.at("op", opening):
                continue
            if self.at("number", offset=1) and self.at("op", closing, offset=2):
                threshold = int(self.peek(1).text)
                self.index += 3
                return Target(expression, kind, threshold)
            self.fail(InvalidModifierArgument(f"Target needs a threshold, e.g. {opening}5{closing}"))
        return expression

    def grouped(self) -> Expression | None:
        if not self.at("op", "("):
            return self.sum()
        mark = self.index
        self.advance()
        inner = self.sum()
        if inner is not None and self.at("op", ")"):
            self.advance()
            return inner
        self.index = mark
        return None

    def sum(self) -> Expression | None:
        left = self.term()
        if left is None:
            return None
        while True:
            # A lone "-" is subtraction; "--" was already lexed as the
            # subtract-each modifier, so it never reaches this point.
            if self.at("op", "+") and self._starts_term(1):
                self.advance()
                left = Sum(left, self.term())
            elif self.at("op", "-") and self._starts_term(1):
                self.advance()
                left = Difference(left, self.term())
            else:
                return left

    def term(self) -> Expression | None:
        if self.at("number"):
            if self.at("die", offset=1) and self._is_size(2):
                count = int(self.advance().text)
                return self.pool(count)
            return Number(int(self.advance().text))
        if self.at("die") and self._is_size(1):
            return self.pool(1)
        return None

    def pool(self, count: int) -> Pool:
        self.advance()  # die marker
        size = self.advance()
        if size.kind == "percent":
            sides, label = PERCENTILE_SIZES[size.text], size.text
        else:
            sides, label = int(size.text), None
        return Pool(count, sides, self.modifier(), label)

    def modifier(self) -> PoolModifier | None:
        token = self.peek()
        if token.kind == "keyword":
            self.advance()
            return _KEYWORD_MODIFIERS[token.text]
        if token.kind != "op":
            return None
        if token.text in ("!", "!!", "*", "**"):
            self.advance()
            threshold = int(self.advance().text) if self.at("number") else None
            repeat = len(token.text) == 2
            if token.text.startswith("!"):
                return Explode(threshold, repeat)
            return ExplodeEach(threshold, repeat)
        if token.text in ("++", "--"):
            self.advance()
            amount = int(self.advance().text) if self.at("number") else 1
            return AddEach(amount) if token.text == "++" else SubtractEach(amount)
        if token.text in ("~", "^", "`"):
            if not self.at("number", offset=1):
                self.fail(InvalidModifierArgument(f"{token.text!r} needs a number of dice to keep"))
                return None
            self.advance()
            count = int(self.advance().text)
            if token.text == "~":
                return TakeMiddle(count)
            return TakeHigh(count) if token.text == "^" else TakeLow(count)
        return None

    # -- entry point --------------------------------------------------------

    def run(self) -> ParseResult:
        expression = self.comparison()
        if expression is None:
            self.index = 0
        stop = self.peek()
        consumed_end = self.tokens[self.index - 1].end if self.index else 0
        consumed = self.text[:consumed_end].strip()
        remainder = self.text[stop.start :].strip() if stop.kind != "eof" else None
        if remainder is not None:
            logger.debug("Stopped parsing %r at offset %d: %r", self.text, stop.start, remainder)
        # Errors from abandoned branches only count if parsing stopped where they were raised.
        error = self.error if remainder is not None and self.error_index == self.index else None
        return ParseResult(expression, consumed, remainder, error)


def parse(text: str) -> ParseResult:
    """Parse dice notation into an expression tree, keeping any unparsed remainder.

    Args:
        text: Dice notation, e.g. "4d6^3" or "3d6 + 2 > 2d8".

    Returns:
        ParseResult with the tree for the longest valid prefix.
    """
    return _Parser(text).run()


def parse_strict(text: str) -> Expression:
    """Parse dice notation, requiring the whole text to be valid.

    Raises:
        ParseIncomplete: If any part of the text could not be parsed.
    """
    result = parse(text)
    if not result.complete:
        raise ParseIncomplete(result)
    return result.expression  # type: ignore[return-value]
