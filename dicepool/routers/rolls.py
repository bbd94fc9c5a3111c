"""Roll and chart routes.

Rolling is CPU-bound, so the handlers are plain functions and FastAPI runs
them in its threadpool instead of on the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from dicepool.aggregator import histogram, run
from dicepool.config import settings
from dicepool.dependencies import get_random_source
from dicepool.errors import DiceError
from dicepool.parser import ParseResult, parse
from dicepool.random_source import RandomSource
from dicepool.schemas import ChartResponse, RollOut, RollResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_or_400(expr: str) -> ParseResult:
    result = parse(expr)
    if result.expression is None:
        detail = f"Could not parse {expr!r}"
        if result.error is not None:
            detail = f"{detail}: {result.error}"
        raise HTTPException(status_code=400, detail=detail)
    return result


@router.get("/roll", response_model=RollResponse)
def roll(
    expr: str = Query(min_length=1, description="Dice notation, e.g. 4d6^3"),
    count: int = Query(default=1, ge=1, le=1000),
    source: RandomSource = Depends(get_random_source),
) -> RollResponse:
    """Roll an expression ``count`` times."""
    result = _parse_or_400(expr)
    try:
        values = run(result.expression, source, count)
    except DiceError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RollResponse(
        expression=str(result.expression),
        remainder=result.remainder,
        rolls=[RollOut.from_value(v) for v in values],
    )


@router.get("/chart", response_model=ChartResponse)
def chart(
    expr: str = Query(min_length=1, description="Dice notation, e.g. 3d6"),
    samples: int = Query(default=settings.chart_samples, ge=1, le=settings.max_samples),
    source: RandomSource = Depends(get_random_source),
) -> ChartResponse:
    """Sample an expression and return the chance of rolling at least each score."""
    result = _parse_or_400(expr)
    try:
        tally = histogram(result.expression, source, samples)
    except DiceError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.debug("Charted %s over %d samples", result.expression, samples)
    return ChartResponse(
        expression=str(result.expression),
        remainder=result.remainder,
        samples=samples,
        rows=ChartResponse.rows_from(tally),
    )
