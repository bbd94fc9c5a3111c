"""Tests for the HTTP roll and chart routes."""

from __future__ import annotations

import asyncio
import threading

import pytest

from dicepool.dependencies import get_random_source
from dicepool.main import app


async def test_roll(async_client, use_faces):
    use_faces(3, 3, 4, 4, 1)
    resp = await async_client.get("/roll", params={"expr": "5d6Y"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["expression"] == "5d6Y"
    assert data["remainder"] is None
    (roll,) = data["rolls"]
    assert roll["total"] == 8
    assert roll["score"] == 8
    assert roll["text"] == "3-, 3-, 4, 4, 1- = 8"
    assert [d["status"] for d in roll["dice"]] == [
        "discarded",
        "discarded",
        "kept",
        "kept",
        "discarded",
    ]


async def test_roll_count(async_client, use_faces):
    use_faces(1, 2, 3, 4)
    resp = await async_client.get("/roll", params={"expr": "2d6", "count": 2})
    assert [r["total"] for r in resp.json()["rolls"]] == [3, 7]


async def test_roll_success_level(async_client, use_faces):
    use_faces(4, 4, 4)
    resp = await async_client.get("/roll", params={"expr": "3d6{10}"})
    (roll,) = resp.json()["rolls"]
    assert roll["total"] == 12
    assert roll["success_level"] == 3
    assert roll["score"] == 3


async def test_roll_partial_parse(async_client, use_faces):
    use_faces(2, 5)
    resp = await async_client.get("/roll", params={"expr": "2d6 + x"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["expression"] == "2d6"
    assert data["remainder"] == "+ x"
    assert data["rolls"][0]["total"] == 7


async def test_roll_unparseable(async_client):
    resp = await async_client.get("/roll", params={"expr": "hello"})
    assert resp.status_code == 400
    assert "Could not parse" in resp.json()["detail"]


async def test_roll_non_terminating(async_client):
    resp = await async_client.get("/roll", params={"expr": "3d6!!1"})
    assert resp.status_code == 400
    assert "reroll forever" in resp.json()["detail"]


async def test_roll_count_bounds(async_client):
    resp = await async_client.get("/roll", params={"expr": "2d6", "count": 0})
    assert resp.status_code == 422


async def test_chart(async_client, use_faces):
    use_faces(1, 2, 2, 4)
    resp = await async_client.get("/chart", params={"expr": "1d4", "samples": 4})
    assert resp.status_code == 200
    data = resp.json()
    assert data["samples"] == 4
    assert [(r["value"], r["count"], r["at_least"]) for r in data["rows"]] == [
        (1, 1, 1.0),
        (2, 2, 0.75),
        (4, 1, 0.25),
    ]


async def test_chart_sample_limit(async_client):
    resp = await async_client.get("/chart", params={"expr": "1d4", "samples": 10_000_000})
    assert resp.status_code == 422


async def test_chart_rows_only_for_rolled_scores(async_client, use_faces):
    use_faces(*([1] * 1000 + [1000] * 1000))
    resp = await async_client.get("/chart", params={"expr": "1000d1000", "samples": 2})
    assert resp.status_code == 200
    assert [(r["value"], r["count"], r["at_least"]) for r in resp.json()["rows"]] == [
        (1000, 1, 1.0),
        (1_000_000, 1, 0.5),
    ]


class _GatedSource:
    """Holds the first roll until ``release`` is set; later rolls return 1 at once."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()

    def roll(self, sides: int) -> int:
        if not self.started.is_set():
            self.started.set()
            self.release.wait(5)
        return 1


@pytest.fixture
def gated_source():
    source = _GatedSource()
    app.dependency_overrides[get_random_source] = lambda: source
    yield source
    source.release.set()
    app.dependency_overrides.pop(get_random_source, None)


async def test_roll_answers_while_chart_runs(async_client, gated_source):
    chart = asyncio.create_task(async_client.get("/chart", params={"expr": "1d6", "samples": 1}))
    assert await asyncio.to_thread(gated_source.started.wait, 5)

    resp = await asyncio.wait_for(async_client.get("/roll", params={"expr": "1d6"}), timeout=2)
    assert resp.status_code == 200
    assert resp.json()["rolls"][0]["total"] == 1
    assert not chart.done()

    gated_source.release.set()
    resp = await chart
    assert resp.status_code == 200
    assert resp.json()["rows"] == [{"value": 1, "count": 1, "at_least": 1.0}]
