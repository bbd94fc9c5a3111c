"""Shared test fixtures for the dicepool test suite.

faces
    Factory fixture: ``faces(4, 4, 4, 1)`` returns a FixedRandomSource that
    replays those faces. Unit tests pass it straight to the evaluator.

use_faces
    Like ``faces`` but also installs the source as the app's random source
    dependency, so HTTP tests get deterministic rolls. The override is
    removed after the test.

async_client
    AsyncClient wired to the FastAPI app through ASGITransport.
"""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from dicepool.dependencies import get_random_source
from dicepool.main import app
from dicepool.random_source import FixedRandomSource


@pytest.fixture
def faces():
    def _faces(*values: int) -> FixedRandomSource:
        return FixedRandomSource(values)

    return _faces


@pytest.fixture
def use_faces():
    def _use(*values: int) -> FixedRandomSource:
        source = FixedRandomSource(values)
        app.dependency_overrides[get_random_source] = lambda: source
        return source

    yield _use
    app.dependency_overrides.pop(get_random_source, None)


@pytest_asyncio.fixture
async def async_client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
