"""
Backend test configuration.

Every test gets a fresh app whose playground is backed by MemoryStorage,
deterministic buffer ids (buf_1 index.html, buf_2 style.css, buf_3
script.js) and a short quiescence window so rebuilds land quickly.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from livepen.backend.main import create_app
from livepen.backend.services.playground import Playground
from livepen.kernel.storage import MemoryStorage
from livepen.kernel.types import CounterIds

TEST_DEBOUNCE_SECONDS = 0.05


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def app(storage):
    async def factory() -> Playground:
        return Playground(storage, debounce_seconds=TEST_DEBOUNCE_SECONDS, id_factory=CounterIds())

    return create_app(factory)


@pytest.fixture
async def client(app):
    """Async HTTP client with the app lifespan running on the test's loop."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client


@pytest.fixture
def ws_client(app):
    """Return a synchronous TestClient for WS testing, lifespan included."""
    with TestClient(app) as client:
        yield client


async def wait_for_generation(client: AsyncClient, above: int, timeout: float = 2.0) -> dict:
    """Poll /api/preview until the live handle is newer than `above`."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        preview = (await client.get("/api/preview")).json()
        if preview["generation"] > above:
            return preview
        if loop.time() > deadline:
            pytest.fail(f"preview never advanced past generation {above}")
        await asyncio.sleep(0.02)
