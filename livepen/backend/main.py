"""
LivePen FastAPI application.

Entry point for the playground server.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from livepen.backend import db
from livepen.backend.config import settings
from livepen.backend.routes import buffers as buffer_routes
from livepen.backend.routes import preview as preview_routes
from livepen.backend.routes import ws as ws_routes
from livepen.backend.services.playground import Playground, create_playground

logger = logging.getLogger(__name__)

PlaygroundFactory = Callable[[], Awaitable[Playground]]

_FRONTEND = Path(__file__).parent.parent / "frontend"


def create_app(playground_factory: PlaygroundFactory = create_playground) -> FastAPI:
    """
    Build the app. The factory decides storage and debounce timing; tests
    pass one backed by MemoryStorage with a short quiescence window.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        - Build the playground (storage, store, aggregator, renderer)
        - Load persisted buffers and publish the first render
        Shutdown:
        - Cancel pending debounce timers, tear down the live preview
        - Close the database pool if one was opened
        """
        playground = await playground_factory()
        await playground.start()
        app.state.playground = playground
        logger.info("Playground ready")

        yield

        await playground.close()
        await db.close_pool()
        logger.info("Playground closed")

    app = FastAPI(
        title="LivePen",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Register routes
    app.include_router(buffer_routes.router)
    app.include_router(preview_routes.router)
    app.include_router(ws_routes.router)

    @app.get("/health")
    async def health():
        """Health check endpoint for uptime monitoring."""
        return {"status": "ok"}

    # Serve frontend -- must be after all API routes
    if _FRONTEND.is_dir():
        app.mount("/static", StaticFiles(directory=str(_FRONTEND)), name="static")

        @app.get("/")
        async def serve_index():
            """Serve the editor SPA."""
            return FileResponse(str(_FRONTEND / "index.html"))

    return app


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("livepen.backend.main:app", host=settings.HOST, port=settings.PORT)
