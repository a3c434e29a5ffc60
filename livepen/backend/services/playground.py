"""
Playground service -- wires the kernel pipeline together for the app.

Buffer store -> change aggregator -> preview renderer -> connected clients.

One Playground per process. It is created in the app lifespan and reached
from routes through get_playground().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import Request, WebSocket

from livepen.backend import db
from livepen.backend.config import settings
from livepen.backend.models.preview import PreviewResponse, ViewportResponse
from livepen.kernel.boundary import sandbox_attribute
from livepen.kernel.buffer_store import BufferStore
from livepen.kernel.debounce import ChangeAggregator
from livepen.kernel.postgres_storage import PostgresStorage
from livepen.kernel.renderer import PreviewEvent, PreviewRenderer
from livepen.kernel.storage import FileStorage, KeyValueStorage, MemoryStorage, StorageError
from livepen.kernel.types import BufferKind, CompositeDocument, IdFactory

logger = logging.getLogger(__name__)

# Per-connection outbound queue bound. A client this far behind only needs
# the newest state, so the oldest message is dropped.
_QUEUE_SIZE = 256


class Playground:
    """The running pipeline plus the set of connected client queues."""

    def __init__(
        self,
        storage: KeyValueStorage,
        debounce_seconds: float = 0.5,
        id_factory: IdFactory | None = None,
    ):
        self.storage = storage
        self.store = BufferStore(storage, id_factory=id_factory)
        self.aggregator = ChangeAggregator(self.store, delay=debounce_seconds)
        self.renderer = PreviewRenderer()
        self._queues: set[asyncio.Queue[dict[str, Any]]] = set()
        self._detach: list[Callable[[], None]] = []

    async def start(self) -> None:
        """Load persisted buffers and publish the first render."""
        await self.store.load()
        self._detach = [
            self.store.subscribe(self._on_store_change),
            self.aggregator.subscribe(self.renderer.render),
            self.renderer.subscribe(self._on_preview_event),
        ]
        self.aggregator.start()
        logger.info("playground: started with %d buffers", len(self.store.buffers))

    async def close(self) -> None:
        self.aggregator.close()
        for detach in self._detach:
            detach()
        self._detach = []
        self.renderer.close()
        await self.storage.close()
        logger.info("playground: stopped")

    # -- read models --

    def workspace_message(self) -> dict[str, Any]:
        return {"type": "workspace", **self.store.snapshot().to_dict()}

    def preview(self) -> PreviewResponse:
        return PreviewResponse.build(self.renderer.current, self.renderer.viewport, sandbox_attribute())

    def preview_message(self) -> dict[str, Any]:
        return {"type": "preview.render", **self.preview().model_dump(mode="json", exclude={"viewport"})}

    def viewport_message(self) -> dict[str, Any]:
        return {"type": "viewport", **ViewportResponse.from_state(self.renderer.viewport).model_dump(mode="json")}

    def current_source(self) -> CompositeDocument:
        """The unsettled triple straight from the active buffers (used for export)."""
        return CompositeDocument(
            markup=self.store.active_content(BufferKind.MARKUP),
            style=self.store.active_content(BufferKind.STYLE),
            script=self.store.active_content(BufferKind.SCRIPT),
        )

    # -- client fan-out --

    def connect(self) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=_QUEUE_SIZE)
        self._queues.add(queue)
        return queue

    def disconnect(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        self._queues.discard(queue)

    @property
    def connection_count(self) -> int:
        return len(self._queues)

    def _broadcast(self, message: dict[str, Any]) -> None:
        for queue in list(self._queues):
            if queue.full():
                queue.get_nowait()
                logger.warning("playground: client queue full, dropped oldest message")
            queue.put_nowait(message)

    def _on_store_change(self, kinds: frozenset[BufferKind]) -> None:
        self._broadcast(self.workspace_message())

    def _on_preview_event(self, event: PreviewEvent) -> None:
        if event.type == "render":
            self._broadcast(self.preview_message())
        else:
            self._broadcast(self.viewport_message())


# ---------------------------------------------------------------------------
# Construction from settings
# ---------------------------------------------------------------------------


async def build_storage() -> KeyValueStorage:
    """Pick the storage adapter named by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND
    if backend == "memory":
        return MemoryStorage()
    if backend == "postgres":
        pool = await db.init_pool()
        logger.info("playground: database pool initialized")
        storage = PostgresStorage(pool)
        try:
            await storage.ensure_schema()
        except StorageError as e:
            logger.warning("playground: could not ensure kv_store schema: %s", e)
        return storage
    logger.info("playground: storing buffers in %s", settings.DATA_DIR)
    return FileStorage(settings.DATA_DIR)


async def create_playground() -> Playground:
    storage = await build_storage()
    return Playground(storage, debounce_seconds=settings.DEBOUNCE_SECONDS)


def get_playground(request: Request) -> Playground:
    """FastAPI dependency: the process-wide playground."""
    return request.app.state.playground


def get_ws_playground(websocket: WebSocket) -> Playground:
    return websocket.app.state.playground
