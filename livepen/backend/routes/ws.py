"""
WebSocket endpoint for live editing.

Accepts connections at /ws/playground. Edits flow in, and the server pushes
the workspace read model after every store mutation and a preview.render
message after every rebuild of the isolated preview.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from livepen.backend.config import settings
from livepen.backend.models.messages import (
    BufferCreateMessage,
    BufferRefMessage,
    BufferRenameMessage,
    BufferUpdateMessage,
    FullScreenMessage,
    ViewportSetMessage,
)
from livepen.backend.services.playground import Playground, get_ws_playground

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


async def _send_error(websocket: WebSocket, error: str) -> None:
    await websocket.send_text(json.dumps({"type": "error", "error": error}))


async def _handle_message(websocket: WebSocket, playground: Playground, msg: dict[str, Any]) -> None:
    """
    Apply one client message.

    Invalid store operations (stale ids, writes to inactive buffers) are
    no-ops, as in the store itself. Only malformed payloads get an error.
    """
    store = playground.store
    renderer = playground.renderer
    msg_type = msg.get("type")

    try:
        if msg_type == "buffer.update":
            update = BufferUpdateMessage.model_validate(msg)
            await store.update_active_content(update.kind, update.content)
        elif msg_type == "buffer.create":
            create = BufferCreateMessage.model_validate(msg)
            await store.create_buffer(create.name, create.kind)
        elif msg_type == "buffer.select":
            await store.select_buffer(BufferRefMessage.model_validate(msg).id)
        elif msg_type == "buffer.rename":
            rename = BufferRenameMessage.model_validate(msg)
            await store.rename_buffer(rename.id, rename.name)
        elif msg_type == "buffer.delete":
            await store.delete_buffer(BufferRefMessage.model_validate(msg).id)
        elif msg_type == "viewport.set":
            renderer.set_viewport(ViewportSetMessage.model_validate(msg).mode)
        elif msg_type == "viewport.full_screen":
            value = FullScreenMessage.model_validate(msg).value
            if value is None:
                renderer.toggle_full_screen()
            else:
                renderer.set_full_screen(value)
        else:
            logger.debug("ws: ignoring unknown message type %r", msg_type)
    except ValidationError as e:
        logger.warning("ws: invalid %s payload: %s", msg_type, e.errors(include_url=False))
        await _send_error(websocket, f"Invalid {msg_type} message.")


async def _pump(websocket: WebSocket, queue: asyncio.Queue[dict[str, Any]]) -> None:
    """Forward broadcast messages to one client until cancelled."""
    while True:
        message = await queue.get()
        await websocket.send_text(json.dumps(message))


@router.websocket("/ws/playground")
async def playground_websocket(websocket: WebSocket) -> None:
    """
    Protocol:
      Client -> Server:  {"type": "buffer.update", "kind": "html", "content": "..."}
                         {"type": "buffer.create", "name": "...", "kind": "css"}
                         {"type": "buffer.select" | "buffer.delete", "id": "..."}
                         {"type": "buffer.rename", "id": "...", "name": "..."}
                         {"type": "viewport.set", "mode": "tablet"}
                         {"type": "viewport.full_screen", "value": true}
      Server -> Client:  workspace | preview.render | viewport | error

    On connect the client receives the current workspace, preview and
    viewport before any broadcast. The queue is registered first, so a
    rebuild that lands while the handshake is being sent is delivered
    right after it.
    """
    await websocket.accept()
    playground = get_ws_playground(websocket)
    queue = playground.connect()
    pump: asyncio.Task[None] | None = None
    logger.info("WebSocket accepted: clients=%d", playground.connection_count)

    try:
        await websocket.send_text(json.dumps(playground.workspace_message()))
        await websocket.send_text(json.dumps(playground.preview_message()))
        await websocket.send_text(json.dumps(playground.viewport_message()))

        pump = asyncio.create_task(_pump(websocket, queue))

        while True:
            raw = await websocket.receive_text()
            if len(raw) > settings.WEBSOCKET_MAX_MESSAGE_BYTES:
                logger.warning("ws: dropping oversized message (%d bytes)", len(raw))
                await _send_error(websocket, "Message too large.")
                continue
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("ws: malformed message from client: %r", raw[:200])
                continue
            if not isinstance(msg, dict):
                logger.warning("ws: non-object message from client: %r", raw[:200])
                continue

            await _handle_message(websocket, playground, msg)

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        playground.disconnect(queue)
        if pump is not None:
            pump.cancel()
            # a pump that died on a closed socket has nothing left to report
            await asyncio.gather(pump, return_exceptions=True)
