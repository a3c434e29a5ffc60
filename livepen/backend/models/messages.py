"""Client -> server WebSocket message payloads."""

from __future__ import annotations

from pydantic import BaseModel, Field

from livepen.kernel.types import BufferKind
from livepen.kernel.viewport import ViewportMode


class BufferUpdateMessage(BaseModel):
    """{"type": "buffer.update", "kind": "css", "content": "..."} -- writes through the active slot."""

    kind: BufferKind
    content: str = Field(max_length=2_000_000)


class BufferCreateMessage(BaseModel):
    model_config = {"str_strip_whitespace": True}

    name: str = Field(min_length=1, max_length=200)
    kind: BufferKind


class BufferRefMessage(BaseModel):
    """buffer.select and buffer.delete."""

    id: str = Field(min_length=1)


class BufferRenameMessage(BaseModel):
    model_config = {"str_strip_whitespace": True}

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)


class ViewportSetMessage(BaseModel):
    mode: ViewportMode


class FullScreenMessage(BaseModel):
    """value omitted means toggle."""

    value: bool | None = None
