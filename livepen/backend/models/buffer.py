"""Buffer models for the playground workspace."""

from __future__ import annotations

from pydantic import BaseModel, Field

from livepen.kernel.types import Buffer, BufferKind, StoreSnapshot

_MAX_CONTENT = 2_000_000


class CreateBufferRequest(BaseModel):
    """What the client sends to create a buffer."""

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    name: str = Field(min_length=1, max_length=200)
    kind: BufferKind


class RenameBufferRequest(BaseModel):
    """What the client sends to rename a buffer."""

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    name: str = Field(min_length=1, max_length=200)


class UpdateContentRequest(BaseModel):
    """New full content for a buffer. Empty content is valid."""

    model_config = {"extra": "forbid"}

    content: str = Field(max_length=_MAX_CONTENT)


class UpdateContentResponse(BaseModel):
    """applied is False when the write targeted an inactive buffer (silently dropped)."""

    applied: bool


class BufferResponse(BaseModel):
    """What the API returns for a buffer."""

    id: str
    name: str
    kind: BufferKind
    content: str

    @classmethod
    def from_buffer(cls, buf: Buffer) -> BufferResponse:
        return cls(id=buf.id, name=buf.name, kind=buf.kind, content=buf.content)


class ActiveSelectionResponse(BaseModel):
    html: str | None = None
    css: str | None = None
    js: str | None = None


class WorkspaceResponse(BaseModel):
    """The buffer store's read model: buffers in store order + active selection."""

    buffers: list[BufferResponse]
    active: ActiveSelectionResponse

    @classmethod
    def from_snapshot(cls, snapshot: StoreSnapshot) -> WorkspaceResponse:
        return cls(
            buffers=[BufferResponse.from_buffer(b) for b in snapshot.buffers],
            active=ActiveSelectionResponse(**snapshot.active.to_dict()),
        )
